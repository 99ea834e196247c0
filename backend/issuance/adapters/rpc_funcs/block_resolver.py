import logging
from datetime import datetime, timezone
from typing import Optional

from web3 import AsyncWeb3

from issuance.errors import DataUnavailable
from issuance.misc.date_helper import start_of_day_ts

logger = logging.getLogger("issuance")


class BlockResolver:
    """
    Resolves a YYYY-MM-DD point in time to the first block of that UTC day on one network.
    The first block of a day is final once UTC midnight has passed.

    With `avg_block_time` set, the search starts in a narrow window around the block estimated
    from the chain head and only falls back to a full search if that window doesn't bracket the target.
    """

    MIN_UNCERTAINTY = 128

    def __init__(self, network: str, w3: AsyncWeb3, avg_block_time: Optional[float] = None):
        self.network = network
        self.w3 = w3
        self.avg_block_time = avg_block_time
        self.get_block_calls = 0

    async def first_block_of_day(self, point: str) -> int:
        target_ts = start_of_day_ts(point)

        latest_block = int(await self.w3.eth.block_number)
        latest_ts = await self._get_block_timestamp(latest_block)
        if latest_ts < target_ts:
            raise DataUnavailable(
                f"{self.network}: no block for {point} yet, latest block {latest_block} is at "
                f"{datetime.fromtimestamp(latest_ts, tz=timezone.utc).isoformat()}"
            )

        block_number = None
        if self.avg_block_time:
            block_number = await self._find_in_estimated_window(target_ts, latest_block, latest_ts)
        if block_number is None:
            block_number = await self._find_first_block_by_timestamp(target_ts, 0, latest_block)
        if block_number is None:
            raise DataUnavailable(f"{self.network}: could not resolve first block of {point}")

        logger.debug(f"{self.network} {point}: first_block_of_day={block_number}, rpc get_block calls={self.get_block_calls}")
        return block_number

    async def _find_in_estimated_window(self, target_ts: int, latest_block: int, latest_ts: int) -> Optional[int]:
        blocks_back = int((latest_ts - target_ts) / max(self.avg_block_time, 0.01))
        center = max(0, latest_block - blocks_back)
        uncertainty = max(self.MIN_UNCERTAINTY, int(blocks_back * 0.01))
        low = max(0, center - uncertainty)
        high = min(latest_block, center + uncertainty)
        if low >= high:
            return None

        # window must bracket the target: first block of the day lies in (low, high]
        if await self._get_block_timestamp(low) >= target_ts:
            return None
        if await self._get_block_timestamp(high) < target_ts:
            return None
        return await self._find_first_block_by_timestamp(target_ts, low + 1, high)

    async def _find_first_block_by_timestamp(self, target_ts: int, low: int, high: int) -> Optional[int]:
        # smallest block with timestamp >= target_ts in [low, high]
        result = None
        while low <= high:
            mid = (low + high) // 2
            ts = await self._get_block_timestamp(mid)
            if ts >= target_ts:
                result = mid
                high = mid - 1
            else:
                low = mid + 1
        return result

    async def _get_block_timestamp(self, block_number: int) -> int:
        self.get_block_calls += 1
        block = await self.w3.eth.get_block(block_number)
        return int(block["timestamp"])
