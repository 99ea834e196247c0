import asyncio
import logging
from typing import Optional

import aiohttp

from issuance.errors import DataUnavailable

logger = logging.getLogger("issuance")

COINGECKO_API_URL = "https://api.coingecko.com/api/v3/simple/price"


class CoinGeckoPriceReader:
    """Current token prices from the CoinGecko simple/price endpoint."""

    def __init__(self, session: Optional[aiohttp.ClientSession] = None, vs_currency: str = "usd", api_url: str = COINGECKO_API_URL, timeout: int = 10):
        self.http_session = session
        self.vs_currency = vs_currency
        self.api_url = api_url
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    async def current_price(self, feed_id: str) -> float:
        if not self.http_session:
            self.http_session = aiohttp.ClientSession(timeout=self.timeout)

        params = {"ids": feed_id, "vs_currencies": self.vs_currency}
        try:
            async with self.http_session.get(self.api_url, params=params) as response:
                if response.status != 200:
                    raise DataUnavailable(f"Failed to fetch price for {feed_id}: HTTP {response.status}")
                data = await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise DataUnavailable(f"Error fetching price for {feed_id}: {e}") from e

        try:
            price = float(data[feed_id][self.vs_currency])
        except (KeyError, TypeError, ValueError) as e:
            raise DataUnavailable(f"Invalid response format from CoinGecko API for {feed_id}: {data}") from e
        logger.info(f"Current {feed_id} price: {price:.6f} {self.vs_currency}")
        return price

    async def close(self) -> None:
        if self.http_session:
            await self.http_session.close()
            self.http_session = None
