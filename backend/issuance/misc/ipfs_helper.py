import base64
from typing import Awaitable, Callable, Optional

import aiohttp

from issuance.errors import DataUnavailable

IPFS_GATEWAY = "https://ipfs.io/ipfs/"


class IpfsHelper:
    """Turns IPFS content ids into data URIs. Nothing is fetched until the loader is awaited."""

    def __init__(self, gateway: str = IPFS_GATEWAY, session: Optional[aiohttp.ClientSession] = None):
        self.gateway = gateway
        self.http_session = session

    def get_data_uri_loader(self, cid: str, mime_type: str) -> Callable[[], Awaitable[str]]:
        async def load() -> str:
            content = await self.fetch(cid)
            return f"data:{mime_type};base64,{base64.b64encode(content).decode('utf-8')}"
        return load

    async def fetch(self, cid: str) -> bytes:
        if not self.http_session:
            self.http_session = aiohttp.ClientSession()
        try:
            async with self.http_session.get(f"{self.gateway}{cid}") as response:
                if response.status != 200:
                    raise DataUnavailable(f"Failed to fetch {cid} from IPFS: HTTP {response.status}")
                return await response.read()
        except aiohttp.ClientError as e:
            raise DataUnavailable(f"Error fetching {cid} from IPFS: {e}") from e

    async def close(self) -> None:
        if self.http_session:
            await self.http_session.close()
            self.http_session = None
