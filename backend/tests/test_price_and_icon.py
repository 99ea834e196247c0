import asyncio
import base64
import json

import aiohttp
import pytest

from issuance.adapters.adapter_coingecko import CoinGeckoPriceReader
from issuance.errors import DataUnavailable
from issuance.misc.ipfs_helper import IpfsHelper


class MockResponse:
    def __init__(self, status=200, payload=None, body=b""):
        self.status = status
        self.payload = payload
        self.body = body

    async def json(self):
        return self.payload

    async def read(self):
        return self.body

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class MockSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []
        self.closed = False

    def get(self, url, params=None):
        self.requests.append((url, params))
        if self.error:
            raise self.error
        return self.response

    async def close(self):
        self.closed = True


def test_current_price():
    session = MockSession(MockResponse(payload={"swapr": {"usd": 0.0123}}))
    reader = CoinGeckoPriceReader(session=session)

    assert asyncio.run(reader.current_price("swapr")) == pytest.approx(0.0123)
    assert session.requests[0][1] == {"ids": "swapr", "vs_currencies": "usd"}


def test_price_http_error():
    reader = CoinGeckoPriceReader(session=MockSession(MockResponse(status=429)))

    with pytest.raises(DataUnavailable, match="429"):
        asyncio.run(reader.current_price("swapr"))


def test_price_missing_in_response():
    reader = CoinGeckoPriceReader(session=MockSession(MockResponse(payload={})))

    with pytest.raises(DataUnavailable):
        asyncio.run(reader.current_price("swapr"))


def test_price_null_in_response():
    reader = CoinGeckoPriceReader(session=MockSession(MockResponse(payload={"swapr": {"usd": None}})))

    with pytest.raises(DataUnavailable, match="Invalid response format"):
        asyncio.run(reader.current_price("swapr"))


def test_price_malformed_json_body():
    class HtmlResponse(MockResponse):
        async def json(self):
            return json.loads("<html>rate limited</html>")

    reader = CoinGeckoPriceReader(session=MockSession(HtmlResponse()))

    with pytest.raises(DataUnavailable, match="Error fetching price"):
        asyncio.run(reader.current_price("swapr"))


def test_price_connection_error():
    reader = CoinGeckoPriceReader(session=MockSession(error=aiohttp.ClientConnectionError("down")))

    with pytest.raises(DataUnavailable):
        asyncio.run(reader.current_price("swapr"))


def test_price_reader_close():
    session = MockSession()
    reader = CoinGeckoPriceReader(session=session)

    asyncio.run(reader.close())

    assert session.closed
    assert reader.http_session is None


def test_icon_loader_is_lazy():
    session = MockSession(MockResponse(body=b"<svg/>"))
    ipfs = IpfsHelper(session=session)

    loader = ipfs.get_data_uri_loader("QmIcon", "image/svg+xml")
    assert session.requests == []

    uri = asyncio.run(loader())
    assert uri == "data:image/svg+xml;base64," + base64.b64encode(b"<svg/>").decode()
    assert session.requests[0][0] == "https://ipfs.io/ipfs/QmIcon"


def test_icon_fetch_error():
    ipfs = IpfsHelper(session=MockSession(MockResponse(status=404)))

    with pytest.raises(DataUnavailable):
        asyncio.run(ipfs.get_data_uri_loader("QmMissing", "image/png")())
