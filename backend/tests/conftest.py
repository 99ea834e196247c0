import asyncio
from datetime import datetime, timezone

import pytest

from issuance.misc.date_helper import DateHelper
from issuance.models import TokenConfig

TOKEN_ETHEREUM = "0x1111111111111111111111111111111111111111"
TOKEN_GNOSIS = "0x2222222222222222222222222222222222222222"
TREASURY_ETHEREUM = "0x3333333333333333333333333333333333333333"
TREASURY_GNOSIS = "0x4444444444444444444444444444444444444444"
BURN = "0x000000000000000000000000000000000000dead"

TODAY = "2024-05-14"
WEEK_AGO = "2024-05-07"


class MockBalanceReader:
    """
    In-memory balance reader.
    supplies: {(network, at): raw total supply}
    balances: {(network, account, at): raw balance}
    failing: set of (network, account, at) / (network, at) keys that raise
    """

    def __init__(self, supplies=None, balances=None, failing=None, decimals=18):
        self.supplies = supplies or {}
        self.balances = balances or {}
        self.failing = failing or set()
        self.decimals = decimals
        self.calls = []

    async def resolve_block(self, network, at):
        # dates double as block tags in memory
        self.calls.append(("resolve", network, at))
        return at

    async def read_total_supply(self, contract_address, network, at):
        self.calls.append(("totalSupply", contract_address, network, at))
        if (network, at) in self.failing:
            raise ConnectionError(f"RPC for {network} unreachable")
        return self.supplies[(network, at)]

    async def read_balance(self, contract_address, account, network, at):
        self.calls.append(("balanceOf", contract_address, account, network, at))
        if (network, account, at) in self.failing:
            raise ConnectionError(f"RPC for {network} unreachable")
        return self.balances.get((network, account, at), 0)

    async def read_decimals(self, contract_address, network):
        self.calls.append(("decimals", contract_address, network))
        return self.decimals

    async def close(self):
        pass


class MockPriceReader:
    def __init__(self, price=2.0):
        self.price = price
        self.calls = []

    async def current_price(self, feed_id):
        self.calls.append(feed_id)
        return self.price

    async def close(self):
        pass


class ReadGate:
    """Holds every read until `expected` reads are pending at the same time."""

    def __init__(self, expected):
        self.expected = expected
        self.pending = 0
        self.released = None

    async def wait(self):
        if self.released is None:
            self.released = asyncio.Event()
        self.pending += 1
        if self.pending >= self.expected:
            self.released.set()
        await self.released.wait()


class GatedBalanceReader(MockBalanceReader):
    def __init__(self, gate, **kwargs):
        super().__init__(**kwargs)
        self.gate = gate

    async def read_total_supply(self, contract_address, network, at):
        await self.gate.wait()
        return await super().read_total_supply(contract_address, network, at)

    async def read_balance(self, contract_address, account, network, at):
        await self.gate.wait()
        return await super().read_balance(contract_address, account, network, at)


class GatedPriceReader(MockPriceReader):
    def __init__(self, gate, price=2.0):
        super().__init__(price)
        self.gate = gate

    async def current_price(self, feed_id):
        await self.gate.wait()
        return await super().current_price(feed_id)


@pytest.fixture
def date_helper():
    return DateHelper(clock=lambda: datetime(2024, 5, 14, 15, 30, tzinfo=timezone.utc))


@pytest.fixture
def single_network_token():
    return TokenConfig(
        id="test",
        name="Test Token",
        coingecko_id="test-token",
        primary_network="ethereum",
        decimals=0,
        addresses={"ethereum": TOKEN_ETHEREUM},
    )


@pytest.fixture
def two_network_token():
    return TokenConfig(
        id="test",
        name="Test Token",
        coingecko_id="test-token",
        primary_network="ethereum",
        decimals=0,
        addresses={"ethereum": TOKEN_ETHEREUM, "gnosis": TOKEN_GNOSIS},
        locked_supply={
            "ethereum": [TREASURY_ETHEREUM, BURN],
            "gnosis": [TREASURY_GNOSIS],
        },
    )


@pytest.fixture
def weekly_reader():
    """1,000,000 today, 950,000 a week ago, nothing locked."""
    return MockBalanceReader(supplies={("ethereum", TODAY): 1_000_000, ("ethereum", WEEK_AGO): 950_000})


@pytest.fixture
def weekly_reader_with_locked():
    """Same supplies as weekly_reader, with 100,000 locked at both points across both networks."""
    balances = {}
    for at in (TODAY, WEEK_AGO):
        balances[("ethereum", TREASURY_ETHEREUM, at)] = 60_000
        balances[("ethereum", BURN, at)] = 15_000
        balances[("gnosis", TREASURY_GNOSIS, at)] = 25_000
    return MockBalanceReader(
        supplies={("ethereum", TODAY): 1_000_000, ("ethereum", WEEK_AGO): 950_000},
        balances=balances,
    )
