import asyncio
import logging
import os
from typing import Dict, Optional, Union

import aiohttp
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3
from web3.exceptions import Web3Exception
from web3.middleware import ExtraDataToPOAMiddleware

from issuance.adapters.rpc_funcs.block_resolver import BlockResolver
from issuance.errors import ConfigurationError, DataUnavailable
from issuance.models import NetworkConfig, load_network_config

logger = logging.getLogger("issuance")

# minimal ERC20 abi: everything the supply calculation needs
ERC20_ABI = [
    {
        "constant": True,
        "inputs": [],
        "name": "totalSupply",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [{"name": "_owner", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "balance", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [],
        "name": "decimals",
        "outputs": [{"name": "", "type": "uint8"}],
        "stateMutability": "view",
        "type": "function",
    },
]

RPC_ERRORS = (Web3Exception, aiohttp.ClientError, asyncio.TimeoutError, ValueError)


def get_rpc_url(network_config: NetworkConfig) -> str:
    return os.getenv(network_config.rpc_env, network_config.default_rpc)


class Erc20BalanceReader:
    """
    Reads historical ERC20 totalSupply / balanceOf values over AsyncWeb3.

    Points in time are either block numbers or YYYY-MM-DD strings, the latter resolved to the first
    block of that UTC day on the network being queried (see resolve_block).
    Returned values are raw base units (not scaled by decimals).
    Connections are opened lazily per network; pass `connections` to reuse existing clients.
    """

    def __init__(self, connections: Optional[Dict[str, AsyncWeb3]] = None, network_mapping: Optional[dict] = None, timeout: int = 10):
        self.connections: Dict[str, AsyncWeb3] = dict(connections or {})
        self.network_mapping = network_mapping
        self.timeout = timeout

    def get_w3(self, network: str) -> AsyncWeb3:
        if network not in self.connections:
            network_config = load_network_config(network, self.network_mapping)
            w3 = AsyncWeb3(AsyncHTTPProvider(get_rpc_url(network_config), request_kwargs={"timeout": self.timeout}))
            # Apply middleware for PoA chains if needed
            if network_config.poa:
                w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
            logger.info(f"Created RPC client for {network} (chain_id {network_config.chain_id})")
            self.connections[network] = w3
        return self.connections[network]

    def get_contract(self, address: str, network: str):
        w3 = self.get_w3(network)
        return w3.eth.contract(address=self._checksum_address(address), abi=ERC20_ABI)

    async def resolve_block(self, network: str, point: str) -> int:
        network_config = load_network_config(network, self.network_mapping)
        resolver = BlockResolver(network, self.get_w3(network), network_config.block_time)
        try:
            return await resolver.first_block_of_day(point)
        except RPC_ERRORS as e:
            raise DataUnavailable(f"{network}: failed to resolve block for {point}: {e}") from e

    async def block_for(self, network: str, at: Union[str, int]) -> int:
        # block numbers are used as-is, dates are resolved
        if isinstance(at, int):
            return at
        return await self.resolve_block(network, at)

    async def read_total_supply(self, contract_address: str, network: str, at: Union[str, int]) -> int:
        contract = self.get_contract(contract_address, network)
        block_number = await self.block_for(network, at)
        try:
            supply = await contract.functions.totalSupply().call(block_identifier=block_number)
        except RPC_ERRORS as e:
            raise DataUnavailable(f"{network}: totalSupply of {contract_address} at block {block_number} ({at}) failed: {e}") from e
        logger.debug(f"{network}: totalSupply of {contract_address} at {at} = {supply}")
        return int(supply)

    async def read_balance(self, contract_address: str, account: str, network: str, at: Union[str, int]) -> int:
        contract = self.get_contract(contract_address, network)
        owner = self._checksum_address(account)
        block_number = await self.block_for(network, at)
        try:
            balance = await contract.functions.balanceOf(owner).call(block_identifier=block_number)
        except RPC_ERRORS as e:
            raise DataUnavailable(f"{network}: balanceOf({account}) of {contract_address} at block {block_number} ({at}) failed: {e}") from e
        logger.debug(f"{network}: balanceOf({account}) of {contract_address} at {at} = {balance}")
        return int(balance)

    async def read_decimals(self, contract_address: str, network: str) -> int:
        contract = self.get_contract(contract_address, network)
        try:
            return int(await contract.functions.decimals().call())
        except RPC_ERRORS as e:
            raise DataUnavailable(f"{network}: decimals of {contract_address} failed: {e}") from e

    async def close(self) -> None:
        for w3 in self.connections.values():
            await w3.provider.disconnect()
        self.connections = {}

    @staticmethod
    def _checksum_address(address: str) -> str:
        if not Web3.is_address(address):
            raise ConfigurationError(f"Malformed address: {address}")
        return address if Web3.is_checksum_address(address) else Web3.to_checksum_address(address)
