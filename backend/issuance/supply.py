import asyncio
import logging
from typing import Dict, List, Tuple

from issuance.errors import ConfigurationError, DataUnavailable, IssuanceError
from issuance.models import TokenConfig

logger = logging.getLogger("issuance")


async def guarded_read(read, description: str):
    """Await a single collaborator call; anything that isn't one of our errors becomes DataUnavailable."""
    try:
        return await read
    except IssuanceError:
        raise
    except Exception as e:
        raise DataUnavailable(f"{description} failed: {e}") from e


async def get_decimals(config: TokenConfig, balance_reader) -> int:
    if config.decimals is not None:
        return config.decimals
    address = config.addresses[config.primary_network]
    return await guarded_read(
        balance_reader.read_decimals(address, config.primary_network),
        f"decimals of {address} on {config.primary_network}",
    )


def locked_supply_reads(config: TokenConfig) -> List[Tuple[str, str, str]]:
    """(network, token address, excluded account) for every excluded balance that has to be read."""
    reads = []
    for network in config.queried_networks:
        accounts = config.locked_supply.get(network, [])
        if accounts and network not in config.addresses:
            raise ConfigurationError(f"Locked supply defined for {network} but {config.id} has no address there")
        for account in accounts:
            reads.append((network, config.addresses[network], account))
    return reads


async def resolve_points(config: TokenConfig, at: str, balance_reader) -> Dict[str, object]:
    """Resolve `at` once per queried network, all networks concurrently."""
    networks = config.queried_networks
    points = await asyncio.gather(*[
        guarded_read(balance_reader.resolve_block(network, at), f"resolving {at} on {network}")
        for network in networks
    ])
    return dict(zip(networks, points))


async def compute_supply(config: TokenConfig, at: str, balance_reader) -> float:
    """
    Circulating supply of a token at a point in time:
    totalSupply on the primary network minus the balances of all locked supply addresses on all networks.

    `at` is resolved once per network, then all balance reads are issued concurrently.
    If any of them fails the whole calculation fails with DataUnavailable, there is no partial result.
    """
    primary = config.primary_network
    if primary not in config.addresses:
        raise ConfigurationError(f"Primary network {primary} of {config.id} has no token address")
    reads = locked_supply_reads(config)
    points = await resolve_points(config, at, balance_reader)

    total_supply, decimals, *locked_balances = await asyncio.gather(
        guarded_read(
            balance_reader.read_total_supply(config.addresses[primary], primary, points[primary]),
            f"totalSupply of {config.id} on {primary} at {at}",
        ),
        get_decimals(config, balance_reader),
        *[
            guarded_read(
                balance_reader.read_balance(token_address, account, network, points[network]),
                f"balance of {account} on {network} at {at}",
            )
            for network, token_address, account in reads
        ],
    )

    locked = sum(locked_balances)
    supply = (total_supply - locked) / (10 ** decimals)
    logger.info(f"{config.id} supply at {at}: total {total_supply}, locked {locked} ({len(reads)} addresses), circulating {supply}")
    return supply
