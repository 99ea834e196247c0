import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from issuance.errors import ConfigurationError
from issuance.issuance_config import adapter_info
from issuance.metrics import DEFAULT_DAYS_AGO, get_circulating_supply, get_inflation_rate, get_issuance_data
from issuance.misc.date_helper import DateHelper
from issuance.misc.ipfs_helper import IpfsHelper
from issuance.models import TokenConfig, load_token_config

logger = logging.getLogger("issuance")

Query = Callable[[], Awaitable[float]]


@dataclass(frozen=True)
class AdapterRecord:
    id: str
    queries: Dict[str, Query]
    metadata: Dict[str, Any] = field(default_factory=dict)


class Registry:
    """Collection of registered adapters, queries are looked up and executed by adapter id and query name."""

    def __init__(self):
        self.adapters: Dict[str, AdapterRecord] = {}

    def register(self, record: AdapterRecord) -> AdapterRecord:
        if record.id in self.adapters:
            raise ConfigurationError(f"Adapter '{record.id}' is already registered")
        self.adapters[record.id] = record
        logger.info(f"Registered adapter '{record.id}' with queries: {list(record.queries.keys())}")
        return record

    def ids(self) -> List[str]:
        return list(self.adapters.keys())

    def get(self, adapter_id: str) -> AdapterRecord:
        if adapter_id not in self.adapters:
            raise ConfigurationError(f"Adapter '{adapter_id}' is not registered")
        return self.adapters[adapter_id]

    async def execute_query(self, adapter_id: str, query_name: str) -> float:
        record = self.get(adapter_id)
        if query_name not in record.queries:
            raise ConfigurationError(f"Adapter '{adapter_id}' has no query '{query_name}'")
        return await record.queries[query_name]()

    async def execute_all(self, adapter_id: str) -> Dict[str, Any]:
        """Run all queries of an adapter concurrently. Failed queries map to their exception."""
        record = self.get(adapter_id)
        names = list(record.queries.keys())
        results = await asyncio.gather(*[record.queries[name]() for name in names], return_exceptions=True)
        return dict(zip(names, results))


@dataclass
class IssuanceContext:
    """Everything an adapter gets handed by its host."""
    balances: Any
    prices: Any
    registry: Registry = field(default_factory=Registry)
    date: DateHelper = field(default_factory=DateHelper)
    ipfs: IpfsHelper = field(default_factory=IpfsHelper)


def build_metadata(token: TokenConfig, context: IssuanceContext) -> Dict[str, Any]:
    return {
        "name": token.name,
        "description": adapter_info["description"],
        "icon": context.ipfs.get_data_uri_loader(token.icon, token.icon_type) if token.icon else None,
        "category": token.category,
        "issuanceDescription": token.issuance_description,
        "website": token.website,
    }


def setup(context: IssuanceContext, token_id: str = "swapr", token: Optional[TokenConfig] = None, days_ago: int = DEFAULT_DAYS_AGO) -> AdapterRecord:
    """Build the issuance queries for a token and register them with the host registry."""
    token = token or load_token_config(token_id)

    return context.registry.register(AdapterRecord(
        id=token.id,
        queries={
            "circulatingSupply": get_circulating_supply(token, context.balances, context.date),
            "issuance7DayAvgUSD": get_issuance_data(token, context.balances, context.prices, context.date, days_ago),
            "issuanceRateCurrent": get_inflation_rate(token, context.balances, context.date, days_ago),
        },
        metadata=build_metadata(token, context),
    ))
