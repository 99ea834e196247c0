import asyncio
from typing import Optional

import pandas as pd

from issuance.adapters.abstract_adapters import AbstractAdapter
from issuance.adapters.adapter_coingecko import CoinGeckoPriceReader
from issuance.adapters.rpc_funcs.erc20_reader import Erc20BalanceReader
from issuance.issuance_config import token_mapping
from issuance.metrics import DEFAULT_DAYS_AGO
from issuance.misc.helper_functions import print_extract, print_init, print_load
from issuance.registry import IssuanceContext, setup

# registered query name -> metric_key in the output
METRIC_KEYS = {
    "circulatingSupply": "circulating_supply",
    "issuance7DayAvgUSD": "issuance_7d_avg_usd",
    "issuanceRateCurrent": "issuance_rate",
}


class AdapterIssuance(AbstractAdapter):
    """
    Runs the issuance queries of one or more tokens and returns them as a DataFrame.

    adapter_params:
        token_ids: list (optional) - tokens to register, defaults to all tokens in issuance_config
        days_ago: int (optional) - lookback period for issuance and rate, defaults to 7
    """
    def __init__(self, adapter_params: dict, db_connector, context: Optional[IssuanceContext] = None):
        super().__init__("Token Issuance", adapter_params, db_connector)
        self.token_ids = adapter_params.get('token_ids', list(token_mapping.keys()))
        self.days_ago = adapter_params.get('days_ago', DEFAULT_DAYS_AGO)

        # close our own clients after each extract, clients handed in belong to the caller
        self.owns_clients = context is None
        self.context = context or IssuanceContext(balances=Erc20BalanceReader(), prices=CoinGeckoPriceReader())

        for token_id in self.token_ids:
            setup(self.context, token_id, days_ago=self.days_ago)

        print_init(self.name, self.adapter_params)

    def extract(self, load_params: dict) -> pd.DataFrame:
        """
        load_params:
            token_ids: list (optional) - subset of the registered tokens, defaults to all
            metric_keys: list (optional) - subset of METRIC_KEYS values, defaults to all
        """
        token_ids = load_params.get('token_ids', self.token_ids)
        metric_keys = load_params.get('metric_keys', list(METRIC_KEYS.values()))

        rows = asyncio.run(self._extract_rows(token_ids, metric_keys))

        df = pd.DataFrame(rows, columns=['metric_key', 'origin_key', 'date', 'value'])
        if not df.empty:
            df['date'] = pd.to_datetime(df['date']).dt.date
            df = df.set_index(['metric_key', 'origin_key', 'date'])

        print_extract(self.name, load_params, df.shape)
        return df

    def load(self, df: pd.DataFrame):
        if df is None or df.empty:
            print("No issuance rows to load.")
            return 0
        upserted = self.db_connector.upsert_table("fact_kpis", df)
        print_load(self.name, upserted, "fact_kpis")
        return upserted

    ## ----------------- Helper functions --------------------

    async def _extract_rows(self, token_ids, metric_keys):
        rows = []
        try:
            for token_id in token_ids:
                date = self.context.date.today()
                results = await self.context.registry.execute_all(token_id)
                for query_name, value in results.items():
                    metric_key = METRIC_KEYS.get(query_name)
                    if metric_key not in metric_keys:
                        continue
                    if isinstance(value, Exception):
                        print(f"Failed to extract {metric_key} for {token_id}: {value}")
                        continue
                    print(f"{token_id} {date}: {metric_key}={value}")
                    rows.append({'metric_key': metric_key, 'origin_key': token_id, 'date': date, 'value': value})
        finally:
            if self.owns_clients:
                await self.context.balances.close()
                await self.context.prices.close()
        return rows
