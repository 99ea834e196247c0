"""
Issuance metrics for one token, derived from two supply readings `days_ago` days apart.

Notes on the calculations:
- issuance is valued at the *current* price, not the price at the start or end of the period
- the rate is annualized linearly (weekly growth * 52), not compounded
"""
import asyncio
import logging

from issuance.errors import DivisionByZero
from issuance.models import TokenConfig
from issuance.supply import compute_supply, guarded_read

logger = logging.getLogger("issuance")

WEEKS_PER_YEAR = 52
DEFAULT_DAYS_AGO = 7


def issuance_period_dates(date_helper, days_ago: int = DEFAULT_DAYS_AGO):
    today = date_helper.today()
    return today, date_helper.offset_days(today, -days_ago)


def average_issuance_value(supply_now: float, supply_prior: float, price: float, days_ago: int = DEFAULT_DAYS_AGO) -> float:
    return (supply_now - supply_prior) / days_ago * price


def annualized_rate(supply_now: float, supply_prior: float, days_ago: int = DEFAULT_DAYS_AGO) -> float:
    if supply_prior == 0:
        raise DivisionByZero("Supply at the start of the period is zero, issuance rate is undefined")
    periods_per_year = WEEKS_PER_YEAR * 7 / days_ago
    return (supply_now / supply_prior - 1) * periods_per_year


def get_circulating_supply(config: TokenConfig, balance_reader, date_helper):
    async def circulating_supply() -> float:
        today = date_helper.today()
        return await compute_supply(config, today, balance_reader)
    return circulating_supply


def get_issuance_data(config: TokenConfig, balance_reader, price_reader, date_helper, days_ago: int = DEFAULT_DAYS_AGO):
    """Average value (in USD) of the tokens issued per day over the last `days_ago` days."""
    async def issuance_avg_usd() -> float:
        today, period_ago = issuance_period_dates(date_helper, days_ago)
        price, today_supply, period_ago_supply = await asyncio.gather(
            guarded_read(price_reader.current_price(config.coingecko_id), f"price of {config.coingecko_id}"),
            compute_supply(config, today, balance_reader),
            compute_supply(config, period_ago, balance_reader),
        )
        logger.debug(f"{config.id}: supply {period_ago} {period_ago_supply} -> {today} {today_supply}, price {price}")
        return average_issuance_value(today_supply, period_ago_supply, price, days_ago)
    return issuance_avg_usd


def get_inflation_rate(config: TokenConfig, balance_reader, date_helper, days_ago: int = DEFAULT_DAYS_AGO):
    """Growth of the supply over the last `days_ago` days, annualized."""
    async def issuance_rate() -> float:
        today, period_ago = issuance_period_dates(date_helper, days_ago)
        today_supply, period_ago_supply = await asyncio.gather(
            compute_supply(config, today, balance_reader),
            compute_supply(config, period_ago, balance_reader),
        )
        return annualized_rate(today_supply, period_ago_supply, days_ago)
    return issuance_rate
