"""
Portfolio level views on top of the per-asset valuation engine:
grouping by normalized symbol, base currency overrides, totals, and the
"value N months ago" snapshot used for period comparisons.
"""
import logging
from collections import OrderedDict
from dataclasses import dataclass, field, replace
from datetime import datetime, time
from typing import Dict, List, Optional

from .pricing import (
    DEFAULT_EUR_USD, DEFAULT_GBP_USD, DEFAULT_USD_TRY,
    ExchangeRates, effective_usd_rate, price_usd_for,
)
from .types import AssetStats, PriceInfo, Transaction, normalize_asset, to_datetime
from .valuation import compute_asset_stats

DEFAULT_DRIVER = "TRY"


@dataclass
class AssetSummary:
    asset: str
    driver: str  # USD or TRY, display currency for profit
    price_usd: float
    stats: AssetStats


@dataclass
class PortfolioTotals:
    value_usd: float = 0.0
    cost_usd: float = 0.0
    profit_usd: float = 0.0
    profit_ratio: float = 0.0
    value_try: float = 0.0
    cost_try: float = 0.0
    profit_try: float = 0.0
    profit_ratio_try: float = 0.0


@dataclass
class PortfolioSummary:
    assets: List[AssetSummary] = field(default_factory=list)
    totals: PortfolioTotals = field(default_factory=PortfolioTotals)


@dataclass
class PeriodChange:
    profit_usd: float
    growth_usd: float  # percent
    profit_try: float
    growth_try: float  # percent


def group_by_asset(transactions: List[Transaction]) -> Dict[str, List[Transaction]]:
    """ Normalized symbol -> transactions, first-seen order, input order inside a group """
    groups: Dict[str, List[Transaction]] = OrderedDict()
    for t in transactions:
        groups.setdefault(normalize_asset(t.asset), []).append(t)
    return groups


def apply_base_currency_overrides(asset: str, stats: AssetStats) -> AssetStats:
    # Holding the base currency itself is not a gain or loss in that currency
    if asset == "TRY":
        return replace(
            stats,
            profit_try=0.0,
            profit_ratio_try=0.0,
            total_cost_try=stats.total_value_try,
        )
    if asset == "USD":
        return replace(
            stats,
            profit_usd=0.0,
            profit_ratio=0.0,
            xirr=0.0,
            total_cost_usd=stats.total_value_usd,
            average_cost_usd=1.0,
        )
    return stats


def aggregate_totals(stats: List[AssetStats]) -> PortfolioTotals:
    totals = PortfolioTotals(
        value_usd=sum(s.total_value_usd for s in stats),
        cost_usd=sum(s.total_cost_usd for s in stats),
        profit_usd=sum(s.profit_usd for s in stats),
        value_try=sum(s.total_value_try for s in stats),
        cost_try=sum(s.total_cost_try for s in stats),
        profit_try=sum(s.profit_try for s in stats),
    )
    # Return on current capital, not on historical volume
    totals.profit_ratio = totals.profit_usd / totals.cost_usd if totals.cost_usd > 0 else 0.0
    totals.profit_ratio_try = totals.profit_try / totals.cost_try if totals.cost_try > 0 else 0.0
    return totals


def summarize_portfolio(
    transactions: List[Transaction],
    prices: Dict[str, PriceInfo],
    rates: ExchangeRates,
    drivers: Optional[Dict[str, str]] = None,
    as_of: Optional[datetime] = None,
) -> PortfolioSummary:
    drivers = drivers or {}
    rates = replace(rates, usd_try=effective_usd_rate(rates.usd_try))

    summaries = []
    for asset, asset_txs in group_by_asset(transactions).items():
        price_usd = price_usd_for(asset, prices.get(asset), rates)
        if price_usd <= 0:
            logging.warning(f"No current price for {asset}. Valuing holdings at 0.")
        stats = compute_asset_stats(asset_txs, price_usd, rates.usd_try, as_of=as_of)
        summaries.append(AssetSummary(
            asset=asset,
            driver=drivers.get(asset, DEFAULT_DRIVER),
            price_usd=price_usd,
            stats=apply_base_currency_overrides(asset, stats),
        ))

    return PortfolioSummary(
        assets=summaries,
        totals=aggregate_totals([s.stats for s in summaries]),
    )


def snapshot_as_of(
    transactions: List[Transaction],
    target: datetime,
    eur_usd_rate: float = DEFAULT_EUR_USD,
    gbp_usd_rate: float = DEFAULT_GBP_USD,
) -> PortfolioTotals:
    """
    Portfolio totals as they stood at the end of `target`'s day, priced only
    from what the transactions up to then recorded.
    """
    cutoff = datetime.combine(to_datetime(target).date(), time.max)
    hist = sorted((t for t in transactions if t.date <= cutoff), key=lambda t: t.date)
    if not hist:
        return PortfolioTotals()

    usd_rate = next((t.usd_rate for t in reversed(hist) if t.usd_rate > 0), DEFAULT_USD_TRY)
    rates = ExchangeRates(usd_try=usd_rate, eur_usd=eur_usd_rate, gbp_usd=gbp_usd_rate)

    stats = []
    for asset, asset_txs in group_by_asset(hist).items():
        last_price = next((t.price_usd for t in reversed(asset_txs) if t.price_usd > 0), 0.0)
        price_usd = price_usd_for(asset, PriceInfo(price=last_price, currency="USD"), rates)
        asset_stats = compute_asset_stats(asset_txs, price_usd, usd_rate, as_of=cutoff)
        stats.append(apply_base_currency_overrides(asset, asset_stats))

    return aggregate_totals(stats)


def period_change(current: PortfolioTotals, past: PortfolioTotals) -> PeriodChange:
    """ Plain value growth between two snapshots, in percent """
    profit_usd = current.value_usd - past.value_usd
    profit_try = current.value_try - past.value_try
    return PeriodChange(
        profit_usd=profit_usd,
        growth_usd=profit_usd / past.value_usd * 100 if past.value_usd > 0 else 0.0,
        profit_try=profit_try,
        growth_try=profit_try / past.value_try * 100 if past.value_try > 0 else 0.0,
    )
