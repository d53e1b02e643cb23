"""
Month-by-month replay of the transaction log for the portfolio value chart.

Past months are valued with the last price embedded in the transactions seen
so far, so the curve does not move when today's prices do. Only the current
month uses live prices and rates.
"""
import logging
from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Optional

import pandas as pd

from .pricing import DEFAULT_USD_TRY, ExchangeRates, effective_usd_rate, price_usd_for
from .types import MonthlyPoint, PriceInfo, Transaction, normalize_asset, to_datetime

RANGE_PRESETS = {
    "6m": pd.DateOffset(months=6),
    "1y": pd.DateOffset(years=1),
    "2y": pd.DateOffset(years=2),
    "all": None,
}

# Valued by rule even in past months; everything else uses its last trade price
_HISTORICAL_RULE_ASSETS = ("TRY", "USD")


def range_start_for(preset: str, as_of: Optional[datetime] = None) -> Optional[datetime]:
    if preset not in RANGE_PRESETS:
        raise ValueError(f"Unknown range preset '{preset}'. Expected one of {sorted(RANGE_PRESETS)}")
    offset = RANGE_PRESETS[preset]
    if offset is None:
        return None
    return (pd.Timestamp(as_of or datetime.now()) - offset).to_pydatetime()


def _in_range(month: pd.Period, range_start: Optional[datetime], range_end: Optional[datetime]) -> bool:
    if range_start is not None and month < pd.Period(to_datetime(range_start), freq="M"):
        return False
    if range_end is not None and month > pd.Period(to_datetime(range_end), freq="M"):
        return False
    return True


def _value_usd(holdings: Dict[str, float], price_of) -> float:
    total = 0.0
    for asset, amount in holdings.items():
        if amount <= 0:
            continue
        total += amount * price_of(asset)
    return total


def reconstruct_monthly_values(
    transactions: List[Transaction],
    current_prices: Dict[str, PriceInfo],
    current_usd_rate: float,
    eur_usd_rate: float,
    gbp_usd_rate: float,
    range_start: Optional[datetime] = None,
    range_end: Optional[datetime] = None,
    as_of: Optional[datetime] = None,
) -> List[MonthlyPoint]:
    """
    One point per calendar month from the first transaction's month up to
    the current month, restricted to [range_start, range_end] by month.
    """
    if not transactions:
        return []

    now = to_datetime(as_of or datetime.now())
    ordered = sorted(transactions, key=lambda t: t.date)

    holdings: Dict[str, float] = defaultdict(float)
    last_price_usd: Dict[str, float] = {}
    last_usd_rate = ordered[0].usd_rate if ordered[0].usd_rate > 0 else DEFAULT_USD_TRY

    months = pd.period_range(
        start=pd.Period(ordered[0].date, freq="M"),
        end=pd.Period(now, freq="M"),
        freq="M",
    )
    if len(months) == 0:
        logging.warning(f"First transaction ({ordered[0].date:%Y-%m-%d}) is after {now:%Y-%m}. No history.")
        return []

    points: List[MonthlyPoint] = []
    idx = 0
    last_month = months[-1]

    for month in months:
        is_current = month == last_month

        # The current month bucket means "as of now": it takes everything left
        while idx < len(ordered) and (is_current or pd.Period(ordered[idx].date, freq="M") <= month):
            t = ordered[idx]
            idx += 1
            asset = normalize_asset(t.asset)
            if t.is_buy:
                holdings[asset] += t.amount
            else:
                holdings[asset] = max(0.0, holdings[asset] - t.amount)
            if t.price_usd > 0:
                last_price_usd[asset] = t.price_usd
            if t.usd_rate > 0:
                last_usd_rate = t.usd_rate

        if not _in_range(month, range_start, range_end):
            continue

        if is_current:
            usd_rate = effective_usd_rate(current_usd_rate)
            live_rates = ExchangeRates(usd_try=usd_rate, eur_usd=eur_usd_rate, gbp_usd=gbp_usd_rate)

            def price_of(asset: str) -> float:
                live = price_usd_for(asset, current_prices.get(asset), live_rates)
                if live > 0:
                    return live
                # No live quote configured: keep the last trade price
                return last_price_usd.get(asset, 0.0)
        else:
            usd_rate = last_usd_rate
            past_rates = ExchangeRates(usd_try=usd_rate, eur_usd=eur_usd_rate, gbp_usd=gbp_usd_rate)

            def price_of(asset: str) -> float:
                if asset in _HISTORICAL_RULE_ASSETS:
                    return price_usd_for(asset, None, past_rates)
                return last_price_usd.get(asset, 0.0)

        value_usd = _value_usd(holdings, price_of)
        points.append(MonthlyPoint(
            month=month.strftime("%Y-%m"),
            value_usd=value_usd,
            value_try=value_usd * usd_rate,
        ))

    logging.debug(f"Reconstructed {len(points)} of {len(months)} months")
    return points


def monthly_growth(points: List[MonthlyPoint], currency: str = "USD") -> List[float]:
    """ Month-over-month change in percent. First point and zero bases give 0. """
    growth: List[float] = []
    prev = None
    for p in points:
        value = p.value_usd if currency.upper() == "USD" else p.value_try
        if prev is None or prev <= 0:
            growth.append(0.0)
        else:
            growth.append((value - prev) / prev * 100)
        prev = value
    return growth
