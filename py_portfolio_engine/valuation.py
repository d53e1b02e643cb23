import logging
import math
from datetime import datetime, time
from typing import List, Optional

from .types import AssetStats, Cashflow, Transaction, to_datetime
from .xirr import compute_xirr

# Holdings at or below this are float dust, not a position
HOLDING_EPSILON = 0.0001
# Ratios are only meaningful above this much invested capital
INVESTED_EPSILON = 0.01

END_OF_DAY = time(23, 59, 59, 999000)


def compute_asset_stats(
    transactions: List[Transaction],
    current_price_usd: float,
    current_usd_try_rate: float,
    as_of: Optional[datetime] = None,
) -> AssetStats:
    """
    Weighted-average cost accounting for the transactions of ONE asset.

    The caller groups by normalized symbol; nothing is filtered here.
    Realized profit is tracked in USD and TRY side by side from each
    transaction's own totals. Total profit is computed in TRY and the USD
    figure is that TRY profit at today's rate, so the two never drift apart.
    """
    if not transactions:
        return AssetStats()

    now = to_datetime(as_of or datetime.now())

    # sorted() is stable: same-day trades keep their input order
    ordered = sorted(transactions, key=lambda t: t.date)
    first_date = ordered[0].date
    days_in_portfolio = max(0, math.ceil((now - first_date).total_seconds() / 86400.0))

    total_amount = 0.0
    total_cost_usd = 0.0
    total_cost_try = 0.0
    realized_profit_usd = 0.0
    realized_profit_try = 0.0
    total_invested_usd = 0.0
    total_invested_try = 0.0

    cashflows: List[Cashflow] = []

    for t in ordered:
        if t.is_buy:
            total_amount += t.amount
            total_cost_usd += t.total_usd
            total_cost_try += t.total_try
            total_invested_usd += t.total_usd
            total_invested_try += t.total_try
        else:
            # Cost of goods sold at the average unit cost BEFORE reducing inventory.
            # Quantity beyond the holding carries zero cost basis.
            matched = min(t.amount, total_amount) if total_amount > 0 else 0.0
            if matched < t.amount:
                logging.warning(
                    f"SELL {t.id} of {t.asset}: {t.amount} exceeds holding {total_amount}. "
                    f"Excess treated as zero-cost."
                )

            cogs_usd = 0.0
            cogs_try = 0.0
            if matched > 0:
                cogs_usd = (total_cost_usd / total_amount) * matched
                cogs_try = (total_cost_try / total_amount) * matched

            realized_profit_usd += t.total_usd - cogs_usd
            realized_profit_try += t.total_try - cogs_try
            total_cost_usd -= cogs_usd
            total_cost_try -= cogs_try

            total_amount = max(0.0, total_amount - t.amount)
            if total_amount <= HOLDING_EPSILON:
                total_amount = 0.0
                total_cost_usd = 0.0
                total_cost_try = 0.0

        # XIRR flows are USD based, dated at midnight
        cashflows.append(Cashflow(
            amount=-t.total_usd if t.is_buy else t.total_usd,
            when=datetime.combine(t.date.date(), time.min),
        ))

    current_value_usd = total_amount * current_price_usd
    current_value_try = current_value_usd * current_usd_try_rate

    # Hypothetical liquidation of the open position at the end of today
    if total_amount > HOLDING_EPSILON:
        cashflows.append(Cashflow(
            amount=current_value_usd,
            when=datetime.combine(now.date(), END_OF_DAY),
        ))

    xirr = compute_xirr(cashflows)

    total_profit_try = (current_value_try - total_cost_try) + realized_profit_try
    total_profit_usd = total_profit_try / current_usd_try_rate if current_usd_try_rate > 0 else 0.0

    return AssetStats(
        total_amount=total_amount,
        total_value_usd=current_value_usd,
        total_cost_usd=total_cost_usd,
        average_cost_usd=total_cost_usd / total_amount if total_amount > HOLDING_EPSILON else 0.0,
        profit_usd=total_profit_usd,
        profit_ratio=total_profit_usd / total_invested_usd if total_invested_usd > INVESTED_EPSILON else 0.0,
        total_value_try=current_value_try,
        total_cost_try=total_cost_try,
        profit_try=total_profit_try,
        profit_ratio_try=total_profit_try / total_invested_try if total_invested_try > INVESTED_EPSILON else 0.0,
        xirr=xirr,
        days_in_portfolio=days_in_portfolio,
        realized_profit_usd=realized_profit_usd,
        realized_profit_try=realized_profit_try,
        total_invested_usd=total_invested_usd,
        total_invested_try=total_invested_try,
    )
