"""
Money-weighted annualized return (XIRR) for irregular, dated cash flows.

Newton-Raphson first, then a bracketed bisection whose upper bound keeps
expanding so very high short-term returns still converge. The solver never
raises: anything it cannot decide comes back as 0.0.
"""
import logging
import math
from typing import List

from .types import Cashflow

DAYS_PER_YEAR = 365.0
MIN_YEARS = 0.0001

NEWTON_MAX_ITER = 50
NEWTON_MIN_DERIVATIVE = 1e-15
TOLERANCE = 1e-8

BISECT_LOW = -0.999999
BISECT_HIGH = 1.0
BRACKET_MAX_EXPANSIONS = 60
BRACKET_GROWTH = 3.0
BISECT_MAX_ITER = 100

# Returned instead of evaluating (1 + rate) ** t for rate <= -100%
SENTINEL = 1e100


def _discounted(amount: float, base: float, exponent: float) -> float:
    try:
        denom = base ** exponent
    except OverflowError:
        return 0.0
    if denom == 0.0:
        if amount == 0:
            return 0.0
        return math.copysign(math.inf, amount)
    return amount / denom


def _npv(flows: List[tuple], rate: float) -> float:
    r1 = 1.0 + rate
    if r1 <= 0:
        return SENTINEL
    return sum(_discounted(amount, r1, years) for amount, years in flows)


def _npv_derivative(flows: List[tuple], rate: float) -> float:
    r1 = 1.0 + rate
    if r1 <= 0:
        return -SENTINEL
    return sum(_discounted(-years * amount, r1, years + 1.0) for amount, years in flows)


def compute_xirr(cashflows: List[Cashflow], initial_guess: float = 0.1) -> float:
    """
    Returns the annual rate r with sum(cf.amount / (1 + r) ** years) == 0,
    years measured from the earliest flow on a 365-day year.

    0.0 means "not computable": fewer than two flows, no sign change,
    or no root found in the search range.
    """
    if len(cashflows) < 2:
        return 0.0

    has_positive = any(cf.amount > 0 for cf in cashflows)
    has_negative = any(cf.amount < 0 for cf in cashflows)
    if not has_positive or not has_negative:
        return 0.0

    ordered = sorted(cashflows, key=lambda cf: cf.when)
    start = ordered[0].when
    flows = [
        (cf.amount, max(MIN_YEARS, (cf.when - start).total_seconds() / 86400.0 / DAYS_PER_YEAR))
        for cf in ordered
    ]

    # 1. Newton-Raphson
    rate = initial_guess
    for _ in range(NEWTON_MAX_ITER):
        fv = _npv(flows, rate)
        dfv = _npv_derivative(flows, rate)
        if abs(dfv) < NEWTON_MIN_DERIVATIVE:
            break

        next_rate = rate - fv / dfv
        if abs(next_rate - rate) < TOLERANCE:
            return next_rate
        rate = next_rate
        if math.isnan(rate) or math.isinf(rate):
            break

    # 2. Bisection, expanding the upper bound until the sign flips
    low = BISECT_LOW
    high = BISECT_HIGH
    expansions = 0
    while _npv(flows, low) * _npv(flows, high) > 0 and expansions < BRACKET_MAX_EXPANSIONS:
        high *= BRACKET_GROWTH
        expansions += 1

    if _npv(flows, low) * _npv(flows, high) > 0:
        logging.debug(f"XIRR: no sign change up to rate {high:.3g}, returning 0")
        return 0.0

    for _ in range(BISECT_MAX_ITER):
        rate = (low + high) / 2
        if _npv(flows, low) * _npv(flows, rate) < 0:
            high = rate
        else:
            low = rate
        if abs(high - low) < TOLERANCE:
            return rate

    return rate
