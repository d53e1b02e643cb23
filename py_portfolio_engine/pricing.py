from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .types import PriceInfo, safe_float

DEFAULT_USD_TRY = 33.50
DEFAULT_EUR_USD = 1.08
DEFAULT_GBP_USD = 1.27
# Live valuation never divides by a non-positive USD/TRY; this stands in
FALLBACK_USD_TRY = 30.0


@dataclass(frozen=True)
class ExchangeRates:
    usd_try: float = DEFAULT_USD_TRY
    eur_usd: float = DEFAULT_EUR_USD
    gbp_usd: float = DEFAULT_GBP_USD


def _try_price(rates: ExchangeRates) -> float:
    return 1.0 / rates.usd_try if rates.usd_try > 0 else 0.0


# Symbol -> USD unit price. Anything not listed is a priced asset.
CURRENCY_RULES: Dict[str, Callable[[ExchangeRates], float]] = {
    "TRY": _try_price,
    "USD": lambda rates: 1.0,
    "EUR": lambda rates: safe_float(rates.eur_usd),
    "GBP": lambda rates: safe_float(rates.gbp_usd),
}


def is_currency(asset: str) -> bool:
    return asset in CURRENCY_RULES


def effective_usd_rate(rate: float) -> float:
    rate = safe_float(rate)
    return rate if rate > 0 else FALLBACK_USD_TRY


def quoted_price_usd(price_info: Optional[PriceInfo], usd_try: float) -> float:
    """ USD unit price of a priced asset. Missing or non-positive price -> 0 """
    if price_info is None:
        return 0.0
    price = safe_float(price_info.price)
    if price <= 0:
        return 0.0
    if (price_info.currency or "USD").upper() == "TRY":
        return price / usd_try if usd_try > 0 else 0.0
    return price


def price_usd_for(asset: str, price_info: Optional[PriceInfo], rates: ExchangeRates) -> float:
    rule = CURRENCY_RULES.get(asset)
    if rule is not None:
        return rule(rates)
    return quoted_price_usd(price_info, rates.usd_try)
