import math
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Any, Optional, Union


class TransactionType(Enum):
    BUY = "BUY"
    SELL = "SELL"

    @classmethod
    def parse(cls, value: Union[str, "TransactionType"]) -> "TransactionType":
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().upper())


def safe_float(value: Any) -> float:
    """ Numeric cast that never raises. Garbage, NaN and inf become 0.0 """
    try:
        result = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(result) or math.isinf(result):
        return 0.0
    return result


DEFAULT_ASSET = "GOLD"


def normalize_asset(symbol: Optional[str]) -> str:
    """ Grouping key for holdings and price lookups: 'gold ' -> 'GOLD' """
    cleaned = (symbol or "").strip().upper()
    return cleaned or DEFAULT_ASSET


def to_datetime(value: Union[datetime, date, str]) -> datetime:
    """ Naive datetime; offset-qualified values are shifted to UTC first """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime.combine(value, time.min)
    else:
        parsed = datetime.fromisoformat(str(value).strip())
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


@dataclass
class Transaction:
    id: str
    type: TransactionType
    asset: str
    date: datetime
    amount: float        # grams, lots, units... opaque here
    price_try: float     # unit price in TRY
    usd_rate: float      # USD/TRY at trade time

    # Derived. Filled in when not supplied by storage.
    total_try: Optional[float] = None
    total_usd: Optional[float] = None
    price_usd: Optional[float] = None

    def __post_init__(self):
        self.type = TransactionType.parse(self.type)
        self.date = to_datetime(self.date)
        self.amount = safe_float(self.amount)
        self.price_try = safe_float(self.price_try)
        self.usd_rate = safe_float(self.usd_rate)

        if self.total_try is None:
            self.total_try = self.amount * self.price_try
        else:
            self.total_try = safe_float(self.total_try)

        if self.price_usd is None:
            self.price_usd = self.price_try / self.usd_rate if self.usd_rate > 0 else 0.0
        else:
            self.price_usd = safe_float(self.price_usd)

        if self.total_usd is None:
            self.total_usd = self.total_try / self.usd_rate if self.usd_rate > 0 else 0.0
        else:
            self.total_usd = safe_float(self.total_usd)

    @property
    def is_buy(self) -> bool:
        return self.type == TransactionType.BUY


@dataclass
class AssetStats:
    total_amount: float = 0.0
    total_value_usd: float = 0.0
    total_cost_usd: float = 0.0
    average_cost_usd: float = 0.0
    profit_usd: float = 0.0
    profit_ratio: float = 0.0
    # TRY side
    total_value_try: float = 0.0
    total_cost_try: float = 0.0
    profit_try: float = 0.0
    profit_ratio_try: float = 0.0

    xirr: float = 0.0
    days_in_portfolio: int = 0
    realized_profit_usd: float = 0.0
    realized_profit_try: float = 0.0
    # Sum of all BUY totals, never reduced by sells
    total_invested_usd: float = 0.0
    total_invested_try: float = 0.0


@dataclass
class Cashflow:
    amount: float  # negative = capital out, positive = capital back
    when: datetime


@dataclass(frozen=True)
class PriceInfo:
    price: float
    currency: str = "USD"  # USD or TRY


@dataclass
class MonthlyPoint:
    month: str  # YYYY-MM
    value_usd: float
    value_try: float
