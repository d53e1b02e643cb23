import pytest

from py_portfolio_engine.pricing import (
    FALLBACK_USD_TRY, ExchangeRates, effective_usd_rate, is_currency, price_usd_for,
)
from py_portfolio_engine.types import PriceInfo

RATES = ExchangeRates(usd_try=40.0, eur_usd=1.1, gbp_usd=1.3)


@pytest.mark.parametrize("asset, expected", [
    ("TRY", 1 / 40.0),
    ("USD", 1.0),
    ("EUR", 1.1),
    ("GBP", 1.3),
])
def test_currency_rules_ignore_configured_price(asset, expected):
    assert is_currency(asset)
    assert price_usd_for(asset, PriceInfo(999.0, "USD"), RATES) == pytest.approx(expected)


def test_try_with_zero_rate_is_zero():
    assert price_usd_for("TRY", None, ExchangeRates(usd_try=0.0)) == 0.0


def test_priced_asset_in_usd():
    assert not is_currency("BTC")
    assert price_usd_for("BTC", PriceInfo(65000.0, "USD"), RATES) == 65000.0


def test_priced_asset_quoted_in_try():
    assert price_usd_for("THYAO", PriceInfo(300.0, "TRY"), RATES) == pytest.approx(7.5)
    assert price_usd_for("THYAO", PriceInfo(300.0, "try"), RATES) == pytest.approx(7.5)


def test_missing_or_non_positive_price_is_zero():
    assert price_usd_for("XU100", None, RATES) == 0.0
    assert price_usd_for("XU100", PriceInfo(0.0, "USD"), RATES) == 0.0
    assert price_usd_for("XU100", PriceInfo(-5.0, "USD"), RATES) == 0.0


def test_effective_usd_rate():
    assert effective_usd_rate(35.2) == 35.2
    assert effective_usd_rate(0) == FALLBACK_USD_TRY
    assert effective_usd_rate("oops") == FALLBACK_USD_TRY
