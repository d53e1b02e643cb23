import json
import os
import logging
from dataclasses import dataclass, field
from typing import Dict

from .pricing import ExchangeRates, DEFAULT_USD_TRY, DEFAULT_EUR_USD, DEFAULT_GBP_USD
from .types import PriceInfo, normalize_asset, safe_float

@dataclass
class AppSettings:
    rates: ExchangeRates = field(default_factory=ExchangeRates)
    prices: Dict[str, PriceInfo] = field(default_factory=dict)  # Symbol -> manual price
    drivers: Dict[str, str] = field(default_factory=dict)       # Symbol -> USD/TRY

def _load_rates(data: dict) -> ExchangeRates:
    rates = data.get("rates", {})
    if not isinstance(rates, dict):
        logging.warning("'rates' is not an object. Using default rates.")
        return ExchangeRates()

    def pick(key: str, default: float) -> float:
        value = safe_float(rates.get(key, default))
        if value <= 0:
            logging.warning(f"Invalid rate {key}={rates.get(key)!r}. Using {default}.")
            return default
        return value

    return ExchangeRates(
        usd_try=pick("usd_try", DEFAULT_USD_TRY),
        eur_usd=pick("eur_usd", DEFAULT_EUR_USD),
        gbp_usd=pick("gbp_usd", DEFAULT_GBP_USD),
    )

def load_settings(config_path: str = "portfolio_settings.json") -> AppSettings:
    """
    Loads exchange rates and per-asset settings (manual price, price
    currency, driver). Anything missing or broken falls back to defaults.
    """
    settings = AppSettings()

    if not os.path.exists(config_path):
        logging.info(f"Settings file {config_path} not found. Using defaults.")
        return settings

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logging.error(f"Failed to load settings file {config_path}: {e}")
        return settings

    if not isinstance(data, dict):
        logging.error(f"Settings file {config_path} must contain a JSON object.")
        return settings

    settings.rates = _load_rates(data)

    assets = data.get("assets", {})
    if not isinstance(assets, dict):
        logging.warning("'assets' is not an object. Ignoring asset settings.")
        assets = {}

    for raw_symbol, a_data in assets.items():
        symbol = normalize_asset(raw_symbol)
        if not isinstance(a_data, dict):
            logging.warning(f"Skipping asset settings for {raw_symbol}: expected an object")
            continue

        if a_data.get("manual_price") is not None:
            currency = str(a_data.get("price_currency") or "USD").upper()
            if currency not in ("USD", "TRY"):
                logging.warning(f"Unknown price currency {currency} for {symbol}. Assuming USD.")
                currency = "USD"
            settings.prices[symbol] = PriceInfo(price=safe_float(a_data["manual_price"]), currency=currency)

        driver = a_data.get("driver")
        if driver:
            driver = str(driver).upper()
            if driver in ("USD", "TRY"):
                settings.drivers[symbol] = driver
            else:
                logging.warning(f"Unknown driver {driver} for {symbol}. Ignoring.")

    logging.info(f"Loaded settings: {len(settings.prices)} prices, {len(settings.drivers)} drivers")
    return settings
