import sys
import os
import argparse
import logging
from datetime import datetime
from .config_loader import load_settings
from .csv_loader import TransactionCsvLoader
from .csv_generator import CsvOutputGenerator
from .history import RANGE_PRESETS, range_start_for, reconstruct_monthly_values
from .portfolio import period_change, snapshot_as_of, summarize_portfolio

# Setup Logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)

def main(argv=None):
    parser = argparse.ArgumentParser(description="Portfolio Valuation Report")
    parser.add_argument("--transactions", default="transactions.csv", help="Transaction CSV (default: transactions.csv)")
    parser.add_argument("--settings", default="portfolio_settings.json", help="Rates and prices JSON (default: portfolio_settings.json)")
    parser.add_argument("--range", default="all", choices=sorted(RANGE_PRESETS), help="Monthly history window (default: all)")
    parser.add_argument("--output-dir", default=".", help="Where the report CSVs are written (default: .)")
    args = parser.parse_args(argv)

    logging.info("Starting Portfolio Valuation Report...")
    now = datetime.now()

    # 1. Inputs
    settings = load_settings(args.settings)
    try:
        transactions = TransactionCsvLoader().load(args.transactions)
    except (OSError, ValueError) as e:
        logging.error(f"Failed to read transactions: {e}")
        return 1

    if not transactions:
        logging.warning("No transactions found.")

    # 2. Per-asset valuation
    summary = summarize_portfolio(transactions, settings.prices, settings.rates, settings.drivers, as_of=now)

    # 3. Monthly history
    rates = settings.rates
    points = reconstruct_monthly_values(
        transactions, settings.prices, rates.usd_try, rates.eur_usd, rates.gbp_usd,
        range_start=range_start_for(args.range, now), as_of=now,
    )

    # 4. Last 1 year
    year_ago = range_start_for("1y", now)
    change = period_change(summary.totals, snapshot_as_of(transactions, year_ago, rates.eur_usd, rates.gbp_usd))

    # 5. Output
    csv_gen = CsvOutputGenerator()
    os.makedirs(args.output_dir, exist_ok=True)
    outputs = {
        "asset_stats.csv": csv_gen.render(csv_gen.asset_frame(summary.assets)),
        "monthly_values.csv": csv_gen.render(csv_gen.monthly_frame(points)),
    }
    for filename, content in outputs.items():
        path = os.path.join(args.output_dir, filename)
        with open(path, "w", encoding='utf-8') as f:
            f.write(content)
        logging.info(f"Written {path}")

    totals = summary.totals
    logging.info(f"Total value: ${totals.value_usd:,.0f} / TRY {totals.value_try:,.0f}")
    logging.info(f"All-time profit: ${totals.profit_usd:,.0f} ({totals.profit_ratio * 100:.1f}%) / "
                 f"TRY {totals.profit_try:,.0f} ({totals.profit_ratio_try * 100:.1f}%)")
    logging.info(f"Last 1 year: {change.growth_usd:+.1f}% USD / {change.growth_try:+.1f}% TRY")
    return 0

if __name__ == "__main__":
    sys.exit(main())
