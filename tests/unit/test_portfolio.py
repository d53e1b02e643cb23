import unittest
from datetime import datetime

from py_portfolio_engine.portfolio import (
    PortfolioTotals, apply_base_currency_overrides, group_by_asset,
    period_change, snapshot_as_of, summarize_portfolio,
)
from py_portfolio_engine.pricing import ExchangeRates
from py_portfolio_engine.types import AssetStats, PriceInfo, Transaction, normalize_asset

AS_OF = datetime(2025, 3, 1)


def tx(id, type, date, amount, price_try, usd_rate, asset):
    return Transaction(
        id=id, type=type, asset=asset, date=date,
        amount=amount, price_try=price_try, usd_rate=usd_rate,
    )


class TestGrouping(unittest.TestCase):

    def test_normalize_asset(self):
        self.assertEqual(normalize_asset(" gold "), "GOLD")
        self.assertEqual(normalize_asset("btc"), "BTC")
        self.assertEqual(normalize_asset(""), "GOLD")
        self.assertEqual(normalize_asset(None), "GOLD")

    def test_group_by_asset_merges_spellings(self):
        txs = [
            tx("1", "BUY", datetime(2024, 1, 1), 1, 1, 1, "gold "),
            tx("2", "BUY", datetime(2024, 1, 2), 1, 1, 1, "BTC"),
            tx("3", "SELL", datetime(2024, 1, 3), 1, 1, 1, "GOLD"),
        ]
        groups = group_by_asset(txs)
        self.assertEqual(list(groups), ["GOLD", "BTC"])
        self.assertEqual([t.id for t in groups["GOLD"]], ["1", "3"])


class TestBaseCurrencyOverrides(unittest.TestCase):

    def setUp(self):
        self.stats = AssetStats(
            total_amount=100.0, total_value_usd=100.0, total_cost_usd=90.0,
            average_cost_usd=0.9, profit_usd=10.0, profit_ratio=0.1,
            total_value_try=4000.0, total_cost_try=3000.0, profit_try=1000.0,
            profit_ratio_try=0.33, xirr=0.2,
        )

    def test_try_has_no_try_profit(self):
        s = apply_base_currency_overrides("TRY", self.stats)
        self.assertEqual(s.profit_try, 0.0)
        self.assertEqual(s.profit_ratio_try, 0.0)
        self.assertEqual(s.total_cost_try, 4000.0)
        self.assertEqual(s.profit_usd, 10.0)

    def test_usd_has_no_usd_profit(self):
        s = apply_base_currency_overrides("USD", self.stats)
        self.assertEqual(s.profit_usd, 0.0)
        self.assertEqual(s.profit_ratio, 0.0)
        self.assertEqual(s.xirr, 0.0)
        self.assertEqual(s.total_cost_usd, 100.0)
        self.assertEqual(s.average_cost_usd, 1.0)
        self.assertEqual(s.profit_try, 1000.0)

    def test_other_assets_untouched(self):
        self.assertIs(apply_base_currency_overrides("GOLD", self.stats), self.stats)


class TestSummary(unittest.TestCase):

    def setUp(self):
        self.txs = [
            tx("1", "BUY", datetime(2024, 1, 10), 10, 600, 30, "GOLD"),    # $200
            tx("2", "BUY", datetime(2024, 2, 10), 100, 30, 30, "USD"),     # $100
            tx("3", "SELL", datetime(2024, 9, 10), 4, 1000, 35, "gold"),
        ]
        self.prices = {"GOLD": PriceInfo(30.0, "USD")}
        self.rates = ExchangeRates(usd_try=40.0, eur_usd=1.1, gbp_usd=1.3)

    def test_totals_are_sums_of_assets(self):
        summary = summarize_portfolio(self.txs, self.prices, self.rates, {"GOLD": "USD"}, as_of=AS_OF)
        by_asset = {a.asset: a for a in summary.assets}

        self.assertEqual(set(by_asset), {"GOLD", "USD"})
        self.assertEqual(by_asset["GOLD"].driver, "USD")
        self.assertEqual(by_asset["USD"].driver, "TRY")
        self.assertAlmostEqual(by_asset["GOLD"].stats.total_amount, 6.0)
        self.assertAlmostEqual(by_asset["GOLD"].stats.total_value_usd, 180.0)
        self.assertAlmostEqual(by_asset["USD"].stats.total_value_usd, 100.0)
        self.assertEqual(by_asset["USD"].stats.profit_usd, 0.0)

        totals = summary.totals
        self.assertAlmostEqual(totals.value_usd, 280.0)
        self.assertAlmostEqual(totals.value_try, 280.0 * 40.0)
        self.assertAlmostEqual(totals.cost_usd, sum(a.stats.total_cost_usd for a in summary.assets))
        self.assertAlmostEqual(totals.profit_usd, sum(a.stats.profit_usd for a in summary.assets))
        self.assertAlmostEqual(totals.profit_ratio, totals.profit_usd / totals.cost_usd)

    def test_non_positive_rate_falls_back(self):
        summary = summarize_portfolio(self.txs, self.prices, ExchangeRates(usd_try=0.0), as_of=AS_OF)
        self.assertAlmostEqual(summary.totals.value_try, summary.totals.value_usd * 30.0)

    def test_empty_portfolio(self):
        summary = summarize_portfolio([], {}, self.rates, as_of=AS_OF)
        self.assertEqual(summary.assets, [])
        self.assertEqual(summary.totals, PortfolioTotals())


class TestSnapshotAsOf(unittest.TestCase):

    def test_uses_only_earlier_transactions_and_their_prices(self):
        txs = [
            tx("1", "BUY", datetime(2023, 5, 1), 10, 600, 30, "GOLD"),     # $20
            tx("2", "BUY", datetime(2023, 11, 1), 5, 1050, 35, "GOLD"),    # $30
            tx("3", "BUY", datetime(2024, 6, 1), 5, 2000, 40, "GOLD"),     # after target
        ]
        snap = snapshot_as_of(txs, datetime(2024, 1, 1))

        self.assertAlmostEqual(snap.value_usd, 15 * 30.0)
        self.assertAlmostEqual(snap.value_try, 15 * 30.0 * 35.0)
        self.assertAlmostEqual(snap.cost_usd, 200.0 + 150.0)

    def test_transaction_on_target_day_counts(self):
        txs = [tx("1", "BUY", datetime(2024, 1, 1, 18, 0), 1, 300, 30, "GOLD")]
        self.assertAlmostEqual(snapshot_as_of(txs, datetime(2024, 1, 1)).value_usd, 10.0)

    def test_nothing_before_target(self):
        txs = [tx("1", "BUY", datetime(2024, 6, 1), 1, 300, 30, "GOLD")]
        self.assertEqual(snapshot_as_of(txs, datetime(2024, 1, 1)), PortfolioTotals())

    def test_period_change(self):
        past = PortfolioTotals(value_usd=200.0, value_try=6000.0)
        current = PortfolioTotals(value_usd=250.0, value_try=10000.0)
        change = period_change(current, past)
        self.assertAlmostEqual(change.profit_usd, 50.0)
        self.assertAlmostEqual(change.growth_usd, 25.0)
        self.assertAlmostEqual(change.profit_try, 4000.0)
        self.assertAlmostEqual(change.growth_try, 4000.0 / 6000.0 * 100)

    def test_period_change_zero_base(self):
        change = period_change(PortfolioTotals(value_usd=10.0, value_try=300.0), PortfolioTotals())
        self.assertEqual(change.growth_usd, 0.0)
        self.assertEqual(change.growth_try, 0.0)


if __name__ == '__main__':
    unittest.main()
