from dataclasses import asdict
from typing import List

import pandas as pd

from .history import monthly_growth
from .portfolio import AssetSummary
from .types import MonthlyPoint

ASSET_COLUMNS = [
    'asset', 'driver', 'price_usd', 'total_amount', 'average_cost_usd',
    'total_cost_usd', 'total_value_usd', 'realized_profit_usd', 'profit_usd', 'profit_ratio',
    'total_cost_try', 'total_value_try', 'realized_profit_try', 'profit_try', 'profit_ratio_try',
    'xirr', 'days_in_portfolio',
]

MONTHLY_COLUMNS = ['month', 'value_usd', 'value_try', 'growth_usd', 'growth_try']


class CsvOutputGenerator:
    """ Renders report tables as ';' separated text, two decimals """

    def __init__(self, sep: str = ";", float_format: str = "%.2f"):
        self.sep = sep
        self.float_format = float_format

    def asset_frame(self, summaries: List[AssetSummary]) -> pd.DataFrame:
        rows = []
        for s in summaries:
            row = {'asset': s.asset, 'driver': s.driver, 'price_usd': s.price_usd}
            row.update(asdict(s.stats))
            rows.append(row)
        df = pd.DataFrame(rows, columns=ASSET_COLUMNS)
        if not df.empty:
            # Ratios are shown in percent
            for col in ('profit_ratio', 'profit_ratio_try', 'xirr'):
                df[col] = df[col] * 100
        return df

    def monthly_frame(self, points: List[MonthlyPoint]) -> pd.DataFrame:
        df = pd.DataFrame([asdict(p) for p in points], columns=['month', 'value_usd', 'value_try'])
        df['growth_usd'] = monthly_growth(points, "USD")
        df['growth_try'] = monthly_growth(points, "TRY")
        return df[MONTHLY_COLUMNS]

    def render(self, df: pd.DataFrame) -> str:
        return df.to_csv(sep=self.sep, index=False, float_format=self.float_format)
