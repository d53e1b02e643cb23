import csv
import logging
from typing import List

from .types import Transaction, TransactionType, normalize_asset

REQUIRED_COLUMNS = ("id", "type", "asset", "date", "amount", "price_try", "usd_rate")

class TransactionCsvLoader:
    """
    Reads a semicolon separated transaction export:
    id;type;asset;date;amount;price_try;usd_rate[;total_try;total_usd]
    """

    def __init__(self, delimiter: str = ";"):
        self.delimiter = delimiter

    def load(self, csv_path: str) -> List[Transaction]:
        # OSError propagates: without a transaction file there is nothing to value
        with open(csv_path, 'r', encoding='utf-8-sig', newline='') as f:
            reader = csv.DictReader(f, delimiter=self.delimiter)
            missing = [c for c in REQUIRED_COLUMNS if c not in (reader.fieldnames or [])]
            if missing:
                raise ValueError(f"{csv_path}: missing columns {', '.join(missing)}")

            transactions = []
            for line_no, row in enumerate(reader, start=2):
                t = self._parse_row(row, line_no)
                if t is not None:
                    transactions.append(t)

        logging.info(f"Loaded {len(transactions)} transactions from {csv_path}")
        return transactions

    def _parse_row(self, row: dict, line_no: int):
        if not any((v or "").strip() for v in row.values() if isinstance(v, str)):
            return None

        try:
            t_type = TransactionType.parse(row.get("type", ""))
        except ValueError:
            logging.warning(f"Line {line_no}: unknown type {row.get('type')!r}. Skipped.")
            return None

        total_try = (row.get("total_try") or "").strip() or None
        total_usd = (row.get("total_usd") or "").strip() or None

        try:
            return Transaction(
                id=(row.get("id") or f"row-{line_no}").strip(),
                type=t_type,
                asset=normalize_asset(row.get("asset")),
                date=(row.get("date") or "").strip(),
                amount=row.get("amount"),
                price_try=row.get("price_try"),
                usd_rate=row.get("usd_rate"),
                total_try=total_try,
                total_usd=total_usd,
            )
        except ValueError as e:
            logging.warning(f"Line {line_no}: invalid date {row.get('date')!r} ({e}). Skipped.")
            return None
