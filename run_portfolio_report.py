#!/usr/bin/env python3
"""
Run Portfolio Report - value holdings and rebuild the monthly history

Usage:
    python run_portfolio_report.py [--transactions transactions.csv] [--settings portfolio_settings.json]
"""
import sys

from py_portfolio_engine.portfolio_report import main

if __name__ == "__main__":
    sys.exit(main())
