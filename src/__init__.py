"""
Personal Finance Tracker - Source Package

Records cash and online income/expense transactions for a single user
and keeps a running balance per payment mode.

DESIGN PRINCIPLES:
1. Balances move only through the ledger
2. Every mutation is one atomic unit
3. Fail early, fail visibly
4. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Personal Finance Tracker Team"
