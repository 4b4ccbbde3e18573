"""Balance ledger and transaction store."""

from src.ledger.balance import BalanceLedger, balance_delta
from src.ledger.store import TransactionStore

__all__ = [
    "BalanceLedger",
    "TransactionStore",
    "balance_delta",
]
