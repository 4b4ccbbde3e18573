"""
Balance Ledger

Keeps `cash_balance` / `online_balance` in step with the transaction
history. The balances are a cache of

    sum(+amount if income else -amount)   per mode

and there is no path that recomputes them from scratch. Every insert goes
through `apply`, every delete through `reverse`, and clear-all through
`reset_all`.

`apply` and `reverse` share `balance_delta`; reverse only flips the sign,
so apply-then-reverse restores the previous balances exactly.
"""

from decimal import Decimal

from src.models.finance import (
    Balances,
    Transaction,
    TransactionMode,
    TransactionType,
)


def balance_delta(transaction: Transaction) -> Decimal:
    """Signed effect of a transaction on the balance of its mode."""
    if transaction.type == TransactionType.INCOME:
        return transaction.amount
    return -transaction.amount


def _shift(balances: Balances, mode: TransactionMode, delta: Decimal) -> Balances:
    if mode == TransactionMode.CASH:
        return Balances(cash=balances.cash + delta, online=balances.online)
    return Balances(cash=balances.cash, online=balances.online + delta)


class BalanceLedger:
    """
    Pure balance arithmetic.

    The ledger never touches storage. The transaction store calls it inside
    the owner's critical section and writes the result together with the
    record change.
    """

    def apply(self, balances: Balances, transaction: Transaction) -> Balances:
        """Balances after `transaction` is inserted."""
        return _shift(balances, transaction.mode, balance_delta(transaction))

    def reverse(self, balances: Balances, transaction: Transaction) -> Balances:
        """Balances after `transaction` is removed."""
        return _shift(balances, transaction.mode, -balance_delta(transaction))

    def reset_all(self) -> Balances:
        """Balances after every transaction of the owner is removed."""
        return Balances()
