"""
In-Memory Storage Implementation

Default backend for local use and for tests. Tables are plain dicts with
secondary indices by owner, (owner, mode) and (owner, date).

Every public method runs under one storage lock. Compound writes check all
preconditions first and only then touch the tables, so a rejected call
leaves nothing behind.
"""

import threading
from typing import Optional
from uuid import UUID

from src.errors import ConflictError, NotFoundError
from src.models.finance import (
    Balances,
    Transaction,
    TransactionMode,
    UserProfile,
)
from src.services.storage.interface import FinanceStorageInterface


class InMemoryFinanceStorage(FinanceStorageInterface):
    """Process-local implementation of finance storage."""

    def __init__(self):
        super().__init__()
        self._lock = threading.RLock()
        self._users: dict[UUID, UserProfile] = {}
        self._transactions: dict[UUID, Transaction] = {}

        # Indices (values keep insertion order)
        self._by_owner: dict[UUID, list[UUID]] = {}
        self._by_owner_mode: dict[tuple[UUID, TransactionMode], list[UUID]] = {}
        self._by_owner_date: dict[UUID, dict[str, list[UUID]]] = {}

    # -------------------------------------------------------------------------
    # Index maintenance
    # -------------------------------------------------------------------------

    def _index(self, txn: Transaction) -> None:
        self._by_owner.setdefault(txn.owner_id, []).append(txn.id)
        self._by_owner_mode.setdefault((txn.owner_id, txn.mode), []).append(txn.id)
        dates = self._by_owner_date.setdefault(txn.owner_id, {})
        dates.setdefault(txn.date, []).append(txn.id)

    def _unindex(self, txn: Transaction) -> None:
        self._by_owner[txn.owner_id].remove(txn.id)
        self._by_owner_mode[(txn.owner_id, txn.mode)].remove(txn.id)
        dates = self._by_owner_date[txn.owner_id]
        dates[txn.date].remove(txn.id)
        if not dates[txn.date]:
            del dates[txn.date]

    def _set_balances(self, owner_id: UUID, balances: Balances) -> None:
        self._users[owner_id] = self._users[owner_id].with_balances(balances)

    def _require_owner(self, owner_id: UUID) -> None:
        if owner_id not in self._users:
            raise NotFoundError("User profile not found")

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    def create_user(self, user: UserProfile, exclusive: bool = False) -> None:
        with self._lock:
            if exclusive and self._users:
                raise ConflictError("A user profile already exists")
            if user.id in self._users:
                raise ConflictError(f"User profile already exists: {user.id}")
            self._users[user.id] = user.model_copy()

    def get_user(self, user_id: UUID) -> Optional[UserProfile]:
        with self._lock:
            user = self._users.get(user_id)
            return user.model_copy() if user else None

    def list_users(self) -> list[UserProfile]:
        with self._lock:
            users = [u.model_copy() for u in self._users.values()]
        users.sort(key=lambda u: u.created_at)
        return users

    # -------------------------------------------------------------------------
    # Transactions (reads)
    # -------------------------------------------------------------------------

    def get_transaction(self, transaction_id: UUID) -> Optional[Transaction]:
        with self._lock:
            return self._transactions.get(transaction_id)

    def list_transactions(
        self,
        owner_id: UUID,
        mode: Optional[TransactionMode] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
    ) -> list[Transaction]:
        with self._lock:
            if mode is not None:
                ids = list(self._by_owner_mode.get((owner_id, mode), []))
            else:
                ids = list(self._by_owner.get(owner_id, []))

            if date_from is not None or date_to is not None:
                in_range = set()
                for day, day_ids in self._by_owner_date.get(owner_id, {}).items():
                    # ISO dates compare correctly as strings
                    if date_from is not None and day < date_from:
                        continue
                    if date_to is not None and day > date_to:
                        continue
                    in_range.update(day_ids)
                ids = [i for i in ids if i in in_range]

            return [self._transactions[i] for i in ids]

    # -------------------------------------------------------------------------
    # Transactions (compound writes)
    # -------------------------------------------------------------------------

    def insert_transaction(
        self,
        transaction: Transaction,
        balances: Balances,
    ) -> None:
        with self._lock:
            self._require_owner(transaction.owner_id)
            if transaction.id in self._transactions:
                raise ConflictError(f"Transaction already exists: {transaction.id}")

            self._transactions[transaction.id] = transaction
            self._index(transaction)
            self._set_balances(transaction.owner_id, balances)

    def delete_transaction(
        self,
        transaction: Transaction,
        balances: Balances,
    ) -> None:
        with self._lock:
            self._require_owner(transaction.owner_id)
            stored = self._transactions.get(transaction.id)
            if stored is None:
                raise NotFoundError("Transaction not found")

            del self._transactions[stored.id]
            self._unindex(stored)
            self._set_balances(stored.owner_id, balances)

    def clear_transactions(
        self,
        owner_id: UUID,
        balances: Balances,
    ) -> int:
        with self._lock:
            self._require_owner(owner_id)
            ids = self._by_owner.pop(owner_id, [])

            for txn_id in ids:
                del self._transactions[txn_id]
            for mode in TransactionMode:
                self._by_owner_mode.pop((owner_id, mode), None)
            self._by_owner_date.pop(owner_id, None)

            self._set_balances(owner_id, balances)
            return len(ids)
