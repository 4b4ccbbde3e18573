"""
Abstract Storage Interface

DESIGN DECISION: Business logic talks to an abstract interface, so the
backend (in-memory, Google Sheets, a real database later) can be swapped
without touching the ledger or the transaction store.

Two logical tables:
- users: one row per profile, carrying the two running balances
- transactions: one row per transaction, looked up by owner,
  (owner, mode) and (owner, date)

The transaction mutations are COMPOUND: each one changes the transaction
table and the owner's balances in a single call. An implementation must
apply both or neither.

The storage also owns the per-owner locks and the insertion clock. Every
transaction store built on the same storage shares them, so the
read-compute-write of a balance is serialised per owner no matter how
many trackers are in play.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from src.errors import FinanceError
from src.models.finance import (
    Balances,
    Transaction,
    TransactionMode,
    UserProfile,
)
from src.services.storage.locks import MonotonicClock, OwnerLocks


class FinanceStorageInterface(ABC):
    """
    Abstract interface for finance storage operations.

    Any storage implementation (in-memory, Google Sheets, SQL, etc.)
    must implement these methods, and call `super().__init__()`.
    """

    def __init__(self):
        self.owner_locks = OwnerLocks()
        self.clock = MonotonicClock()

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    @abstractmethod
    def create_user(self, user: UserProfile, exclusive: bool = False) -> None:
        """
        Persist a new user profile.

        With `exclusive`, the "no profile exists yet" check and the write
        happen as one step.

        Raises:
            ConflictError: If a profile with the same ID exists, or if
                `exclusive` and any profile exists
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def get_user(self, user_id: UUID) -> Optional[UserProfile]:
        """Retrieve a user profile by ID, or None."""
        pass

    @abstractmethod
    def list_users(self) -> list[UserProfile]:
        """All user profiles, oldest first."""
        pass

    # -------------------------------------------------------------------------
    # Transactions (reads)
    # -------------------------------------------------------------------------

    @abstractmethod
    def get_transaction(self, transaction_id: UUID) -> Optional[Transaction]:
        """Retrieve a transaction by ID, or None."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        owner_id: UUID,
        mode: Optional[TransactionMode] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
    ) -> list[Transaction]:
        """
        List an owner's transactions with optional filters.

        Args:
            owner_id: Owning user profile
            mode: Only this payment mode
            date_from: Only dates on or after this YYYY-MM-DD string
            date_to: Only dates on or before this YYYY-MM-DD string

        Returns:
            Matching transactions in no guaranteed order
        """
        pass

    # -------------------------------------------------------------------------
    # Transactions (compound writes)
    # -------------------------------------------------------------------------

    @abstractmethod
    def insert_transaction(
        self,
        transaction: Transaction,
        balances: Balances,
    ) -> None:
        """
        Add a transaction and set its owner's balances, atomically.

        Raises:
            NotFoundError: If the owner does not exist
            ConflictError: If the transaction ID is already taken
            StorageError: If the write fails (nothing is changed)
        """
        pass

    @abstractmethod
    def delete_transaction(
        self,
        transaction: Transaction,
        balances: Balances,
    ) -> None:
        """
        Remove a transaction and set its owner's balances, atomically.

        Raises:
            NotFoundError: If the transaction or its owner does not exist
            StorageError: If the write fails (nothing is changed)
        """
        pass

    @abstractmethod
    def clear_transactions(
        self,
        owner_id: UUID,
        balances: Balances,
    ) -> int:
        """
        Remove every transaction of an owner and set its balances, atomically.

        Returns:
            Number of transactions removed

        Raises:
            NotFoundError: If the owner does not exist
            StorageError: If the write fails (nothing is changed)
        """
        pass


class StorageError(FinanceError):
    """Base exception for storage operations."""

    code = "storage"


class StorageConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
