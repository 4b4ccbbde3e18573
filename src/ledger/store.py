"""
Transaction Store

Owns the transaction records of each user and is the only caller of the
balance ledger. Each mutation runs inside the owner's critical section:

    read user -> ledger computes new balances -> one compound storage write

so the record change and the balance change land together or not at all.
The owner locks and the clock belong to the storage, so several stores (one
per tracker, say) on the same storage still serialise per owner.
Reads never mutate.
"""

from typing import Optional
from uuid import UUID

from src.audit import AuditLogger
from src.errors import NotFoundError, UnauthorizedError
from src.ledger.balance import BalanceLedger
from src.models.finance import (
    FinancialSummary,
    NewTransaction,
    Transaction,
    TransactionMode,
    UserProfile,
)
from src.queries.reports import build_financial_summary
from src.services.storage import FinanceStorageInterface
from src.services.storage.locks import OwnerLocks


class TransactionStore:
    """
    Transaction operations keyed by owner.

    Callers pass the owner explicitly; the store never guesses who the
    current user is.
    """

    def __init__(
        self,
        storage: FinanceStorageInterface,
        ledger: Optional[BalanceLedger] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._ledger = ledger or BalanceLedger()
        self._locks = storage.owner_locks
        self._clock = storage.clock
        self._audit_logger = audit_logger
        self._seeded_owners: set[UUID] = set()

    @property
    def locks(self) -> OwnerLocks:
        return self._locks

    def _require_user(
        self,
        owner_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> UserProfile:
        user = self._storage.get_user(owner_id)
        if user is None:
            if self._audit_logger:
                self._audit_logger.log_not_found(
                    entity_type="user",
                    message="User profile not found",
                    entity_id=owner_id,
                    correlation_id=correlation_id,
                )
            raise NotFoundError("User profile not found")
        return user

    def _seed_clock(self, owner_id: UUID) -> None:
        """Start the clock after the newest stored timestamp of this owner."""
        if owner_id in self._seeded_owners:
            return
        for txn in self._storage.list_transactions(owner_id):
            self._clock.observe(txn.created_at)
        self._seeded_owners.add(owner_id)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def insert(
        self,
        owner_id: UUID,
        draft: NewTransaction,
        correlation_id: Optional[UUID] = None,
    ) -> UUID:
        """
        Record a validated transaction and apply it to the balances.

        Returns:
            The new transaction's ID

        Raises:
            NotFoundError: If the owner has no profile
        """
        with self._locks.hold(owner_id):
            user = self._require_user(owner_id, correlation_id)
            self._seed_clock(owner_id)

            transaction = Transaction.from_draft(
                draft,
                owner_id=owner_id,
                created_at=self._clock.now(),
            )
            balances = self._ledger.apply(user.balances, transaction)
            self._storage.insert_transaction(transaction, balances)

        if self._audit_logger:
            self._audit_logger.log_transaction_added(
                transaction=transaction,
                cash_balance=balances.cash,
                online_balance=balances.online,
                correlation_id=correlation_id,
            )
        return transaction.id

    def delete(
        self,
        transaction_id: UUID,
        owner_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """
        Remove one transaction and reverse its effect on the balances.

        The reversal is computed from the stored record before removal.

        Raises:
            NotFoundError: If the owner or the transaction does not exist
            UnauthorizedError: If the transaction belongs to someone else
        """
        with self._locks.hold(owner_id):
            user = self._require_user(owner_id, correlation_id)

            transaction = self._storage.get_transaction(transaction_id)
            if transaction is None:
                if self._audit_logger:
                    self._audit_logger.log_not_found(
                        entity_type="transaction",
                        message="Transaction not found",
                        entity_id=transaction_id,
                        correlation_id=correlation_id,
                    )
                raise NotFoundError("Transaction not found")

            if transaction.owner_id != owner_id:
                if self._audit_logger:
                    self._audit_logger.log_ownership_rejected(
                        transaction_id=transaction_id,
                        caller_id=owner_id,
                        correlation_id=correlation_id,
                    )
                raise UnauthorizedError("Unauthorized to delete this transaction")

            balances = self._ledger.reverse(user.balances, transaction)
            self._storage.delete_transaction(transaction, balances)

        if self._audit_logger:
            self._audit_logger.log_transaction_deleted(
                transaction=transaction,
                cash_balance=balances.cash,
                online_balance=balances.online,
                correlation_id=correlation_id,
            )

    def clear_all(
        self,
        owner_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> int:
        """
        Remove every transaction of the owner and zero both balances.

        Returns:
            Number of transactions removed
        """
        with self._locks.hold(owner_id):
            self._require_user(owner_id, correlation_id)
            count = self._storage.clear_transactions(owner_id, self._ledger.reset_all())

        if self._audit_logger:
            self._audit_logger.log_transactions_cleared(
                owner_id=owner_id,
                count=count,
                correlation_id=correlation_id,
            )
        return count

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def list_by_owner(
        self,
        owner_id: UUID,
        newest_first: bool = True,
        mode: Optional[TransactionMode] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
    ) -> list[Transaction]:
        """
        The owner's transactions ordered by insertion time.

        Ordering uses `created_at`, not the caller-supplied `date`.
        """
        transactions = self._storage.list_transactions(
            owner_id,
            mode=mode,
            date_from=date_from,
            date_to=date_to,
        )
        transactions.sort(key=lambda t: t.created_at, reverse=newest_first)
        return transactions

    def summarize(self, owner_id: UUID) -> Optional[FinancialSummary]:
        """
        Headline summary for the owner, or None if the owner has no profile.
        """
        # Both reads under the owner lock so balances and spending
        # come from the same state.
        with self._locks.hold(owner_id):
            user = self._storage.get_user(owner_id)
            if user is None:
                return None
            transactions = self._storage.list_transactions(owner_id)

        return build_financial_summary(user, transactions)
