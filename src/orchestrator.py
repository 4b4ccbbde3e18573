"""
Main Orchestrator for the Finance Tracker

`FinanceTracker` is the request contract the presentation layer talks to:

    create_user             get_current_user
    add_transaction         list_transactions
    delete_transaction      get_financial_summary
    clear_all_transactions  get_financial_report

Every call resolves the caller's profile explicitly, validates input,
and hands the mutation to the transaction store, which owns the atomic
store + ledger step. Every step is audited.
"""

from decimal import Decimal
from typing import Callable, Optional, TypeVar, Union
from uuid import UUID

from pydantic import ValidationError

from src.audit import AuditLogger, configure_logging, create_correlation_id
from src.config import Settings, get_settings
from src.errors import (
    ConflictError,
    NotFoundError,
    ValidationFailedError,
)
from src.ledger import TransactionStore
from src.models.finance import (
    FinancialReport,
    FinancialSummary,
    NewUserProfile,
    Transaction,
    TransactionMode,
    UserProfile,
)
from src.queries import build_report
from src.services.storage import (
    FinanceStorageInterface,
    GoogleSheetsFinanceStorage,
    InMemoryFinanceStorage,
    StorageError,
)
from src.validation import TransactionValidator


T = TypeVar("T")


class FinanceTracker:
    """
    The seven operations of the finance tracker, plus the reports view.

    Identity: pass `owner_id` to act for a specific profile. Without it the
    tracker acts for the single provisioned profile, and refuses to guess
    if storage ever holds more than one.
    """

    def __init__(
        self,
        storage: FinanceStorageInterface,
        store: Optional[TransactionStore] = None,
        validator: Optional[TransactionValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        owner_id: Optional[UUID] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger
        self._store = store or TransactionStore(storage, audit_logger=audit_logger)
        self._validator = validator or TransactionValidator()
        self._owner_id = owner_id

    # -------------------------------------------------------------------------
    # Identity
    # -------------------------------------------------------------------------

    def _resolve_user(self) -> Optional[UserProfile]:
        if self._owner_id is not None:
            return self._storage.get_user(self._owner_id)

        users = self._storage.list_users()
        if not users:
            return None
        if len(users) > 1:
            raise ConflictError(
                "More than one user profile exists; an explicit owner is required"
            )
        return users[0]

    def _require_user(self, correlation_id: UUID) -> UserProfile:
        user = self._resolve_user()
        if user is None:
            if self._audit_logger:
                self._audit_logger.log_not_found(
                    entity_type="user",
                    message="User profile not found",
                    correlation_id=correlation_id,
                )
            raise NotFoundError("User profile not found")
        return user

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    def create_user(
        self,
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> UUID:
        """
        Set up the user profile with zero balances.

        Raises:
            ValidationFailedError: If the name is blank
            ConflictError: If a profile already exists
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            profile = NewUserProfile(name=name)
        except ValidationError as e:
            if self._audit_logger:
                self._audit_logger.log_user_create_rejected(
                    reason="Name is required",
                    correlation_id=correlation_id,
                )
            raise ValidationFailedError("Name is required") from e

        user = UserProfile(name=profile.name)
        if self._owner_id is not None:
            user = user.model_copy(update={"id": self._owner_id})

        try:
            self._storage.create_user(user, exclusive=True)
        except ConflictError as e:
            if self._audit_logger:
                self._audit_logger.log_user_create_rejected(
                    reason=str(e),
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            self._audit_logger.log_user_created(
                user_id=user.id,
                name=user.name,
                correlation_id=correlation_id,
            )
        return user.id

    def get_current_user(self) -> Optional[UserProfile]:
        """The caller's profile, or None before setup."""
        return self._resolve_user()

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    def add_transaction(
        self,
        date: str,
        mode: Union[TransactionMode, str],
        application: str,
        amount: Union[Decimal, int, float, str],
        type: str,
        category: Optional[str] = None,
        description: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> UUID:
        """
        Record a transaction and apply it to the running balance.

        Returns:
            The new transaction's ID

        Raises:
            NotFoundError: If no profile exists
            ValidationFailedError: If any field is rejected; nothing is written
        """
        correlation_id = correlation_id or create_correlation_id()
        user = self._require_user(correlation_id)

        result = self._validator.validate(
            date=date,
            mode=mode,
            application=application,
            amount=amount,
            type=type,
            category=category,
            description=description,
        )
        if result.has_errors:
            if self._audit_logger:
                self._audit_logger.log_validation_failed(
                    issues=[
                        {"field": i.field, "type": i.issue_type, "message": i.message}
                        for i in result.issues
                    ],
                    correlation_id=correlation_id,
                )
            message = "; ".join(i.message for i in result.issues if i.severity == "error")
            raise ValidationFailedError(message, result)

        return self._run_storage(
            "add_transaction",
            self._store.insert,
            user.id,
            result.transaction,
            correlation_id=correlation_id,
        )

    def delete_transaction(
        self,
        transaction_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """
        Delete one of the caller's transactions and reverse its effect.

        Raises:
            NotFoundError: If no profile exists or the transaction is absent
            UnauthorizedError: If the transaction belongs to another profile
        """
        correlation_id = correlation_id or create_correlation_id()
        user = self._require_user(correlation_id)
        self._run_storage(
            "delete_transaction",
            self._store.delete,
            transaction_id,
            user.id,
            correlation_id=correlation_id,
        )

    def clear_all_transactions(
        self,
        correlation_id: Optional[UUID] = None,
    ) -> int:
        """
        Delete all of the caller's transactions and zero the balances.

        Returns:
            Number of transactions deleted
        """
        correlation_id = correlation_id or create_correlation_id()
        user = self._require_user(correlation_id)
        return self._run_storage(
            "clear_all_transactions",
            self._store.clear_all,
            user.id,
            correlation_id=correlation_id,
        )

    def list_transactions(
        self,
        mode: Optional[TransactionMode] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
    ) -> list[Transaction]:
        """The caller's transactions, newest first; empty before setup."""
        user = self._resolve_user()
        if user is None:
            return []
        return self._store.list_by_owner(
            user.id,
            mode=mode,
            date_from=date_from,
            date_to=date_to,
        )

    def get_financial_summary(self) -> Optional[FinancialSummary]:
        """Headline numbers, or None before setup."""
        user = self._resolve_user()
        if user is None:
            return None
        return self._store.summarize(user.id)

    def get_financial_report(self) -> Optional[FinancialReport]:
        """Full reports view, or None before setup."""
        user = self._resolve_user()
        if user is None:
            return None

        with self._store.locks.hold(user.id):
            summary = self._store.summarize(user.id)
            transactions = self._store.list_by_owner(user.id)
        if summary is None:
            return None
        return build_report(summary, transactions)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _run_storage(
        self,
        operation: str,
        func: Callable[..., T],
        *args,
        **kwargs,
    ) -> T:
        """
        Call into the store, auditing backend failures before re-raising.

        Arguments pass through to `func` unchanged, including `correlation_id`.
        """
        try:
            return func(*args, **kwargs)
        except StorageError as e:
            if self._audit_logger:
                self._audit_logger.log_storage_error(
                    operation=operation,
                    error_message=str(e),
                    correlation_id=kwargs.get("correlation_id"),
                )
            raise


def create_storage(settings: Optional[Settings] = None) -> FinanceStorageInterface:
    """Build the storage backend selected in settings."""
    settings = settings or get_settings()
    if settings.app.storage_backend == "google_sheets":
        return GoogleSheetsFinanceStorage()
    return InMemoryFinanceStorage()


def create_tracker(
    settings: Optional[Settings] = None,
    storage: Optional[FinanceStorageInterface] = None,
    owner_id: Optional[UUID] = None,
) -> FinanceTracker:
    """
    Factory function to create a fully wired tracker.

    Args:
        settings: Settings to use (defaults to the cached ones)
        storage: Storage backend; built from settings when omitted
        owner_id: Act for this profile instead of the single provisioned one
    """
    settings = settings or get_settings()
    app_settings = settings.app

    configure_logging(app_settings.log_level)
    audit_logger = AuditLogger()

    return FinanceTracker(
        storage=storage or create_storage(settings),
        validator=TransactionValidator(app_settings),
        audit_logger=audit_logger,
        owner_id=owner_id,
    )
