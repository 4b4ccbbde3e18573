"""
Audit Models for the Finance Tracker

Every mutation and every rejected request produces one audit event.
Events are emitted as structured log lines (see src.audit.logger); they
are not persisted.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from src.models.finance import Transaction, utc_now


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Profile
    USER_CREATED = "user_created"
    USER_CREATE_REJECTED = "user_create_rejected"

    # Transactions
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_DELETED = "transaction_deleted"
    TRANSACTIONS_CLEARED = "transactions_cleared"

    # Rejections
    VALIDATION_FAILED = "validation_failed"
    OWNERSHIP_REJECTED = "ownership_rejected"
    NOT_FOUND = "not_found"

    # System events
    STORAGE_ERROR = "storage_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of the audit log.
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # What entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'user', 'transaction')"
    )
    entity_id: Optional[UUID] = None

    # Ties together every event raised by one tracker call
    correlation_id: Optional[UUID] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


def _money(value: Decimal) -> str:
    return str(value)


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.user_created(user_id, name, correlation_id)
        event = AuditEventBuilder.transaction_added(txn, cash, online, correlation_id)
    """

    @staticmethod
    def user_created(
        user_id: UUID,
        name: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_CREATED,
            entity_type="user",
            entity_id=user_id,
            correlation_id=correlation_id,
            description=f"User profile created: {name}",
            details={"name": name},
            is_user_action=True,
        )

    @staticmethod
    def user_create_rejected(
        reason: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_CREATE_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="user",
            correlation_id=correlation_id,
            description="User profile creation rejected",
            error_message=reason,
            is_user_action=True,
        )

    @staticmethod
    def transaction_added(
        transaction: Transaction,
        cash_balance: Decimal,
        online_balance: Decimal,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            entity_type="transaction",
            entity_id=transaction.id,
            correlation_id=correlation_id,
            description=(
                f"{transaction.type.value.capitalize()} added: "
                f"{transaction.application} - ₹{transaction.amount} ({transaction.mode.value})"
            ),
            details={
                "owner_id": str(transaction.owner_id),
                "mode": transaction.mode.value,
                "type": transaction.type.value,
                "amount": _money(transaction.amount),
                "cash_balance": _money(cash_balance),
                "online_balance": _money(online_balance),
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_deleted(
        transaction: Transaction,
        cash_balance: Decimal,
        online_balance: Decimal,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            entity_type="transaction",
            entity_id=transaction.id,
            correlation_id=correlation_id,
            description=f"Transaction deleted: {transaction.application} - ₹{transaction.amount}",
            details={
                "owner_id": str(transaction.owner_id),
                "mode": transaction.mode.value,
                "type": transaction.type.value,
                "amount": _money(transaction.amount),
                "cash_balance": _money(cash_balance),
                "online_balance": _money(online_balance),
            },
            is_user_action=True,
        )

    @staticmethod
    def transactions_cleared(
        owner_id: UUID,
        count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTIONS_CLEARED,
            entity_type="user",
            entity_id=owner_id,
            correlation_id=correlation_id,
            description=f"Cleared {count} transactions and reset balances",
            details={"count": count},
            is_user_action=True,
        )

    @staticmethod
    def validation_failed(
        issues: list[dict],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="transaction",
            correlation_id=correlation_id,
            description=f"Transaction rejected with {len(issues)} issues",
            details={"issues": issues},
            error_code="validation",
        )

    @staticmethod
    def ownership_rejected(
        transaction_id: UUID,
        caller_id: UUID,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OWNERSHIP_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description="Delete rejected: transaction belongs to another user",
            details={"caller_id": str(caller_id)},
            error_code="unauthorized",
        )

    @staticmethod
    def not_found(
        entity_type: str,
        message: str,
        entity_id: Optional[UUID] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.NOT_FOUND,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"Lookup failed: {entity_type}",
            error_code="not_found",
            error_message=message,
        )

    @staticmethod
    def storage_error(
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"Storage error during {operation}",
            error_code="storage",
            error_message=error_message,
            details={"operation": operation},
            correlation_id=correlation_id,
        )

