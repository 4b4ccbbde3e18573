"""
Audit Logger

Every mutation and every rejected request is logged as one structured
`audit_event` line. Events are not persisted anywhere else; the log is the
trail.

The audit logger:
- Writes through structlog (JSON lines via stdlib logging)
- Maps event severity to log level
- Supports correlation IDs to trace the events of one tracker call
"""

import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

import structlog

from src.models.audit import AuditEvent, AuditEventBuilder
from src.models.finance import Transaction


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output to stderr at the given stdlib level."""
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper(), logging.INFO),
    )


class AuditLogger:
    """Central audit logging service."""

    def __init__(self, logger=None):
        self._logger = logger or structlog.get_logger("finance.audit")

    def log(self, event: AuditEvent) -> None:
        """Log an audit event at the level matching its severity."""
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif event.severity.value == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

    def log_user_created(
        self,
        user_id: UUID,
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.user_created(
            user_id=user_id,
            name=name,
            correlation_id=correlation_id,
        ))

    def log_user_create_rejected(
        self,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.user_create_rejected(
            reason=reason,
            correlation_id=correlation_id,
        ))

    def log_transaction_added(
        self,
        transaction: Transaction,
        cash_balance: Decimal,
        online_balance: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.transaction_added(
            transaction=transaction,
            cash_balance=cash_balance,
            online_balance=online_balance,
            correlation_id=correlation_id,
        ))

    def log_transaction_deleted(
        self,
        transaction: Transaction,
        cash_balance: Decimal,
        online_balance: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.transaction_deleted(
            transaction=transaction,
            cash_balance=cash_balance,
            online_balance=online_balance,
            correlation_id=correlation_id,
        ))

    def log_transactions_cleared(
        self,
        owner_id: UUID,
        count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.transactions_cleared(
            owner_id=owner_id,
            count=count,
            correlation_id=correlation_id,
        ))

    def log_validation_failed(
        self,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.validation_failed(
            issues=issues,
            correlation_id=correlation_id,
        ))

    def log_ownership_rejected(
        self,
        transaction_id: UUID,
        caller_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.ownership_rejected(
            transaction_id=transaction_id,
            caller_id=caller_id,
            correlation_id=correlation_id,
        ))

    def log_not_found(
        self,
        entity_type: str,
        message: str,
        entity_id: Optional[UUID] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.not_found(
            entity_type=entity_type,
            message=message,
            entity_id=entity_id,
            correlation_id=correlation_id,
        ))

    def log_storage_error(
        self,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.storage_error(
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action and pass it through all
    subsequent operations.
    """
    return uuid4()
