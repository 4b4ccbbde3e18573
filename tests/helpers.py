"""Builders and fakes shared by the test modules."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional
from uuid import UUID

from src.models.finance import (
    NewTransaction,
    Transaction,
    TransactionMode,
    TransactionType,
)


class RecordingLogger:
    """Stands in for a structlog logger; keeps (level, event, fields)."""

    def __init__(self):
        self.records: list[tuple[str, str, dict]] = []

    def _record(self, level: str, event: str, **fields) -> None:
        self.records.append((level, event, fields))

    def debug(self, event, **fields):
        self._record("debug", event, **fields)

    def info(self, event, **fields):
        self._record("info", event, **fields)

    def warning(self, event, **fields):
        self._record("warning", event, **fields)

    def error(self, event, **fields):
        self._record("error", event, **fields)

    def event_types(self) -> list[str]:
        return [fields["event_type"] for _, _, fields in self.records]


def make_transaction(
    owner_id: UUID,
    amount: str = "100",
    mode: TransactionMode = TransactionMode.CASH,
    type: TransactionType = TransactionType.EXPENSE,
    date: str = "2024-01-15",
    application: str = "Shop",
    category: Optional[str] = None,
    created_at: Optional[datetime] = None,
) -> Transaction:
    return Transaction(
        owner_id=owner_id,
        date=date,
        mode=mode,
        application=application,
        amount=Decimal(amount),
        type=type,
        category=category,
        created_at=created_at or datetime(2024, 1, 15, tzinfo=timezone.utc),
    )


def make_draft(
    amount: str = "100",
    mode: TransactionMode = TransactionMode.CASH,
    type: TransactionType = TransactionType.EXPENSE,
    date: str = "2024-01-15",
    application: str = "Shop",
    category: Optional[str] = None,
) -> NewTransaction:
    return NewTransaction(
        date=date,
        mode=mode,
        application=application,
        amount=Decimal(amount),
        type=type,
        category=category,
    )


def timestamps(count: int) -> list[datetime]:
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return [start + timedelta(minutes=i) for i in range(count)]
