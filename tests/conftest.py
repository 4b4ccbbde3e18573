"""
Shared fixtures.

No real API calls in tests: storage is in-memory or a fake worksheet,
and the audit logger writes into a list.
"""

import pytest

from src.audit import AuditLogger
from src.config import AppSettings
from src.ledger import TransactionStore
from src.orchestrator import FinanceTracker
from src.services.storage import InMemoryFinanceStorage
from src.validation import TransactionValidator
from tests.helpers import RecordingLogger


@pytest.fixture
def app_settings() -> AppSettings:
    return AppSettings(
        _env_file=None,
        max_transaction_amount=100000.0,
        future_date_tolerance_days=7,
    )


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def audit_logger(recording_logger) -> AuditLogger:
    return AuditLogger(logger=recording_logger)


@pytest.fixture
def storage() -> InMemoryFinanceStorage:
    return InMemoryFinanceStorage()


@pytest.fixture
def store(storage, audit_logger) -> TransactionStore:
    return TransactionStore(storage, audit_logger=audit_logger)


@pytest.fixture
def tracker(storage, store, app_settings, audit_logger) -> FinanceTracker:
    return FinanceTracker(
        storage=storage,
        store=store,
        validator=TransactionValidator(app_settings),
        audit_logger=audit_logger,
    )
