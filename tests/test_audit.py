"""Tests for the audit logger."""

from decimal import Decimal
from uuid import uuid4

import pytest

from src.audit import AuditLogger, create_correlation_id
from src.models.audit import AuditEvent, AuditEventType, AuditSeverity
from tests.helpers import RecordingLogger, make_transaction


@pytest.fixture
def sink():
    return RecordingLogger()


@pytest.fixture
def audit(sink):
    return AuditLogger(logger=sink)


class TestSeverityMapping:
    """Severity picks the log level."""

    @pytest.mark.parametrize("severity, level", [
        (AuditSeverity.DEBUG, "debug"),
        (AuditSeverity.INFO, "info"),
        (AuditSeverity.WARNING, "warning"),
        (AuditSeverity.ERROR, "error"),
        (AuditSeverity.CRITICAL, "error"),
    ])
    def test_levels(self, audit, sink, severity, level):
        """Test each severity lands on the matching level."""
        audit.log(AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=severity,
            description="x",
        ))
        assert sink.records[0][0] == level
        assert sink.records[0][1] == "audit_event"


class TestHelpers:
    """The log_* shortcuts."""

    def test_transaction_deleted(self, audit, sink):
        """Test the delete event carries balances after the reversal."""
        correlation_id = create_correlation_id()
        txn = make_transaction(uuid4(), "300")
        audit.log_transaction_deleted(
            transaction=txn,
            cash_balance=Decimal("1000"),
            online_balance=Decimal("0"),
            correlation_id=correlation_id,
        )

        level, _, fields = sink.records[0]
        assert level == "info"
        assert fields["event_type"] == "transaction_deleted"
        assert fields["entity_id"] == str(txn.id)
        assert fields["correlation_id"] == str(correlation_id)
        assert fields["details"]["cash_balance"] == "1000"

    def test_validation_failed_is_warning(self, audit, sink):
        """Test rejected input logs at warning level."""
        audit.log_validation_failed(issues=[{"field": "amount"}])
        level, _, fields = sink.records[0]
        assert level == "warning"
        assert fields["details"]["issues"] == [{"field": "amount"}]

    def test_not_found(self, audit, sink):
        """Test lookups that miss are logged with the message shown to the user."""
        audit.log_not_found(entity_type="transaction", message="Transaction not found")
        _, _, fields = sink.records[0]
        assert fields["error_message"] == "Transaction not found"
        assert fields["error_code"] == "not_found"

    def test_correlation_ids_are_unique(self):
        """Test every call gets its own ID."""
        assert create_correlation_id() != create_correlation_id()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
