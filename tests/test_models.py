"""
Tests for the data models.

Test strategy:
1. Unit tests for individual components (models, validators)
2. Integration tests for flows (in-memory storage, fake worksheets)
3. No real API calls in tests
"""

import pytest
from decimal import Decimal
from uuid import uuid4

from pydantic import ValidationError

from src.models.finance import (
    Balances,
    FinancialSummary,
    NewTransaction,
    NewUserProfile,
    Transaction,
    TransactionMode,
    TransactionType,
    UserProfile,
    ValidationIssue,
    ValidationResult,
    utc_now,
)
from src.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from tests.helpers import make_transaction


class TestUserModels:
    """Tests for the user profile models."""

    def test_new_profile_starts_at_zero(self):
        """Test a fresh profile has zero balances."""
        user = UserProfile(name="Asha")
        assert user.cash_balance == Decimal("0")
        assert user.online_balance == Decimal("0")
        assert user.balances == Balances()

    def test_name_strips_whitespace(self):
        """Test that whitespace is stripped from the name."""
        assert NewUserProfile(name="  Asha  ").name == "Asha"

    def test_blank_name_rejected(self):
        """Test a whitespace-only name is rejected."""
        with pytest.raises(ValidationError):
            NewUserProfile(name="   ")

    def test_with_balances_returns_copy(self):
        """Test with_balances leaves the original untouched."""
        user = UserProfile(name="Asha")
        updated = user.with_balances(Balances(cash=Decimal("10"), online=Decimal("-5")))
        assert updated.cash_balance == Decimal("10")
        assert updated.online_balance == Decimal("-5")
        assert updated.id == user.id
        assert user.cash_balance == Decimal("0")

    def test_balances_total(self):
        """Test Balances.total adds both modes."""
        assert Balances(cash=Decimal("1000"), online=Decimal("-300")).total == Decimal("700")


class TestTransactionModels:
    """Tests for transaction models."""

    def test_new_transaction_creation(self):
        """Test NewTransaction parses string enums and amounts."""
        draft = NewTransaction(
            date="2024-01-01",
            mode="cash",
            application="Salary",
            amount="1000",
            type="income",
        )
        assert draft.mode == TransactionMode.CASH
        assert draft.type == TransactionType.INCOME
        assert draft.amount == Decimal("1000")

    def test_rejects_non_positive_amount(self):
        """Test that zero and negative amounts are rejected."""
        for amount in ("0", "-5"):
            with pytest.raises(ValidationError):
                NewTransaction(
                    date="2024-01-01",
                    mode="cash",
                    application="Test",
                    amount=amount,
                    type="expense",
                )

    def test_rejects_blank_application(self):
        """Test application must be non-empty after trimming."""
        with pytest.raises(ValidationError):
            NewTransaction(
                date="2024-01-01",
                mode="cash",
                application="   ",
                amount="5",
                type="expense",
            )

    def test_rejects_bad_date_format(self):
        """Test dates must look like YYYY-MM-DD."""
        with pytest.raises(ValidationError):
            NewTransaction(
                date="01/02/2024",
                mode="cash",
                application="Test",
                amount="5",
                type="expense",
            )

    def test_blank_optional_fields_become_none(self):
        """Test blank category/description are stored as absent."""
        draft = NewTransaction(
            date="2024-01-01",
            mode="online",
            application="  Swiggy ",
            amount="250",
            type="expense",
            category="   ",
            description="",
        )
        assert draft.application == "Swiggy"
        assert draft.category is None
        assert draft.description is None

    def test_from_draft_assigns_identity(self):
        """Test from_draft carries fields and adds owner and timestamp."""
        owner_id = uuid4()
        created_at = utc_now()
        draft = NewTransaction(
            date="2024-01-02",
            mode="online",
            application="Rent",
            amount="300",
            type="expense",
            category="Housing",
        )
        txn = Transaction.from_draft(draft, owner_id=owner_id, created_at=created_at)
        assert txn.owner_id == owner_id
        assert txn.created_at == created_at
        assert txn.category == "Housing"
        assert txn.amount == Decimal("300")

    def test_transaction_is_immutable(self):
        """Test stored transactions cannot be edited in place."""
        txn = make_transaction(uuid4())
        with pytest.raises(ValidationError):
            txn.amount = Decimal("1")


class TestFinancialSummary:
    """Tests for the summary read model."""

    def test_left_figures_mirror_totals(self):
        """Test amount/cash/online 'left' equal the totals."""
        summary = FinancialSummary(
            total_amount=Decimal("700"),
            total_cash=Decimal("1000"),
            total_online=Decimal("-300"),
            amount_spent=Decimal("300"),
            cash_spent=Decimal("0"),
            online_spent=Decimal("300"),
            online_money_in=Decimal("0"),
        )
        assert summary.amount_left == Decimal("700")
        assert summary.cash_left == Decimal("1000")
        assert summary.online_left == Decimal("-300")

        dumped = summary.model_dump()
        assert dumped["amount_left"] == Decimal("700")


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.USER_CREATED,
            description="Profile created",
        )
        assert event.event_type == AuditEventType.USER_CREATED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.TRANSACTIONS_CLEARED,
            description="Cleared",
            details={"count": 2},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "transactions_cleared"
        assert log_dict["details"]["count"] == 2
        assert log_dict["correlation_id"] is None

    def test_builder_transaction_added(self):
        """Test AuditEventBuilder.transaction_added."""
        correlation_id = uuid4()
        txn = make_transaction(uuid4(), amount="300", mode=TransactionMode.ONLINE)

        event = AuditEventBuilder.transaction_added(
            transaction=txn,
            cash_balance=Decimal("1000"),
            online_balance=Decimal("-300"),
            correlation_id=correlation_id,
        )

        assert event.event_type == AuditEventType.TRANSACTION_ADDED
        assert event.entity_id == txn.id
        assert event.correlation_id == correlation_id
        assert event.details["online_balance"] == "-300"
        assert event.is_user_action is True

    def test_builder_ownership_rejected_is_warning(self):
        """Test ownership rejections are logged as warnings."""
        event = AuditEventBuilder.ownership_rejected(
            transaction_id=uuid4(),
            caller_id=uuid4(),
        )
        assert event.severity == AuditSeverity.WARNING
        assert event.error_code == "unauthorized"

    def test_builder_storage_error_is_error(self):
        """Test storage failures are logged as errors."""
        event = AuditEventBuilder.storage_error(
            operation="add_transaction",
            error_message="quota exceeded",
        )
        assert event.severity == AuditSeverity.ERROR
        assert event.details["operation"] == "add_transaction"


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_validation_result_has_errors(self):
        """Test has_errors property."""
        result = ValidationResult(
            schema_valid=False,
            semantic_valid=False,
            is_valid=False,
            issues=[
                ValidationIssue(
                    field="amount",
                    issue_type="invalid_value",
                    message="Amount must be greater than zero",
                    severity="error",
                ),
            ],
        )
        assert result.has_errors is True
        assert result.error_count == 1

    def test_validation_result_warnings_only(self):
        """Test that warnings don't count as errors."""
        result = ValidationResult(
            schema_valid=True,
            semantic_valid=True,
            is_valid=True,
            issues=[
                ValidationIssue(
                    field="date",
                    issue_type="future_date",
                    message="Date in future",
                    severity="warning",
                ),
            ],
        )
        assert result.has_errors is False
        assert result.error_count == 0

    def test_issue_severity_is_constrained(self):
        """Test unknown severities are rejected."""
        with pytest.raises(ValidationError):
            ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="x",
                severity="fatal",
            )


class TestEnums:
    """Tests for the mode/type enums."""

    def test_values(self):
        """Test enum string values."""
        assert TransactionMode("cash") is TransactionMode.CASH
        assert TransactionMode("online") is TransactionMode.ONLINE
        assert TransactionType("income") is TransactionType.INCOME
        assert TransactionType("expense") is TransactionType.EXPENSE

    def test_unknown_value(self):
        """Test unknown modes are rejected."""
        with pytest.raises(ValueError):
            TransactionMode("card")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
