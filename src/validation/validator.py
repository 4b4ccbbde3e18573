"""
Two-Stage Validation Pipeline

STAGE 1 - SCHEMA VALIDATION (blocking):
- Required fields present (application, date, amount, mode, type)
- Application non-empty after trimming
- Date in YYYY-MM-DD form
- Amount strictly positive
- Mode / type are known values

STAGE 2 - SEMANTIC VALIDATION (warnings only):
- Date is not a real calendar day (2024-02-30)
- Date lies further in the future than the configured tolerance
- Amount is unusually large

Stage 2 only runs when stage 1 passes. Validation NEVER silently fixes
values beyond trimming whitespace; it reports issues.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Optional

from pydantic import ValidationError

from src.config import AppSettings, get_settings
from src.models.finance import (
    NewTransaction,
    ValidationIssue,
    ValidationResult,
)


# Friendly messages for the stage 1 failures users actually hit
FIELD_MESSAGES = {
    ("application", "missing"): "Application is required",
    ("date", "missing"): "Date is required",
    ("date", "invalid_format"): "Date must be in YYYY-MM-DD format",
    ("amount", "missing"): "Amount is required",
    ("amount", "invalid_value"): "Amount must be greater than zero",
    ("mode", "missing"): "Mode is required",
    ("mode", "invalid_choice"): "Mode must be 'cash' or 'online'",
    ("type", "missing"): "Type is required",
    ("type", "invalid_choice"): "Type must be 'income' or 'expense'",
}

# pydantic error type -> our issue type
ERROR_TYPES = {
    "missing": "missing",
    "string_too_short": "missing",
    "string_type": "missing",
    "string_pattern_mismatch": "invalid_format",
    "string_too_long": "too_long",
    "greater_than": "invalid_value",
    "decimal_parsing": "invalid_value",
    "decimal_type": "invalid_value",
    "finite_number": "invalid_value",
    "enum": "invalid_choice",
}


class TransactionValidator:
    """
    Validates raw transaction input through a two-stage pipeline.

    Stage 1 decides whether the transaction can be stored at all.
    Stage 2 only adds warnings for the caller to show.
    """

    def __init__(self, settings: Optional[AppSettings] = None):
        self._settings = settings or get_settings().app

    def _issue_from_error(self, error: dict) -> ValidationIssue:
        field = str(error["loc"][0]) if error.get("loc") else "transaction"
        issue_type = ERROR_TYPES.get(error["type"], "invalid_value")

        # A `None` amount reads as "missing", not "wrong type"
        if field == "amount" and error.get("input") is None:
            issue_type = "missing"

        message = FIELD_MESSAGES.get((field, issue_type), error["msg"])
        return ValidationIssue(
            field=field,
            issue_type=issue_type,
            message=message,
            severity="error",
        )

    def _validate_schema(
        self,
        data: dict[str, Any],
    ) -> tuple[Optional[NewTransaction], list[ValidationIssue]]:
        """
        Stage 1: Schema validation.

        Returns: (parsed_transaction_or_None, list_of_issues)
        """
        try:
            return NewTransaction.model_validate(data), []
        except ValidationError as e:
            issues = [self._issue_from_error(err) for err in e.errors()]
            return None, issues

    def _validate_semantic(
        self,
        transaction: NewTransaction,
    ) -> list[ValidationIssue]:
        """
        Stage 2: Semantic validation.

        Every issue here is a warning.
        """
        issues = []

        try:
            day = date.fromisoformat(transaction.date)
        except ValueError:
            day = None
            issues.append(ValidationIssue(
                field="date",
                issue_type="suspicious_date",
                message=f"Date ({transaction.date}) is not a real calendar date",
                severity="warning",
                suggested_fix="Please verify the day and month",
            ))

        max_future_date = date.today() + timedelta(
            days=self._settings.future_date_tolerance_days
        )
        if day and day > max_future_date:
            issues.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message=f"Date ({transaction.date}) is in the future",
                severity="warning",
                suggested_fix="Please verify the date is correct",
            ))

        max_amount = Decimal(str(self._settings.max_transaction_amount))
        if transaction.amount > max_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount (₹{transaction.amount:,.2f}) seems unusually high",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))

        return issues

    def validate(self, **fields: Any) -> ValidationResult:
        """
        Run the full two-stage validation pipeline.

        Args:
            fields: date, mode, application, amount, type,
                    and optionally category and description

        Returns:
            ValidationResult; `transaction` is set when stage 1 passed
        """
        all_issues = []

        transaction, schema_issues = self._validate_schema(fields)
        all_issues.extend(schema_issues)
        schema_valid = transaction is not None

        semantic_valid = False
        if schema_valid:
            semantic_issues = self._validate_semantic(transaction)
            all_issues.extend(semantic_issues)
            semantic_valid = not any(i.severity == "error" for i in semantic_issues)

        warnings = [i.message for i in all_issues if i.severity == "warning"]

        return ValidationResult(
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            is_valid=schema_valid and semantic_valid,
            issues=all_issues,
            warnings=warnings,
            transaction=transaction,
        )

    def get_user_friendly_summary(
        self,
        result: ValidationResult,
    ) -> str:
        """
        Generate a user-friendly summary of validation results.
        """
        if result.is_valid and not result.warnings:
            return "✅ All checks passed!"

        lines = []

        if result.has_errors:
            lines.append("❌ The transaction could not be saved:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
