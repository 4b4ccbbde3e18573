"""
Core Data Models for the Finance Tracker

These models define the schemas for everything flowing through the system:
1. The user profile carrying the two running balances
2. Transactions (as submitted, and as stored)
3. Validation results
4. Read-side summaries and reports

DESIGN DECISION: Money is `Decimal` end to end. The ledger adds and
subtracts the same delta, and with Decimal that round trip is exact.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
)


ZERO = Decimal("0")

# Calendar format only; 2024-02-31 passes here and is flagged later as a warning.
ISO_DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionMode(str, Enum):
    """How the money moved. Each mode has its own running balance."""
    CASH = "cash"
    ONLINE = "online"


class TransactionType(str, Enum):
    """Direction of the money flow."""
    INCOME = "income"
    EXPENSE = "expense"


# =============================================================================
# USER & BALANCES
# =============================================================================

class Balances(BaseModel):
    """
    Snapshot of the two running balances.

    Immutable: the ledger always returns a new snapshot.
    """
    model_config = ConfigDict(frozen=True)

    cash: Decimal = ZERO
    online: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return self.cash + self.online


class NewUserProfile(BaseModel):
    """User input for the one-time profile setup."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Display name"
    )


class UserProfile(BaseModel):
    """
    The user record.

    `cash_balance` and `online_balance` are a cache of the transaction
    history. Only the ledger writes them.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique user ID"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Display name"
    )
    cash_balance: Decimal = Field(
        default=ZERO,
        description="Net flow of all surviving cash transactions"
    )
    online_balance: Decimal = Field(
        default=ZERO,
        description="Net flow of all surviving online transactions"
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        description="When the profile was set up"
    )

    @property
    def balances(self) -> Balances:
        return Balances(cash=self.cash_balance, online=self.online_balance)

    def with_balances(self, balances: Balances) -> "UserProfile":
        """Copy of this profile carrying the given balances."""
        return self.model_copy(update={
            "cash_balance": balances.cash,
            "online_balance": balances.online,
        })


# =============================================================================
# TRANSACTIONS
# =============================================================================

class NewTransaction(BaseModel):
    """
    A transaction as submitted by the caller, before the store assigns
    identity and creation time.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    date: str = Field(
        ...,
        min_length=1,
        pattern=ISO_DATE_PATTERN,
        description="Transaction date as YYYY-MM-DD"
    )
    mode: TransactionMode
    application: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Where the money went or came from (app, shop, employer)"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Positive amount; direction comes from `type`"
    )
    type: TransactionType
    category: Optional[str] = Field(
        default=None,
        max_length=100,
    )
    description: Optional[str] = Field(
        default=None,
        max_length=1000,
    )

    @field_validator("category", "description")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Blank optional labels are stored as absent."""
        if v is not None and not v.strip():
            return None
        return v


class Transaction(NewTransaction):
    """
    A stored transaction.

    Immutable once created. There is no update operation; a wrong entry
    is deleted and re-added.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique transaction ID"
    )
    owner_id: UUID = Field(
        ...,
        description="ID of the owning user profile"
    )
    created_at: datetime = Field(
        ...,
        description="Store-assigned, strictly increasing insertion marker"
    )

    @classmethod
    def from_draft(
        cls,
        draft: NewTransaction,
        owner_id: UUID,
        created_at: datetime,
    ) -> "Transaction":
        return cls(owner_id=owner_id, created_at=created_at, **draft.model_dump())


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'future_date')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = None


class ValidationResult(BaseModel):
    """
    Result of the two-stage validation.

    Stage 1: Schema validation (types, required fields, formats)
    Stage 2: Semantic validation (suspicious but allowed values)
    """

    validated_at: datetime = Field(default_factory=utc_now)

    schema_valid: bool
    semantic_valid: bool
    is_valid: bool

    issues: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[str] = Field(
        default_factory=list,
        description="Non-blocking warnings"
    )

    # Populated only when stage 1 passed
    transaction: Optional[NewTransaction] = None

    @property
    def has_errors(self) -> bool:
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == "error")


# =============================================================================
# READ MODELS
# =============================================================================

class FinancialSummary(BaseModel):
    """
    Headline numbers for the dashboard.

    Balances come straight from the user record. Spending figures are
    folded from the transaction list.
    """

    total_amount: Decimal
    total_cash: Decimal
    total_online: Decimal
    amount_spent: Decimal
    cash_spent: Decimal
    online_spent: Decimal
    online_money_in: Decimal

    # "Left" figures mirror the totals; they are not net of spending.
    @computed_field
    @property
    def amount_left(self) -> Decimal:
        return self.total_amount

    @computed_field
    @property
    def cash_left(self) -> Decimal:
        return self.total_cash

    @computed_field
    @property
    def online_left(self) -> Decimal:
        return self.total_online


class MonthlyTotals(BaseModel):
    income: Decimal = ZERO
    expense: Decimal = ZERO


class FinancialReport(BaseModel):
    """Aggregate view for the reports page."""

    summary: FinancialSummary
    transaction_count: int = Field(ge=0)
    average_spend: Decimal = Field(
        ...,
        description="amount_spent divided by the number of transactions"
    )
    income_total: Decimal
    income_share_percent: Decimal = Field(
        ...,
        description="income / (amount_spent + income) as a percentage"
    )
    largest_expense: Decimal
    largest_income: Decimal
    top_category: Optional[str] = None

    category_breakdown: dict[str, Decimal] = Field(default_factory=dict)
    monthly_breakdown: dict[str, MonthlyTotals] = Field(default_factory=dict)
    mode_distribution: dict[TransactionMode, Decimal] = Field(default_factory=dict)
