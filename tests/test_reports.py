"""Tests for summary and report aggregation."""

from decimal import Decimal

import pytest

from src.models.finance import (
    TransactionMode,
    TransactionType,
    UserProfile,
)
from src.queries import (
    build_financial_summary,
    build_report,
    category_breakdown,
    income_total,
    largest_amount,
    mode_distribution,
    monthly_breakdown,
)
from tests.helpers import make_transaction


CASH = TransactionMode.CASH
ONLINE = TransactionMode.ONLINE
INCOME = TransactionType.INCOME
EXPENSE = TransactionType.EXPENSE


@pytest.fixture
def user():
    return UserProfile(
        name="Asha",
        cash_balance=Decimal("1500"),
        online_balance=Decimal("-420"),
    )


@pytest.fixture
def transactions(user):
    return [
        make_transaction(user.id, "1000", CASH, INCOME, "2024-01-01", "Salary"),
        make_transaction(user.id, "300", ONLINE, EXPENSE, "2024-01-02", "Rent", "Housing"),
        make_transaction(user.id, "120", ONLINE, EXPENSE, "2024-02-10", "Swiggy", "Food"),
        make_transaction(user.id, "80", CASH, EXPENSE, "2024-02-11", "Market", "Food"),
        make_transaction(user.id, "500", CASH, INCOME, "2024-02-15", "Freelance"),
        make_transaction(user.id, "200", ONLINE, INCOME, "2024-02-20", "Refund"),
        make_transaction(user.id, "50", CASH, EXPENSE, "2024-02-21", "Tea"),
    ]


class TestSummary:
    """Headline numbers."""

    def test_balances_come_from_user(self, user, transactions):
        """Test totals mirror the stored balances, not a recomputation."""
        summary = build_financial_summary(user, transactions)
        assert summary.total_cash == Decimal("1500")
        assert summary.total_online == Decimal("-420")
        assert summary.total_amount == Decimal("1080")

    def test_spending(self, user, transactions):
        """Test spending is folded from expenses per mode."""
        summary = build_financial_summary(user, transactions)
        assert summary.cash_spent == Decimal("130")
        assert summary.online_spent == Decimal("420")
        assert summary.amount_spent == Decimal("550")
        assert summary.online_money_in == Decimal("200")

    def test_empty(self, user):
        """Test an empty history spends nothing."""
        summary = build_financial_summary(user, [])
        assert summary.amount_spent == Decimal("0")
        assert summary.online_money_in == Decimal("0")


class TestBreakdowns:
    """Stateless folds over the list."""

    def test_category_breakdown(self, transactions):
        """Test expense categories, largest first, uncategorised skipped."""
        breakdown = category_breakdown(transactions)
        assert list(breakdown.items()) == [
            ("Housing", Decimal("300")),
            ("Food", Decimal("200")),
        ]

    def test_monthly_breakdown(self, transactions):
        """Test per-month income and expense in calendar order."""
        months = monthly_breakdown(transactions)
        assert list(months) == ["2024-01", "2024-02"]
        assert months["2024-01"].income == Decimal("1000")
        assert months["2024-01"].expense == Decimal("300")
        assert months["2024-02"].income == Decimal("700")
        assert months["2024-02"].expense == Decimal("250")

    def test_mode_distribution(self, transactions):
        """Test everything that moved per mode."""
        assert mode_distribution(transactions) == {
            CASH: Decimal("1630"),
            ONLINE: Decimal("620"),
        }

    def test_income_and_largest(self, transactions):
        """Test income total and per-type maximums."""
        assert income_total(transactions) == Decimal("1700")
        assert largest_amount(transactions, EXPENSE) == Decimal("300")
        assert largest_amount(transactions, INCOME) == Decimal("1000")
        assert largest_amount([], INCOME) == Decimal("0")


class TestReport:
    """The combined reports view."""

    def test_report(self, user, transactions):
        """Test derived report figures."""
        summary = build_financial_summary(user, transactions)
        report = build_report(summary, transactions)

        assert report.transaction_count == 7
        assert report.average_spend == Decimal("550") / 7
        assert report.income_total == Decimal("1700")
        assert report.income_share_percent == Decimal("1700") / Decimal("2250") * 100
        assert report.top_category == "Housing"
        assert report.largest_expense == Decimal("300")

    def test_empty_report(self, user):
        """Test an empty history does not divide by zero."""
        summary = build_financial_summary(user, [])
        report = build_report(summary, [])
        assert report.transaction_count == 0
        assert report.average_spend == Decimal("0")
        assert report.income_share_percent == Decimal("0")
        assert report.top_category is None
        assert report.category_breakdown == {}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
