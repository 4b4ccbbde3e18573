"""
Summary and Report Aggregation

Everything here is a pure fold over an in-memory list of transactions.
Nothing reads or writes storage, and nothing here feeds back into the
balances.

The one exception to "fold everything" is the headline balance: the
summary takes it from the user record, never from the transaction sum.
"""

from decimal import Decimal
from typing import Iterable, Optional

from src.models.finance import (
    ZERO,
    FinancialReport,
    FinancialSummary,
    MonthlyTotals,
    Transaction,
    TransactionMode,
    TransactionType,
    UserProfile,
)


def _total(
    transactions: Iterable[Transaction],
    mode: Optional[TransactionMode] = None,
    type_: Optional[TransactionType] = None,
) -> Decimal:
    total = ZERO
    for txn in transactions:
        if mode is not None and txn.mode != mode:
            continue
        if type_ is not None and txn.type != type_:
            continue
        total += txn.amount
    return total


def build_financial_summary(
    user: UserProfile,
    transactions: list[Transaction],
) -> FinancialSummary:
    """Headline numbers for one user."""
    cash_spent = _total(transactions, TransactionMode.CASH, TransactionType.EXPENSE)
    online_spent = _total(transactions, TransactionMode.ONLINE, TransactionType.EXPENSE)

    return FinancialSummary(
        total_amount=user.cash_balance + user.online_balance,
        total_cash=user.cash_balance,
        total_online=user.online_balance,
        amount_spent=cash_spent + online_spent,
        cash_spent=cash_spent,
        online_spent=online_spent,
        online_money_in=_total(transactions, TransactionMode.ONLINE, TransactionType.INCOME),
    )


def income_total(transactions: list[Transaction]) -> Decimal:
    return _total(transactions, type_=TransactionType.INCOME)


def category_breakdown(transactions: list[Transaction]) -> dict[str, Decimal]:
    """
    Expense totals per category, largest first.

    Uncategorised expenses are left out.
    """
    groups: dict[str, Decimal] = {}
    for txn in transactions:
        if txn.type != TransactionType.EXPENSE or not txn.category:
            continue
        groups[txn.category] = groups.get(txn.category, ZERO) + txn.amount

    return dict(sorted(groups.items(), key=lambda item: item[1], reverse=True))


def monthly_breakdown(transactions: list[Transaction]) -> dict[str, MonthlyTotals]:
    """Income and expense per YYYY-MM, oldest month first."""
    groups: dict[str, MonthlyTotals] = {}
    for txn in transactions:
        month = txn.date[:7]
        totals = groups.setdefault(month, MonthlyTotals())
        if txn.type == TransactionType.INCOME:
            totals.income += txn.amount
        else:
            totals.expense += txn.amount

    return dict(sorted(groups.items()))


def mode_distribution(transactions: list[Transaction]) -> dict[TransactionMode, Decimal]:
    """Everything that moved through each mode, income and expense alike."""
    return {mode: _total(transactions, mode=mode) for mode in TransactionMode}


def largest_amount(
    transactions: list[Transaction],
    type_: TransactionType,
) -> Decimal:
    return max(
        (txn.amount for txn in transactions if txn.type == type_),
        default=ZERO,
    )


def build_report(
    summary: FinancialSummary,
    transactions: list[Transaction],
) -> FinancialReport:
    """Full reports view for one user."""
    count = len(transactions)
    income = income_total(transactions)
    categories = category_breakdown(transactions)

    average_spend = summary.amount_spent / count if count else ZERO

    turnover = summary.amount_spent + income
    income_share = income / turnover * 100 if turnover else ZERO

    return FinancialReport(
        summary=summary,
        transaction_count=count,
        average_spend=average_spend,
        income_total=income,
        income_share_percent=income_share,
        largest_expense=largest_amount(transactions, TransactionType.EXPENSE),
        largest_income=largest_amount(transactions, TransactionType.INCOME),
        top_category=next(iter(categories), None),
        category_breakdown=categories,
        monthly_breakdown=monthly_breakdown(transactions),
        mode_distribution=mode_distribution(transactions),
    )
