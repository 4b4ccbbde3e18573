"""Read-side aggregation package."""

from src.queries.reports import (
    build_financial_summary,
    build_report,
    category_breakdown,
    income_total,
    largest_amount,
    mode_distribution,
    monthly_breakdown,
)

__all__ = [
    "build_financial_summary",
    "build_report",
    "category_breakdown",
    "income_total",
    "largest_amount",
    "mode_distribution",
    "monthly_breakdown",
]
