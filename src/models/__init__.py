"""
Data Models Package

This package contains all Pydantic models used by the finance tracker.
All data flowing through the system must conform to these schemas.
"""

from src.models.finance import (
    Balances,
    FinancialReport,
    FinancialSummary,
    MonthlyTotals,
    NewTransaction,
    NewUserProfile,
    Transaction,
    TransactionMode,
    TransactionType,
    UserProfile,
    ValidationIssue,
    ValidationResult,
)
from src.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Finance models
    "Balances",
    "FinancialReport",
    "FinancialSummary",
    "MonthlyTotals",
    "NewTransaction",
    "NewUserProfile",
    "Transaction",
    "TransactionMode",
    "TransactionType",
    "UserProfile",
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
