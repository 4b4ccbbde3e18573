"""
Error Taxonomy for the Finance Tracker

Every failure surfaced to a caller is one of these exceptions.
The presentation layer shows `str(error)` verbatim and may branch on `code`.

There is no "balance drifted" error: balances only ever move
through the ledger inside the same atomic unit as the record change.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from src.models.finance import ValidationResult


class FinanceError(Exception):
    """Base exception for all finance tracker failures."""

    code = "error"


class NotFoundError(FinanceError):
    """No user profile exists, or the referenced transaction is absent."""

    code = "not_found"


class ConflictError(FinanceError):
    """Attempted to create a second user profile."""

    code = "conflict"


class UnauthorizedError(FinanceError):
    """Caller tried to touch a transaction it does not own."""

    code = "unauthorized"


class ValidationFailedError(FinanceError):
    """Input rejected before anything was written."""

    code = "validation"

    def __init__(self, message: str, result: Optional["ValidationResult"] = None):
        self.result = result
        super().__init__(message)

    @property
    def issues(self) -> list:
        """Error-level issues that caused the rejection."""
        if self.result is None:
            return []
        return [i for i in self.result.issues if i.severity == "error"]

