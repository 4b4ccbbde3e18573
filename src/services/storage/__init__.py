"""
Storage Services Package

Provides the abstract storage interface and its implementations.
The in-memory backend is the default; Google Sheets is the persistent one.
"""

from src.services.storage.interface import (
    FinanceStorageInterface,
    StorageConnectionError,
    StorageError,
)
from src.services.storage.locks import MonotonicClock, OwnerLocks
from src.services.storage.memory import InMemoryFinanceStorage
from src.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsFinanceStorage,
)

__all__ = [
    # Interface
    "FinanceStorageInterface",
    # Exceptions
    "StorageConnectionError",
    "StorageError",
    # Shared per-storage concurrency state
    "MonotonicClock",
    "OwnerLocks",
    # Implementations
    "GoogleSheetsClient",
    "GoogleSheetsFinanceStorage",
    "InMemoryFinanceStorage",
]
