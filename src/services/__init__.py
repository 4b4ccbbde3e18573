"""Services package."""

from src.services.storage import (
    FinanceStorageInterface,
    GoogleSheetsClient,
    GoogleSheetsFinanceStorage,
    InMemoryFinanceStorage,
    StorageConnectionError,
    StorageError,
)

__all__ = [
    "FinanceStorageInterface",
    "GoogleSheetsClient",
    "GoogleSheetsFinanceStorage",
    "InMemoryFinanceStorage",
    "StorageConnectionError",
    "StorageError",
]
