"""
Storage Services Package

Provides the table abstraction and its implementations.
Google Sheets is the production backend; the in-memory table backs tests.
"""

from money_tracker.services.storage.interface import (
    NotFoundError,
    StorageError,
    StorageUnavailableError,
    TableStorageInterface,
)
from money_tracker.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsTable,
)
from money_tracker.services.storage.memory import InMemoryTableStorage

__all__ = [
    # Interfaces
    "TableStorageInterface",
    # Exceptions
    "NotFoundError",
    "StorageError",
    "StorageUnavailableError",
    # Implementations
    "GoogleSheetsClient",
    "GoogleSheetsTable",
    "InMemoryTableStorage",
]
