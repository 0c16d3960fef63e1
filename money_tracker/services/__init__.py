"""Services package."""

from money_tracker.services.entry_store import EntryStore, generate_entry_id
from money_tracker.services.receipts import (
    CloudinaryHosting,
    FileHostingInterface,
    GoogleDriveHosting,
    InMemoryHosting,
    ReceiptArchiver,
    UploadError,
)
from money_tracker.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsTable,
    InMemoryTableStorage,
    NotFoundError,
    StorageError,
    StorageUnavailableError,
    TableStorageInterface,
)

__all__ = [
    # Entry store
    "EntryStore",
    "generate_entry_id",
    # Receipt services
    "CloudinaryHosting",
    "FileHostingInterface",
    "GoogleDriveHosting",
    "InMemoryHosting",
    "ReceiptArchiver",
    "UploadError",
    # Storage services
    "GoogleSheetsClient",
    "GoogleSheetsTable",
    "InMemoryTableStorage",
    "NotFoundError",
    "StorageError",
    "StorageUnavailableError",
    "TableStorageInterface",
]
