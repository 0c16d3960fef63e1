"""Receipt archiving services package."""

from money_tracker.services.receipts.interface import (
    FileHostingInterface,
    FolderResolutionError,
    ReceiptDecodeError,
    StoredFile,
    UploadError,
)
from money_tracker.services.receipts.archiver import (
    ReceiptArchiver,
    build_receipt_filename,
    decode_image,
    receipt_year_month,
    slugify_description,
    strip_data_uri,
)
from money_tracker.services.receipts.cloudinary_service import CloudinaryHosting
from money_tracker.services.receipts.google_drive import GoogleDriveHosting
from money_tracker.services.receipts.memory import InMemoryHosting

__all__ = [
    # Interfaces
    "FileHostingInterface",
    "StoredFile",
    # Exceptions
    "FolderResolutionError",
    "ReceiptDecodeError",
    "UploadError",
    # Archiver
    "ReceiptArchiver",
    "build_receipt_filename",
    "decode_image",
    "receipt_year_month",
    "slugify_description",
    "strip_data_uri",
    # Backends
    "CloudinaryHosting",
    "GoogleDriveHosting",
    "InMemoryHosting",
]
