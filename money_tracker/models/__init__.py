"""
Data Models Package

This package contains all Pydantic models used in Money Tracker.
"""

from money_tracker.models.entry import (
    COLUMN_WIDTHS,
    ENTRY_COLUMNS,
    RECEIPT_FOLDER,
    RECEIPT_LINK_COLUMN,
    SAVED_AT_FORMAT,
    SHEET_NAME,
    TIMEZONE,
    Direction,
    Entry,
    EntryDeleteRequest,
    EntryListResponse,
    EntryWriteRequest,
    WriteResponse,
    coerce_amount,
    format_date_cell,
    tokyo_now,
)
from money_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Layout constants
    "COLUMN_WIDTHS",
    "ENTRY_COLUMNS",
    "RECEIPT_FOLDER",
    "RECEIPT_LINK_COLUMN",
    "SAVED_AT_FORMAT",
    "SHEET_NAME",
    "TIMEZONE",
    # Entry models
    "Direction",
    "Entry",
    "EntryDeleteRequest",
    "EntryListResponse",
    "EntryWriteRequest",
    "WriteResponse",
    "coerce_amount",
    "format_date_cell",
    "tokyo_now",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
