"""
Audit Models for Money Tracker

Every significant action (entry saved, receipt archived, row deleted)
produces an AuditEvent that is written to the structured log.

DESIGN DECISION: Audit events are plain data. The AuditLogger decides
where they go; builders here only decide what they say.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Reads
    ENTRIES_LISTED = "entries_listed"
    LIST_FAILED = "list_failed"

    # Writes
    ENTRY_SAVED = "entry_saved"
    ENTRY_DELETED = "entry_deleted"
    ENTRY_NOT_FOUND = "entry_not_found"

    # Receipts
    RECEIPT_ARCHIVED = "receipt_archived"
    RECEIPT_UPLOAD_FAILED = "receipt_upload_failed"
    RECEIPT_LINK_WRITE_FAILED = "receipt_link_write_failed"
    RECEIPT_FOLDER_CREATED = "receipt_folder_created"

    # Table maintenance
    TABLE_CREATED = "table_created"
    HEADER_REPAIRED = "header_repaired"

    # System events
    REQUEST_FAILED = "request_failed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    entity_id is the entry id as a string since entry ids are client
    supplied and not necessarily UUIDs. Client text goes into entity_id
    or details, never into the length-limited description.
    """

    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'entry', 'receipt', 'table')"
    )
    entity_id: Optional[str] = None
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID shared by all events of one request"
    )

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.entry_saved(entry_id, amount, correlation_id)
    """

    @staticmethod
    def entries_listed(count: int, correlation_id: Optional[UUID]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRIES_LISTED,
            entity_type="entry",
            correlation_id=correlation_id,
            description=f"Listed {count} entries",
            details={"count": count},
        )

    @staticmethod
    def list_failed(error_message: str, correlation_id: Optional[UUID]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LIST_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="entry",
            correlation_id=correlation_id,
            description="Could not read entries",
            error_message=error_message,
        )

    @staticmethod
    def entry_saved(
        entry_id: str,
        direction: str,
        amount: Any,
        has_receipt: bool,
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_SAVED,
            entity_type="entry",
            entity_id=entry_id,
            correlation_id=correlation_id,
            description="Entry saved",
            details={
                "direction": direction,
                "amount": amount,
                "has_receipt": has_receipt,
            },
        )

    @staticmethod
    def entry_deleted(entry_id: str, correlation_id: Optional[UUID]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_DELETED,
            entity_type="entry",
            entity_id=entry_id,
            correlation_id=correlation_id,
            description="Entry deleted",
        )

    @staticmethod
    def entry_not_found(entry_id: str, correlation_id: Optional[UUID]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_NOT_FOUND,
            severity=AuditSeverity.WARNING,
            entity_type="entry",
            entity_id=entry_id,
            correlation_id=correlation_id,
            description="Delete requested for missing entry",
        )

    @staticmethod
    def receipt_archived(
        entry_id: str,
        url: str,
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECEIPT_ARCHIVED,
            entity_type="receipt",
            entity_id=entry_id,
            correlation_id=correlation_id,
            description="Receipt image archived",
            details={"url": url},
        )

    @staticmethod
    def receipt_upload_failed(
        entry_id: str,
        error_message: str,
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECEIPT_UPLOAD_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="receipt",
            entity_id=entry_id,
            correlation_id=correlation_id,
            description="Receipt upload failed, entry kept without link",
            error_message=error_message,
        )

    @staticmethod
    def receipt_link_write_failed(
        entry_id: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECEIPT_LINK_WRITE_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="entry",
            entity_id=entry_id,
            correlation_id=correlation_id,
            description="Could not write receipt link into entry row",
            error_message=error_message,
        )

    @staticmethod
    def receipt_folder_created(path: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECEIPT_FOLDER_CREATED,
            entity_type="folder",
            description=f"Receipt folder created: {path}",
            details={"path": path},
        )

    @staticmethod
    def table_created(name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TABLE_CREATED,
            entity_type="table",
            entity_id=name,
            description=f"Created table {name} with header row",
        )

    @staticmethod
    def header_repaired(name: str, old_header: list) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.HEADER_REPAIRED,
            severity=AuditSeverity.WARNING,
            entity_type="table",
            entity_id=name,
            description=f"Rewrote legacy header row of {name}",
            details={"old_header": [str(c) for c in old_header]},
        )

    @staticmethod
    def request_failed(
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REQUEST_FAILED,
            severity=AuditSeverity.ERROR,
            correlation_id=correlation_id,
            description=f"{operation} request failed",
            details={"operation": operation},
            error_message=error_message,
        )
