"""
Audit Logger

DESIGN DECISION: Every significant action in the system is logged.
This provides:
1. Traceability of every row written or removed
2. A record of receipts that failed to upload (the row is kept, the link is not)
3. Debugging capability for a backend with no UI of its own

The audit logger:
- Writes structured JSON lines through structlog
- Never raises (logging must not break a request)
- Supports correlation IDs to trace the events of one request
"""

import logging
import sys
from typing import Callable, Optional
from uuid import UUID, uuid4

import structlog

from money_tracker.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route stdlib logging (and therefore structlog) to stdout at `level`."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )


class AuditLogger:
    """Central audit logging service."""

    def __init__(self):
        self._logger = structlog.get_logger("money_tracker.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event at its severity.

        Returns False if the log write itself failed.
        """
        try:
            log_dict = event.to_log_dict()
            if event.severity == AuditSeverity.ERROR:
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception:
            return False
        return True

    def record(self, build: Callable[..., AuditEvent], *args, **kwargs) -> bool:
        """
        Build an event with `build` and log it.

        A builder that fails (for instance on oversized client input) is
        reported as a dropped event instead of propagating to the caller.
        """
        try:
            event = build(*args, **kwargs)
        except Exception as e:
            try:
                self._logger.warning(
                    "audit_event_dropped",
                    builder=getattr(build, "__name__", repr(build)),
                    error=str(e),
                )
            except Exception:
                pass
            return False
        return self.log(event)

    def log_entry_saved(
        self,
        entry_id: str,
        direction: str,
        amount,
        has_receipt: bool,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log entry append."""
        self.record(
            AuditEventBuilder.entry_saved,
            entry_id=entry_id,
            direction=direction,
            amount=amount,
            has_receipt=has_receipt,
            correlation_id=correlation_id,
        )

    def log_entry_deleted(
        self,
        entry_id: str,
        found: bool,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log entry delete (or a delete that matched nothing)."""
        if found:
            self.record(AuditEventBuilder.entry_deleted, entry_id, correlation_id)
        else:
            self.record(AuditEventBuilder.entry_not_found, entry_id, correlation_id)

    def log_entries_listed(
        self,
        count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.record(AuditEventBuilder.entries_listed, count, correlation_id)

    def log_list_failed(
        self,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.record(AuditEventBuilder.list_failed, error_message, correlation_id)

    def log_receipt_archived(
        self,
        entry_id: str,
        url: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.record(AuditEventBuilder.receipt_archived, entry_id, url, correlation_id)

    def log_receipt_failed(
        self,
        entry_id: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a receipt upload that was dropped."""
        self.record(
            AuditEventBuilder.receipt_upload_failed,
            entry_id=entry_id,
            error_message=error_message,
            correlation_id=correlation_id,
        )

    def log_receipt_link_write_failed(self, entry_id: str, error_message: str) -> None:
        self.record(
            AuditEventBuilder.receipt_link_write_failed,
            entry_id=entry_id,
            error_message=error_message,
        )

    def log_receipt_folder_created(self, path: str) -> None:
        self.record(AuditEventBuilder.receipt_folder_created, path)

    def log_table_created(self, name: str) -> None:
        self.record(AuditEventBuilder.table_created, name)

    def log_header_repaired(self, name: str, old_header: list) -> None:
        self.record(AuditEventBuilder.header_repaired, name, old_header)

    def log_request_failed(
        self,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.record(
            AuditEventBuilder.request_failed,
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
        )


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of each request and pass it through.
    """
    return uuid4()
