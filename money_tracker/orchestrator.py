"""
Main Orchestrator for Money Tracker

Ties the Entry Store and the Receipt Archiver together and defines the
two request flows:
1. Fetch all (table -> entries newest first -> JSON)
2. Add or delete (JSON body -> row append + best-effort receipt, or row delete)

DESIGN DECISION: There are two error boundaries.
- Outer: every handler catches everything and returns a JSON body with
  status "error" (or an empty entry list) instead of failing the request.
- Inner: the receipt step is isolated. The row is written first; if the
  image cannot be decoded, uploaded or linked, the entry stays saved
  without a link and the response is still "ok".
"""

import json
from typing import Any, Optional, Union
from uuid import UUID

import structlog

from money_tracker.audit import AuditLogger, create_correlation_id
from money_tracker.config import get_settings
from money_tracker.models.entry import (
    SHEET_NAME,
    Entry,
    EntryDeleteRequest,
    EntryListResponse,
    EntryWriteRequest,
    WriteResponse,
)
from money_tracker.services.entry_store import EntryStore
from money_tracker.services.receipts import (
    CloudinaryHosting,
    GoogleDriveHosting,
    InMemoryHosting,
    ReceiptArchiver,
)
from money_tracker.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsTable,
    InMemoryTableStorage,
)


logger = structlog.get_logger(__name__)

ROW_NOT_FOUND_NOTE = "row not found"


class InvalidRequestError(ValueError):
    """The POST body is not a JSON object of a known form."""
    pass


class EntryFlow:
    """
    Orchestrates entry requests.

    The archiver is optional: without one, receipt images are ignored
    and entries are saved without a link.
    """

    def __init__(
        self,
        entry_store: EntryStore,
        receipt_archiver: Optional[ReceiptArchiver] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._entry_store = entry_store
        self._receipt_archiver = receipt_archiver
        self._audit_logger = audit_logger or AuditLogger()

    @property
    def entry_store(self) -> EntryStore:
        return self._entry_store

    @property
    def receipt_archiver(self) -> Optional[ReceiptArchiver]:
        return self._receipt_archiver

    # -------------------------------------------------------------------------
    # Fetch all
    # -------------------------------------------------------------------------

    async def list_entries(self, correlation_id: Optional[UUID] = None) -> dict:
        """
        Handle a fetch-all request.

        Returns {"entries": [...]} newest first, or
        {"entries": [], "error": "..."} if the table could not be read.
        """
        correlation_id = correlation_id or create_correlation_id()
        try:
            entries = await self._entry_store.list_entries()
        except Exception as e:
            self._audit_logger.log_list_failed(str(e), correlation_id)
            return EntryListResponse(error=str(e)).model_dump(exclude_none=True)

        self._audit_logger.log_entries_listed(len(entries), correlation_id)
        return EntryListResponse(
            entries=[entry.to_wire() for entry in entries]
        ).model_dump(exclude_none=True)

    # -------------------------------------------------------------------------
    # Add or delete
    # -------------------------------------------------------------------------

    async def handle_post(
        self,
        body: Union[str, bytes, dict],
        correlation_id: Optional[UUID] = None,
    ) -> dict:
        """
        Handle an add-or-delete request.

        `body` is the raw request body or an already-parsed object. Any
        failure becomes {"status": "error", "message": ...}.
        """
        correlation_id = correlation_id or create_correlation_id()
        data: Any = None
        try:
            data = self._parse_body(body)
            if data.get("action") == "delete":
                response = await self.delete_entry(
                    EntryDeleteRequest.model_validate(data),
                    correlation_id=correlation_id,
                )
            else:
                response = await self.add_entry(
                    EntryWriteRequest.model_validate(data),
                    correlation_id=correlation_id,
                )
        except Exception as e:
            operation = "delete" if isinstance(data, dict) and data.get("action") == "delete" else "post"
            self._audit_logger.log_request_failed(operation, str(e), correlation_id)
            return WriteResponse(status="error", message=str(e)).to_wire()

        return response.to_wire()

    @staticmethod
    def _parse_body(body: Union[str, bytes, dict]) -> dict:
        if isinstance(body, dict):
            return body
        try:
            data = json.loads(body or b"")
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise InvalidRequestError(f"Request body is not valid JSON: {e}")
        if not isinstance(data, dict):
            raise InvalidRequestError("Request body must be a JSON object")
        return data

    async def add_entry(
        self,
        request: EntryWriteRequest,
        correlation_id: Optional[UUID] = None,
    ) -> WriteResponse:
        """
        Save an entry, then try to archive its receipt.

        The row is appended before any image work so that a receipt
        failure can never lose the entry itself.
        """
        correlation_id = correlation_id or create_correlation_id()

        entry = await self._entry_store.append_entry(request)
        self._audit_logger.log_entry_saved(
            entry_id=entry.id,
            direction=entry.direction,
            amount=entry.amount,
            has_receipt=bool(request.receipt_image),
            correlation_id=correlation_id,
        )

        drive_link = None
        if request.receipt_image:
            drive_link = await self._archive_receipt(entry, request.receipt_image, correlation_id)

        return WriteResponse(status="ok", driveLink=drive_link)

    async def _archive_receipt(
        self,
        entry: Entry,
        image: str,
        correlation_id: UUID,
    ) -> Optional[str]:
        """Upload the receipt and link it. Returns the URL, or None on any failure."""
        if self._receipt_archiver is None:
            logger.info("receipt_ignored", entry_id=entry.id, reason="no receipt backend")
            return None

        try:
            url = await self._receipt_archiver.store(
                image,
                entry_id=entry.id,
                date=entry.date,
                description=entry.description,
            )
            await self._entry_store.set_receipt_link(entry.id, url)
        except Exception as e:
            self._audit_logger.log_receipt_failed(entry.id, str(e), correlation_id)
            return None

        self._audit_logger.log_receipt_archived(entry.id, url, correlation_id)
        return url

    async def delete_entry(
        self,
        request: EntryDeleteRequest,
        correlation_id: Optional[UUID] = None,
    ) -> WriteResponse:
        """Delete an entry by id. A missing id is reported, not an error."""
        correlation_id = correlation_id or create_correlation_id()

        found = await self._entry_store.delete_entry(request.id)
        self._audit_logger.log_entry_deleted(request.id, found, correlation_id)

        if not found:
            return WriteResponse(status="ok", note=ROW_NOT_FOUND_NOTE)
        return WriteResponse(status="ok", deleted=request.id)


def create_app_components(
    storage_backend: Optional[str] = None,
    receipt_backend: Optional[str] = None,
) -> EntryFlow:
    """
    Factory function to create the entry flow from settings.

    Args:
        storage_backend: "google_sheets" or "memory" (default from settings)
        receipt_backend: "google_drive", "cloudinary", "memory" or "none"
                         (default from settings)
    """
    app_settings = get_settings().app
    storage_backend = storage_backend or app_settings.storage_backend
    receipt_backend = receipt_backend or app_settings.receipt_backend

    audit_logger = AuditLogger()
    sheets_client: Optional[GoogleSheetsClient] = None

    if storage_backend == "google_sheets":
        sheets_client = GoogleSheetsClient()
        table: Any = GoogleSheetsTable(sheets_client, SHEET_NAME)
    elif storage_backend == "memory":
        table = InMemoryTableStorage(SHEET_NAME)
    else:
        raise ValueError(f"Unknown storage backend: {storage_backend}")

    if receipt_backend == "google_drive":
        hosting: Any = GoogleDriveHosting(sheets_client or GoogleSheetsClient())
    elif receipt_backend == "cloudinary":
        hosting = CloudinaryHosting()
    elif receipt_backend == "memory":
        hosting = InMemoryHosting()
    elif receipt_backend == "none":
        hosting = None
    else:
        raise ValueError(f"Unknown receipt backend: {receipt_backend}")

    archiver = ReceiptArchiver(hosting, audit_logger) if hosting else None

    logger.info(
        "components_created",
        storage_backend=storage_backend,
        receipt_backend=receipt_backend,
    )
    return EntryFlow(
        entry_store=EntryStore(table, audit_logger),
        receipt_archiver=archiver,
        audit_logger=audit_logger,
    )
