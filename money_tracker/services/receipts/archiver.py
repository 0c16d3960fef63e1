"""
Receipt Archiver

Stores a receipt photo for an entry and returns a shareable link.

Layout in the hosting backend:

    <anchor>/Money Tracker Receipt/<YYYYMM>/<date>_<id>_<slug>.jpg

DESIGN DECISION: Folder lookup is find-then-create with first match by
name. Two requests creating the same month folder at the same moment can
produce duplicate folders; receipts stay reachable through their links,
so this race is accepted rather than locked against.

Every failure surfaces as UploadError. The caller decides whether that
matters (for the add flow it never does: the entry row is already saved).
"""

import base64
import binascii
import re
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

import structlog

from money_tracker.audit import AuditLogger
from money_tracker.models.entry import RECEIPT_FOLDER, TIMEZONE, tokyo_now
from money_tracker.services.receipts.interface import (
    FileHostingInterface,
    FolderResolutionError,
    ReceiptDecodeError,
    UploadError,
)


logger = structlog.get_logger(__name__)

RECEIPT_MIME_TYPE = "image/jpeg"
MAX_SLUG_LENGTH = 40
DEFAULT_SLUG = "receipt"

_DATA_URI_PREFIX = re.compile(r"^data:[^,]*?;base64,", re.IGNORECASE)

# Letters kept in the slug: ASCII lowercase, digits, hiragana, katakana, CJK
_SLUG_SEPARATOR = re.compile(r"[^a-z0-9\u3040-\u309f\u30a0-\u30ff\u4e00-\u9fff]+")


def strip_data_uri(payload: str) -> str:
    """Remove a leading `data:<mime>;base64,` prefix if present."""
    return _DATA_URI_PREFIX.sub("", payload.strip(), count=1)


def decode_image(payload: str) -> bytes:
    """
    Decode a (possibly data-URI prefixed) base64 image.

    Raises:
        ReceiptDecodeError: If the payload is empty or not valid base64
    """
    if not payload:
        raise ReceiptDecodeError("Receipt image is empty")
    data = "".join(strip_data_uri(payload).split())
    try:
        content = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ReceiptDecodeError(f"Receipt image is not valid base64: {e}")
    if not content:
        raise ReceiptDecodeError("Receipt image is empty")
    return content


def receipt_year_month(date: Optional[str], now: Optional[datetime] = None) -> str:
    """
    Year-month partition (YYYYMM) for a receipt.

    The entry date is read as noon in the tracker timezone. A missing or
    malformed date falls back to the current month.
    """
    tz = ZoneInfo(TIMEZONE)
    if date:
        try:
            moment = datetime.strptime(date.strip(), "%Y-%m-%d").replace(hour=12, tzinfo=tz)
            return moment.strftime("%Y%m")
        except ValueError:
            pass
    moment = now.astimezone(tz) if now else tokyo_now()
    return moment.strftime("%Y%m")


def slugify_description(description: Optional[str]) -> str:
    """
    Filename-safe slug of an entry description.

    >>> slugify_description("Lunch Ramen!!")
    'lunch-ramen'
    """
    slug = _SLUG_SEPARATOR.sub("-", (description or DEFAULT_SLUG).lower())
    slug = slug[:MAX_SLUG_LENGTH].strip("-")
    return slug or DEFAULT_SLUG


def build_receipt_filename(
    date: Optional[str],
    entry_id: str,
    description: Optional[str],
    year_month: str,
) -> str:
    """`{date or year_month}_{entry_id}_{slug}.jpg`"""
    prefix = date or year_month
    return f"{prefix}_{entry_id}_{slugify_description(description)}.jpg"


class ReceiptArchiver:
    """
    Archives receipt images into a FileHostingInterface.

    Flow:
    1. Decode the base64 payload
    2. Resolve <anchor>/<RECEIPT_FOLDER>/<YYYYMM>, creating folders as needed
    3. Upload the file as image/jpeg
    4. Share it as view-by-link and return the URL
    """

    def __init__(
        self,
        hosting: FileHostingInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._hosting = hosting
        self._audit_logger = audit_logger

    @property
    def backend_name(self) -> str:
        return self._hosting.name

    def _find_or_create(self, parent: str, name: str, path: str) -> str:
        folder = self._hosting.find_folder(parent, name)
        if folder is None:
            folder = self._hosting.create_folder(parent, name)
            if self._audit_logger:
                self._audit_logger.log_receipt_folder_created(path)
        return folder

    def resolve_folder(self, year_month: str) -> str:
        """
        Find or create the month folder for `year_month`.

        Raises:
            FolderResolutionError: If any lookup or creation fails
        """
        try:
            anchor = self._hosting.anchor_folder()
            root = self._find_or_create(anchor, RECEIPT_FOLDER, RECEIPT_FOLDER)
            return self._find_or_create(root, year_month, f"{RECEIPT_FOLDER}/{year_month}")
        except UploadError:
            raise
        except Exception as e:
            raise FolderResolutionError(
                f"Could not resolve receipt folder {RECEIPT_FOLDER}/{year_month}: {e}"
            )

    async def store(
        self,
        image: str,
        entry_id: str,
        date: Optional[str],
        description: Optional[str],
        now: Optional[datetime] = None,
    ) -> str:
        """
        Archive a receipt image and return its shareable URL.

        Args:
            image: base64 image, optionally prefixed with a data URI header
            entry_id: id of the entry the receipt belongs to
            date: entry date (YYYY-MM-DD), used for folder and filename
            description: entry description, slugged into the filename

        Raises:
            UploadError: On any decode or hosting failure
        """
        content = decode_image(image)
        year_month = receipt_year_month(date, now)
        filename = build_receipt_filename(date, entry_id, description, year_month)

        folder = self.resolve_folder(year_month)
        try:
            stored = self._hosting.upload_file(folder, filename, content, RECEIPT_MIME_TYPE)
            self._hosting.share_with_link(stored.file_id)
        except UploadError:
            raise
        except Exception as e:
            raise UploadError(f"Failed to upload receipt {filename}: {e}")

        logger.debug(
            "receipt_stored",
            backend=self._hosting.name,
            filename=filename,
            size_bytes=len(content),
        )
        return stored.url
