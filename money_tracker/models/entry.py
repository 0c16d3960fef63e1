"""
Core Data Models for Money Tracker

These models define the shape of an entry as it travels between the
client, the spreadsheet row and the JSON response.

DESIGN DECISION: The only validation we do is type coercion.
Amounts that are not numbers become 0, missing text becomes "".
The client is the source of truth for what the user typed.
"""

import re
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Literal, Optional, Union
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# FIXED STORAGE LAYOUT
# =============================================================================

SHEET_NAME = "Entries"
RECEIPT_FOLDER = "Money Tracker Receipt"
TIMEZONE = "Asia/Tokyo"

SAVED_AT_FORMAT = "%Y-%m-%d %H:%M:%S"

ENTRY_COLUMNS = [
    "ID",
    "Date",
    "Direction",
    "Amount",
    "Method",
    "Situation",
    "Description",
    "Who",
    "Saved At",
    "Receipt Link",
]

# Pixel widths applied when the sheet is first created
COLUMN_WIDTHS = [140, 100, 80, 90, 110, 110, 220, 90, 150, 280]

RECEIPT_LINK_COLUMN = 9

# Day zero of spreadsheet date serial numbers
SHEETS_EPOCH = datetime(1899, 12, 30)

_AMOUNT_NOISE = re.compile(r"[,\s\u00a5\uffe5$]")


def tokyo_now() -> datetime:
    """Current time in the fixed tracker timezone."""
    return datetime.now(ZoneInfo(TIMEZONE))


def coerce_amount(value: Any) -> Union[int, float]:
    """
    Coerce an amount to a number.

    Blank, missing or non-numeric values become 0. Thousands separators
    and yen or dollar signs are ignored. Integral values stay integers so
    yen amounts round-trip as 500 rather than 500.0.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        number = value
    else:
        text = _AMOUNT_NOISE.sub("", str(value))
        if not text:
            return 0
        try:
            number = float(text)
        except ValueError:
            return 0
    if number != number or number in (float("inf"), float("-inf")):
        return 0
    if float(number).is_integer():
        return int(number)
    return number


def _is_serial(cell: Any) -> bool:
    return isinstance(cell, (int, float)) and not isinstance(cell, bool)


def serial_to_datetime(serial: Union[int, float]) -> datetime:
    """
    Convert a spreadsheet date serial (days since 1899-12-30) to a naive
    datetime in the spreadsheet's own timezone, rounded to the second.
    """
    return SHEETS_EPOCH + timedelta(seconds=round(float(serial) * 86400))


def format_date_cell(cell: Any) -> str:
    """
    Normalize a date cell to YYYY-MM-DD.

    Sheets that parsed the value as a date hand back a serial number;
    text values have any ISO time part cut off.
    """
    if cell is None or cell == "":
        return ""
    if isinstance(cell, datetime):
        return cell.astimezone(ZoneInfo(TIMEZONE)).strftime("%Y-%m-%d")
    if _is_serial(cell):
        return serial_to_datetime(cell).strftime("%Y-%m-%d")
    return str(cell).split("T")[0]


def format_saved_at_cell(cell: Any) -> str:
    """Saved At as text; date serials are rendered with SAVED_AT_FORMAT."""
    if _is_serial(cell):
        return serial_to_datetime(cell).strftime(SAVED_AT_FORMAT)
    return _text(cell)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


# =============================================================================
# ENUMS
# =============================================================================

class Direction(str, Enum):
    """Whether money came in or went out."""
    IN = "in"
    OUT = "out"


# =============================================================================
# ENTRY
# =============================================================================

class Entry(BaseModel):
    """
    One financial transaction as stored in the Entries sheet.

    Field aliases are the wire names the client already uses
    (desc, savedAt, driveLink).
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Client supplied or server generated identifier")
    date: str = Field(default="", description="Calendar date, YYYY-MM-DD")
    direction: str = Field(default=Direction.OUT.value, description="in or out")
    amount: Union[int, float] = Field(default=0, description="Amount in yen")
    method: str = ""
    situation: str = ""
    description: str = Field(default="", alias="desc")
    who: str = ""
    saved_at: str = Field(default="", alias="savedAt")
    receipt_link: str = Field(default="", alias="driveLink")

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount_value(cls, v: Any) -> Union[int, float]:
        return coerce_amount(v)

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        return _text(v)

    def to_sheets_row(self) -> list:
        """
        Convert to a row for the Entries sheet.

        Returns exactly len(ENTRY_COLUMNS) values in column order.
        """
        return [
            self.id,
            self.date,
            self.direction,
            self.amount,
            self.method,
            self.situation,
            self.description,
            self.who,
            self.saved_at,
            self.receipt_link,
        ]

    @classmethod
    def from_sheets_row(cls, row: list) -> "Entry":
        """Build an Entry from a sheet row, tolerating short or blank rows."""
        def safe_get(index: int) -> Any:
            try:
                return row[index]
            except IndexError:
                return ""

        return cls(
            id=_text(safe_get(0)),
            date=format_date_cell(safe_get(1)),
            direction=_text(safe_get(2)) or Direction.OUT.value,
            amount=safe_get(3),
            method=_text(safe_get(4)),
            situation=_text(safe_get(5)),
            desc=_text(safe_get(6)),
            who=_text(safe_get(7)),
            savedAt=format_saved_at_cell(safe_get(8)),
            driveLink=_text(safe_get(9)),
        )

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


# =============================================================================
# REQUESTS
# =============================================================================

class EntryWriteRequest(BaseModel):
    """
    The add-entry form of a POST body.

    Every field is optional on the wire. The receipt image, if any, is a
    data-URI prefixed base64 string.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = None
    date: str = ""
    direction: str = Direction.OUT.value
    amount: Union[int, float] = 0
    method: str = ""
    situation: str = ""
    description: str = Field(default="", alias="desc")
    who: str = ""
    receipt_image: Optional[str] = Field(default=None, alias="receiptImage")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Optional[str]:
        if v is None or v == "":
            return None
        return str(v)

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount_value(cls, v: Any) -> Union[int, float]:
        return coerce_amount(v)

    @field_validator("direction", mode="before")
    @classmethod
    def default_direction(cls, v: Any) -> str:
        return _text(v) or Direction.OUT.value

    @field_validator("date", "method", "situation", "description", "who", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        return _text(v)

    @field_validator("receipt_image", mode="before")
    @classmethod
    def blank_image_is_none(cls, v: Any) -> Optional[str]:
        return v or None


class EntryDeleteRequest(BaseModel):
    """The delete form of a POST body."""
    model_config = ConfigDict(extra="ignore")

    action: Literal["delete"]
    id: str

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        return _text(v)


# =============================================================================
# RESPONSES
# =============================================================================

class EntryListResponse(BaseModel):
    """Body of GET. `error` is present only when the read failed."""
    entries: list[dict] = Field(default_factory=list)
    error: Optional[str] = None


class WriteResponse(BaseModel):
    """Body of POST. Unset optional fields are omitted on the wire."""
    model_config = ConfigDict(populate_by_name=True)

    status: Literal["ok", "error"] = "ok"
    drive_link: Optional[str] = Field(default=None, alias="driveLink")
    deleted: Optional[str] = None
    note: Optional[str] = None
    message: Optional[str] = None

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
