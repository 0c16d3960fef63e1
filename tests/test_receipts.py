"""Tests for the Receipt Archiver and its helpers."""

import base64

import pytest
from datetime import datetime
from zoneinfo import ZoneInfo

from money_tracker.models.entry import RECEIPT_FOLDER
from money_tracker.services.receipts import (
    InMemoryHosting,
    ReceiptArchiver,
    ReceiptDecodeError,
    UploadError,
    build_receipt_filename,
    decode_image,
    receipt_year_month,
    slugify_description,
    strip_data_uri,
)


JPEG_BYTES = b"\xff\xd8\xff\xe0fake-jpeg-body"
JPEG_DATA_URI = "data:image/jpeg;base64," + base64.b64encode(JPEG_BYTES).decode()


class TestFilenames:
    """Tests for receipt filenames and slugs."""

    def test_example_filename(self):
        """Test the documented filename example."""
        assert (
            build_receipt_filename("2026-01-21", "42", "Lunch Ramen!!", "202601")
            == "2026-01-21_42_lunch-ramen.jpg"
        )

    def test_missing_date_uses_year_month(self):
        """Without a date the prefix is the year-month."""
        assert build_receipt_filename("", "42", "taxi", "202603") == "202603_42_taxi.jpg"

    def test_slug_defaults_to_receipt(self):
        """Empty slugs fall back to receipt."""
        assert slugify_description(None) == "receipt"
        assert slugify_description("!!!") == "receipt"

    def test_slug_keeps_japanese(self):
        """Kana and kanji survive slugging."""
        assert slugify_description("ラーメン 一蘭") == "ラーメン-一蘭"

    def test_slug_is_truncated_to_40_chars(self):
        """Slugs are cut to 40 characters."""
        slug = slugify_description("a" * 60)
        assert slug == "a" * 40

    def test_slug_collapses_runs(self):
        """Runs of separators become one hyphen."""
        assert slugify_description("  Coffee & Cake -- 2 ") == "coffee-cake-2"


class TestYearMonth:
    """Tests for the year-month partition."""

    def test_from_entry_date(self):
        """The month comes from the entry date."""
        assert receipt_year_month("2026-01-21") == "202601"

    def test_malformed_date_uses_now(self):
        """A malformed date uses the current Tokyo month."""
        now = datetime(2026, 3, 31, 20, 0, tzinfo=ZoneInfo("UTC"))
        # 20:00 UTC on March 31st is April 1st in Tokyo
        assert receipt_year_month("21/01/2026", now=now) == "202604"

    def test_missing_date_uses_now(self):
        """A missing date uses the current month."""
        now = datetime(2026, 7, 1, 9, 0, tzinfo=ZoneInfo("Asia/Tokyo"))
        assert receipt_year_month(None, now=now) == "202607"


class TestDecoding:
    """Tests for base64 decoding."""

    def test_strip_data_uri(self):
        """Test data URI prefix removal."""
        assert strip_data_uri("data:image/png;base64,AAAA") == "AAAA"
        assert strip_data_uri("AAAA") == "AAAA"

    def test_decode_data_uri(self):
        """Test decoding with a data URI prefix."""
        assert decode_image(JPEG_DATA_URI) == JPEG_BYTES

    def test_decode_plain_base64(self):
        """Test decoding bare base64."""
        assert decode_image(base64.b64encode(JPEG_BYTES).decode()) == JPEG_BYTES

    @pytest.mark.parametrize("payload", ["", "data:image/jpeg;base64,", "@@@not base64@@@"])
    def test_decode_rejects_bad_payloads(self, payload):
        """Empty or malformed payloads are rejected."""
        with pytest.raises(ReceiptDecodeError):
            decode_image(payload)

    def test_decode_error_is_upload_error(self):
        """Decode failures are upload failures."""
        assert issubclass(ReceiptDecodeError, UploadError)


class TestReceiptArchiver:
    """Tests for the archive flow against in-memory hosting."""

    @pytest.mark.asyncio
    async def test_store_writes_into_month_folder(self):
        """The file lands in the month folder and is shared."""
        hosting = InMemoryHosting()
        archiver = ReceiptArchiver(hosting)

        url = await archiver.store(JPEG_DATA_URI, "42", "2026-01-21", "Lunch Ramen!!")

        assert url == f"memory://{RECEIPT_FOLDER}/202601/2026-01-21_42_lunch-ramen.jpg"
        [(file_id, (folder, filename, content))] = hosting.files.items()
        assert hosting.path_of(folder) == f"{RECEIPT_FOLDER}/202601"
        assert content == JPEG_BYTES
        assert file_id in hosting.shared

    @pytest.mark.asyncio
    async def test_folders_are_reused(self):
        """Existing folders are found, not recreated."""
        hosting = InMemoryHosting()
        archiver = ReceiptArchiver(hosting)

        await archiver.store(JPEG_DATA_URI, "1", "2026-01-21", "a")
        await archiver.store(JPEG_DATA_URI, "2", "2026-01-30", "b")
        await archiver.store(JPEG_DATA_URI, "3", "2026-02-01", "c")

        paths = sorted(hosting.path_of(h) for h in hosting.folders)
        assert paths == [
            RECEIPT_FOLDER,
            f"{RECEIPT_FOLDER}/202601",
            f"{RECEIPT_FOLDER}/202602",
        ]

    @pytest.mark.asyncio
    async def test_decode_failure_raises_before_touching_hosting(self):
        """Nothing is created for an undecodable image."""
        hosting = InMemoryHosting()
        with pytest.raises(UploadError):
            await ReceiptArchiver(hosting).store("%%%", "1", "2026-01-21", "x")
        assert hosting.folders == {}

    @pytest.mark.asyncio
    async def test_hosting_failure_raises_upload_error(self):
        """Hosting failures surface as UploadError."""
        hosting = InMemoryHosting()
        hosting.fail_uploads = True
        with pytest.raises(UploadError):
            await ReceiptArchiver(hosting).store(JPEG_DATA_URI, "1", "2026-01-21", "x")

    @pytest.mark.asyncio
    async def test_unexpected_hosting_error_is_wrapped(self):
        """Unexpected exceptions are wrapped as UploadError."""
        class BrokenHosting(InMemoryHosting):
            def anchor_folder(self):
                raise RuntimeError("network down")

        with pytest.raises(UploadError, match="network down"):
            await ReceiptArchiver(BrokenHosting()).store(JPEG_DATA_URI, "1", "2026-01-21", "x")
