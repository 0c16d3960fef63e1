"""Tests for the Cloudinary hosting backend with the SDK patched out."""

import cloudinary.api
import cloudinary.exceptions
import cloudinary.uploader
import pytest

from money_tracker.services.receipts import CloudinaryHosting, UploadError


@pytest.fixture
def hosting(monkeypatch):
    monkeypatch.setenv("CLOUDINARY_CLOUD_NAME", "demo")
    monkeypatch.setenv("CLOUDINARY_API_KEY", "key")
    monkeypatch.setenv("CLOUDINARY_API_SECRET", "secret")
    monkeypatch.setenv("CLOUDINARY_ROOT_FOLDER", "/tracker/")
    return CloudinaryHosting()


def test_anchor_is_configured_root_folder(hosting):
    """Slashes around the root folder are dropped."""
    assert hosting.anchor_folder() == "tracker"


def test_find_folder_lists_subfolders(hosting, monkeypatch):
    """A named subfolder resolves to its path."""
    seen = []

    def subfolders(parent):
        seen.append(parent)
        return {"folders": [
            {"name": "other", "path": "tracker/other"},
            {"name": "Money Tracker Receipt", "path": "tracker/Money Tracker Receipt"},
        ]}

    monkeypatch.setattr(cloudinary.api, "subfolders", subfolders)

    assert hosting.find_folder("tracker", "Money Tracker Receipt") == "tracker/Money Tracker Receipt"
    assert seen == ["tracker"]


def test_find_folder_at_top_level_uses_root_folders(hosting, monkeypatch):
    """An empty parent searches the top level."""
    monkeypatch.setattr(cloudinary.api, "root_folders", lambda: {"folders": [{"name": "202601"}]})
    assert hosting.find_folder("", "202601") == "202601"


def test_find_folder_not_found_is_none(hosting, monkeypatch):
    """A parent Cloudinary does not know yet has no subfolders."""
    def subfolders(parent):
        raise cloudinary.exceptions.NotFound("no such folder")

    monkeypatch.setattr(cloudinary.api, "subfolders", subfolders)

    assert hosting.find_folder("tracker/new", "202601") is None


def test_find_folder_error_is_upload_error(hosting, monkeypatch):
    """Other SDK errors surface as UploadError."""
    def subfolders(parent):
        raise cloudinary.exceptions.Error("rate limited")

    monkeypatch.setattr(cloudinary.api, "subfolders", subfolders)

    with pytest.raises(UploadError, match="rate limited"):
        hosting.find_folder("tracker", "202601")


def test_create_folder_joins_paths(hosting, monkeypatch):
    """Folder handles are slash-joined paths."""
    created = []
    monkeypatch.setattr(cloudinary.api, "create_folder", lambda path: created.append(path))

    assert hosting.create_folder("tracker/", "202601") == "tracker/202601"
    assert hosting.create_folder("", "Money Tracker Receipt") == "Money Tracker Receipt"
    assert created == ["tracker/202601", "Money Tracker Receipt"]


def test_upload_returns_secure_url(hosting, monkeypatch):
    """The public id is the filename stem and the URL is secure_url."""
    calls = []

    def upload(file, **options):
        calls.append((file.read(), options))
        return {"public_id": "tracker/202601/2026-01-21_1_x", "secure_url": "https://res/x.jpg"}

    monkeypatch.setattr(cloudinary.uploader, "upload", upload)

    stored = hosting.upload_file("tracker/202601", "2026-01-21_1_x.jpg", b"JPEG", "image/jpeg")

    assert stored.url == "https://res/x.jpg"
    assert stored.file_id == "tracker/202601/2026-01-21_1_x"
    [(content, options)] = calls
    assert content == b"JPEG"
    assert options["folder"] == "tracker/202601"
    assert options["public_id"] == "2026-01-21_1_x"
    assert options["type"] == "upload"


def test_upload_without_url_is_an_error(hosting, monkeypatch):
    """A response with no URL cannot be linked."""
    monkeypatch.setattr(cloudinary.uploader, "upload", lambda file, **options: {"public_id": "x"})
    with pytest.raises(UploadError):
        hosting.upload_file("f", "x.jpg", b"JPEG", "image/jpeg")
