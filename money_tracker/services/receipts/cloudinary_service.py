"""
Cloudinary receipt hosting.

An alternative to Drive for users who would rather not give the service
account Drive access. Cloudinary folders are paths, so folder handles
here are "a/b/c" strings and the anchor is the configured root folder
("" for the top level).

Assets uploaded with type="upload" are public by URL, which already
matches "anyone with the link may view".
"""

from io import BytesIO
from pathlib import PurePosixPath
from typing import Optional

import cloudinary
import cloudinary.api
import cloudinary.exceptions
import cloudinary.uploader

from money_tracker.config import get_settings
from money_tracker.services.receipts.interface import (
    FileHostingInterface,
    StoredFile,
    UploadError,
)


def _join(parent: str, name: str) -> str:
    return f"{parent.strip('/')}/{name}" if parent.strip("/") else name


class CloudinaryHosting(FileHostingInterface):
    """Cloudinary implementation of FileHostingInterface."""

    def __init__(self):
        self._settings = get_settings().cloudinary
        self._configured = False

    @property
    def name(self) -> str:
        return "cloudinary"

    def _configure(self):
        """Configure Cloudinary SDK."""
        if not self._configured:
            cloudinary.config(
                cloud_name=self._settings.cloud_name,
                api_key=self._settings.api_key,
                api_secret=self._settings.api_secret,
                secure=True,
            )
            self._configured = True

    def anchor_folder(self) -> str:
        return self._settings.root_folder.strip("/")

    def find_folder(self, parent: str, name: str) -> Optional[str]:
        self._configure()
        try:
            if parent:
                result = cloudinary.api.subfolders(parent)
            else:
                result = cloudinary.api.root_folders()
        except cloudinary.exceptions.NotFound:
            return None
        except cloudinary.exceptions.Error as e:
            raise UploadError(f"Cloudinary folder lookup failed: {e}")

        for folder in result.get("folders", []):
            if folder.get("name") == name:
                return folder.get("path") or _join(parent, name)
        return None

    def create_folder(self, parent: str, name: str) -> str:
        self._configure()
        path = _join(parent, name)
        try:
            cloudinary.api.create_folder(path)
        except cloudinary.exceptions.Error as e:
            raise UploadError(f"Cloudinary folder creation failed: {e}")
        return path

    def upload_file(
        self,
        folder: str,
        filename: str,
        content: bytes,
        mime_type: str,
    ) -> StoredFile:
        self._configure()
        try:
            result = cloudinary.uploader.upload(
                BytesIO(content),
                folder=folder,
                asset_folder=folder,
                public_id=PurePosixPath(filename).stem,
                resource_type="image",
                type="upload",
                overwrite=False,
            )
        except cloudinary.exceptions.Error as e:
            raise UploadError(f"Cloudinary error: {e}")

        url = result.get("secure_url", result.get("url", ""))
        if not url:
            raise UploadError("No URL returned from Cloudinary")
        return StoredFile(file_id=result.get("public_id", filename), url=url)

    def share_with_link(self, file_id: str) -> None:
        """Public uploads are already viewable by anyone holding the URL."""
        return None
