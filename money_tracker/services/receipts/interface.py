"""
Abstract File Hosting Interface

The Receipt Archiver only needs a folder tree it can search, extend and
upload into, plus a way to make a file viewable by link. Google Drive,
Cloudinary and the in-memory fake all fit behind this.

Folder handles are opaque strings: a Drive folder id, a Cloudinary
folder path, or a key in the in-memory tree.
"""

from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel


class StoredFile(BaseModel):
    """A file written to the hosting backend."""
    file_id: str
    url: str


class FileHostingInterface(ABC):
    """Abstract interface for receipt file hosting."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Short backend name for logs and health checks."""
        pass

    @abstractmethod
    def anchor_folder(self) -> str:
        """
        Folder the receipt tree hangs from.

        For Drive this is the folder containing the spreadsheet.
        """
        pass

    @abstractmethod
    def find_folder(self, parent: str, name: str) -> Optional[str]:
        """Return the first child folder of `parent` called `name`, or None."""
        pass

    @abstractmethod
    def create_folder(self, parent: str, name: str) -> str:
        """Create a child folder and return its handle."""
        pass

    @abstractmethod
    def upload_file(
        self,
        folder: str,
        filename: str,
        content: bytes,
        mime_type: str,
    ) -> StoredFile:
        """Write `content` as `filename` inside `folder`."""
        pass

    @abstractmethod
    def share_with_link(self, file_id: str) -> None:
        """Allow anyone with the link to view the file."""
        pass


class UploadError(Exception):
    """Base exception for receipt archiving."""
    pass


class ReceiptDecodeError(UploadError):
    """The receipt payload is not valid base64."""
    pass


class FolderResolutionError(UploadError):
    """Could not find or create a receipt folder."""
    pass
