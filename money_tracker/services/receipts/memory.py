"""
In-memory receipt hosting for tests and local development.
"""

from typing import Optional

from money_tracker.services.receipts.interface import (
    FileHostingInterface,
    StoredFile,
    UploadError,
)


ANCHOR = "anchor"


class InMemoryHosting(FileHostingInterface):
    """A folder tree kept in dicts. URLs use a memory:// scheme."""

    def __init__(self):
        # folder handle -> (parent handle, name)
        self.folders: dict[str, tuple[str, str]] = {}
        # file id -> (folder handle, filename, content)
        self.files: dict[str, tuple[str, str, bytes]] = {}
        self.shared: set[str] = set()
        self.fail_uploads = False
        self._counter = 0

    @property
    def name(self) -> str:
        return "memory"

    def _next_id(self, prefix: str) -> str:
        self._counter += 1
        return f"{prefix}{self._counter}"

    def path_of(self, folder: str) -> str:
        """Slash-separated folder names from the anchor down."""
        parts = []
        while folder in self.folders:
            folder, name = self.folders[folder]
            parts.append(name)
        return "/".join(reversed(parts))

    def anchor_folder(self) -> str:
        return ANCHOR

    def find_folder(self, parent: str, name: str) -> Optional[str]:
        for handle, (folder_parent, folder_name) in self.folders.items():
            if folder_parent == parent and folder_name == name:
                return handle
        return None

    def create_folder(self, parent: str, name: str) -> str:
        handle = self._next_id("folder-")
        self.folders[handle] = (parent, name)
        return handle

    def upload_file(
        self,
        folder: str,
        filename: str,
        content: bytes,
        mime_type: str,
    ) -> StoredFile:
        if self.fail_uploads:
            raise UploadError("Simulated upload failure")
        file_id = self._next_id("file-")
        self.files[file_id] = (folder, filename, content)
        return StoredFile(
            file_id=file_id,
            url=f"memory://{self.path_of(folder)}/{filename}",
        )

    def share_with_link(self, file_id: str) -> None:
        self.shared.add(file_id)
