"""
Google Drive receipt hosting.

DESIGN DECISION: We call the Drive v3 REST API through google-auth's
AuthorizedSession with the same service-account credentials gspread
uses. Receipts then live next to the spreadsheet, where the user already
looks for their data, and no second SDK is needed.

The receipt tree hangs off the folder that contains the spreadsheet
(or "My Drive" root when the spreadsheet has no parent visible to the
service account).
"""

import json
from typing import Any, Optional
from uuid import uuid4

import requests
from google.auth.transport.requests import AuthorizedSession

from money_tracker.services.receipts.interface import (
    FileHostingInterface,
    StoredFile,
    UploadError,
)
from money_tracker.services.storage.google_sheets import GoogleSheetsClient


DRIVE_API = "https://www.googleapis.com/drive/v3/files"
DRIVE_UPLOAD_API = "https://www.googleapis.com/upload/drive/v3/files"
FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"

REQUEST_TIMEOUT = 30


def _quote(value: str) -> str:
    """Escape a literal for a Drive search query."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


class GoogleDriveHosting(FileHostingInterface):
    """Drive implementation of FileHostingInterface."""

    def __init__(
        self,
        sheets_client: Optional[GoogleSheetsClient] = None,
        session: Optional[requests.Session] = None,
    ):
        self._sheets_client = sheets_client or GoogleSheetsClient()
        self._session = session

    @property
    def name(self) -> str:
        return "google_drive"

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = AuthorizedSession(self._sheets_client.credentials)
        return self._session

    def _request(self, method: str, url: str, **kwargs: Any) -> dict:
        params = kwargs.pop("params", {})
        params.setdefault("supportsAllDrives", "true")
        try:
            response = self.session.request(
                method, url, params=params, timeout=REQUEST_TIMEOUT, **kwargs
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise UploadError(f"Drive {method} {url} failed: {e}")
        if not response.content:
            return {}
        return response.json()

    def anchor_folder(self) -> str:
        """Parent folder of the spreadsheet, falling back to My Drive root."""
        result = self._request(
            "GET",
            f"{DRIVE_API}/{self._sheets_client.spreadsheet_id}",
            params={"fields": "parents"},
        )
        parents = result.get("parents") or []
        return parents[0] if parents else "root"

    def find_folder(self, parent: str, name: str) -> Optional[str]:
        query = (
            f"'{_quote(parent)}' in parents"
            f" and name = '{_quote(name)}'"
            f" and mimeType = '{FOLDER_MIME_TYPE}'"
            " and trashed = false"
        )
        result = self._request(
            "GET",
            DRIVE_API,
            params={
                "q": query,
                "fields": "files(id, name)",
                "pageSize": 1,
                "includeItemsFromAllDrives": "true",
            },
        )
        files = result.get("files") or []
        return files[0]["id"] if files else None

    def create_folder(self, parent: str, name: str) -> str:
        result = self._request(
            "POST",
            DRIVE_API,
            params={"fields": "id"},
            json={"name": name, "mimeType": FOLDER_MIME_TYPE, "parents": [parent]},
        )
        return result["id"]

    def upload_file(
        self,
        folder: str,
        filename: str,
        content: bytes,
        mime_type: str,
    ) -> StoredFile:
        """Multipart upload: JSON metadata part followed by the media part."""
        boundary = f"money_tracker_{uuid4().hex}"
        metadata = json.dumps({"name": filename, "parents": [folder], "mimeType": mime_type})
        body = (
            f"--{boundary}\r\n"
            "Content-Type: application/json; charset=UTF-8\r\n\r\n"
            f"{metadata}\r\n"
            f"--{boundary}\r\n"
            f"Content-Type: {mime_type}\r\n\r\n"
        ).encode("utf-8") + content + f"\r\n--{boundary}--\r\n".encode("utf-8")

        result = self._request(
            "POST",
            DRIVE_UPLOAD_API,
            params={"uploadType": "multipart", "fields": "id, webViewLink"},
            data=body,
            headers={"Content-Type": f"multipart/related; boundary={boundary}"},
        )
        file_id = result["id"]
        url = result.get("webViewLink") or f"https://drive.google.com/file/d/{file_id}/view"
        return StoredFile(file_id=file_id, url=url)

    def share_with_link(self, file_id: str) -> None:
        self._request(
            "POST",
            f"{DRIVE_API}/{file_id}/permissions",
            json={"type": "anyone", "role": "reader"},
        )
