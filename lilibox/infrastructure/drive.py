# Copyright (c) 2025 Trae AI. All rights reserved.

import logging
from pathlib import Path
from typing import Iterable, List, Optional
from urllib.parse import quote

import requests
from google.auth.exceptions import RefreshError, TransportError
from google.auth.transport.requests import AuthorizedSession
from google.oauth2.credentials import Credentials
from pydantic import ValidationError

from ..core.errors import NotFound, ProviderUnavailable, RangeNotSatisfiable, UpstreamError
from ..core.models import DriveFile, StreamRange

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/drive.readonly"]
LIST_FIELDS = "nextPageToken, files(id, name, mimeType, thumbnailLink, webViewLink, size, modifiedTime)"
METADATA_FIELDS = "id, size, name, mimeType"


class DriveClient:
    """
    Thin client for the Google Drive v3 REST API.

    A client built without credentials is valid but not ready: every call
    raises ProviderUnavailable until the authorization flow has been run.
    """

    BASE_URL = "https://www.googleapis.com/drive/v3"

    def __init__(self, credentials: Optional[Credentials] = None, timeout: float = 30.0,
                 session: Optional[requests.Session] = None):
        self.credentials = credentials
        self.timeout = timeout
        if session is None and credentials is not None:
            session = AuthorizedSession(credentials)
        self._session = session

    @classmethod
    def from_token_file(cls, token_path: Path, timeout: float = 30.0) -> "DriveClient":
        token_path = Path(token_path)
        if not token_path.exists():
            logger.warning(f"No token found at {token_path}. Run the 'auth' command first.")
            return cls(timeout=timeout)

        try:
            credentials = Credentials.from_authorized_user_file(str(token_path), SCOPES)
        except (ValueError, OSError) as e:
            logger.error(f"Could not load Google Drive token from {token_path}: {e}")
            return cls(timeout=timeout)

        logger.info("Google Drive API initialized successfully")
        return cls(credentials, timeout=timeout)

    @property
    def is_ready(self) -> bool:
        return self._session is not None

    def _request(self, url: str, params: Optional[dict] = None, headers: Optional[dict] = None,
                 stream: bool = False) -> requests.Response:
        if not self.is_ready:
            raise ProviderUnavailable("Google Drive not initialized")

        try:
            response = self._session.request(
                "GET", url, params=params, headers=headers, timeout=self.timeout, stream=stream
            )
        except RefreshError as e:
            raise ProviderUnavailable("Google Drive credential is invalid or expired", details=str(e)) from e
        except (TransportError, requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
            raise ProviderUnavailable("Google Drive is unreachable", details=str(e)) from e
        except requests.exceptions.RequestException as e:
            raise UpstreamError("Google Drive request failed", details=str(e)) from e

        if response.status_code < 400:
            return response

        status = response.status_code
        body = response.text[:500]
        response.close()
        if status == 401:
            raise ProviderUnavailable("Google Drive rejected the credential", details=body)
        if status == 404:
            raise NotFound("File not found", details=body)
        if status == 416:
            raise RangeNotSatisfiable("Google Drive rejected the requested range")
        raise UpstreamError(f"Google Drive API error {status}", details=body)

    def _json(self, response: requests.Response) -> dict:
        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError("Google Drive returned an unreadable response", details=str(e)) from e
        if not isinstance(data, dict):
            raise UpstreamError("Google Drive returned an unexpected response", details=type(data).__name__)
        return data

    def list_files(self, folder_id: str, mime_prefixes: Iterable[str] = ("video/", "image/")) -> List[DriveFile]:
        """
        Lists every non-trashed file in `folder_id` whose MIME type contains one of
        `mime_prefixes`, ordered by name. Follows pagination until exhausted.
        """
        folder = folder_id.replace("'", "\\'")
        mime_clause = " or ".join(f"mimeType contains '{prefix}'" for prefix in mime_prefixes)
        params = {
            "q": f"'{folder}' in parents and ({mime_clause}) and trashed = false",
            "fields": LIST_FIELDS,
            "orderBy": "name",
            "pageSize": 1000,
        }

        files: List[DriveFile] = []
        while True:
            data = self._json(self._request(f"{self.BASE_URL}/files", params=dict(params)))
            try:
                files.extend(DriveFile.model_validate(item) for item in data.get("files", []))
            except ValidationError as e:
                raise UpstreamError("Google Drive returned a malformed file listing", details=str(e)) from e

            page_token = data.get("nextPageToken")
            if not page_token:
                break
            params["pageToken"] = page_token

        return files

    def get_file_metadata(self, file_id: str) -> DriveFile:
        url = f"{self.BASE_URL}/files/{quote(file_id, safe='')}"
        data = self._json(self._request(url, params={"fields": METADATA_FIELDS}))
        try:
            return DriveFile.model_validate(data)
        except ValidationError as e:
            raise UpstreamError("Google Drive returned malformed file metadata", details=str(e)) from e

    def open_content(self, file_id: str, byte_range: Optional[StreamRange] = None) -> requests.Response:
        """
        Opens a streaming download of the file body (or of `byte_range`).
        The caller owns the returned response and must close it.
        """
        url = f"{self.BASE_URL}/files/{quote(file_id, safe='')}"
        headers = {"Range": byte_range.header_value()} if byte_range else None
        return self._request(url, params={"alt": "media"}, headers=headers, stream=True)
