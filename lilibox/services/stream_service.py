# Copyright (c) 2025 Trae AI. All rights reserved.

import logging
import re
from typing import Dict, Iterator, NamedTuple, Optional
from urllib.parse import quote

import requests

from lilibox.core.errors import ProviderUnavailable, RangeNotSatisfiable, StreamingFailed, UpstreamError
from lilibox.core.ranges import parse_range
from lilibox.infrastructure.drive import DriveClient

logger = logging.getLogger(__name__)

MATROSKA_MIME = "video/x-matroska"
BROWSER_MIME = "video/mp4"
DEFAULT_MIME = "application/octet-stream"
IMMUTABLE_CACHE = "public, max-age=31536000"
CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


def resolve_content_type(mime_type: Optional[str], file_name: str) -> str:
    """
    Labels Matroska files as MP4 so browsers attempt playback. The bytes are untouched.
    """
    if mime_type == MATROSKA_MIME or file_name.lower().endswith(".mkv"):
        return BROWSER_MIME
    return mime_type or DEFAULT_MIME


def content_disposition(file_name: str) -> str:
    """
    Header values cannot carry CR, LF or other control characters, so the plain
    `filename=` form gets a sanitized ASCII copy and the exact name travels
    percent-encoded in `filename*`.
    """
    fallback = file_name.encode("ascii", "replace").decode("ascii").replace('"', "'")
    fallback = CONTROL_CHARS.sub(" ", fallback)
    value = f'inline; filename="{fallback}"'
    if fallback != file_name:
        value += f"; filename*=UTF-8''{quote(file_name, safe='')}"
    return value


class UpstreamBody:
    """
    Response body that pipes an upstream download chunk by chunk.

    Closing it (werkzeug does so when the client goes away) releases the
    upstream connection. An upstream failure mid-transfer just ends the body.
    """

    def __init__(self, upstream: requests.Response, chunk_size: int, file_id: str):
        self.upstream = upstream
        self.chunk_size = chunk_size
        self.file_id = file_id
        self.closed = False

    def __iter__(self) -> Iterator[bytes]:
        try:
            for chunk in self.upstream.iter_content(chunk_size=self.chunk_size):
                if chunk:
                    yield chunk
        except requests.exceptions.RequestException as e:
            logger.warning(f"Upstream stream for {self.file_id} ended early: {e}")
        finally:
            self.close()

    def close(self):
        if not self.closed:
            self.closed = True
            self.upstream.close()


class StreamResponse(NamedTuple):
    status: int
    headers: Dict[str, str]
    body: UpstreamBody


class StreamService:
    def __init__(self, config, drive_client: DriveClient):
        self.config = config
        self.drive_client = drive_client

    def open_stream(self, file_id: str, range_header: Optional[str] = None) -> StreamResponse:
        """
        Prepares a (possibly partial) proxy response for one Drive file.

        Metadata is fetched and the upstream download is opened before anything
        is returned, so every failure up to that point is raised rather than
        sent as a half-written response.
        """
        if not self.drive_client.is_ready:
            raise ProviderUnavailable("Google Drive not initialized")

        logger.info(f"Streaming video: {file_id}, Range: {range_header}")

        try:
            drive_file = self.drive_client.get_file_metadata(file_id)
        except (UpstreamError, ProviderUnavailable) as e:
            raise StreamingFailed("Failed to read file metadata", details=e.message) from e

        if drive_file.size is None:
            raise StreamingFailed(f"File size unavailable for {drive_file.name}")

        size = drive_file.size
        content_type = resolve_content_type(drive_file.mime_type, drive_file.name)
        logger.info(f"File: {drive_file.name}, Size: {size}, MIME: {drive_file.mime_type} -> {content_type}")

        byte_range = parse_range(range_header, size)

        headers = {
            "Content-Type": content_type,
            "Accept-Ranges": "bytes",
            "Cache-Control": IMMUTABLE_CACHE,
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Headers": "Range",
            "X-Content-Type-Options": "nosniff",
            "Content-Disposition": content_disposition(drive_file.name),
        }
        if byte_range:
            status = 206
            headers["Content-Range"] = byte_range.content_range(size)
            headers["Content-Length"] = str(byte_range.length)
            logger.info(f"Range request: {byte_range.start}-{byte_range.end} ({byte_range.length} bytes)")
        else:
            status = 200
            headers["Content-Length"] = str(size)
            logger.info(f"Full file request: {size} bytes")

        try:
            upstream = self.drive_client.open_content(file_id, byte_range)
        except RangeNotSatisfiable as e:
            raise RangeNotSatisfiable(e.message, size=size) from e
        except (UpstreamError, ProviderUnavailable) as e:
            raise StreamingFailed("Failed to open file content", details=e.message) from e

        if byte_range and upstream.status_code != 206:
            upstream.close()
            raise StreamingFailed(f"Google Drive answered {upstream.status_code} to a range request")

        return StreamResponse(status, headers, UpstreamBody(upstream, self.config.stream_chunk_size, file_id))
