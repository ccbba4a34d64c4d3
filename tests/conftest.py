# Copyright (c) 2025 Trae AI. All rights reserved.

import pytest
import requests
from lilibox.core.config import Config
from lilibox.core.errors import NotFound, ProviderUnavailable
from lilibox.core.models import DriveFile, MediaEntry
from lilibox.core.parser import parse_file_name


class FakeUpstream:
    """
    Stands in for a streamed requests.Response.
    """

    def __init__(self, data: bytes, status_code: int = 200, fail_after_chunks: int = None):
        self.data = data
        self.status_code = status_code
        self.fail_after_chunks = fail_after_chunks
        self.closed = False

    def iter_content(self, chunk_size=1):
        for index, offset in enumerate(range(0, len(self.data), chunk_size)):
            if self.fail_after_chunks is not None and index >= self.fail_after_chunks:
                raise requests.exceptions.ChunkedEncodingError("connection reset")
            yield self.data[offset:offset + chunk_size]

    def close(self):
        self.closed = True


class FakeDrive:
    """
    In-memory Google Drive with the same surface as DriveClient.
    """

    def __init__(self, files=None, contents=None, ready=True):
        self.files = files or []
        self.contents = contents or {}
        self.is_ready = ready
        self.opened = []
        self.upstreams = []
        self.fail_after_chunks = None

    def list_files(self, folder_id, mime_prefixes=("video/", "image/")):
        if not self.is_ready:
            raise ProviderUnavailable("Google Drive not initialized")
        return list(self.files)

    def get_file_metadata(self, file_id):
        if not self.is_ready:
            raise ProviderUnavailable("Google Drive not initialized")
        for f in self.files:
            if f.id == file_id:
                return f
        raise NotFound("File not found")

    def open_content(self, file_id, byte_range=None):
        data = self.contents[file_id]
        status = 200
        if byte_range:
            data = data[byte_range.start:byte_range.end + 1]
            status = 206
        upstream = FakeUpstream(data, status, fail_after_chunks=self.fail_after_chunks)
        self.opened.append((file_id, byte_range))
        self.upstreams.append(upstream)
        return upstream


@pytest.fixture
def make_entry():
    def _make(name: str, file_id: str = None, mime_type: str = "video/mp4") -> MediaEntry:
        return MediaEntry(
            id=file_id or name,
            name=name,
            mime_type=mime_type,
            size=1000,
            parsed_name=parse_file_name(name),
        )
    return _make


@pytest.fixture
def movie_bytes():
    return bytes(i % 256 for i in range(1000))


@pytest.fixture
def fake_drive(movie_bytes):
    files = [
        DriveFile(id="mkv1", name="The Summer I Turned Pretty S02E01.mkv", mime_type="video/x-matroska", size="1000"),
        DriveFile(id="mp41", name="The Summer I Turned Pretty S01E02.mp4", mime_type="video/mp4", size=1000),
        DriveFile(id="img1", name="family_photo.jpg", mime_type="image/jpeg", size=1000),
    ]
    contents = {f.id: movie_bytes for f in files}
    return FakeDrive(files=files, contents=contents)


@pytest.fixture
def config():
    return Config(media_folder_id="folder123", stream_chunk_size=64)


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    for env_name in ("MEDIA_FOLDER_ID", "TMDB_API_KEY", "PORT"):
        monkeypatch.delenv(env_name, raising=False)
    path = tmp_path / "config.yaml"
    path.write_text(
        "media_folder_id: folder123\n"
        f"token_path: {tmp_path / 'token.json'}\n"
        "stream_chunk_size: 64\n",
        encoding="utf-8",
    )
    return path
