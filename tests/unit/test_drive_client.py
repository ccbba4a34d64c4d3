# Copyright (c) 2025 Trae AI. All rights reserved.

import pytest
import requests
from unittest.mock import MagicMock
from google.auth.exceptions import RefreshError
from lilibox.core.errors import NotFound, ProviderUnavailable, RangeNotSatisfiable, UpstreamError
from lilibox.core.models import StreamRange
from lilibox.infrastructure.drive import DriveClient


def make_response(status_code=200, payload=None, text=""):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload or {}
    response.text = text
    return response


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def client(session):
    return DriveClient(session=session, timeout=5)


def test_client_without_credentials_is_not_ready():
    client = DriveClient()

    assert client.is_ready is False
    with pytest.raises(ProviderUnavailable):
        client.list_files("folder")
    with pytest.raises(ProviderUnavailable):
        client.get_file_metadata("abc")


def test_missing_token_file_gives_unready_client(tmp_path):
    client = DriveClient.from_token_file(tmp_path / "token.json")

    assert client.is_ready is False


def test_corrupt_token_file_gives_unready_client(tmp_path):
    token = tmp_path / "token.json"
    token.write_text("{}", encoding="utf-8")

    assert DriveClient.from_token_file(token).is_ready is False


def test_list_files_follows_pagination(client, session):
    session.request.side_effect = [
        make_response(payload={
            "files": [{"id": "a", "name": "Dark S01E01.mkv", "mimeType": "video/x-matroska", "size": "1000",
                       "modifiedTime": "2024-05-01T10:00:00.000Z", "webViewLink": "https://drive/a"}],
            "nextPageToken": "page2",
        }),
        make_response(payload={"files": [{"id": "b", "name": "photo.jpg", "mimeType": "image/jpeg"}]}),
    ]

    files = client.list_files("folder123")

    assert [f.id for f in files] == ["a", "b"]
    assert files[0].size == 1000
    assert files[0].web_view_link == "https://drive/a"
    assert files[1].size is None

    first_params = session.request.call_args_list[0].kwargs["params"]
    second_params = session.request.call_args_list[1].kwargs["params"]
    assert "'folder123' in parents" in first_params["q"]
    assert "mimeType contains 'video/' or mimeType contains 'image/'" in first_params["q"]
    assert first_params["orderBy"] == "name"
    assert "pageToken" not in first_params
    assert second_params["pageToken"] == "page2"


def test_malformed_listing_is_upstream_error(client, session):
    session.request.return_value = make_response(payload={"files": [{"id": "a"}]})

    with pytest.raises(UpstreamError):
        client.list_files("folder123")


def test_non_object_payload_is_upstream_error(client, session):
    response = make_response()
    response.json.return_value = ["not", "an", "object"]
    session.request.return_value = response

    with pytest.raises(UpstreamError):
        client.get_file_metadata("a")


def test_get_file_metadata(client, session):
    session.request.return_value = make_response(payload={"id": "a", "name": "x.mkv", "mimeType": "video/x-matroska", "size": "42"})

    drive_file = client.get_file_metadata("a")

    assert drive_file.size == 42
    assert drive_file.mime_type == "video/x-matroska"
    args, kwargs = session.request.call_args
    assert args == ("GET", "https://www.googleapis.com/drive/v3/files/a")
    assert kwargs["params"] == {"fields": "id, size, name, mimeType"}
    assert kwargs["timeout"] == 5


@pytest.mark.parametrize("status, error", [
    (401, ProviderUnavailable),
    (404, NotFound),
    (416, RangeNotSatisfiable),
    (500, UpstreamError),
    (403, UpstreamError),
])
def test_error_statuses(client, session, status, error):
    response = make_response(status_code=status, text="error body")
    session.request.return_value = response

    with pytest.raises(error):
        client.get_file_metadata("a")
    response.close.assert_called_once()


def test_refresh_error_is_provider_unavailable(client, session):
    session.request.side_effect = RefreshError("invalid_grant")

    with pytest.raises(ProviderUnavailable):
        client.get_file_metadata("a")


def test_connection_error_is_provider_unavailable(client, session):
    session.request.side_effect = requests.exceptions.ConnectionError("down")

    with pytest.raises(ProviderUnavailable):
        client.list_files("folder123")


def test_open_content_requests_range(client, session):
    upstream = make_response(status_code=206)
    session.request.return_value = upstream

    result = client.open_content("file/1", StreamRange(start=100, end=199))

    assert result is upstream
    args, kwargs = session.request.call_args
    assert args[1] == "https://www.googleapis.com/drive/v3/files/file%2F1"
    assert kwargs["params"] == {"alt": "media"}
    assert kwargs["headers"] == {"Range": "bytes=100-199"}
    assert kwargs["stream"] is True


def test_open_content_without_range(client, session):
    session.request.return_value = make_response()

    client.open_content("a")

    assert session.request.call_args.kwargs["headers"] is None
