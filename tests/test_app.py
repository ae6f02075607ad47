# Tests for the listing application routes.
# Created: 2026-10-17

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from b2browse.app import create_app, request_path
from b2browse.config import Settings
from b2browse.entries import FileEntry, FolderEntry
from b2browse.errors import ConfigurationError, UpstreamFailure

ENTRIES = [
    FolderEntry("docs/"),
    FolderEntry("docs/guides/"),
    FileEntry("docs/readme.txt", size_bytes=5000, uploaded_at=1614834367890),
]


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        b2_key_id="key",
        b2_application_key="secret",
        b2_bucket_id="bucket-1",
        content_base_url="https://files.example.com",
        cache_seconds=600,
    )


@pytest.fixture
def test_app(settings):
    return create_app(settings)


@pytest.fixture
def client(test_app):
    return TestClient(test_app)


@pytest.fixture
def mock_authorize(b2_session):
    with patch(
        "b2browse.app.authorize_account", new_callable=AsyncMock, return_value=b2_session
    ) as m:
        yield m


class TestBrowse:
    """Tests for GET /<prefix>/."""

    def test_listing_page(self, client, mock_authorize):
        with patch(
            "b2browse.app.fetch_listing", new_callable=AsyncMock, return_value=ENTRIES
        ) as mock_fetch:
            resp = client.get("/docs/")

        assert resp.status_code == 200
        assert resp.headers["content-type"] == "text/html; charset=utf-8"
        assert resp.headers["cache-control"] == "public, immutable, max-age=600"
        assert "expires" in resp.headers
        body = resp.text
        assert "readme.txt" in body
        assert "4.9 KiB" in body
        assert body.index("guides/") < body.index("readme.txt")
        assert mock_fetch.await_args.args[0] == "/docs/"

    def test_root_listing(self, client, mock_authorize):
        entries = [FileEntry("top.txt", size_bytes=1, uploaded_at=0)]
        with patch("b2browse.app.fetch_listing", new_callable=AsyncMock, return_value=entries):
            resp = client.get("/")
        assert resp.status_code == 200
        assert "Up a Level" not in resp.text

    def test_encoded_path_passed_through(self, client, mock_authorize):
        entries = [FileEntry("my docs/a.txt", size_bytes=1, uploaded_at=0)]
        with patch(
            "b2browse.app.fetch_listing", new_callable=AsyncMock, return_value=entries
        ) as mock_fetch:
            resp = client.get("/my%20docs/")
        assert resp.status_code == 200
        assert mock_fetch.await_args.args[0] == "/my%20docs/"
        assert "a.txt" in resp.text

    def test_empty_listing_is_404(self, client, mock_authorize):
        with patch(
            "b2browse.app.fetch_listing",
            new_callable=AsyncMock,
            return_value=[FolderEntry("gone/")],
        ):
            resp = client.get("/gone/")
        assert resp.status_code == 404
        assert "Not Found" in resp.text
        assert resp.headers["cache-control"] == "no-store"

    def test_path_without_trailing_slash_is_404(self, client, mock_authorize):
        with patch("b2browse.app.fetch_listing", new_callable=AsyncMock) as mock_fetch:
            resp = client.get("/docs/readme.txt")
        assert resp.status_code == 404
        mock_fetch.assert_not_awaited()

    def test_upstream_401_is_rewritten(self, client, mock_authorize):
        with patch(
            "b2browse.app.fetch_listing",
            new_callable=AsyncMock,
            side_effect=UpstreamFailure(401, "unauthorized", "nope"),
        ):
            resp = client.get("/docs/")
        assert resp.status_code == 403
        assert "<table" not in resp.text

    def test_upstream_500_is_bad_gateway(self, client, mock_authorize):
        with patch(
            "b2browse.app.fetch_listing",
            new_callable=AsyncMock,
            side_effect=UpstreamFailure(500, "internal_error", "boom"),
        ):
            resp = client.get("/docs/")
        assert resp.status_code == 502


    def test_head_listing(self, client, mock_authorize):
        with patch("b2browse.app.fetch_listing", new_callable=AsyncMock, return_value=ENTRIES):
            resp = client.head("/docs/")
        assert resp.status_code == 200
        assert resp.headers["cache-control"] == "public, immutable, max-age=600"


class TestRequestPath:
    def _request(self, raw_path, path):
        request = MagicMock()
        request.scope = {"raw_path": raw_path}
        request.url.path = path
        return request

    def test_percent_encoded_path_kept(self):
        assert request_path(self._request(b"/caf%C3%A9/", "/caf\u00e9/")) == "/caf%C3%A9/"

    def test_raw_utf8_bytes_decoded(self):
        request = self._request("/caf\u00e9/".encode(), "/caf\u00e9/")
        assert request_path(request) == "/caf\u00e9/"

    def test_query_string_dropped(self):
        assert request_path(self._request(b"/docs/?x=1", "/docs/")) == "/docs/"

    def test_undecodable_bytes_fall_back(self):
        assert request_path(self._request(b"/caf\xe9/", "/caf\u00e9/")) == "/caf\u00e9/"


class TestSessionCaching:
    def test_session_reused(self, client, test_app, mock_authorize):
        with patch("b2browse.app.fetch_listing", new_callable=AsyncMock, return_value=ENTRIES):
            client.get("/docs/")
            client.get("/docs/")
        assert mock_authorize.await_count == 1
        assert test_app.state.b2_session is not None

    def test_expired_token_drops_session(self, client, test_app, mock_authorize):
        with patch(
            "b2browse.app.fetch_listing",
            new_callable=AsyncMock,
            side_effect=UpstreamFailure(401, "expired_auth_token", "expired"),
        ) as mock_fetch:
            resp = client.get("/docs/")
        assert resp.status_code == 403
        assert test_app.state.b2_session is None
        # no retry within the request
        assert mock_fetch.await_count == 1

    def test_missing_credentials(self, client):
        with patch(
            "b2browse.app.authorize_account",
            new_callable=AsyncMock,
            side_effect=ConfigurationError("no creds"),
        ):
            resp = client.get("/docs/")
        assert resp.status_code == 500


class TestDirectoryHost:
    def test_other_host_is_404(self, settings, mock_authorize):
        settings.directory_host = "dir.example.com"
        client = TestClient(create_app(settings))
        with patch("b2browse.app.fetch_listing", new_callable=AsyncMock) as mock_fetch:
            resp = client.get("/docs/", headers={"host": "files.example.com"})
        assert resp.status_code == 404
        mock_fetch.assert_not_awaited()

    def test_matching_host(self, settings, mock_authorize):
        settings.directory_host = "dir.example.com"
        client = TestClient(create_app(settings), base_url="http://dir.example.com")
        with patch("b2browse.app.fetch_listing", new_callable=AsyncMock, return_value=ENTRIES):
            resp = client.get("/docs/")
        assert resp.status_code == 200


class TestHealth:
    def test_healthz(self, client):
        resp = client.get("/healthz")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}
