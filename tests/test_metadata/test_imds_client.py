"""Tests for eip_binding.metadata.client — IMDSClient against a local fake IMDS.

A stdlib ``HTTPServer`` on an ephemeral port plays the metadata service:
``PUT /latest/api/token`` issues a token and ``GET /latest/meta-data/*``
serves values only when the token header matches.
"""
from __future__ import annotations

import threading
from collections.abc import Iterator
from email.message import Message
from http.server import BaseHTTPRequestHandler, HTTPServer

import pytest
import requests

from eip_binding.errors import MetadataError
from eip_binding.metadata.client import (
    DEFAULT_ENDPOINT,
    TOKEN_HEADER,
    TOKEN_TTL_HEADER,
    IMDSClient,
)

_TOKEN = "test-token-abc"
_VALUES = {
    "/latest/meta-data/public-ipv4": "54.162.153.80",
    "/latest/meta-data/instance-id": "i-abc123",
}


class FakeIMDSHandler(BaseHTTPRequestHandler):
    """Minimal IMDSv2: token endpoint plus token-gated metadata reads."""

    token_status = 200
    get_status = 200
    requests_seen: list[tuple[str, str, Message]] = []

    def log_message(self, format: str, *args: object) -> None:
        pass

    def do_PUT(self) -> None:
        self.requests_seen.append(("PUT", self.path, self.headers))
        if self.path != "/latest/api/token":
            self._send(404, b"")
        elif self.token_status != 200:
            self._send(self.token_status, b"")
        else:
            self._send(200, _TOKEN.encode())

    def do_GET(self) -> None:
        self.requests_seen.append(("GET", self.path, self.headers))
        if self.headers.get(TOKEN_HEADER) != _TOKEN:
            self._send(401, b"")
        elif self.get_status != 200:
            self._send(self.get_status, b"")
        elif self.path in _VALUES:
            self._send(200, _VALUES[self.path].encode())
        else:
            self._send(404, b"")

    def _send(self, status: int, body: bytes) -> None:
        self.send_response(status)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def imds_url() -> Iterator[str]:
    FakeIMDSHandler.token_status = 200
    FakeIMDSHandler.get_status = 200
    FakeIMDSHandler.requests_seen = []
    server = HTTPServer(("127.0.0.1", 0), FakeIMDSHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{server.server_address[1]}"
    finally:
        server.shutdown()
        server.server_close()


@pytest.fixture()
def session() -> Iterator[requests.Session]:
    with requests.Session() as session:
        # Keep proxy settings from the environment away from loopback requests.
        session.trust_env = False
        yield session


@pytest.fixture()
def client(imds_url: str, session: requests.Session) -> IMDSClient:
    return IMDSClient(session=session, endpoint=imds_url, timeout=5.0)


# ===========================================================================
# get_token
# ===========================================================================


class TestGetToken:
    def test_returns_token_body(self, client: IMDSClient) -> None:
        assert client.get_token() == _TOKEN

    def test_uses_put_with_ttl_header(self, client: IMDSClient) -> None:
        client.get_token()
        method, path, headers = FakeIMDSHandler.requests_seen[0]
        assert method == "PUT"
        assert path == "/latest/api/token"
        assert headers[TOKEN_TTL_HEADER] == "300"

    def test_custom_ttl(self, imds_url: str, session: requests.Session) -> None:
        IMDSClient(session=session, endpoint=imds_url, token_ttl=60).get_token()
        assert FakeIMDSHandler.requests_seen[0][2][TOKEN_TTL_HEADER] == "60"

    def test_server_error_raises(self, client: IMDSClient) -> None:
        FakeIMDSHandler.token_status = 500
        with pytest.raises(MetadataError) as info:
            client.get_token()
        assert info.value.status == 500
        assert info.value.path is None

    @pytest.mark.parametrize("status", [204, 304])
    def test_non_200_success_status_raises(self, client: IMDSClient, status: int) -> None:
        FakeIMDSHandler.token_status = status
        with pytest.raises(MetadataError) as info:
            client.get_token()
        assert info.value.status == status

    def test_connection_refused_raises(self, session: requests.Session) -> None:
        # Port 9 (discard) is closed on test hosts.
        client = IMDSClient(session=session, endpoint="http://127.0.0.1:9", timeout=1.0)
        with pytest.raises(MetadataError, match="failed to get metadata token"):
            client.get_token()


# ===========================================================================
# get_metadata
# ===========================================================================


class TestGetMetadata:
    @pytest.mark.parametrize(
        "path, expected",
        [("meta-data/public-ipv4", "54.162.153.80"), ("meta-data/instance-id", "i-abc123")],
    )
    def test_returns_value(self, client: IMDSClient, path: str, expected: str) -> None:
        assert client.get_metadata(_TOKEN, path) == expected

    def test_sends_token_header_with_get(self, client: IMDSClient) -> None:
        client.get_metadata(_TOKEN, "meta-data/instance-id")
        method, path, headers = FakeIMDSHandler.requests_seen[0]
        assert method == "GET"
        assert path == "/latest/meta-data/instance-id"
        assert headers[TOKEN_HEADER] == _TOKEN

    def test_not_found_raises(self, client: IMDSClient) -> None:
        with pytest.raises(MetadataError) as info:
            client.get_metadata(_TOKEN, "meta-data/nonexistent")
        assert info.value.status == 404
        assert info.value.path == "meta-data/nonexistent"

    def test_bad_token_raises(self, client: IMDSClient) -> None:
        with pytest.raises(MetadataError) as info:
            client.get_metadata("wrong", "meta-data/instance-id")
        assert info.value.status == 401

    @pytest.mark.parametrize("status", [204, 304])
    def test_non_200_success_status_raises(self, client: IMDSClient, status: int) -> None:
        FakeIMDSHandler.get_status = status
        with pytest.raises(MetadataError) as info:
            client.get_metadata(_TOKEN, "meta-data/public-ipv4")
        assert info.value.status == status
        assert info.value.path == "meta-data/public-ipv4"


# ===========================================================================
# Construction
# ===========================================================================


class TestConstruction:
    def test_default_endpoint(self) -> None:
        assert IMDSClient().endpoint == DEFAULT_ENDPOINT

    def test_trailing_slash_is_stripped(self, imds_url: str, session: requests.Session) -> None:
        client = IMDSClient(session=session, endpoint=imds_url + "/")
        assert client.endpoint == imds_url
        assert client.get_token() == _TOKEN

    def test_full_token_then_fetch_flow(self, client: IMDSClient) -> None:
        token = client.get_token()
        assert client.get_metadata(token, "meta-data/public-ipv4") == "54.162.153.80"
        assert [r[0] for r in FakeIMDSHandler.requests_seen] == ["PUT", "GET"]
