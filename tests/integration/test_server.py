"""
Integration tests: a real server on a free port, driven with http.client.
"""

import http.client
import os
import socket

import pytest

from conftest import DATA_BIN, INDEX_HTML


# 2026-01-01 12:00:00 UTC
MTIME = 1767268800
MTIME_HTTP = "Thu, 01 Jan 2026 12:00:00 GMT"


@pytest.fixture
def client(test_server):
    conn = http.client.HTTPConnection("127.0.0.1", test_server.port, timeout=5)
    yield conn
    conn.close()


def get(client, path, headers=None, method="GET", body=None):
    client.request(method, path, body=body, headers=headers or {})
    response = client.getresponse()
    return response, response.read()


def raw_exchange(port, data: bytes) -> bytes:
    """Send raw bytes and read until the server closes the connection."""
    with socket.create_connection(("127.0.0.1", port), timeout=5) as sock:
        sock.sendall(data)
        received = b""
        while True:
            chunk = sock.recv(4096)
            if not chunk:
                break
            received += chunk
    return received


class TestFiles:

    def test_get_file(self, client):
        response, body = get(client, "/data.bin")

        assert response.status == 200
        assert response.getheader("Content-Length") == "100"
        assert response.getheader("Content-Type") == "application/octet-stream"
        assert response.getheader("Accept-Ranges") == "bytes"
        assert response.getheader("Last-Modified") is not None
        assert body == DATA_BIN

    def test_encoded_path(self, client):
        response, body = get(client, "/My%20Files/a%20b.txt")

        assert response.status == 200
        assert body == b"spaced\n"

    def test_large_file_is_streamed_whole(self, client, doc_root):
        payload = os.urandom(200 * 1024)
        (doc_root / "big.bin").write_bytes(payload)

        response, body = get(client, "/big.bin")

        assert response.status == 200
        assert body == payload

    def test_response_headers_not_duplicated(self, client):
        response, _ = get(client, "/docs/guide.txt")

        assert len(response.msg.get_all("Date")) == 1
        assert len(response.msg.get_all("Server")) == 1


class TestIndexFallback:

    def test_missing_path_serves_index(self, client):
        response, body = get(client, "/does/not/exist")

        assert response.status == 200
        assert response.getheader("Content-Type") == "text/html; charset=utf-8"
        assert body == INDEX_HTML

    def test_root(self, client):
        response, body = get(client, "/")

        assert response.status == 200
        assert body == INDEX_HTML

    def test_directory_with_slash(self, client):
        _, body = get(client, "/docs/")

        assert body == INDEX_HTML


class TestRedirects:

    def test_directory_without_slash(self, client):
        response, _ = get(client, "/docs")

        assert response.status == 301
        assert response.getheader("Location") == "/docs/"

    def test_normalization_keeps_query(self, client):
        response, _ = get(client, "/a//b?x=1")

        assert response.status == 301
        assert response.getheader("Location") == "/a/b?x=1"

    def test_traversal(self, client):
        response, _ = get(client, "/../../etc/passwd")

        assert response.status == 301
        assert response.getheader("Location") == "/etc/passwd"

    def test_following_traversal_redirect_serves_index(self, client):
        get(client, "/../../etc/passwd")
        response, body = get(client, "/etc/passwd")

        assert response.status == 200
        assert body == INDEX_HTML


class TestRanges:

    def test_partial_content(self, client):
        response, body = get(client, "/data.bin", headers={"Range": "bytes=10-19"})

        assert response.status == 206
        assert response.getheader("Content-Range") == "bytes 10-19/100"
        assert response.getheader("Content-Length") == "10"
        assert body == DATA_BIN[10:20]

    def test_suffix_range(self, client):
        response, body = get(client, "/data.bin", headers={"Range": "bytes=-5"})

        assert response.status == 206
        assert body == DATA_BIN[95:]

    def test_unsatisfiable(self, client):
        response, body = get(client, "/data.bin", headers={"Range": "bytes=500-600"})

        assert response.status == 416
        assert response.getheader("Content-Range") == "bytes */100"
        assert body == b""

    def test_multi_range_gets_whole_file(self, client):
        response, body = get(client, "/data.bin", headers={"Range": "bytes=0-1,5-6"})

        assert response.status == 200
        assert body == DATA_BIN


class TestConditional:

    @pytest.fixture(autouse=True)
    def _fixed_mtime(self, doc_root, set_mtime):
        set_mtime(doc_root / "data.bin", MTIME)

    def test_not_modified(self, client):
        response, body = get(client, "/data.bin", headers={"If-Modified-Since": MTIME_HTTP})

        assert response.status == 304
        assert response.getheader("Last-Modified") == MTIME_HTTP
        assert body == b""

    def test_modified(self, client):
        response, body = get(
            client, "/data.bin",
            headers={"If-Modified-Since": "Wed, 31 Dec 2025 12:00:00 GMT"},
        )

        assert response.status == 200
        assert body == DATA_BIN

    def test_if_none_match_forces_full_response(self, client):
        response, _ = get(client, "/data.bin", headers={
            "If-Modified-Since": MTIME_HTTP,
            "If-None-Match": '"x"',
        })

        assert response.status == 200


class TestMethodsAndErrors:

    def test_post_is_405(self, client):
        response, body = get(client, "/data.bin", method="POST", body=b"x=1")

        assert response.status == 405
        assert response.getheader("Allow") == "GET"
        assert body == b"Method not allowed"

    def test_unknown_method(self, test_server):
        reply = raw_exchange(test_server.port, b"BREW /pot HTTP/1.1\r\nHost: x\r\n\r\n")

        assert reply.startswith(b"HTTP/1.1 405 ")

    def test_hyphenated_method_is_405(self, test_server):
        reply = raw_exchange(test_server.port, b"M-SEARCH * HTTP/1.1\r\nHost: x\r\n\r\n")

        assert reply.startswith(b"HTTP/1.1 405 ")

    def test_malformed_request_line(self, test_server):
        reply = raw_exchange(test_server.port, b"GARBAGE\r\n\r\n")

        assert reply.startswith(b"HTTP/1.1 400 ")
        assert b"Connection: close" in reply

    def test_unsupported_version(self, test_server):
        reply = raw_exchange(test_server.port, b"GET / HTTP/3.0\r\n\r\n")

        assert reply.startswith(b"HTTP/1.1 505 ")


class TestConnections:

    def test_keep_alive_reuses_socket(self, client):
        first, body1 = get(client, "/data.bin", headers={"Range": "bytes=0-9"})
        sock = client.sock

        second, body2 = get(client, "/docs/guide.txt")

        assert first.getheader("Connection") == "keep-alive"
        assert client.sock is sock
        assert body1 == DATA_BIN[:10]
        assert body2 == b"guide\n"

    def test_connection_close(self, client):
        response, _ = get(client, "/data.bin", headers={"Connection": "close"})

        assert response.getheader("Connection") == "close"

    def test_http_10_closes(self, test_server):
        reply = raw_exchange(test_server.port, b"GET /docs/guide.txt HTTP/1.0\r\n\r\n")

        assert reply.startswith(b"HTTP/1.1 200 OK\r\n")
        assert b"Connection: close\r\n" in reply
        assert reply.endswith(b"\r\n\r\nguide\n")

    def test_pipelined_requests(self, test_server):
        reply = raw_exchange(
            test_server.port,
            b"GET /docs/guide.txt HTTP/1.1\r\nHost: x\r\n\r\n"
            b"GET /data.bin HTTP/1.1\r\nHost: x\r\nRange: bytes=0-2\r\nConnection: close\r\n\r\n",
        )

        assert reply.count(b"HTTP/1.1 ") == 2
        assert b"HTTP/1.1 206 Partial Content" in reply
        assert reply.endswith(b"\x00\x01\x02")
