"""
Unit tests for file and index responses.
"""

import pytest

from staticserver.files.metadata import probe
from staticserver.files.responder import IndexResponder
from staticserver.http.response import format_http_date
from staticserver.http.status_codes import HTTPStatus

from conftest import DATA_BIN, INDEX_HTML


# 2026-01-01 12:00:00 UTC
MTIME = 1767268800
MTIME_HTTP = "Thu, 01 Jan 2026 12:00:00 GMT"


@pytest.fixture
def respond(file_responder, make_request, doc_root):
    """respond("data.bin", headers={...}) → HTTPResponse"""
    def _respond(name, method="GET", headers=None):
        fs_path = doc_root / name
        request = make_request(path="/" + name, method=method, headers=headers)
        return file_responder.respond(request, fs_path, probe(fs_path))
    return _respond


class TestWholeFile:
    """Plain GET of a regular file."""

    def test_status_and_body(self, respond):
        response = respond("data.bin")

        assert response.status == HTTPStatus.OK
        assert response.read() == DATA_BIN

    def test_headers(self, respond, doc_root, set_mtime):
        set_mtime(doc_root / "data.bin", MTIME, atime=MTIME + 3600)

        response = respond("data.bin")

        assert response.headers["Content-Length"] == "100"
        assert response.headers["Content-Type"] == "application/octet-stream"
        assert response.headers["Accept-Ranges"] == "bytes"
        assert response.headers["Server"] == "staticserver"
        assert response.headers["Last-Modified"] == MTIME_HTTP
        assert response.headers["Date"] == "Thu, 01 Jan 2026 13:00:00 GMT"
        response.close()

    def test_body_is_streamed_in_chunks(self, respond):
        response = respond("data.bin")

        assert response.is_streamed
        chunks = list(response.stream)
        assert all(len(chunk) <= 16 for chunk in chunks)
        assert b"".join(chunks) == DATA_BIN

    def test_text_type_has_charset(self, respond):
        response = respond("docs/guide.txt")

        assert response.headers["Content-Type"] == "text/plain; charset=utf-8"
        assert response.read() == b"guide\n"

    def test_unknown_extension_has_no_content_type(self, respond):
        response = respond("notes.unknownext")

        assert "Content-Type" not in response.headers
        assert response.read() == b"plain notes"

    def test_serialized_response(self, respond):
        raw = respond("docs/guide.txt").to_bytes()

        head, _, body = raw.partition(b"\r\n\r\n")
        assert head.startswith(b"HTTP/1.1 200 OK\r\n")
        assert head.lower().count(b"\r\ndate:") == 1
        assert head.lower().count(b"\r\nserver:") == 1
        assert body == b"guide\n"


class TestMethodAndDirectory:

    @pytest.mark.parametrize("method", ["POST", "PUT", "DELETE", "HEAD"])
    def test_non_get_is_405(self, respond, method):
        response = respond("data.bin", method=method)

        assert response.status == HTTPStatus.METHOD_NOT_ALLOWED
        assert response.headers["Allow"] == "GET"
        assert response.body == b"Method not allowed"

    def test_directory_serves_index(self, respond):
        response = respond("docs")

        assert response.status == HTTPStatus.OK
        assert response.headers["Content-Type"] == "text/html; charset=utf-8"
        assert response.read() == INDEX_HTML


class TestConditional:
    """If-Modified-Since handling."""

    @pytest.fixture(autouse=True)
    def _fixed_mtime(self, doc_root, set_mtime):
        set_mtime(doc_root / "data.bin", MTIME)

    def test_not_modified(self, respond):
        response = respond("data.bin", headers={"If-Modified-Since": MTIME_HTTP})

        assert response.status == HTTPStatus.NOT_MODIFIED
        assert response.body == b""
        assert not response.is_streamed
        assert response.headers["Last-Modified"] == MTIME_HTTP
        assert response.headers["Accept-Ranges"] == "bytes"
        assert b"Content-Length" not in response.head_bytes()

    def test_not_modified_wins_over_range(self, respond):
        response = respond("data.bin", headers={
            "If-Modified-Since": MTIME_HTTP,
            "Range": "bytes=0-9",
        })

        assert response.status == HTTPStatus.NOT_MODIFIED

    def test_modified_since(self, respond):
        response = respond("data.bin", headers={"If-Modified-Since": "Thu, 01 Jan 2026 11:59:58 GMT"})

        assert response.status == HTTPStatus.OK
        assert response.read() == DATA_BIN

    def test_if_none_match_disables_304(self, respond):
        response = respond("data.bin", headers={
            "If-Modified-Since": MTIME_HTTP,
            "If-None-Match": '"whatever"',
        })

        assert response.status == HTTPStatus.OK
        response.close()

    def test_invalid_date_is_ignored(self, respond):
        response = respond("data.bin", headers={"If-Modified-Since": "garbage"})

        assert response.status == HTTPStatus.OK
        response.close()


class TestRanges:
    """Range header handling."""

    def test_partial_content(self, respond):
        response = respond("data.bin", headers={"Range": "bytes=10-19"})

        assert response.status == HTTPStatus.PARTIAL_CONTENT
        assert response.headers["Content-Range"] == "bytes 10-19/100"
        assert response.headers["Content-Length"] == "10"
        assert response.read() == DATA_BIN[10:20]

    @pytest.mark.parametrize("value, start, end", [
        ("bytes=90-500", 90, 99),
        ("bytes=-10", 90, 99),
        ("bytes=-500", 0, 99),
        ("bytes=0-", 0, 99),
        ("bytes=99-99", 99, 99),
    ])
    def test_clamped_ranges(self, respond, value, start, end):
        response = respond("data.bin", headers={"Range": value})

        assert response.status == HTTPStatus.PARTIAL_CONTENT
        assert response.headers["Content-Range"] == f"bytes {start}-{end}/100"
        assert response.headers["Content-Length"] == str(end - start + 1)
        assert response.read() == DATA_BIN[start:end + 1]

    @pytest.mark.parametrize("value", ["bytes=100-200", "bytes=20-10", "bytes=-0"])
    def test_unsatisfiable(self, respond, value):
        response = respond("data.bin", headers={"Range": value})

        assert response.status == HTTPStatus.RANGE_NOT_SATISFIABLE
        assert response.headers["Content-Range"] == "bytes */100"
        assert response.body == b""
        assert not response.is_streamed

    @pytest.mark.parametrize("value", ["bytes=0-10,20-30", "pages=1-2", "bytes=-"])
    def test_unparseable_range_serves_whole_file(self, respond, value):
        response = respond("data.bin", headers={"Range": value})

        assert response.status == HTTPStatus.OK
        assert "Content-Range" not in response.headers
        assert response.read() == DATA_BIN

    def test_range_on_empty_file_is_ignored(self, respond):
        response = respond("empty.txt", headers={"Range": "bytes=0-"})

        assert response.status == HTTPStatus.OK
        assert response.headers["Content-Length"] == "0"
        assert response.read() == b""

    def test_partial_response_keeps_base_headers(self, respond, doc_root, set_mtime):
        set_mtime(doc_root / "data.bin", MTIME)

        response = respond("data.bin", headers={"Range": "bytes=0-0"})

        assert response.headers["Last-Modified"] == MTIME_HTTP
        assert response.headers["Accept-Ranges"] == "bytes"
        assert response.headers["Content-Type"] == "application/octet-stream"
        assert response.read() == b"\x00"


class TestIndexResponder:

    def test_serves_index(self, index_responder):
        response = index_responder.respond()

        assert response.status == HTTPStatus.OK
        assert response.headers["Content-Length"] == str(len(INDEX_HTML))
        assert response.read() == INDEX_HTML

    def test_picks_up_edits(self, index_responder, doc_root):
        (doc_root / "index.html").write_bytes(b"<h1>v2</h1>")

        assert index_responder.respond().read() == b"<h1>v2</h1>"

    def test_missing_index_is_404(self, tmp_path, caplog):
        response = IndexResponder(tmp_path / "index.html").respond()

        assert response.status == HTTPStatus.NOT_FOUND
        assert "Index file not found" in caplog.text

    def test_index_that_is_a_directory_is_404(self, tmp_path):
        (tmp_path / "index.html").mkdir()

        assert IndexResponder(tmp_path / "index.html").respond().status == HTTPStatus.NOT_FOUND


def test_format_matches_last_modified(respond, doc_root, set_mtime):
    set_mtime(doc_root / "empty.txt", MTIME)

    response = respond("empty.txt")

    assert response.headers["Last-Modified"] == format_http_date(probe(doc_root / "empty.txt").modified_at)
    response.close()
