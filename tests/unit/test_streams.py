"""
Unit tests for file metadata probing and byte-slice streams.
"""

import io
from datetime import datetime, timezone

import pytest

from staticserver.files.metadata import probe
from staticserver.files.streams import byte_slice, open_slice

from conftest import DATA_BIN


class TestByteSlice:
    """Tests for byte_slice()."""

    def test_chunks_are_bounded(self):
        source = io.BytesIO(b"0123456789")

        assert list(byte_slice(source, 10, chunk_size=4)) == [b"0123", b"4567", b"89"]

    def test_stops_at_length(self):
        source = io.BytesIO(b"0123456789")

        assert b"".join(byte_slice(source, 3, chunk_size=2)) == b"012"
        assert source.tell() == 3

    def test_starts_at_current_position(self):
        source = io.BytesIO(b"0123456789")
        source.seek(5)

        assert b"".join(byte_slice(source, 3)) == b"567"

    def test_short_source_raises(self):
        stream = byte_slice(io.BytesIO(b"abc"), 100)

        assert next(stream) == b"abc"
        with pytest.raises(OSError, match="after 3 of 100 bytes"):
            next(stream)

    def test_zero_length(self):
        assert list(byte_slice(io.BytesIO(b"abc"), 0)) == []


class TestOpenSlice:
    """Tests for open_slice()."""

    def test_whole_file(self, doc_root):
        assert b"".join(open_slice(doc_root / "data.bin", chunk_size=7)) == DATA_BIN

    def test_middle_slice(self, doc_root):
        chunks = list(open_slice(doc_root / "data.bin", start=10, length=10, chunk_size=4))

        assert [len(c) for c in chunks] == [4, 4, 2]
        assert b"".join(chunks) == DATA_BIN[10:20]

    def test_length_past_eof_raises(self, doc_root):
        with pytest.raises(OSError):
            b"".join(open_slice(doc_root / "data.bin", start=95, length=50))

    def test_file_shrunk_after_stat_raises(self, doc_root):
        path = doc_root / "data.bin"
        stream = open_slice(path, length=100, chunk_size=40)
        with open(path, "r+b") as f:
            f.truncate(60)

        received = []
        with pytest.raises(OSError, match="after 60 of 100 bytes"):
            for chunk in stream:
                received.append(chunk)

        assert b"".join(received) == DATA_BIN[:60]

    def test_nothing_opened_before_first_chunk(self, tmp_path):
        stream = open_slice(tmp_path / "does-not-exist.bin")

        # Creating the generator must not touch the filesystem
        stream.close()

    def test_close_releases_file(self, doc_root, monkeypatch):
        opened = []
        real_open = open

        def tracking_open(*args, **kwargs):
            f = real_open(*args, **kwargs)
            opened.append(f)
            return f

        monkeypatch.setattr("staticserver.files.streams.open", tracking_open, raising=False)

        stream = open_slice(doc_root / "data.bin", length=100, chunk_size=10)
        assert next(stream) == DATA_BIN[:10]
        assert not opened[0].closed

        stream.close()

        assert opened[0].closed


class TestProbe:
    """Tests for probe()."""

    def test_regular_file(self, doc_root, set_mtime):
        set_mtime(doc_root / "data.bin", 1767268800, atime=1767272400)

        metadata = probe(doc_root / "data.bin")

        assert metadata.is_file
        assert not metadata.is_directory
        assert metadata.size == 100
        assert metadata.modified_at == datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
        assert metadata.accessed_at == datetime(2026, 1, 1, 13, 0, tzinfo=timezone.utc)

    def test_directory(self, doc_root):
        metadata = probe(doc_root / "docs")

        assert metadata.is_directory
        assert not metadata.is_file

    def test_missing(self, doc_root):
        assert probe(doc_root / "nope") is None

    def test_embedded_nul(self, doc_root):
        assert probe(str(doc_root) + "/bad\x00name") is None
