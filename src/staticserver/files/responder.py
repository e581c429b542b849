"""
=============================================================================
FILE RESPONDER
=============================================================================

Builds the response for a resolved file: whole, partial, not-modified or
rejected. The checks run in a fixed order and the first match wins:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        RESPONSE DECISIONS                           │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. method != GET                 → 405  "Method not allowed"      │
    │   2. directory                     → 200  index page                │
    │   3. base headers: server, accept-ranges, date, last-modified       │
    │   4. If-Modified-Since satisfied   → 304  headers only              │
    │   5. Content-Type from extension   (unset when unknown)             │
    │   6. Range present and size > 0                                     │
    │        unparseable                 → 200  whole file                │
    │        outside the file            → 416  Content-Range: bytes */N  │
    │        otherwise (clamped)         → 206  exactly end-start+1 bytes │
    │   7. everything else               → 200  whole file                │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

A Range on an empty file is ignored. Some clients add "Range: bytes=0-"
to every request, and 416 for a zero-byte file would break them.

=============================================================================
THE "date" HEADER
=============================================================================

File responses report the file's access time as "date". When the
platform reports no access time the header is left for the serializer,
which adds the current time.

=============================================================================
"""

import logging
from pathlib import Path
from typing import Union

from ..http.headers import HeaderMap
from ..http.mime_types import get_content_type
from ..http.request import HTTPRequest
from ..http.response import (
    HTTPResponse,
    ResponseBuilder,
    format_http_date,
    method_not_allowed,
    not_found,
)
from ..http.status_codes import HTTPStatus
from .conditional import is_not_modified
from .metadata import ResourceMetadata, probe
from .ranges import parse_range, unsatisfied_content_range
from .streams import DEFAULT_CHUNK_SIZE, open_slice


logger = logging.getLogger(__name__)


ALLOWED_METHODS = ["GET"]


class IndexResponder:
    """
    Serves the index page: 200 with the whole file.

    No range or conditional handling. The index is stat'ed fresh on every
    call so edits show up without a restart.
    """

    def __init__(
        self,
        index_path: Union[str, Path],
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        self.index_path = Path(index_path)
        self.chunk_size = chunk_size

    def respond(self) -> HTTPResponse:
        metadata = probe(self.index_path)
        if metadata is None or not metadata.is_file:
            logger.warning(f"Index file not found: {self.index_path}")
            return not_found()

        return (ResponseBuilder()
            .status(HTTPStatus.OK)
            .content_type(get_content_type(self.index_path))
            .stream(
                open_slice(self.index_path, length=metadata.size, chunk_size=self.chunk_size),
                length=metadata.size,
            )
            .build())


class FileResponder:
    """
    Turns (request, file, metadata) into an HTTPResponse.

    Usage:
        responder = FileResponder(IndexResponder("public/index.html"))
        response = responder.respond(request, path, metadata)
    """

    def __init__(
        self,
        index_responder: IndexResponder,
        server_name: str = "staticserver",
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        """
        Args:
            index_responder: Used when the target turns out to be a directory.
            server_name: Value of the "server" header.
            chunk_size: Largest body chunk read from disk at once.
        """
        self.index_responder = index_responder
        self.server_name = server_name
        self.chunk_size = chunk_size

    def respond(
        self,
        request: HTTPRequest,
        fs_path: Union[str, Path],
        metadata: ResourceMetadata,
    ) -> HTTPResponse:
        """
        Build the response for a file. See the module docstring for the
        decision order.
        """
        # ─────────────────────────────────────────────────────────────────
        # 1-2. METHOD AND DIRECTORY
        # ─────────────────────────────────────────────────────────────────
        if request.method != "GET":
            return method_not_allowed(ALLOWED_METHODS)

        if metadata.is_directory:
            return self.index_responder.respond()

        # ─────────────────────────────────────────────────────────────────
        # 3. BASE HEADERS
        # ─────────────────────────────────────────────────────────────────
        headers = HeaderMap()
        headers["server"] = self.server_name
        headers["accept-ranges"] = "bytes"
        if metadata.accessed_at is not None:
            headers["date"] = format_http_date(metadata.accessed_at)
        if metadata.modified_at is not None:
            headers["last-modified"] = format_http_date(metadata.modified_at)

        # ─────────────────────────────────────────────────────────────────
        # 4. CONDITIONAL REQUEST
        # ─────────────────────────────────────────────────────────────────
        if is_not_modified(
            request.get_header("if-none-match"),
            request.get_header("if-modified-since"),
            metadata.modified_at,
        ):
            logger.debug(f"304 for {fs_path}")
            return HTTPResponse(status=HTTPStatus.NOT_MODIFIED, headers=headers)

        # ─────────────────────────────────────────────────────────────────
        # 5. CONTENT TYPE
        # ─────────────────────────────────────────────────────────────────
        builder = ResponseBuilder(self.server_name).headers(headers)
        builder.content_type(get_content_type(fs_path))

        size = metadata.size

        # ─────────────────────────────────────────────────────────────────
        # 6. RANGE REQUEST
        # ─────────────────────────────────────────────────────────────────
        range_value = request.get_header("range")
        if range_value and size > 0:
            byte_range = parse_range(range_value, size)

            if byte_range is None:
                logger.debug(f"Ignoring unparseable Range {range_value!r}")
                return self._whole_file(builder, fs_path, size)

            if not byte_range.is_satisfiable(size):
                logger.debug(f"416 for Range {range_value!r} on {size} bytes")
                return (builder
                    .status(HTTPStatus.RANGE_NOT_SATISFIABLE)
                    .header("Content-Range", unsatisfied_content_range(size))
                    .build())

            byte_range = byte_range.clamp(size)
            return (builder
                .status(HTTPStatus.PARTIAL_CONTENT)
                .header("Content-Range", byte_range.content_range(size))
                .stream(
                    open_slice(fs_path, byte_range.start, byte_range.length, self.chunk_size),
                    length=byte_range.length,
                )
                .build())

        # ─────────────────────────────────────────────────────────────────
        # 7. WHOLE FILE
        # ─────────────────────────────────────────────────────────────────
        return self._whole_file(builder, fs_path, size)

    def _whole_file(
        self,
        builder: ResponseBuilder,
        fs_path: Union[str, Path],
        size: int,
    ) -> HTTPResponse:
        return (builder
            .status(HTTPStatus.OK)
            .stream(open_slice(fs_path, length=size, chunk_size=self.chunk_size), length=size)
            .build())
