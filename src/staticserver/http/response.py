"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Builds HTTP/1.1 responses with proper formatting per RFC 7230.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ STATUS LINE ──────────────────────────────────────────────────┐ │
    │  │    HTTP/1.1 206 Partial Content\r\n                            │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ HEADERS ──────────────────────────────────────────────────────┐ │
    │  │    server: staticserver\r\n                                     │ │
    │  │    accept-ranges: bytes\r\n                                     │ │
    │  │    last-modified: Thu, 01 Jan 2026 12:00:00 GMT\r\n             │ │
    │  │    Content-Type: video/mp4\r\n                                  │ │
    │  │    Content-Range: bytes 10-19/100\r\n                           │ │
    │  │    Content-Length: 10\r\n                                       │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ EMPTY LINE (separator) ───────────────────────────────────────┐ │
    │  │    \r\n                                                         │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BODY ─────────────────────────────────────────────────────────┐ │
    │  │    buffered bytes, or a stream of chunks read from disk         │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
BUFFERED VS STREAMED BODIES
=============================================================================

Small responses (errors, redirects) carry their body as bytes. File
responses carry a STREAM instead: an iterator that reads the file chunk by
chunk while the connection writes it out.

    Buffered:   HTTPResponse(body=b"Method not allowed")
    Streamed:   HTTPResponse(stream=open_slice(path, 10, 10))

A stream is single-pass. It is consumed exactly once by the connection and
must be closed afterwards so the file handle is released even when the
client disconnects halfway (see HTTPResponse.close).

Headers are fully determined before the first body byte is produced:
iter_bytes() yields the head first, then the body chunks.

=============================================================================
BUILDER PATTERN
=============================================================================

    ResponseBuilder()
        .status(HTTPStatus.PARTIAL_CONTENT)
        .header("Content-Range", "bytes 10-19/100")
        .stream(chunks, length=10)
        .build()

Each builder produces exactly one response with its own HeaderMap, so no
header table is ever shared between concurrent requests.

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Dict, Iterable, Iterator, Union

from .headers import HeaderMap
from .status_codes import HTTPStatus


# Statuses that never carry a body, so no Content-Length is added for them
BODILESS_STATUSES = {HTTPStatus.NO_CONTENT, HTTPStatus.NOT_MODIFIED}


@dataclass
class HTTPResponse:
    """
    Represents an HTTP response.

    =========================================================================
    RESPONSE LIFECYCLE
    =========================================================================

        Handler returns          iter_bytes()            Connection sends
        HTTPResponse    ─────►   head + body    ─────►   chunk by chunk
                                 chunks

    =========================================================================
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: HeaderMap = field(default_factory=HeaderMap)
    body: bytes = b""
    stream: Optional[Iterator[bytes]] = field(default=None, repr=False)
    version: str = "HTTP/1.1"

    def __post_init__(self):
        if not isinstance(self.headers, HeaderMap):
            self.headers = HeaderMap(self.headers)

    @property
    def status_line(self) -> str:
        """
        Get the HTTP status line.

        Example: "HTTP/1.1 206 Partial Content"
        """
        return f"{self.version} {self.status} {self.status.phrase}"

    @property
    def is_streamed(self) -> bool:
        """True if the body is produced lazily from a stream."""
        return self.stream is not None

    @property
    def content_length(self) -> Optional[int]:
        """
        Size of the body in bytes.

        Taken from the Content-Length header when present (the only way to
        know the size of a streamed body), else the buffered body length.
        None for a stream without a declared length.
        """
        declared = self.headers.get("Content-Length")
        if declared is not None:
            try:
                return int(declared)
            except ValueError:
                return None
        if self.is_streamed:
            return None
        return len(self.body)

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """
        Set a response header (replaces any spelling of the same name).

        Returns self for method chaining.
        """
        self.headers[name] = value
        return self

    def set_content_type(self, content_type: str) -> "HTTPResponse":
        """Set the Content-Type header."""
        return self.set_header("Content-Type", content_type)

    def set_body(self, body: Union[str, bytes]) -> "HTTPResponse":
        """Set a buffered body. Strings are encoded as UTF-8."""
        self.body = body.encode("utf-8") if isinstance(body, str) else body
        self.stream = None
        return self

    def head_bytes(self, server_name: str = "staticserver") -> bytes:
        """
        Serialize the status line and headers (including the blank line).

        =====================================================================
        AUTO-ADDED HEADERS
        =====================================================================

        Content-Length: for buffered bodies, unless the status has no body
        Date:           RFC 7231 requires origin servers to send this
        Server:         identifies the server software

        Each is added only when the handler did not set it under any
        spelling.

        =====================================================================
        """
        response_headers = self.headers.copy()

        if (
            "Content-Length" not in response_headers
            and not self.is_streamed
            and self.status not in BODILESS_STATUSES
        ):
            response_headers["Content-Length"] = str(len(self.body))

        if "Date" not in response_headers:
            response_headers["Date"] = format_http_date(datetime.now(timezone.utc))

        if "Server" not in response_headers:
            response_headers["Server"] = server_name

        lines = [self.status_line]
        for name, value in response_headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")

        return "\r\n".join(lines).encode("latin-1", errors="replace") + b"\r\n"

    def iter_bytes(self, server_name: str = "staticserver") -> Iterator[bytes]:
        """
        Yield the serialized response: head first, then body chunks.

        The body stream is pulled lazily, so nothing is read from disk
        before the head has been handed to the socket.
        """
        yield self.head_bytes(server_name)
        if self.is_streamed:
            for chunk in self.stream:
                if chunk:
                    yield chunk
        elif self.body:
            yield self.body

    def to_bytes(self, server_name: str = "staticserver") -> bytes:
        """
        Serialize the whole response to bytes.

        Drains the stream if there is one; meant for buffered responses and
        tests, the server itself writes streamed responses chunk by chunk.
        """
        try:
            return b"".join(self.iter_bytes(server_name))
        finally:
            self.close()

    def read(self) -> bytes:
        """Return the body bytes, draining (and closing) the stream if any."""
        if not self.is_streamed:
            return self.body
        try:
            return b"".join(self.stream)
        finally:
            self.close()

    def close(self) -> None:
        """
        Release the body stream.

        Generators opened with open_slice() close their file on exit from a
        with block; calling close() triggers it even if the stream was never
        fully consumed (client went away, send failed, ...).
        """
        if self.stream is not None:
            close = getattr(self.stream, "close", None)
            if close is not None:
                close()


class ResponseBuilder:
    """
    Fluent builder for constructing HTTP responses.

    Each method returns `self`, build() returns the finished HTTPResponse.
    A builder is meant to produce one response for one request.
    """

    def __init__(self, server_name: str = "staticserver"):
        """
        Initialize the response builder.

        Args:
            server_name: Server identifier used by to_bytes().
        """
        self._status = HTTPStatus.OK
        self._headers = HeaderMap()
        self._body: bytes = b""
        self._stream: Optional[Iterator[bytes]] = None
        self._server_name = server_name

    # =========================================================================
    # STATUS
    # =========================================================================

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        """Set the HTTP status code."""
        self._status = HTTPStatus(status)
        return self

    # =========================================================================
    # HEADERS
    # =========================================================================

    def header(self, name: str, value: str) -> "ResponseBuilder":
        """Add a single response header."""
        self._headers[name] = value
        return self

    def headers(self, headers: Union[Dict[str, str], HeaderMap]) -> "ResponseBuilder":
        """Add multiple headers at once."""
        self._headers.update(headers)
        return self

    def content_type(self, content_type: Optional[str]) -> "ResponseBuilder":
        """
        Set the Content-Type header.

        None leaves the header unset, which is what a failed MIME lookup
        should do.
        """
        if content_type:
            self._headers["Content-Type"] = content_type
        return self

    def content_length(self, length: int) -> "ResponseBuilder":
        """Set the Content-Length header."""
        return self.header("Content-Length", str(length))

    # =========================================================================
    # BODY
    # =========================================================================

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """Set a buffered body (strings auto-encoded to UTF-8)."""
        self._body = body.encode("utf-8") if isinstance(body, str) else body
        self._stream = None
        return self

    def text(self, text: str, content_type: str = "text/plain; charset=utf-8") -> "ResponseBuilder":
        """Set a plain text body and its Content-Type."""
        self._headers["Content-Type"] = content_type
        return self.body(text)

    def stream(self, chunks: Iterable[bytes], length: Optional[int] = None) -> "ResponseBuilder":
        """
        Set a lazily produced body.

        Args:
            chunks: Single-pass iterable of byte chunks.
            length: Exact number of bytes the stream yields. Sets
                    Content-Length so keep-alive framing still works.
        """
        self._stream = iter(chunks)
        self._body = b""
        if length is not None:
            self.content_length(length)
        return self

    # =========================================================================
    # REDIRECTS AND CONNECTION
    # =========================================================================

    def redirect(self, location: str, permanent: bool = False) -> "ResponseBuilder":
        """
        Create a redirect response.

        301 Moved Permanently when permanent, else 302 Found.
        """
        self._status = HTTPStatus.MOVED_PERMANENTLY if permanent else HTTPStatus.FOUND
        self._headers["Location"] = location
        return self

    def close_connection(self) -> "ResponseBuilder":
        """Set Connection: close."""
        self._headers["Connection"] = "close"
        return self

    # =========================================================================
    # BUILD
    # =========================================================================

    def build(self) -> HTTPResponse:
        """Build and return the HTTPResponse object."""
        return HTTPResponse(
            status=self._status,
            headers=self._headers,
            body=self._body,
            stream=self._stream,
        )

    def to_bytes(self) -> bytes:
        """Build and serialize the response in one step."""
        return self.build().to_bytes(self._server_name)


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date (RFC 7231).

    Format: Day, DD Mon YYYY HH:MM:SS GMT
    Example: Thu, 01 Jan 2026 12:00:00 GMT

    Aware datetimes are converted to UTC first; naive ones are assumed to
    already be UTC.
    """
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)

    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def redirect(location: str, permanent: bool = False) -> HTTPResponse:
    """Create a redirect response (301 or 302)."""
    return ResponseBuilder().redirect(location, permanent).build()


def bad_request(message: str = "Bad Request") -> HTTPResponse:
    """Create a 400 Bad Request response with a plain-text body."""
    return ResponseBuilder().status(HTTPStatus.BAD_REQUEST).text(message).build()


def not_found(message: str = "Not Found") -> HTTPResponse:
    """Create a 404 Not Found response with a plain-text body."""
    return ResponseBuilder().status(HTTPStatus.NOT_FOUND).text(message).build()


def method_not_allowed(allowed_methods: list[str]) -> HTTPResponse:
    """
    Create a 405 Method Not Allowed response.

    Body is the plain text "Method not allowed". Includes the Allow header
    listing valid methods (RFC 7231 requirement).
    """
    return (ResponseBuilder()
        .status(HTTPStatus.METHOD_NOT_ALLOWED)
        .header("Allow", ", ".join(allowed_methods))
        .text("Method not allowed")
        .build())


def internal_error(message: str = "Internal Server Error") -> HTTPResponse:
    """Create a 500 Internal Server Error response."""
    return ResponseBuilder().status(HTTPStatus.INTERNAL_SERVER_ERROR).text(message).build()
