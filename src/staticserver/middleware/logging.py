"""
=============================================================================
ACCESS LOGGING MIDDLEWARE
=============================================================================

Writes one access-log line per request to the "staticserver.access"
logger.

=============================================================================
FORMATS
=============================================================================

TEXT (Apache combined-like, for humans and GoAccess-style tools):

    127.0.0.1 - - [18/Oct/2026:12:00:00 +0000] "GET /video.mp4" 206 10
        "bytes=10-19" "curl/8.5.0" 0.41ms

    (one line in the log; "-" stands in for a missing Range or User-Agent)

JSON (one object per line, for log aggregators):

    {"request_id": "3f2a9c1e", "method": "GET", "path": "/video.mp4",
     "status_code": 206, "content_length": 10, "range": "bytes=10-19", ...}

=============================================================================
WHAT THE NUMBERS MEAN
=============================================================================

content_length is the size the response DECLARES (Content-Length). File
bodies are streamed after the middleware returns, so the byte count is
taken from the header rather than from a body that has not been read yet.
A 304 or a redirect logs 0; a stream without a length logs "-".

duration_ms runs until the response is done with. For a streamed body
that is when the server closes the stream, after the last chunk went out
or the send was aborted, so the line is written then and not when the
handler returns. Buffered bodies are small and logged as soon as they are
built.

The handler for this logger is whatever the application configured
(HTTPServer._setup_logging uses logging.basicConfig). Route it elsewhere
with the standard API:

    logging.getLogger("staticserver.access").addHandler(file_handler)

=============================================================================
"""

import time
import json
import uuid
import logging
from typing import Callable, Iterable, Iterator, Optional, Union
from dataclasses import dataclass, asdict

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger("staticserver.access")


@dataclass
class RequestLog:
    """
    One access-log entry.

    Attributes:
        request_id:     Short ID, also sent back as X-Request-ID
        method:         HTTP method
        path:           Decoded request path
        query:          Raw query string ("" when none)
        range:          Range header as sent ("" when none)
        client_ip:      Client IP address
        user_agent:     User-Agent header, "-" when missing
        status_code:    Response status
        content_length: Declared body size, None when unknown
        duration_ms:    Time until the body was sent or abandoned
        timestamp:      Apache-style local timestamp
    """

    request_id: str
    method: str
    path: str
    query: str
    range: str
    client_ip: str
    user_agent: str
    status_code: int
    content_length: Optional[int]
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        entry = asdict(self)
        entry["status_code"] = int(self.status_code)
        entry["duration_ms"] = round(self.duration_ms, 2)
        return entry

    def to_text(self) -> str:
        target = f"{self.path}?{self.query}" if self.query else self.path
        size: Union[int, str] = "-" if self.content_length is None else self.content_length
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.method} {target}" {int(self.status_code)} '
            f'{size} "{self.range or "-"}" "{self.user_agent}" '
            f'{self.duration_ms:.2f}ms'
        )


class LoggedStream:
    """
    Wraps a response body stream and calls `on_close` once, when the
    stream is closed.

    HTTPServer closes every response after sending it, whether the body
    went out whole or the send was aborted, so this fires exactly once
    per served request.
    """

    def __init__(self, stream: Iterable[bytes], on_close: Callable[[], None]):
        self._stream = iter(stream)
        self._on_close: Optional[Callable[[], None]] = on_close

    def __iter__(self) -> Iterator[bytes]:
        return self

    def __next__(self) -> bytes:
        return next(self._stream)

    def close(self) -> None:
        try:
            close = getattr(self._stream, "close", None)
            if close is not None:
                close()
        finally:
            on_close, self._on_close = self._on_close, None
            if on_close is not None:
                on_close()


class LoggingMiddleware(Middleware):
    """
    Access-log middleware. Add it first so it sees every request.

    Usage:
        server.use(LoggingMiddleware(log_format="json"))
    """

    def __init__(
        self,
        log_format: str = "text",
        include_request_id: bool = True,
        log_level: int = logging.INFO,
        skip_paths: Optional[list[str]] = None,
    ):
        """
        Args:
            log_format: "text" or "json".
            include_request_id: Add X-Request-ID to every response.
            log_level: Level the access lines are logged at.
            skip_paths: Exact paths never logged (e.g. ["/favicon.ico"]).
        """
        self.log_format = log_format
        self.include_request_id = include_request_id
        self.log_level = log_level
        self.skip_paths = set(skip_paths or [])

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        request_id = str(uuid.uuid4())[:8]
        start_time = time.time()

        try:
            response = next(request)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"Request failed: {request.method} {request.path} "
                f"- {type(e).__name__}: {e} ({duration_ms:.2f}ms)"
            )
            raise

        if self.include_request_id:
            response.headers["X-Request-ID"] = request_id

        if request.path in self.skip_paths:
            return response

        def write_entry():
            log_entry = RequestLog(
                request_id=request_id,
                method=request.method,
                path=request.path,
                query=request.query_string,
                range=request.get_header("range", ""),
                client_ip=request.client_address[0],
                user_agent=request.user_agent or "-",
                status_code=response.status,
                content_length=response.content_length,
                duration_ms=(time.time() - start_time) * 1000,
                timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
            )

            if self.log_format == "json":
                logger.log(self.log_level, json.dumps(log_entry.to_dict()))
            else:
                logger.log(self.log_level, log_entry.to_text())

        if response.is_streamed:
            response.stream = LoggedStream(response.stream, write_entry)
        else:
            write_entry()

        return response
