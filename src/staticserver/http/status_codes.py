"""
=============================================================================
HTTP STATUS CODES (RFC 7231, RFC 7232, RFC 7233)
=============================================================================

The status codes a static file server actually produces, with their
reason phrases.

    ┌────────────────────────────────────────────────────────────────────┐
    │                    WHO PRODUCES WHICH STATUS                        │
    ├────────┬───────────────────────────────────────────────────────────┤
    │  200   │ Whole file, or the index fallback                         │
    │  206   │ Satisfiable Range request                                 │
    │  301   │ Non-canonical path, or directory without trailing slash   │
    │  304   │ If-Modified-Since says the client copy is current         │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  400   │ Malformed request line (parser)                           │
    │  404   │ Index file itself is missing                              │
    │  405   │ Anything other than GET                                   │
    │  408   │ Client never finished sending the request                 │
    │  413   │ Request larger than max_request_size                      │
    │  416   │ Range outside the file                                    │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  500   │ Unexpected handler crash                                  │
    │  503   │ Thread pool queue full                                    │
    │  505   │ HTTP version other than 1.0 / 1.1                         │
    └────────┴───────────────────────────────────────────────────────────┘

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    IntEnum, so members compare equal to plain integers:

        >>> HTTPStatus.PARTIAL_CONTENT == 206
        True
        >>> HTTPStatus.PARTIAL_CONTENT.phrase
        'Partial Content'
    """

    # 2xx SUCCESS
    OK = 200
    NO_CONTENT = 204
    PARTIAL_CONTENT = 206               # Range request fulfilled

    # 3xx REDIRECTION
    MOVED_PERMANENTLY = 301             # Canonical path / trailing slash
    FOUND = 302
    NOT_MODIFIED = 304                  # Cached version is still valid

    # 4xx CLIENT ERRORS
    BAD_REQUEST = 400
    FORBIDDEN = 403
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    REQUEST_TIMEOUT = 408
    PAYLOAD_TOO_LARGE = 413
    URI_TOO_LONG = 414
    RANGE_NOT_SATISFIABLE = 416         # Range outside the resource

    # 5xx SERVER ERRORS
    INTERNAL_SERVER_ERROR = 500
    NOT_IMPLEMENTED = 501
    SERVICE_UNAVAILABLE = 503
    HTTP_VERSION_NOT_SUPPORTED = 505

    @property
    def phrase(self) -> str:
        """
        Reason phrase for the status line.

            HTTP/1.1 416 Range Not Satisfiable
                     ─── ─────────────────────
                      │           │
                    code        phrase
        """
        return _STATUS_PHRASES.get(self, "Unknown")

    @property
    def is_success(self) -> bool:
        """True for 2xx."""
        return 200 <= self < 300

    @property
    def is_redirect(self) -> bool:
        """True for 3xx."""
        return 300 <= self < 400

    @property
    def is_client_error(self) -> bool:
        """True for 4xx."""
        return 400 <= self < 500

    @property
    def is_server_error(self) -> bool:
        """True for 5xx."""
        return 500 <= self < 600

    @property
    def is_error(self) -> bool:
        """True for 4xx and 5xx."""
        return self >= 400


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.NO_CONTENT: "No Content",
    HTTPStatus.PARTIAL_CONTENT: "Partial Content",

    HTTPStatus.MOVED_PERMANENTLY: "Moved Permanently",
    HTTPStatus.FOUND: "Found",
    HTTPStatus.NOT_MODIFIED: "Not Modified",

    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.FORBIDDEN: "Forbidden",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.REQUEST_TIMEOUT: "Request Timeout",
    HTTPStatus.PAYLOAD_TOO_LARGE: "Payload Too Large",
    HTTPStatus.URI_TOO_LONG: "URI Too Long",
    HTTPStatus.RANGE_NOT_SATISFIABLE: "Range Not Satisfiable",

    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
    HTTPStatus.NOT_IMPLEMENTED: "Not Implemented",
    HTTPStatus.SERVICE_UNAVAILABLE: "Service Unavailable",
    HTTPStatus.HTTP_VERSION_NOT_SUPPORTED: "HTTP Version Not Supported",
}
