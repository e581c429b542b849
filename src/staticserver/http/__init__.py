"""
=============================================================================
HTTP PROTOCOL IMPLEMENTATION
=============================================================================

This package contains the HTTP/1.1 protocol handling. It translates raw
bytes from TCP into structured messages and back.

=============================================================================
MODULE COMPONENTS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │ REQUEST PARSER (request.py)                                         │
    │ ─────────────────────────────────────────────────────────────────── │
    │ Input:   b"GET /a%20b.txt?v=1 HTTP/1.1\r\nRange: ...\r\n\r\n"       │
    │ Output:  HTTPRequest(method="GET", path="/a b.txt",                 │
    │                      query_string="v=1", ...)                       │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │ HEADER MAP (headers.py)                                             │
    │ ─────────────────────────────────────────────────────────────────── │
    │ Ordered, case-insensitive response headers, never duplicated       │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │ RESPONSE BUILDER (response.py)                                      │
    │ ─────────────────────────────────────────────────────────────────── │
    │ Buffered or streamed HTTPResponse objects, serialized head-first   │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │ STATUS CODES / MIME TYPES                                           │
    │ ─────────────────────────────────────────────────────────────────── │
    │ HTTPStatus enum with phrases; extension → Content-Type lookup      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .headers import HeaderMap
from .request import HTTPRequest, RequestParser, HTTPParseError
from .response import (
    HTTPResponse,
    ResponseBuilder,
    format_http_date,
    # Convenience functions for common responses
    redirect,            # 301/302 Redirect
    bad_request,         # 400 Bad Request
    not_found,           # 404 Not Found
    method_not_allowed,  # 405 Method Not Allowed
    internal_error,      # 500 Internal Server Error
)
from .status_codes import HTTPStatus
from .mime_types import get_mime_type, get_content_type

__all__ = [
    # Headers
    "HeaderMap",

    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",

    # Response building
    "HTTPResponse",
    "ResponseBuilder",
    "format_http_date",

    # Response convenience functions
    "redirect",
    "bad_request",
    "not_found",
    "method_not_allowed",
    "internal_error",

    # Status codes
    "HTTPStatus",

    # MIME types
    "get_mime_type",
    "get_content_type",
]
