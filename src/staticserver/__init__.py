"""
=============================================================================
STATICSERVER
=============================================================================

A small HTTP/1.1 static file server on raw sockets and threads.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   GET /video.mp4   Range: bytes=0-1023      → 206 Partial Content   │
    │   GET /app.js      If-Modified-Since: ...   → 304 Not Modified      │
    │   GET /docs        (a directory)            → 301 Location: /docs/  │
    │   GET /a//b/../c                            → 301 Location: /a/c    │
    │   GET /settings    (no such file)           → 200 index.html        │
    │   POST /anything                            → 405                   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Package layout:

    config.py     ServerConfig
    server.py     HTTPServer
    core/         sockets, connections, thread pool
    http/         request parser, headers, responses, status codes, MIME
    files/        resolver, responders, ranges, conditional requests
    middleware/   pipeline and access logging

Usage:

    from staticserver import HTTPServer, ServerConfig
    HTTPServer(ServerConfig(root_dir="./public")).run()

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer, create_app
from .config import ServerConfig

__all__ = ["HTTPServer", "ServerConfig", "create_app", "__version__"]
