"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the static file server.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── staticserver ./public --port 3000                         │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── STATIC_PORT=3000 STATIC_ROOT=./public staticserver        │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Configuration is validated once at startup. A bad value stops the server
before it binds a socket, with a ValueError naming the field.

=============================================================================
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


LOG_FORMATS = ("text", "json")


@dataclass
class ServerConfig:
    """
    Configuration for the static file server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, buffer_size, timeout

    HTTP SETTINGS
    - keep_alive, keep_alive_timeout, max_request_size

    THREADING SETTINGS
    - min_workers, max_workers

    DOCUMENT ROOT
    - root_dir, index_file, chunk_size

    LOGGING
    - log_level, log_format

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """
    The IP address to bind to.
    - "127.0.0.1" - Localhost only (development)
    - "0.0.0.0" - All network interfaces (containers, production)
    """

    port: int = 8080
    """The port number to listen on."""

    backlog: int = 128
    """
    Maximum number of queued connections.
    When the accept queue is full, new connections are refused.
    """

    buffer_size: int = 8192
    """Size of each socket recv() in bytes."""

    timeout: Optional[float] = 30.0
    """
    Socket timeout in seconds for reading a request and sending a
    response. None blocks forever.
    """

    # ─────────────────────────────────────────────────────────────────────
    # HTTP SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    keep_alive: bool = True
    """Allow multiple requests on the same TCP connection."""

    keep_alive_timeout: float = 5.0
    """Idle time in seconds before a keep-alive connection is closed."""

    max_request_size: int = 1024 * 1024  # 1 MB
    """
    Maximum request size in bytes (headers plus body).
    GET requests are small; anything bigger is answered with 413.
    """

    # ─────────────────────────────────────────────────────────────────────
    # THREAD POOL SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    min_workers: int = 4
    """Worker threads created at startup."""

    max_workers: int = 16
    """
    Upper bound on worker threads. Each keep-alive connection holds a
    worker while it is open.
    """

    # ─────────────────────────────────────────────────────────────────────
    # DOCUMENT ROOT
    # ─────────────────────────────────────────────────────────────────────

    root_dir: str = "."
    """Directory whose files are served. Must exist."""

    index_file: str = "index.html"
    """
    File inside root_dir served for directories and for every path that
    does not name a file.
    """

    chunk_size: int = 64 * 1024
    """Bytes read from disk per body chunk."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    log_format: str = "text"
    """
    Access log format: 'text' (Apache-like) or 'json' (one object per
    line, for log aggregators).
    """

    # ─────────────────────────────────────────────────────────────────────
    # SERVER IDENTITY
    # ─────────────────────────────────────────────────────────────────────

    server_name: str = "staticserver"
    """Value of the Server header."""

    @property
    def index_path(self) -> Path:
        """Full path of the index file."""
        return Path(self.root_dir) / self.index_file

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        STATIC_HOST        Server host (default: 127.0.0.1)
        STATIC_PORT        Server port (default: 8080)
        STATIC_ROOT        Document root (default: .)
        STATIC_INDEX       Index file name (default: index.html)
        STATIC_CHUNK_SIZE  Body chunk size in bytes (default: 65536)
        STATIC_TIMEOUT     Socket timeout in seconds (default: 30)
        STATIC_WORKERS     Max worker threads (default: 16)
        STATIC_LOG_LEVEL   Logging level (default: INFO)
        STATIC_LOG_FORMAT  Access log format, text or json (default: text)

        =====================================================================
        """
        return cls(
            host=os.getenv("STATIC_HOST", "127.0.0.1"),
            port=int(os.getenv("STATIC_PORT", "8080")),
            root_dir=os.getenv("STATIC_ROOT", "."),
            index_file=os.getenv("STATIC_INDEX", "index.html"),
            chunk_size=int(os.getenv("STATIC_CHUNK_SIZE", str(64 * 1024))),
            timeout=float(os.getenv("STATIC_TIMEOUT", "30")),
            max_workers=int(os.getenv("STATIC_WORKERS", "16")),
            log_level=os.getenv("STATIC_LOG_LEVEL", "INFO"),
            log_format=os.getenv("STATIC_LOG_FORMAT", "text"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: On the first invalid value found.
        """
        if not 0 < self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 1-65535.")

        if self.min_workers < 1:
            raise ValueError("min_workers must be >= 1")

        if self.max_workers < self.min_workers:
            raise ValueError("max_workers must be >= min_workers")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(
                f"Invalid log_format: {self.log_format!r}. "
                f"Must be one of {', '.join(LOG_FORMATS)}."
            )

        if not self.index_file or "/" in self.index_file:
            raise ValueError(f"Invalid index_file: {self.index_file!r}")

        if not Path(self.root_dir).is_dir():
            raise ValueError(f"Document root is not a directory: {self.root_dir}")
