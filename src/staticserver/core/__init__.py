"""
=============================================================================
CORE NETWORKING
=============================================================================

Transport layer of the server: the listening socket, per-client
connections and the worker threads that serve them.

    ┌─────────────────────────────────────────────────────────────────────┐
    │  SocketServer ──accept──► Connection ──submit──► ThreadPool worker  │
    │                                                     │               │
    │                                                     ▼               │
    │                                        HTTPServer._process_connection│
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState
from .thread_pool import ThreadPool

__all__ = [
    "SocketServer",     # Accepts TCP connections
    "Connection",       # Client socket wrapper: buffered reads, streamed sends
    "ConnectionState",  # Connection lifecycle states
    "ThreadPool",       # Worker threads
]
