"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket: buffered request reads, buffered and
streamed response writes, keep-alive timeouts and a clean TCP close.

=============================================================================
TCP IS A BYTE STREAM
=============================================================================

TCP does not preserve message boundaries. A request may arrive in pieces:

    First recv():  "GET /vid"
    Second recv(): "eo.mp4 HTTP/1.1\r\nRange: bytes=0-"
    Third recv():  "\r\n\r\n"

So reads are buffered until the header terminator (\r\n\r\n) is seen,
then until Content-Length body bytes have arrived. Anything after that
stays in the buffer for the next request on the connection.

=============================================================================
STREAMED RESPONSES
=============================================================================

A file response is not one bytes object but an iterator of chunks:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                          send_stream()                              │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   for chunk in response.iter_bytes():      head, then file chunks   │
    │       sendall(chunk)                                                │
    │                                                                      │
    │   client hangs up   → return False, stream closed (file released)  │
    │   file read fails   → exception propagates, stream closed          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Socket errors are the client's doing and are reported with a False
return. Errors raised while producing a chunk are server-side failures;
they propagate so the caller can log them and abort the connection,
because the head (with its Content-Length) is already on the wire.

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Iterable, Optional
import uuid


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states, used in logs."""
    NEW = "new"                # Just accepted
    READING = "reading"        # Reading request data
    PROCESSING = "processing"  # Handler is executing
    WRITING = "writing"        # Sending response data
    KEEP_ALIVE = "keep_alive"  # Waiting for the next request
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short connection identifier for log lines.
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
        last_activity: Timestamp of the last successful read or write.
        requests_handled: Number of requests read on this connection.
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)
    last_activity: float = field(default_factory=time.time)
    requests_handled: int = 0

    # From ServerConfig
    buffer_size: int = 8192
    timeout: Optional[float] = 30.0        # First request and all writes
    keep_alive_timeout: float = 5.0        # Waiting for a follow-up request
    max_request_size: int = 1024 * 1024

    _buffer: bytes = field(default=b"", repr=False)

    def __post_init__(self):
        self.socket.setblocking(True)
        if self.timeout:
            self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> Optional[bytes]:
        """
        Read one complete HTTP request from the socket.

        Uses the shorter keep-alive timeout once a request has already been
        served on this connection.

        Returns:
            Complete request bytes, or None if the client closed the
            connection (or went quiet on a keep-alive connection).

        Raises:
            TimeoutError: The first request never completed.
            ValueError: The request exceeds max_request_size.
        """
        self.state = ConnectionState.READING
        self.last_activity = time.time()

        if self.requests_handled > 0:
            self.socket.settimeout(self.keep_alive_timeout)

        try:
            while b"\r\n\r\n" not in self._buffer:
                chunk = self._recv()
                if not chunk:
                    return None
                self._buffer += chunk
                if len(self._buffer) > self.max_request_size:
                    raise ValueError(f"Request too large: {len(self._buffer)} bytes")

            header_end = self._buffer.find(b"\r\n\r\n")
            body_start = header_end + 4
            content_length = self._parse_content_length(self._buffer[:header_end])

            while len(self._buffer) - body_start < content_length:
                chunk = self._recv()
                if not chunk:
                    break  # Client closed mid-body; the parser reports it
                self._buffer += chunk
                if len(self._buffer) > self.max_request_size:
                    raise ValueError(f"Request too large: {len(self._buffer)} bytes")

            request_end = body_start + content_length
            request_data = self._buffer[:request_end]
            # Pipelined requests stay buffered
            self._buffer = self._buffer[request_end:]

            self.requests_handled += 1
            self.last_activity = time.time()
            return request_data

        except socket.timeout:
            if self.requests_handled > 0:
                logger.debug(f"[{self.id}] Keep-alive timeout")
                return None
            raise TimeoutError("Request read timeout")

        finally:
            self.socket.settimeout(self.timeout)

    def _recv(self) -> bytes:
        """socket.recv() that maps an abrupt disconnect to b""."""
        try:
            data = self.socket.recv(self.buffer_size)
            self.last_activity = time.time()
            return data
        except (ConnectionResetError, BrokenPipeError):
            return b""

    def _parse_content_length(self, headers: bytes) -> int:
        """
        Find Content-Length in raw header bytes, 0 if absent or invalid.

        Needed before the request can be parsed, so this is a plain scan.
        """
        try:
            header_str = headers.decode("latin-1").lower()
            for line in header_str.split("\r\n"):
                if line.startswith("content-length:"):
                    return max(0, int(line.split(":", 1)[1].strip()))
        except (ValueError, IndexError):
            pass
        return 0

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send a fully serialized response.

        Returns:
            True if sent, False if the client is gone.
        """
        self.state = ConnectionState.WRITING
        self.last_activity = time.time()

        try:
            self.socket.sendall(data)
            self.last_activity = time.time()
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    def send_stream(self, chunks: Iterable[bytes]) -> bool:
        """
        Send a response produced chunk by chunk.

        The iterable is closed on every exit path, so a generator reading
        from a file releases it even if the client disconnects halfway.

        Returns:
            True if every chunk was sent, False if the client is gone.

        Raises:
            Whatever producing a chunk raises (e.g. OSError reading a file).
        """
        self.state = ConnectionState.WRITING
        self.last_activity = time.time()

        iterator = iter(chunks)
        try:
            for chunk in iterator:
                try:
                    self.socket.sendall(chunk)
                except OSError as e:
                    logger.warning(f"[{self.id}] Send failed mid-stream: {e}")
                    return False
                self.last_activity = time.time()
            return True
        finally:
            close = getattr(iterator, "close", None)
            if close is not None:
                close()

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully.

            1. shutdown(SHUT_WR)  send FIN, we're done writing
            2. drain              discard whatever the client still sends
            3. close()            release the file descriptor
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(1024):
                pass
        except OSError:
            pass

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.requests_handled} requests")

    def set_keep_alive(self):
        """Mark connection as waiting for the next request."""
        self.state = ConnectionState.KEEP_ALIVE

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
