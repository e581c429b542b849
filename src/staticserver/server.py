"""
=============================================================================
STATIC FILE SERVER
=============================================================================

Ties the layers together into a runnable server.

=============================================================================
ARCHITECTURE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                          HTTPServer                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   SocketServer ── accept ──► ThreadPool.submit(_process_connection) │
    │                                                                      │
    │   _process_connection (worker thread, keep-alive loop):             │
    │                                                                      │
    │       Connection.read_request()          raw bytes                  │
    │             │                                                        │
    │       RequestParser.parse()              HTTPRequest                │
    │             │                                                        │
    │       MiddlewarePipeline ─► RequestDispatcher.handle()              │
    │             │                                                        │
    │       Connection.send_stream(response.iter_bytes())                 │
    │             │                                                        │
    │       response.close()                   file handle released       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
ERROR MAPPING
=============================================================================

    HTTPParseError            → its status (400 / 405 / 413 / 505), close
    request too large (read)  → 413, close
    first request times out   → 408, close
    thread pool queue full    → 503, close
    handler raises            → 500 (the only path to a 500)
    body stream raises        → logged, connection closed mid-response

=============================================================================
"""

import logging
from typing import Optional, Callable

from .config import ServerConfig
from .core import SocketServer, Connection, ConnectionState, ThreadPool
from .files import RequestDispatcher
from .http import (
    HTTPRequest, RequestParser, HTTPParseError,
    HTTPResponse, ResponseBuilder, HTTPStatus,
    internal_error,
)
from .middleware import MiddlewarePipeline, Middleware


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    Multi-threaded HTTP/1.1 static file server.

    =========================================================================
    USAGE
    =========================================================================

        config = ServerConfig(root_dir="./public", port=8000)
        server = HTTPServer(config)
        server.use(LoggingMiddleware(log_format=config.log_format))
        server.run()            # blocks until Ctrl+C / SIGTERM / stop()

    =========================================================================
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        dispatcher: Optional[RequestDispatcher] = None,
    ):
        """
        Args:
            config: Server configuration. Validated immediately.
            dispatcher: Final request handler; built from config if omitted.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._thread_pool = ThreadPool(
            min_workers=self.config.min_workers,
            max_workers=self.config.max_workers,
        )
        self._parser = RequestParser(max_request_size=self.config.max_request_size)
        self._dispatcher = dispatcher or RequestDispatcher.from_config(self.config)
        self._middleware = MiddlewarePipeline()

        # Pipeline-wrapped dispatcher, built in run()
        self._handler: Optional[Callable[[HTTPRequest], HTTPResponse]] = None

        self._running = False

    # =========================================================================
    # CONFIGURATION
    # =========================================================================

    def use(self, middleware: Middleware) -> "HTTPServer":
        """
        Add middleware. First added runs outermost.

        Returns:
            Self for method chaining.
        """
        self._middleware.add(middleware)
        return self

    @property
    def dispatcher(self) -> RequestDispatcher:
        return self._dispatcher

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """
        Start the server and block until it is stopped.

        Args:
            host: Override config host.
            port: Override config port.
        """
        if host:
            self.config.host = host
        if port:
            self.config.port = port

        self._running = True
        self._setup_logging()

        self._handler = self._middleware.wrap(self._dispatcher.handle)
        self._thread_pool.start()

        logger.info(
            f"Serving {self.config.root_dir} on http://{self.config.host}:{self.config.port} "
            f"({self.config.min_workers}-{self.config.max_workers} workers)"
        )

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def stop(self):
        """Stop accepting connections; run() returns once workers finish."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the server is listening. False on timeout."""
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        """Configure the root logger once, from config.log_level."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("staticserver").setLevel(level)

    def _shutdown(self):
        """Stop the workers, letting in-flight connections finish (30s cap)."""
        logger.info("Shutting down server...")
        self._running = False
        self._thread_pool.shutdown(wait=True, timeout=30.0)
        logger.info("Server stopped")

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Hand a new connection to the thread pool (accept thread)."""
        submitted = self._thread_pool.submit(
            self._process_connection,
            args=(conn,),
            block=False,
        )

        if not submitted:
            logger.warning(f"[{conn.id}] Thread pool full, rejecting {conn.client_ip}")
            self._send_error(conn, HTTPStatus.SERVICE_UNAVAILABLE, "Server overloaded")
            conn.close()

    def _process_connection(self, conn: Connection):
        """
        Serve requests on one connection until it closes (worker thread).

        Each iteration reads one request, runs it through the pipeline and
        writes the response. The loop ends on Connection: close, a send
        failure, an error, or server shutdown.
        """
        with conn:
            while self._running:
                try:
                    raw_request = conn.read_request()
                except TimeoutError:
                    self._send_error(conn, HTTPStatus.REQUEST_TIMEOUT, "Request timeout")
                    break
                except ValueError as e:
                    self._send_error(conn, HTTPStatus.PAYLOAD_TOO_LARGE, str(e))
                    break
                except OSError as e:
                    logger.debug(f"[{conn.id}] Read failed: {e}")
                    break

                if raw_request is None:
                    break

                try:
                    request = self._parser.parse(raw_request, conn.address)
                except HTTPParseError as e:
                    logger.info(f"[{conn.id}] Bad request ({e.status_code}): {e}")
                    self._send_error(conn, e.status_code, str(e))
                    break

                conn.state = ConnectionState.PROCESSING

                try:
                    response = self._handler(request)
                except Exception as e:
                    logger.exception(f"[{conn.id}] Handler error: {e}")
                    response = internal_error()

                if not self._send(conn, request, response):
                    break

                if not response.headers.get("Connection", "").lower() == "keep-alive":
                    break

                conn.set_keep_alive()

    def _send(self, conn: Connection, request: HTTPRequest, response: HTTPResponse) -> bool:
        """
        Write one response and release its body stream.

        Returns:
            True if the whole response went out.
        """
        # Without a length the body can only be delimited by closing
        keep_alive = (
            self.config.keep_alive
            and request.is_keep_alive
            and response.content_length is not None
        )

        if keep_alive:
            response.headers["Connection"] = "keep-alive"
            response.headers["Keep-Alive"] = f"timeout={int(self.config.keep_alive_timeout)}"
        else:
            response.headers["Connection"] = "close"

        try:
            return conn.send_stream(response.iter_bytes(self.config.server_name))
        except OSError as e:
            logger.error(f"[{conn.id}] Aborted response for {request.path}: {e}")
            return False
        finally:
            response.close()

    def _send_error(self, conn: Connection, status: int, message: str):
        """
        Send a plain-text error for failures outside the handler
        (parse errors, timeouts, overload). Always closes the connection.
        """
        response = (ResponseBuilder(self.config.server_name)
            .status(HTTPStatus(status))
            .text(message)
            .close_connection()
            .build())

        conn.send_response(response.to_bytes(self.config.server_name))


def create_app(config: Optional[ServerConfig] = None) -> HTTPServer:
    """
    Create a server application.

    Example:
        app = create_app(ServerConfig(root_dir="./dist", port=3000))
        app.run()
    """
    return HTTPServer(config)
