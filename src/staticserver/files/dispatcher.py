"""
=============================================================================
REQUEST DISPATCHER
=============================================================================

The final handler of the middleware pipeline. Routes every request to the
right responder:

    HTTPRequest
        │
        ├── method != GET ───────────────────────► 405
        │
        ▼
    PathResolver.resolve(request.path)
        │
        ├── Redirect(location) ──────────────────► 301 Location: location[?query]
        ├── ServeFile(fs_path, metadata) ────────► FileResponder
        └── ServeIndex() ────────────────────────► IndexResponder

request.path is already percent-decoded by the request parser. The query
string is carried through redirects untouched.

=============================================================================
"""

import logging

from ..config import ServerConfig
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, method_not_allowed, redirect
from .resolver import PathResolver, Redirect, ServeFile
from .responder import ALLOWED_METHODS, FileResponder, IndexResponder


logger = logging.getLogger(__name__)


class RequestDispatcher:
    """
    Maps requests to file, index and redirect responses.

    Usage:
        dispatcher = RequestDispatcher.from_config(config)
        handler = pipeline.wrap(dispatcher.handle)
    """

    def __init__(
        self,
        resolver: PathResolver,
        file_responder: FileResponder,
        index_responder: IndexResponder,
    ):
        self.resolver = resolver
        self.file_responder = file_responder
        self.index_responder = index_responder

    @classmethod
    def from_config(cls, config: ServerConfig) -> "RequestDispatcher":
        """Wire up resolver and responders from a ServerConfig."""
        index_responder = IndexResponder(config.index_path, config.chunk_size)
        return cls(
            resolver=PathResolver(config.root_dir),
            file_responder=FileResponder(
                index_responder,
                server_name=config.server_name,
                chunk_size=config.chunk_size,
            ),
            index_responder=index_responder,
        )

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """Produce the response for one request."""
        if request.method != "GET":
            return method_not_allowed(ALLOWED_METHODS)

        target = self.resolver.resolve(request.path)

        if isinstance(target, Redirect):
            location = target.location
            if request.query_string:
                location += "?" + request.query_string
            return redirect(location, permanent=True)

        if isinstance(target, ServeFile):
            logger.debug(f"Serving file {target.fs_path}")
            return self.file_responder.respond(request, target.fs_path, target.metadata)

        return self.index_responder.respond()

    __call__ = handle
