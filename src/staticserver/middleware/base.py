"""
=============================================================================
BASE MIDDLEWARE INTERFACE
=============================================================================

Middleware wraps the request dispatcher in layers (Chain of
Responsibility). Each layer sees the request on the way in and the
response on the way out, and may answer on its own without calling
further in:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   Request ──►  ┌──────────┐    ┌──────────┐    ┌────────────────┐  │
    │                │ Logging  │───►│   ...    │───►│ Dispatcher     │  │
    │                │   MW     │    │   MW     │    │ (final handler)│  │
    │                └────┬─────┘    └────┬─────┘    └───────┬────────┘  │
    │                     ▲               ▲                  │           │
    │   Response ◄────────┴───────────────┴──────────────────┘           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

A response leaving the dispatcher may carry a body STREAM that has not
been read yet. Middleware can change status and headers but must not
consume the stream; the connection does that after the chain returns.

=============================================================================
"""

from abc import ABC, abstractmethod
from typing import Callable, List
import logging

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)


# The next middleware, or the final handler
NextHandler = Callable[[HTTPRequest], HTTPResponse]


class Middleware(ABC):
    """
    Abstract base class for middleware.

        class ServerTiming(Middleware):
            def __call__(self, request, next):
                start = time.time()
                response = next(request)
                response.set_header("Server-Timing", f"app;dur={...}")
                return response
    """

    @abstractmethod
    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        """
        Process the request.

        Args:
            request: The incoming request.
            next: The rest of the chain; call it to continue.

        Returns:
            The response, from next() or produced here.
        """

    @property
    def name(self) -> str:
        return self.__class__.__name__


class MiddlewarePipeline:
    """
    Ordered middleware around a final handler.

        pipeline = MiddlewarePipeline()
        pipeline.add(LoggingMiddleware())        # first added = outermost
        handler = pipeline.wrap(dispatcher.handle)
        response = handler(request)
    """

    def __init__(self):
        self._middleware: List[Middleware] = []

    def add(self, middleware: Middleware) -> "MiddlewarePipeline":
        """Append middleware (innermost so far). Returns self."""
        self._middleware.append(middleware)
        logger.debug(f"Added middleware: {middleware.name}")
        return self

    def use(self, *middleware: Middleware) -> "MiddlewarePipeline":
        """Append several middleware at once. Returns self."""
        for mw in middleware:
            self.add(mw)
        return self

    def wrap(self, handler: NextHandler) -> NextHandler:
        """
        Build the chain around `handler`.

        Wrapping runs in reverse so that, for [A, B, C], the result is
        A(B(C(handler))).
        """
        current = handler
        for middleware in reversed(self._middleware):
            current = self._create_wrapped_handler(middleware, current)
        return current

    def _create_wrapped_handler(
        self,
        middleware: Middleware,
        next_handler: NextHandler
    ) -> NextHandler:
        # Bind middleware and next_handler now, not at call time
        def wrapped(request: HTTPRequest) -> HTTPResponse:
            return middleware(request, next_handler)

        return wrapped

    def __len__(self) -> int:
        return len(self._middleware)

    def __iter__(self):
        return iter(self._middleware)
