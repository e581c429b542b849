"""
=============================================================================
MIDDLEWARE
=============================================================================

Cross-cutting request/response processing around the request dispatcher.

    base.py     Middleware ABC and MiddlewarePipeline
    logging.py  Access log (text or JSON) and X-Request-ID

=============================================================================
"""

from .base import Middleware, MiddlewarePipeline, NextHandler
from .logging import LoggingMiddleware, RequestLog

__all__ = [
    "Middleware",
    "MiddlewarePipeline",
    "NextHandler",
    "LoggingMiddleware",
    "RequestLog",
]
