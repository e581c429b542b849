"""
=============================================================================
STATIC FILE SERVING
=============================================================================

Everything between a parsed request and a file response:

    ┌─────────────────────────────────────────────────────────────────────┐
    │ dispatcher.py   RequestDispatcher: final handler of the pipeline    │
    │ resolver.py     PathResolver: normalize, redirect, locate           │
    │ responder.py    FileResponder / IndexResponder: build responses     │
    │ ranges.py       Range header → ByteRange                            │
    │ conditional.py  If-Modified-Since → 304 decision                    │
    │ metadata.py     os.stat → ResourceMetadata                          │
    │ streams.py      lazy, bounded file reads                            │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .conditional import is_not_modified, parse_http_date
from .dispatcher import RequestDispatcher
from .metadata import ResourceMetadata, probe
from .ranges import ByteRange, parse_range
from .resolver import (
    PathResolver,
    Redirect,
    ResolvedTarget,
    ServeFile,
    ServeIndex,
    normalize_path,
)
from .responder import FileResponder, IndexResponder
from .streams import byte_slice, open_slice

__all__ = [
    "RequestDispatcher",
    "PathResolver",
    "ResolvedTarget",
    "Redirect",
    "ServeFile",
    "ServeIndex",
    "normalize_path",
    "FileResponder",
    "IndexResponder",
    "ByteRange",
    "parse_range",
    "is_not_modified",
    "parse_http_date",
    "ResourceMetadata",
    "probe",
    "byte_slice",
    "open_slice",
]
