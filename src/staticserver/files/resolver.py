"""
=============================================================================
PATH RESOLVER
=============================================================================

Maps a decoded request path onto the document root and decides what the
request becomes: a redirect, a file, or the index page.

=============================================================================
RESOLUTION FLOW
=============================================================================

    decoded path
        │
        ├── normalize_path() changed it? ─────────► Redirect(normalized)
        │     "/a//b", "/a/./b", "/a/../b", "/a/b//"
        │
        ├── drop one trailing "/" (lookup key only)
        │
        ├── probe(root / key)
        │     ├── fails (missing, EACCES, bad name) ► ServeIndex
        │     ├── real path escapes root (symlink) ─► ServeIndex  + warning
        │     ├── directory, path has no "/" ───────► Redirect(path + "/")
        │     ├── directory, path ends in "/" ──────► ServeIndex
        │     ├── regular file ─────────────────────► ServeFile(fs_path, meta)
        │     └── anything else (FIFO, socket) ─────► ServeIndex
        ▼

Unknown paths fall back to the index page instead of 404, so client-side
routed apps ("/settings/profile") load their shell from any URL.

=============================================================================
SECURITY: STAYING INSIDE THE ROOT
=============================================================================

Two layers keep requests inside root_dir:

    1. LEXICAL: normalize_path() clamps ".." at "/", so "/../../etc/passwd"
       redirects to "/etc/passwd", which is looked up as root/etc/passwd.

    2. SYMLINKS: a link inside the root can point anywhere. The probed path
       is resolved and checked with relative_to(root_dir):

           full_path = (root_dir / key).resolve()
           full_path.relative_to(root_dir)   # ValueError if outside

       Escapes are served the index page like any other miss.

=============================================================================
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Union
from urllib.parse import quote

from .metadata import ResourceMetadata, probe


logger = logging.getLogger(__name__)


# =============================================================================
# RESOLVED TARGETS
# =============================================================================


@dataclass(frozen=True)
class Redirect:
    """301 to `location` (percent-encoded path, no query string)."""

    location: str


@dataclass(frozen=True)
class ServeFile:
    """Serve the regular file at `fs_path`, described by `metadata`."""

    fs_path: Path
    metadata: ResourceMetadata


@dataclass(frozen=True)
class ServeIndex:
    """Serve the configured index page."""


ResolvedTarget = Union[Redirect, ServeFile, ServeIndex]


# =============================================================================
# NORMALIZATION
# =============================================================================


def normalize_path(path: str) -> str:
    """
    Normalize a decoded URL path, POSIX style.

    - repeated slashes collapse          "/a//b"     → "/a/b"
    - "." segments are dropped           "/a/./b"    → "/a/b"
    - ".." removes the previous segment  "/a/../b"   → "/b"
    - ".." never climbs above "/"        "/../etc"   → "/etc"
    - one trailing "/" is kept           "/a/b///"   → "/a/b/"

    The result is always absolute, and normalizing it again returns it
    unchanged.
    """
    segments: list[str] = []
    for segment in path.split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            if segments:
                segments.pop()
            continue
        segments.append(segment)

    normalized = "/" + "/".join(segments)
    if path.endswith("/") and normalized != "/":
        normalized += "/"
    return normalized


def encode_location(path: str) -> str:
    """Percent-encode a decoded path for a Location header ("/" kept)."""
    return quote(path, safe="/")


# =============================================================================
# RESOLVER
# =============================================================================


class PathResolver:
    """
    Resolves decoded request paths against a document root.

    Usage:
        resolver = PathResolver("./public")
        target = resolver.resolve("/css/site.css")
        if isinstance(target, ServeFile):
            ...
    """

    def __init__(self, root_dir: Union[str, Path]):
        """
        Args:
            root_dir: Directory to serve. Resolved to an absolute path once
                      so the containment check compares real paths.
        """
        self.root_dir = Path(root_dir).resolve()

    def resolve(self, decoded_path: str) -> ResolvedTarget:
        """
        Decide what a request for `decoded_path` should get.

        Never raises for filesystem problems; they all end in ServeIndex.
        """
        normalized = normalize_path(decoded_path)
        if normalized != decoded_path:
            logger.debug(f"Redirecting {decoded_path!r} to {normalized!r}")
            return Redirect(encode_location(normalized))

        key = normalized[:-1] if normalized.endswith("/") else normalized
        fs_path = self.root_dir / key.lstrip("/")

        metadata = probe(fs_path)
        if metadata is None:
            logger.debug(f"No resource at {fs_path}, serving index")
            return ServeIndex()

        if not self._is_inside_root(fs_path):
            logger.warning(f"Path escapes document root: {decoded_path!r}")
            return ServeIndex()

        if metadata.is_directory:
            if not decoded_path.endswith("/"):
                return Redirect(encode_location(normalized + "/"))
            return ServeIndex()

        if metadata.is_file:
            return ServeFile(fs_path, metadata)

        logger.debug(f"Not a regular file: {fs_path}, serving index")
        return ServeIndex()

    def _is_inside_root(self, fs_path: Path) -> bool:
        """True if the real path of `fs_path` lies within root_dir."""
        try:
            fs_path.resolve().relative_to(self.root_dir)
        except (OSError, RuntimeError, ValueError):
            return False
        return True
