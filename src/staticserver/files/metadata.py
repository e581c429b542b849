"""
=============================================================================
RESOURCE METADATA
=============================================================================

A read-only snapshot of what the filesystem says about a path, taken once
per request:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         ResourceMetadata                            │
    ├──────────────┬──────────────────────────────────────────────────────┤
    │ is_directory │ os.stat S_ISDIR                                      │
    │ is_file      │ os.stat S_ISREG (sockets, FIFOs, devices: neither)   │
    │ size         │ st_size in bytes                                     │
    │ modified_at  │ st_mtime as an aware UTC datetime                    │
    │ accessed_at  │ st_atime as an aware UTC datetime                    │
    └──────────────┴──────────────────────────────────────────────────────┘

probe() never raises for an unusable path. Missing files, permission
problems and names the OS refuses (embedded NUL bytes) all come back as
None, which the resolver turns into the index fallback.

=============================================================================
"""

import os
import stat
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResourceMetadata:
    """
    Filesystem facts about one resource.

    Timestamps are None when the platform does not report them.
    """

    is_directory: bool
    is_file: bool
    size: int
    modified_at: Optional[datetime] = None
    accessed_at: Optional[datetime] = None

    @classmethod
    def from_stat(cls, st: os.stat_result) -> "ResourceMetadata":
        """Build metadata from an os.stat() result."""
        return cls(
            is_directory=stat.S_ISDIR(st.st_mode),
            is_file=stat.S_ISREG(st.st_mode),
            size=st.st_size,
            modified_at=_to_utc(getattr(st, "st_mtime", None)),
            accessed_at=_to_utc(getattr(st, "st_atime", None)),
        )


def _to_utc(timestamp: Optional[float]) -> Optional[datetime]:
    if timestamp is None:
        return None
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


def probe(path: Union[str, Path]) -> Optional[ResourceMetadata]:
    """
    Stat a path, following symlinks.

    Returns:
        ResourceMetadata, or None if the path cannot be stat'ed for any
        reason.
    """
    try:
        st = os.stat(path)
    except (OSError, ValueError) as e:
        logger.debug(f"Probe failed for {path}: {e}")
        return None
    return ResourceMetadata.from_stat(st)
