"""
=============================================================================
HTTP HEADER MAP
=============================================================================

An ordered, case-insensitive mapping of header names to values.

=============================================================================
WHY NOT A PLAIN DICT?
=============================================================================

HTTP header names are case-insensitive (RFC 7230 section 3.2):

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    SAME HEADER, DIFFERENT SPELLING                  │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   headers["date"] = "Thu, 01 Jan 2026 12:00:00 GMT"                 │
    │   "Date" in headers            → True                               │
    │   headers["DATE"]              → "Thu, 01 Jan 2026 12:00:00 GMT"    │
    │                                                                      │
    │   headers["Content-Type"] = "text/html"                             │
    │   headers["content-type"] = "text/plain"   (replaces, no duplicate) │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

With a plain dict, a file handler that sets "date" and a serializer that
checks for "Date" would send the header twice. HeaderMap keys every entry
by the lowercased name and remembers the spelling used last, so lookups
ignore case and serialization keeps the caller's spelling.

Insertion order is preserved: replacing a value keeps the original slot.

=============================================================================
"""

from collections.abc import MutableMapping
from typing import Dict, Iterator, Mapping, Optional, Tuple, Union


class HeaderMap(MutableMapping):
    """
    Ordered mapping of header name → value with case-insensitive keys.

    Usage:
        headers = HeaderMap({"server": "staticserver"})
        headers["Accept-Ranges"] = "bytes"
        headers.get("ACCEPT-RANGES")   # "bytes"
        list(headers.items())          # [("server", ...), ("Accept-Ranges", "bytes")]
    """

    def __init__(
        self,
        initial: Optional[Union[Mapping[str, str], "HeaderMap"]] = None,
        **kwargs: str,
    ):
        # lowercased name → (display name, value)
        self._store: Dict[str, Tuple[str, str]] = {}
        if initial:
            self.update(initial)
        if kwargs:
            self.update(kwargs)

    def __setitem__(self, name: str, value: str) -> None:
        self._store[name.lower()] = (name, str(value))

    def __getitem__(self, name: str) -> str:
        return self._store[name.lower()][1]

    def __delitem__(self, name: str) -> None:
        del self._store[name.lower()]

    def __iter__(self) -> Iterator[str]:
        return (display for display, _ in self._store.values())

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._store

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Mapping):
            other = HeaderMap(other)
            return {k: v for k, (_, v) in self._store.items()} == {
                k: v for k, (_, v) in other._store.items()
            }
        return NotImplemented

    def __repr__(self) -> str:
        return f"HeaderMap({dict(self.items())!r})"

    def copy(self) -> "HeaderMap":
        """Return a shallow copy that keeps order and spelling."""
        return HeaderMap(self)
