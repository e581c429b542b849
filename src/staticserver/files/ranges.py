"""
=============================================================================
RANGE PARSER (RFC 7233)
=============================================================================

Turns a Range header value into a single inclusive byte interval.

=============================================================================
ACCEPTED FORMS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                  Range header → ByteRange (size 500)                │
    ├─────────────────────────┬───────────────────────────────────────────┤
    │  bytes=0-100            │  ByteRange(0, 100)                        │
    │  bytes=0-               │  ByteRange(0, 499)      open-ended        │
    │  bytes=-100             │  ByteRange(400, 499)    last 100 bytes    │
    │  bytes=450-9999         │  ByteRange(450, 9999)   NOT clamped       │
    │  bytes=-                │  None                                     │
    │  bytes=0-10,20-30       │  None                   multi-range       │
    │  items=0-10             │  None                   unknown unit      │
    └─────────────────────────┴───────────────────────────────────────────┘

The parser only reads syntax. It does not clamp, and a suffix longer than
the file gives a negative start (bytes=-600 on 500 bytes → start=-100).
Deciding between 206 and 416 is the responder's job, using
is_satisfiable() and clamp().

=============================================================================
"""

import re
from dataclasses import dataclass
from typing import Optional


RANGE_PATTERN = re.compile(r"bytes=(?P<start>\d+)?-(?P<end>\d+)?")


@dataclass(frozen=True)
class ByteRange:
    """
    Inclusive byte interval [start, end].

        ByteRange(10, 19).length  →  10
    """

    start: int
    end: int

    @property
    def length(self) -> int:
        """Number of bytes covered (end - start + 1)."""
        return self.end - self.start + 1

    def is_satisfiable(self, size: int) -> bool:
        """
        True if at least part of the range lies inside a resource of `size`
        bytes.

        Unsatisfiable: end < 0, end < start, or start >= size.
        """
        return not (self.end < 0 or self.end < self.start or self.start >= size)

    def clamp(self, size: int) -> "ByteRange":
        """Clip the range to [0, size - 1]."""
        return ByteRange(max(0, self.start), min(self.end, size - 1))

    def content_range(self, size: int) -> str:
        """
        Content-Range header value for this range.

            >>> ByteRange(10, 19).content_range(100)
            'bytes 10-19/100'
        """
        return f"bytes {self.start}-{self.end}/{size}"


def unsatisfied_content_range(size: int) -> str:
    """Content-Range value sent with 416: "bytes */<size>"."""
    return f"bytes */{size}"


def parse_range(header_value: str, resource_size: int) -> Optional[ByteRange]:
    """
    Parse a Range header value against a resource size.

    Args:
        header_value: Raw header value, e.g. "bytes=0-1023".
        resource_size: Size of the resource in bytes.

    Returns:
        The (unclamped) ByteRange, or None when the value is unparseable.
    """
    match = RANGE_PATTERN.fullmatch(header_value.strip())
    if not match:
        return None

    start, end = match.group("start"), match.group("end")

    if start is not None and end is not None:
        return ByteRange(int(start), int(end))

    if start is not None:
        return ByteRange(int(start), resource_size - 1)

    if end is not None:
        # Suffix form: the last `end` bytes
        return ByteRange(resource_size - int(end), resource_size - 1)

    return None
