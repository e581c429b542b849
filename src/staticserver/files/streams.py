"""
=============================================================================
BYTE-SLICE STREAMS
=============================================================================

File bodies are never read into memory whole. They are produced as a
generator of chunks that the connection writes out one by one:

    open_slice(path, start=10, length=10, chunk_size=4)

        open file ── seek(10) ── read 4 ── read 4 ── read 2 ── close
                                   │          │          │
                                   ▼          ▼          ▼
                                 yield      yield      yield

=============================================================================
CLEANUP
=============================================================================

The file is opened in a with block inside the generator, so it is
released on every exit:

    • the slice was fully sent
    • a read failed, or the file was truncated underneath us and ended
      before the promised length (OSError)
    • the consumer stopped early and called close() on the generator,
      which raises GeneratorExit at the paused yield

Nothing is opened until the first chunk is requested.

=============================================================================
"""

from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Union


DEFAULT_CHUNK_SIZE = 64 * 1024


def byte_slice(
    source: BinaryIO,
    length: int,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Iterator[bytes]:
    """
    Yield exactly `length` bytes from `source`, from its current position.

    Works with any binary file-like object, io.BytesIO included.

    Raises:
        OSError: The source ran out before `length` bytes.
    """
    remaining = length
    while remaining > 0:
        chunk = source.read(min(chunk_size, remaining))
        if not chunk:
            raise OSError(
                f"Source ended after {length - remaining} of {length} bytes"
            )
        remaining -= len(chunk)
        yield chunk


def open_slice(
    path: Union[str, Path],
    start: int = 0,
    length: Optional[int] = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Iterator[bytes]:
    """
    Stream `length` bytes of the file at `path`, beginning at `start`.

    Args:
        path: File to read.
        start: Byte offset of the first byte.
        length: Number of bytes, or None for everything up to EOF. When
            given, the file must still hold that many bytes or OSError is
            raised once it runs out.
        chunk_size: Largest chunk yielded.
    """
    with open(path, "rb") as f:
        if start:
            f.seek(start)
        if length is None:
            while True:
                chunk = f.read(chunk_size)
                if not chunk:
                    break
                yield chunk
        else:
            yield from byte_slice(f, length, chunk_size)
