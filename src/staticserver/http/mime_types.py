"""
=============================================================================
MIME TYPE LOOKUP
=============================================================================

Maps file extensions to Content-Type values.

The lookup deliberately has NO default. When an extension is unknown the
caller leaves Content-Type unset and lets the client sniff, instead of
labelling everything application/octet-stream:

    >>> get_content_type("app.js")
    'text/javascript; charset=utf-8'
    >>> get_content_type("clip.mp4")
    'video/mp4'
    >>> get_content_type("LICENSE") is None
    True

Text types get a charset parameter, binary types do not.

=============================================================================
"""

from pathlib import Path
from typing import Optional, Union


MIME_TYPES = {
    # Text / web documents
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "text/javascript",
    ".mjs": "text/javascript",
    ".json": "application/json",
    ".map": "application/json",    # Source maps
    ".webmanifest": "application/manifest+json",
    ".xml": "application/xml",
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".csv": "text/csv",
    ".yaml": "text/yaml",
    ".yml": "text/yaml",

    # Images
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
    ".webp": "image/webp",
    ".avif": "image/avif",
    ".bmp": "image/bmp",

    # Fonts
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".ttf": "font/ttf",
    ".otf": "font/otf",

    # Audio / video (the usual Range request consumers)
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".ogg": "audio/ogg",
    ".m4a": "audio/mp4",
    ".flac": "audio/flac",
    ".mp4": "video/mp4",
    ".webm": "video/webm",
    ".mov": "video/quicktime",
    ".mkv": "video/x-matroska",

    # Documents / archives / binaries
    ".pdf": "application/pdf",
    ".zip": "application/zip",
    ".gz": "application/gzip",
    ".tar": "application/x-tar",
    ".wasm": "application/wasm",
    ".bin": "application/octet-stream",
}

# application/* types that are really text and want a charset
_TEXTUAL_APPLICATION_TYPES = {
    "application/json",
    "application/manifest+json",
    "application/xml",
    "image/svg+xml",
}


def get_mime_type(path: Union[str, Path]) -> Optional[str]:
    """
    Get the bare MIME type for a file from its extension.

    Returns None for unknown extensions (including files without one).
    Matching is case-insensitive: "IMG.PNG" → "image/png".
    """
    extension = Path(path).suffix.lower()
    return MIME_TYPES.get(extension)


def is_text_type(mime_type: str) -> bool:
    """True if the MIME type is text and should carry a charset."""
    return mime_type.startswith("text/") or mime_type in _TEXTUAL_APPLICATION_TYPES


def get_content_type(path: Union[str, Path], charset: str = "utf-8") -> Optional[str]:
    """
    Get the full Content-Type header value for a file, or None.

    Examples:
        >>> get_content_type("page.html")
        'text/html; charset=utf-8'
        >>> get_content_type("image.png")
        'image/png'
    """
    mime_type = get_mime_type(path)
    if mime_type is None:
        return None
    if is_text_type(mime_type):
        return f"{mime_type}; charset={charset}"
    return mime_type
