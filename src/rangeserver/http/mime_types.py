"""
=============================================================================
MIME TYPE DETECTION
=============================================================================

Maps the request's extension token (lowercase, no dot) to the value sent in
the Content-Type header.

    ┌────────────────────────────────────────────────────────────────────┐
    │  "html" → text/html; charset=utf-8                                 │
    │  "mp4"  → video/mp4                                                │
    │  "bin"  → application/octet-stream   (unknown, treat as binary)    │
    └────────────────────────────────────────────────────────────────────┘

The extension is derived once by the request parser, so lookups here never
touch the filesystem path.

=============================================================================
"""

MIME_TYPES = {
    # -------------------------------------------------------------------------
    # TEXT TYPES
    # -------------------------------------------------------------------------
    "html": "text/html",
    "htm": "text/html",
    "css": "text/css",
    "js": "text/javascript",
    "mjs": "text/javascript",
    "json": "application/json",
    "xml": "application/xml",
    "txt": "text/plain",
    "md": "text/markdown",
    "csv": "text/csv",

    # -------------------------------------------------------------------------
    # IMAGE TYPES
    # -------------------------------------------------------------------------
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "svg": "image/svg+xml",
    "ico": "image/x-icon",
    "webp": "image/webp",
    "bmp": "image/bmp",

    # -------------------------------------------------------------------------
    # AUDIO / VIDEO TYPES
    # -------------------------------------------------------------------------
    # These are the files clients usually fetch with Range requests
    # (seeking in a player).
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "ogg": "audio/ogg",
    "m4a": "audio/mp4",
    "flac": "audio/flac",
    "mp4": "video/mp4",
    "m4v": "video/mp4",
    "webm": "video/webm",
    "mov": "video/quicktime",
    "mkv": "video/x-matroska",
    "avi": "video/x-msvideo",

    # -------------------------------------------------------------------------
    # DOCUMENTS / ARCHIVES
    # -------------------------------------------------------------------------
    "pdf": "application/pdf",
    "zip": "application/zip",
    "gz": "application/gzip",
    "tar": "application/x-tar",
    "wasm": "application/wasm",
}

DEFAULT_MIME_TYPE = "application/octet-stream"

# application/* types that are still text and get a charset parameter
_TEXT_APPLICATION_TYPES = {
    "application/json",
    "application/xml",
    "image/svg+xml",
}


def get_mime_type(extension: str, default: str = DEFAULT_MIME_TYPE) -> str:
    """
    Look up the MIME type for an extension token.

    Examples:
        >>> get_mime_type("mp4")
        'video/mp4'
        >>> get_mime_type("PNG")
        'image/png'
        >>> get_mime_type("")
        'application/octet-stream'
    """
    return MIME_TYPES.get(extension.lower().lstrip("."), default)


def is_text_type(mime_type: str) -> bool:
    """Check if a MIME type represents text content."""
    return mime_type.startswith("text/") or mime_type in _TEXT_APPLICATION_TYPES


def get_content_type(extension: str, charset: str = "utf-8") -> str:
    """
    Full Content-Type header value for an extension.

    Text types carry a charset parameter, binary types do not:

        >>> get_content_type("html")
        'text/html; charset=utf-8'
        >>> get_content_type("mp4")
        'video/mp4'
    """
    mime_type = get_mime_type(extension)
    if is_text_type(mime_type):
        return f"{mime_type}; charset={charset}"
    return mime_type
