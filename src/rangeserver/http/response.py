"""
=============================================================================
HTTP RESPONSE WRITER
=============================================================================

Decides which status a file request gets and writes the header block and
body slice straight onto the connection.

=============================================================================
THREE OUTCOMES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   file missing ─────────────────────────►  404 Not Found             │
    │                                             (headers only)           │
    │                                                                      │
    │   no Range and extension not forced ───►  200 OK                     │
    │                                             bytes 0 .. size-1        │
    │                                                                      │
    │   Range given, or extension forced ────►  206 Partial Content        │
    │   (mp4 by default)                          bytes start .. end       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    Range spec               start                end
    ─────────────────────    ─────────────────    ──────────────
    BoundedRange(s, e)       s                    e
    OpenEndedRange(s)        s                    size - 1
    None (forced by ext)     0                    size - 1

Offsets are inclusive, so Content-Length is always end - start + 1.

=============================================================================
WIRE FORMAT
=============================================================================

    HTTP/1.1 206 Partial Content\r\n
    Server: BBBserver\r\n
    Content-Range: bytes 50-149/200\r\n
    Content-Length: 100\r\n
    Content-Type: text/html; charset=utf-8\r\n
    Last-Modified: Thu, 15 Jan 2026 10:00:00 GMT\r\n
    \r\n
    <100 bytes of file starting at offset 50>

No Date header is sent, so two identical requests against an
unmodified file get byte-identical responses.

=============================================================================
OUT-OF-RANGE REQUESTS
=============================================================================

The end offset is never clamped to the file size. What happens instead:

    start > end              → 416, "Content-Range: bytes */size"
                               (a non-positive length cannot be framed)
                               (a client range only: an empty file of a
                               forced extension, sent without Range, is
                               a plain 200 with Content-Length: 0)
    end >= size, non-strict  → headers as computed, body stops at EOF,
                               connection closed short
    start or end >= size,
    strict_ranges=True       → 416

=============================================================================
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, Optional, Protocol

from .mime_types import get_content_type
from .request import BoundedRange, OpenEndedRange, RangeSpec
from .status_codes import HTTPStatus
from ..content import FileMetadata, ResolvedFile


logger = logging.getLogger(__name__)


DEFAULT_SERVER_NAME = "BBBserver"
DEFAULT_RANGE_EXTENSIONS = ("mp4",)


class Writable(Protocol):
    """Anything the writer can send bytes to (a Connection, or a test fake)."""

    def write(self, data: bytes) -> int:
        ...


@dataclass
class ResponseHead:
    """
    Status line and headers of a response, without the body.

    The body is streamed separately so large files never sit in memory.
    """

    status: HTTPStatus
    headers: Dict[str, str] = field(default_factory=dict)
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    def to_bytes(self, server_name: str = DEFAULT_SERVER_NAME) -> bytes:
        """
        Serialize to the bytes that precede the body.

            HTTP/1.1 404 Not Found\\r\\n
            Server: BBBserver\\r\\n
            \\r\\n
        """
        lines = [self.status_line, f"Server: {server_name}"]
        lines.extend(f"{name}: {value}" for name, value in self.headers.items())
        lines.append("")
        return ("\r\n".join(lines) + "\r\n").encode("latin-1")


@dataclass(frozen=True)
class ResponseDecision:
    """
    Status and inclusive byte bounds for one response.

    Derived per request and never stored. For 404 and 416 the bounds are
    meaningless and left at their defaults.
    """

    status: HTTPStatus
    byte_start: int = 0
    byte_end: int = -1
    size_bytes: int = 0

    @property
    def content_length(self) -> int:
        return self.byte_end - self.byte_start + 1

    @property
    def content_range(self) -> str:
        if self.status == HTTPStatus.RANGE_NOT_SATISFIABLE:
            return f"bytes */{self.size_bytes}"
        return f"bytes {self.byte_start}-{self.byte_end}/{self.size_bytes}"

    @property
    def has_body(self) -> bool:
        return self.status in (HTTPStatus.OK, HTTPStatus.PARTIAL_CONTENT)


def decide(
    metadata: Optional[FileMetadata],
    extension: str,
    range_spec: Optional[RangeSpec],
    range_extensions: Iterable[str] = DEFAULT_RANGE_EXTENSIONS,
    strict_ranges: bool = False,
) -> ResponseDecision:
    """
    Map a parse result plus file metadata to a ResponseDecision.

    Args:
        metadata: Size/mtime of the resolved file, or None if not found.
        extension: Extension token from the request.
        range_spec: None, OpenEndedRange or BoundedRange.
        range_extensions: Extensions always answered as partial content.
        strict_ranges: Answer 416 when the range runs past end of file.

    Returns:
        ResponseDecision.
    """
    if metadata is None:
        return ResponseDecision(HTTPStatus.NOT_FOUND)

    size = metadata.size_bytes

    # An empty file has no byte range to force; it is sent whole
    if range_spec is None and (extension not in range_extensions or size == 0):
        return ResponseDecision(HTTPStatus.OK, 0, size - 1, size)

    if isinstance(range_spec, BoundedRange):
        start, end = range_spec.start, range_spec.end
    elif isinstance(range_spec, OpenEndedRange):
        start, end = range_spec.start, size - 1
    else:
        # Forced by extension, no client range at all
        start, end = 0, size - 1

    if start > end or (strict_ranges and (start >= size or end >= size)):
        return ResponseDecision(HTTPStatus.RANGE_NOT_SATISFIABLE, size_bytes=size)

    return ResponseDecision(HTTPStatus.PARTIAL_CONTENT, start, end, size)


class ResponseWriter:
    """
    Writes file responses onto a connection.

    Stateless apart from its settings, so one instance is shared by every
    connection thread.

    Usage:
        writer = ResponseWriter(server_name="BBBserver")
        with content_root.resolve(request.path) as resolved:
            sent = writer.respond(conn, resolved, request.extension, request.range_spec)
    """

    def __init__(
        self,
        server_name: str = DEFAULT_SERVER_NAME,
        range_extensions: Iterable[str] = DEFAULT_RANGE_EXTENSIONS,
        strict_ranges: bool = False,
        chunk_size: int = 8192,
    ):
        self.server_name = server_name
        self.range_extensions = frozenset(ext.lower().lstrip(".") for ext in range_extensions)
        self.strict_ranges = strict_ranges
        self.chunk_size = chunk_size

    def decide(
        self,
        resolved: Optional[ResolvedFile],
        extension: str,
        range_spec: Optional[RangeSpec],
    ) -> ResponseDecision:
        """decide() with this writer's settings."""
        return decide(
            resolved.metadata if resolved is not None else None,
            extension,
            range_spec,
            self.range_extensions,
            self.strict_ranges,
        )

    def respond(
        self,
        conn: Writable,
        resolved: Optional[ResolvedFile],
        extension: str,
        range_spec: Optional[RangeSpec],
    ) -> int:
        """
        Decide and write a complete response.

        Returns:
            Number of body bytes written.

        Raises:
            OSError: On any write (or file read) failure. Nothing is retried;
                     the caller closes the connection.
        """
        decision = self.decide(resolved, extension, range_spec)
        return self.write(conn, decision, resolved, extension)

    def write(
        self,
        conn: Writable,
        decision: ResponseDecision,
        resolved: Optional[ResolvedFile],
        extension: str,
    ) -> int:
        """Write the header block for a decision, then its body slice."""
        if not decision.has_body or resolved is None:
            extra = {}
            if decision.status == HTTPStatus.RANGE_NOT_SATISFIABLE:
                extra["Content-Range"] = decision.content_range
            self.write_status(conn, decision.status, extra)
            return 0

        head = ResponseHead(decision.status)
        if decision.status == HTTPStatus.PARTIAL_CONTENT:
            head.headers["Content-Range"] = decision.content_range
        head.headers["Content-Length"] = str(decision.content_length)
        head.headers["Content-Type"] = get_content_type(extension)
        head.headers["Last-Modified"] = format_http_date(resolved.last_modified)

        conn.write(head.to_bytes(self.server_name))
        return self._write_body(conn, resolved, decision)

    def write_status(
        self,
        conn: Writable,
        status: HTTPStatus,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        """Write a header-only response (404, 400, 500, ...)."""
        head = ResponseHead(status, dict(headers or {}))
        conn.write(head.to_bytes(self.server_name))

    def _write_body(
        self,
        conn: Writable,
        resolved: ResolvedFile,
        decision: ResponseDecision,
    ) -> int:
        sent = 0
        for chunk in resolved.read_range(decision.byte_start, decision.content_length, self.chunk_size):
            conn.write(chunk)
            sent += len(chunk)

        if sent < decision.content_length:
            logger.warning(
                f"Short body for {resolved.path}: declared {decision.content_length} "
                f"bytes, file had {sent} from offset {decision.byte_start}"
            )
        return sent


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date (RFC 7231).

    Format: Day, DD Mon YYYY HH:MM:SS GMT
    Example: Thu, 01 Jan 2026 12:00:00 GMT

    HTTP dates are always GMT; pass an aware UTC datetime.
    """
    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )
