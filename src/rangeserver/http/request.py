"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Turns the raw bytes of a single GET request into a ParsedRequest.

=============================================================================
WHAT WE ACTUALLY LOOK AT
=============================================================================

A file server only needs two things from the request: the path and,
optionally, a byte range.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │    GET /videos/intro.mp4 HTTP/1.1\r\n      ◄── request line          │
    │        ───────┬─────────                                             │
    │               └── path, extension = "mp4"                            │
    │                                                                      │
    │    Host: localhost:8080\r\n                ◄── ignored               │
    │    Range: bytes=1024-\r\n                  ◄── range spec            │
    │    \r\n                                                              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
RANGE SPECS
=============================================================================

Only the single-range "bytes=<start>-<end>" form is understood. The parse
result is a tagged variant rather than a pair of integers plus a flag:

    Range header                 range_spec
    ──────────────────────────   ─────────────────────────
    (absent)                     None
    bytes=500-                   OpenEndedRange(start=500)
    bytes=500-999                BoundedRange(start=500, end=999)
    bytes=-500                   None   (suffix form unsupported)
    bytes=0-1,5-9                None   (multi-range unsupported)
    items=0-5                    None   (unknown unit)
    bytes=<19+ digits>-          None   (offset too large to seek to)

A Range header that does not match is never an error; the request is
simply served as if no range had been asked for. File size plays no part
here: bounds are checked against the file in the response writer.

=============================================================================
"""

import re
from dataclasses import dataclass
from typing import Optional, Union


class ParseError(Exception):
    """
    Raised when the request line cannot be parsed.

    This is the only fatal parse error. The status_code attribute tells the
    server what to answer before closing the connection.
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class OpenEndedRange:
    """Range with only a start byte: serve from start to end of file."""

    start: int


@dataclass(frozen=True)
class BoundedRange:
    """Range with inclusive start and end bytes."""

    start: int
    end: int


RangeSpec = Union[OpenEndedRange, BoundedRange]


@dataclass(frozen=True)
class ParsedRequest:
    """
    A parsed request, ready to be resolved against the content root.

    Attributes:
        path:       The request target, verbatim. Not validated here; a bad
                    path simply fails to open later.
        extension:  Lowercase token after the last "." of the final path
                    segment ("" if there is none).
        range_spec: None, OpenEndedRange or BoundedRange.
        method:     Method token as sent by the client.
        version:    Protocol token ("HTTP/1.1").
    """

    path: str
    extension: str = ""
    range_spec: Optional[RangeSpec] = None
    method: str = "GET"
    version: str = "HTTP/1.1"

    @property
    def is_get(self) -> bool:
        return self.method == "GET"


class RequestParser:
    """
    Parses raw request bytes into ParsedRequest objects.

    The parser is lenient. It accepts whatever arrived on the
    socket, with or without the blank line that ends the header block, and
    only gives up when the first line has no path token.

    Usage:
        parser = RequestParser()
        request = parser.parse(b"GET /a.mp4 HTTP/1.1\\r\\nRange: bytes=0-99\\r\\n\\r\\n")
        request.range_spec   # BoundedRange(start=0, end=99)
    """

    # METHOD SP PATH [SP HTTP/x.y]
    REQUEST_LINE_PATTERN = re.compile(r"^(\S+)[ \t]+(\S+)(?:[ \t]+(HTTP/\d+(?:\.\d+)?))?\s*$")

    # bytes=<start>-<end?>, nothing else (no lists, no suffix ranges).
    # At most 18 digits per offset keeps both below 2**63 for seek().
    RANGE_PATTERN = re.compile(r"^bytes\s*=\s*(\d{1,18})\s*-\s*(\d{0,18})$", re.IGNORECASE)

    def parse(self, data: bytes) -> ParsedRequest:
        """
        Parse raw request bytes.

        Args:
            data: Bytes read from the connection. Anything after the
                  header terminator is ignored.

        Returns:
            ParsedRequest.

        Raises:
            ParseError: If the request line is missing or has no path.
        """
        header_end = data.find(b"\r\n\r\n")
        if header_end != -1:
            data = data[:header_end]

        # latin-1 maps every byte, so decoding can never fail
        lines = [line.rstrip("\r") for line in data.decode("latin-1").split("\n")]
        if not lines or not lines[0].strip():
            raise ParseError("Empty request")

        method, path, version = self._parse_request_line(lines[0])

        return ParsedRequest(
            path=path,
            extension=parse_extension(path),
            range_spec=self._find_range(lines[1:]),
            method=method,
            version=version,
        )

    def _parse_request_line(self, line: str) -> tuple[str, str, str]:
        match = self.REQUEST_LINE_PATTERN.match(line)
        if not match:
            raise ParseError(f"Malformed request line: {line!r}")

        method, path, version = match.groups()
        return method.upper(), path, version or "HTTP/1.0"

    def _find_range(self, header_lines: list[str]) -> Optional[RangeSpec]:
        for line in header_lines:
            name, sep, value = line.partition(":")
            if sep and name.strip().lower() == "range":
                return parse_range(value)
        return None


def parse_range(value: str) -> Optional[RangeSpec]:
    """
    Parse the value of a Range header.

    Examples:
        >>> parse_range("bytes=100-")
        OpenEndedRange(start=100)
        >>> parse_range("bytes=100-199")
        BoundedRange(start=100, end=199)
        >>> parse_range("bytes=-100") is None
        True
    """
    match = RequestParser.RANGE_PATTERN.match(value.strip())
    if not match:
        return None

    start, end = match.groups()
    if end:
        return BoundedRange(start=int(start), end=int(end))
    return OpenEndedRange(start=int(start))


def parse_extension(path: str) -> str:
    """
    Extension token of the last path segment, lowercased.

        >>> parse_extension("/media/Clip.MP4")
        'mp4'
        >>> parse_extension("/releases.v2/README")
        ''
        >>> parse_extension("/song.mp3?t=30")
        'mp3'
    """
    name = path.split("?", 1)[0].split("#", 1)[0].rsplit("/", 1)[-1]
    _, dot, extension = name.rpartition(".")
    return extension.lower() if dot else ""


def parse_request(data: bytes) -> ParsedRequest:
    """Convenience wrapper around RequestParser().parse()."""
    return RequestParser().parse(data)
