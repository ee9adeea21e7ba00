"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │ REQUEST PARSER (request.py)                                         │
    │   b"GET /a.mp4 HTTP/1.1\r\nRange: bytes=0-\r\n\r\n"                 │
    │     → ParsedRequest(path="/a.mp4", extension="mp4",                 │
    │                     range_spec=OpenEndedRange(start=0))             │
    ├─────────────────────────────────────────────────────────────────────┤
    │ RESPONSE WRITER (response.py)                                       │
    │   ParsedRequest + ResolvedFile → 200 / 206 / 404 on the wire        │
    ├─────────────────────────────────────────────────────────────────────┤
    │ STATUS CODES (status_codes.py), MIME TYPES (mime_types.py)          │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .request import (
    ParsedRequest,
    RequestParser,
    ParseError,
    OpenEndedRange,
    BoundedRange,
    RangeSpec,
    parse_request,
)
from .response import (
    ResponseWriter,
    ResponseDecision,
    ResponseHead,
    decide,
    format_http_date,
)
from .status_codes import HTTPStatus
from .mime_types import get_mime_type, get_content_type

__all__ = [
    # Request parsing
    "ParsedRequest",
    "RequestParser",
    "ParseError",
    "OpenEndedRange",
    "BoundedRange",
    "RangeSpec",
    "parse_request",

    # Response writing
    "ResponseWriter",
    "ResponseDecision",
    "ResponseHead",
    "decide",
    "format_http_date",

    # Status codes
    "HTTPStatus",

    # MIME types
    "get_mime_type",
    "get_content_type",
]
