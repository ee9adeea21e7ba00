"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The handful of status codes a range-capable file server actually sends.

    ┌────────┬───────────────────────────────────────────────────────────┐
    │  2xx   │ 200 OK              - Whole file follows                  │
    │        │ 206 Partial Content - A byte slice follows               │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  4xx   │ 400 Bad Request     - No usable request line             │
    │        │ 404 Not Found       - Nothing to open under the root     │
    │        │ 408 Request Timeout - Client stalled mid-request        │
    │        │ 416 Range Not Satisfiable - Range cannot be framed       │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  5xx   │ 500 Internal Server Error - stat/read failed             │
    │        │ 501 Not Implemented - Method other than GET              │
    │        │ 503 Service Unavailable - Admission limit reached        │
    └────────┴───────────────────────────────────────────────────────────┘

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    Extends IntEnum, so members compare equal to plain integers:

        >>> HTTPStatus.PARTIAL_CONTENT == 206
        True
        >>> HTTPStatus.PARTIAL_CONTENT.phrase
        'Partial Content'
    """

    OK = 200
    PARTIAL_CONTENT = 206                # Range request fulfilled (video streaming)

    BAD_REQUEST = 400
    NOT_FOUND = 404
    REQUEST_TIMEOUT = 408
    RANGE_NOT_SATISFIABLE = 416

    INTERNAL_SERVER_ERROR = 500
    NOT_IMPLEMENTED = 501
    SERVICE_UNAVAILABLE = 503

    @property
    def phrase(self) -> str:
        """Reason phrase that follows the code in the status line."""
        return _STATUS_PHRASES.get(self, "Unknown")

    @property
    def is_success(self) -> bool:
        return 200 <= self < 300

    @property
    def is_error(self) -> bool:
        return self >= 400


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.PARTIAL_CONTENT: "Partial Content",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.REQUEST_TIMEOUT: "Request Timeout",
    HTTPStatus.RANGE_NOT_SATISFIABLE: "Range Not Satisfiable",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
    HTTPStatus.NOT_IMPLEMENTED: "Not Implemented",
    HTTPStatus.SERVICE_UNAVAILABLE: "Service Unavailable",
}
