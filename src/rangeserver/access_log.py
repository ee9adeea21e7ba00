"""
=============================================================================
ACCESS LOG
=============================================================================

One log record per answered request, on its own namespaced logger so it can
be routed separately from diagnostics:

    logging.getLogger("rangeserver.access").addHandler(file_handler)

Two formats:

    text   127.0.0.1 - - [15/Jan/2026:10:00:00 +0000] "GET /clip.mp4" 206
           bytes=0-999/1000 1000 3.41ms

    json   {"connection_id": "1a2b3c4d", "method": "GET", "path": "/clip.mp4",
            "status_code": 206, "range": "bytes 0-999/1000", ...}

=============================================================================
"""

import json
import logging
import time
from dataclasses import dataclass, asdict
from typing import Optional


logger = logging.getLogger("rangeserver.access")


@dataclass
class AccessLog:
    """
    Structured access log entry.

    connection_id:  Connection.id, ties the entry to diagnostic lines
    client_ip:      Client's IP address
    method, path:   From the request line ("-" if it never parsed)
    status_code:    Status sent
    content_range:  Content-Range value for 206/416, "-" otherwise
    bytes_sent:     Body bytes actually written
    duration_ms:    Accept to close
    timestamp:      When the response finished
    """

    connection_id: str
    client_ip: str
    method: str
    path: str
    status_code: int
    content_range: str
    bytes_sent: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        data = asdict(self)
        data["duration_ms"] = round(self.duration_ms, 2)
        return data

    def to_text(self) -> str:
        """Apache-style line with the served range appended."""
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.method} {self.path}" {self.status_code} '
            f'{self.content_range} {self.bytes_sent} {self.duration_ms:.2f}ms'
        )


class AccessLogger:
    """Formats and emits AccessLog entries."""

    def __init__(self, log_format: str = "text", log_level: int = logging.INFO):
        self.log_format = log_format
        self.log_level = log_level

    def log(
        self,
        connection_id: str,
        client_ip: str,
        status_code: int,
        started_at: float,
        method: str = "-",
        path: str = "-",
        content_range: Optional[str] = None,
        bytes_sent: int = 0,
    ) -> AccessLog:
        entry = AccessLog(
            connection_id=connection_id,
            client_ip=client_ip,
            method=method,
            path=path,
            status_code=int(status_code),
            content_range=content_range or "-",
            bytes_sent=bytes_sent,
            duration_ms=(time.time() - started_at) * 1000,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

        if self.log_format == "json":
            logger.log(self.log_level, json.dumps(entry.to_dict()))
        else:
            logger.log(self.log_level, entry.to_text())

        return entry
