"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the file server.

    ┌─────────────────────────────────────────────────────────────────────┐
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m rangeserver 8080 --root ./content               │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── RANGE_PORT=8080 python -m rangeserver                     │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class ServerConfig:
    """
    Configuration for the file server.

    NETWORK        host, port, backlog, buffer_size, timeout, max_request_size
    CONTENT        content_root, confine_to_root
    RANGES         range_extensions, strict_ranges
    CONCURRENCY    max_connections
    LOGGING        log_level, log_format
    IDENTITY       server_name
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """Address to bind to (all interfaces by default)."""

    port: int = 8080
    """Port to listen on. 0 lets the OS pick one (used by the tests)."""

    backlog: int = 128
    """Maximum number of queued, not yet accepted connections."""

    buffer_size: int = 8192
    """Bytes per recv() and per file read when streaming a body."""

    timeout: Optional[float] = 30.0
    """
    Per-request read/write deadline in seconds.
    None = block forever.
    """

    max_request_size: int = 64 * 1024
    """Stop reading the request head after this many bytes."""

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    content_root: str = "./content"
    """Directory request paths are resolved against."""

    confine_to_root: bool = True
    """
    Canonicalize request paths and refuse anything outside content_root.
    False joins the path verbatim (no traversal protection).
    """

    # ─────────────────────────────────────────────────────────────────────
    # RANGES
    # ─────────────────────────────────────────────────────────────────────

    range_extensions: tuple[str, ...] = ("mp4",)
    """Extensions always answered with 206, even without a Range header."""

    strict_ranges: bool = False
    """Answer 416 for ranges that run past end of file instead of sending short."""

    # ─────────────────────────────────────────────────────────────────────
    # CONCURRENCY
    # ─────────────────────────────────────────────────────────────────────

    max_connections: Optional[int] = None
    """
    Admission limit on concurrently served connections.
    None = unbounded, one thread per connection.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR)."""

    log_format: str = "text"
    """Access log format: 'text' or 'json'."""

    # ─────────────────────────────────────────────────────────────────────
    # SERVER IDENTITY
    # ─────────────────────────────────────────────────────────────────────

    server_name: str = "BBBserver"
    """Value of the Server header."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        RANGE_HOST              Server host (default: 0.0.0.0)
        RANGE_PORT              Server port (default: 8080)
        RANGE_TIMEOUT           Read/write deadline in seconds (default: 30)
        RANGE_CONTENT_ROOT      Content directory (default: ./content)
        RANGE_MAX_CONNECTIONS   Admission limit (default: unbounded)
        RANGE_LOG_LEVEL         Logging level (default: INFO)
        """
        max_connections = os.getenv("RANGE_MAX_CONNECTIONS")
        return cls(
            host=os.getenv("RANGE_HOST", "0.0.0.0"),
            port=int(os.getenv("RANGE_PORT", "8080")),
            timeout=float(os.getenv("RANGE_TIMEOUT", "30")),
            content_root=os.getenv("RANGE_CONTENT_ROOT", "./content"),
            max_connections=int(max_connections) if max_connections else None,
            log_level=os.getenv("RANGE_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called at server construction so a bad value fails at startup, not
        on the first request.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.max_connections is not None and self.max_connections < 1:
            raise ValueError("max_connections must be >= 1")

        if self.log_format not in ("text", "json"):
            raise ValueError(f"Invalid log_format: {self.log_format}. Must be 'text' or 'json'.")
