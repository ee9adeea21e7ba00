"""
=============================================================================
CONNECTION
=============================================================================

Wraps one accepted client socket. Each connection carries exactly one
request and one response, then it is closed.

=============================================================================
TCP IS A BYTE STREAM
=============================================================================

A GET request may arrive in several recv() chunks:

    recv() → b"GET /vid"
    recv() → b"eo.mp4 HTTP/1.1\r\nRange: bytes=0-\r\n"
    recv() → b"\r\n"

We buffer until the blank line that ends the header block (\r\n\r\n),
until the client stops sending, or until max_request_size is reached.
GET requests have no body, so nothing after the blank line matters.

=============================================================================
DEADLINES
=============================================================================

The socket timeout doubles as a per-request read/write deadline. A stalled
read raises TimeoutError; a stalled write raises it from write(). Either
way only this connection is affected.

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional
import uuid


logger = logging.getLogger(__name__)


# Upper bounds on reading unread client input while closing
DRAIN_TIMEOUT = 0.5
DRAIN_LIMIT = 64 * 1024


class ConnectionState(Enum):
    """Connection lifecycle states, used for logging."""
    NEW = "new"
    READING = "reading"
    WRITING = "writing"
    CLOSED = "closed"


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short unique id used to tag log lines.
        state: Current lifecycle state.
        created_at: When the connection was accepted.
        bytes_sent: Total bytes written so far (headers and body).
        write_started: Set before the first byte goes out, so a write that
                       fails part-way is still known to have touched the wire.
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)
    bytes_sent: int = 0
    write_started: bool = False

    buffer_size: int = 8192
    timeout: Optional[float] = 30.0
    max_request_size: int = 64 * 1024

    def __post_init__(self):
        self.socket.setblocking(True)
        if self.timeout:
            self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def age(self) -> float:
        """Connection age in seconds."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> Optional[bytes]:
        """
        Read the request head from the socket.

        Returns:
            The bytes received, or None if the client closed the connection
            without sending anything.

        Raises:
            TimeoutError: If the read deadline expires before any complete
                          request head arrived.
        """
        self.state = ConnectionState.READING
        buffer = b""

        try:
            while b"\r\n\r\n" not in buffer and len(buffer) < self.max_request_size:
                chunk = self.read(self.buffer_size)
                if not chunk:
                    break  # Client stopped sending
                buffer += chunk
        except socket.timeout:
            if buffer:
                logger.debug(f"[{self.id}] Read deadline hit with partial request, parsing what arrived")
                return buffer
            raise TimeoutError("Request read timeout")

        return buffer or None

    def read(self, size: int) -> bytes:
        """
        Receive up to `size` bytes.

        Returns b"" when the peer has closed or reset the connection.
        """
        try:
            return self.socket.recv(size)
        except (ConnectionResetError, BrokenPipeError):
            return b""

    # =========================================================================
    # WRITING
    # =========================================================================

    def write(self, data: bytes) -> int:
        """
        Send all of `data`.

        sendall() keeps calling send() until every byte is out, so a short
        write is retried rather than silently dropping the tail.

        Returns:
            Number of bytes written (always len(data)).

        Raises:
            OSError: If the peer went away or the write deadline expired.
        """
        self.state = ConnectionState.WRITING
        self.write_started = True
        self.socket.sendall(data)
        self.bytes_sent += len(data)
        return len(data)

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self, drain: bool = True):
        """
        Close the connection.

        shutdown(SHUT_WR) sends FIN so the client sees end-of-response.
        Whatever the client sent that we never read (a request we rejected
        before reading, trailing bytes) is drained first: closing with
        unread data makes the kernel answer with RST, and the client may
        lose the response it has not read yet. The drain is bounded by
        DRAIN_TIMEOUT in total and DRAIN_LIMIT bytes.
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected

        if drain:
            self._drain()

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s, {self.bytes_sent} bytes sent")

    def _drain(self):
        deadline = time.monotonic() + DRAIN_TIMEOUT
        drained = 0
        try:
            while drained < DRAIN_LIMIT:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self.socket.settimeout(remaining)
                chunk = self.socket.recv(4096)
                if not chunk:
                    break
                drained += len(chunk)
        except OSError:
            pass  # socket.timeout included

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
