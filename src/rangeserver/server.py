"""
=============================================================================
FILE SERVER
=============================================================================

Ties the pieces together: accept, one thread per connection, parse,
resolve, respond, close.

=============================================================================
REQUEST FLOW
=============================================================================

    SocketServer.accept()
         │
         ▼
    _handle_connection(conn)          admission check, start worker thread
         │
         ▼  (worker thread)
    conn.read_request()               ──► None: client left, just close
         │                            ──► TimeoutError: 408
         ▼
    RequestParser.parse()             ──► ParseError: 400
         │                            ──► not GET: 501
         ▼
    ContentRoot.resolve(path)         ──► None: 404
         │                            ──► OSError (stat): 500
         ▼
    ResponseWriter.write()            ──► OSError: log, close
         │
         ▼
    conn.close()

=============================================================================
FAILURE ISOLATION
=============================================================================

Every failure above ends this one connection. Nothing a client sends, and
no I/O error on a file or socket, stops the accept loop or exits the
process.

=============================================================================
"""

import logging
import threading
import time
from typing import Optional

from .access_log import AccessLogger
from .config import ServerConfig
from .content import ContentRoot
from .core import SocketServer, Connection, ActiveConnectionCounter
from .http import (
    RequestParser, ParseError, ParsedRequest,
    ResponseWriter, HTTPStatus,
)


logger = logging.getLogger(__name__)


class FileServer:
    """
    Range-capable static file server.

    Usage:
        server = FileServer(ServerConfig(port=8080, content_root="./content"))
        server.run()  # Blocks until Ctrl+C

    Components:
        SocketServer            accept loop
        RequestParser           raw bytes → ParsedRequest
        ContentRoot             path → open file + metadata
        ResponseWriter          decision + bytes on the wire
        ActiveConnectionCounter in-flight connections (optional limit)
        AccessLogger            one line per response
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._parser = RequestParser()
        self._content = ContentRoot(
            self.config.content_root,
            confine_to_root=self.config.confine_to_root,
        )
        self._writer = ResponseWriter(
            server_name=self.config.server_name,
            range_extensions=self.config.range_extensions,
            strict_ranges=self.config.strict_ranges,
            chunk_size=self.config.buffer_size,
        )
        self._counter = ActiveConnectionCounter(limit=self.config.max_connections)
        self._access_log = AccessLogger(log_format=self.config.log_format)

        self._workers: set[threading.Thread] = set()
        self._workers_lock = threading.Lock()

    @property
    def address(self) -> tuple[str, int]:
        return self._socket_server.address

    @property
    def active_connections(self) -> int:
        return self._counter.count

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """
        Start the server (blocking).

        Args:
            host: Override config host.
            port: Override config port.
        """
        if host:
            self.config.host = host
        if port is not None:
            self.config.port = port

        self._setup_logging()

        logger.info(
            f"Serving {self._content.root_dir} on {self.config.host}:{self.config.port} "
            f"(range-forced: {', '.join(sorted(self._writer.range_extensions)) or 'none'})"
        )

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def stop(self):
        """Stop accepting connections. run() returns once in-flight workers finish."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("rangeserver").setLevel(level)

    def _shutdown(self, timeout: float = 30.0):
        logger.info("Shutting down server...")

        with self._workers_lock:
            workers = list(self._workers)

        deadline = time.time() + timeout
        for worker in workers:
            worker.join(max(0.0, deadline - time.time()))

        logger.info(f"Server stopped (peak concurrent connections: {self._counter.peak})")

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """
        Called by SocketServer on the accept thread: start a worker.

        With max_connections set, a connection over the limit is handed to
        a short-lived thread that answers 503; the accept thread itself
        never writes to or drains a client socket.
        """
        if not self._counter.try_acquire():
            logger.warning(f"[{conn.id}] {self._counter.count} connections active, rejecting {conn.client_ip}")
            self._start_thread(self._reject, conn, f"reject-{conn.id}")
            return

        if not self._start_thread(self._run_worker, conn, f"conn-{conn.id}"):
            self._counter.release()

    def _start_thread(self, target, conn: Connection, name: str) -> bool:
        """
        Start a daemon thread serving one connection.

        If the thread cannot be started (out of threads), the connection
        gets a best-effort 503 and is closed, and the accept loop carries on.
        """
        worker = threading.Thread(target=target, args=(conn,), name=name, daemon=True)
        with self._workers_lock:
            self._workers.add(worker)

        try:
            worker.start()
        except RuntimeError as e:
            with self._workers_lock:
                self._workers.discard(worker)
            logger.error(f"[{conn.id}] Could not start thread {name}: {e}")
            self._send_error(conn, HTTPStatus.SERVICE_UNAVAILABLE)
            conn.close(drain=False)
            return False
        return True

    def _reject(self, conn: Connection):
        try:
            with conn:
                self._send_error(conn, HTTPStatus.SERVICE_UNAVAILABLE)
        finally:
            with self._workers_lock:
                self._workers.discard(threading.current_thread())

    def _run_worker(self, conn: Connection):
        logger.info(
            f"[{conn.id}] Established connection with {conn.client_ip} "
            f"({self._counter.count} active)"
        )
        try:
            self._process_connection(conn)
        finally:
            self._counter.release()
            with self._workers_lock:
                self._workers.discard(threading.current_thread())
            logger.info(f"[{conn.id}] Connection with {conn.client_ip} closed")

    def _process_connection(self, conn: Connection):
        """
        Serve exactly one request on a connection (runs in a worker thread).

        Never raises: every error is logged and ends with the connection
        being closed.
        """
        started_at = time.time()
        request: Optional[ParsedRequest] = None
        status: Optional[HTTPStatus] = None
        content_range = None
        bytes_sent = 0

        with conn:
            try:
                raw_request = conn.read_request()
                if raw_request is None:
                    logger.debug(f"[{conn.id}] Client closed without sending a request")
                    return

                logger.debug(f"[{conn.id}] Received {len(raw_request)} bytes")

                try:
                    request = self._parser.parse(raw_request)
                except ParseError as e:
                    logger.info(f"[{conn.id}] {e}")
                    status = HTTPStatus(e.status_code)
                    self._writer.write_status(conn, status)
                    return

                if not request.is_get:
                    status = HTTPStatus.NOT_IMPLEMENTED
                    self._writer.write_status(conn, status)
                    return

                resolved = self._content.resolve(request.path)
                decision = self._writer.decide(resolved, request.extension, request.range_spec)
                status = decision.status
                if decision.status in (HTTPStatus.PARTIAL_CONTENT, HTTPStatus.RANGE_NOT_SATISFIABLE):
                    content_range = decision.content_range

                if resolved is None:
                    self._writer.write(conn, decision, None, request.extension)
                else:
                    with resolved:
                        bytes_sent = self._writer.write(conn, decision, resolved, request.extension)
                    logger.info(f"[{conn.id}] Sent {bytes_sent} bytes ({int(status)}) for {request.path}")

            except TimeoutError:
                if conn.write_started:
                    logger.warning(f"[{conn.id}] Write deadline expired, aborting response")
                    return
                logger.info(f"[{conn.id}] Request read timed out")
                status = HTTPStatus.REQUEST_TIMEOUT
                self._send_error(conn, status)

            except OSError as e:
                if conn.write_started:
                    # Part of the response is on the wire; cut it short
                    logger.warning(f"[{conn.id}] Response aborted after {conn.bytes_sent} bytes: {e}")
                    return
                logger.error(f"[{conn.id}] I/O error before response: {e}")
                status = HTTPStatus.INTERNAL_SERVER_ERROR
                self._send_error(conn, status)

            except Exception as e:
                logger.exception(f"[{conn.id}] Unexpected error: {e}")
                if not conn.write_started:
                    status = HTTPStatus.INTERNAL_SERVER_ERROR
                    self._send_error(conn, status)

            finally:
                if status is not None:
                    self._access_log.log(
                        connection_id=conn.id,
                        client_ip=conn.client_ip,
                        status_code=status,
                        started_at=started_at,
                        method=request.method if request else "-",
                        path=request.path if request else "-",
                        content_range=content_range,
                        bytes_sent=bytes_sent,
                    )

    def _send_error(self, conn: Connection, status: HTTPStatus):
        """Best-effort header-only error response; the connection closes after."""
        try:
            self._writer.write_status(conn, status)
        except OSError as e:
            logger.debug(f"[{conn.id}] Could not send {int(status)}: {e}")


def create_server(config: Optional[ServerConfig] = None) -> FileServer:
    """Factory for FileServer instances."""
    return FileServer(config)
