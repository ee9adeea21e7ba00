"""
Process-wide count of connections currently being served.

Diagnostic only: it shows up in log lines, and when an admission limit is
configured it decides whether a new connection gets served or a 503.
"""

import threading
from typing import Optional


class ActiveConnectionCounter:
    """
    Thread-safe counter of in-flight connections.

    Usage:
        counter = ActiveConnectionCounter(limit=100)
        if counter.try_acquire():
            try:
                serve(conn)
            finally:
                counter.release()
    """

    def __init__(self, limit: Optional[int] = None):
        self.limit = limit
        self._count = 0
        self._peak = 0
        self._lock = threading.Lock()

    @property
    def count(self) -> int:
        with self._lock:
            return self._count

    @property
    def peak(self) -> int:
        """Highest count seen since start."""
        with self._lock:
            return self._peak

    def try_acquire(self) -> bool:
        """Count one more connection unless the limit is reached."""
        with self._lock:
            if self.limit is not None and self._count >= self.limit:
                return False
            self._count += 1
            self._peak = max(self._peak, self._count)
            return True

    def release(self) -> None:
        with self._lock:
            if self._count > 0:
                self._count -= 1
