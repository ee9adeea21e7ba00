"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

The plumbing under the HTTP layer:

    SocketServer             accepts TCP connections, one callback each
    Connection               one client socket: read the request head,
                             write the response, close
    ActiveConnectionCounter  thread-safe count of connections in flight

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState
from .counter import ActiveConnectionCounter

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
    "ActiveConnectionCounter",
]
