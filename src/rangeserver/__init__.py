"""
=============================================================================
RANGESERVER - Static File Server With Byte-Range Support
=============================================================================

Serves files from a content directory over raw TCP sockets, one thread per
connection, one request per connection. Answers 200 for whole files, 206 for
byte ranges (and always for video, so players can seek), 404 for anything
that cannot be opened.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    rangeserver/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m rangeserver)
    ├── server.py            # FileServer: accept → worker → respond
    ├── config.py            # ServerConfig dataclass
    ├── content.py           # ContentRoot: request path → open file
    ├── access_log.py        # One line per answered request
    ├── core/                # Low-level components
    │   ├── socket_server.py # TCP accept loop
    │   ├── connection.py    # Socket wrapper
    │   └── counter.py       # Active connection counter
    └── http/                # HTTP protocol components
        ├── request.py       # Request line + Range header parsing
        ├── response.py      # Status decision + response writing
        ├── status_codes.py  # HTTP status enum
        └── mime_types.py    # Extension → Content-Type

=============================================================================
QUICK START
=============================================================================

    from rangeserver import FileServer, ServerConfig

    server = FileServer(ServerConfig(port=8080, content_root="./content"))
    server.run()  # Blocks until Ctrl+C

=============================================================================
"""

__version__ = "1.0.0"

from .server import FileServer, create_server
from .config import ServerConfig

__all__ = ["FileServer", "ServerConfig", "create_server", "__version__"]
