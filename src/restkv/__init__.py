"""
=============================================================================
RESTKV - In-Memory Key-Value Store Over HTTP
=============================================================================

A string-to-string map held in memory and served over plain HTTP/1.1,
on a small threaded server written against raw sockets.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                          ARCHITECTURE                               │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   client ──TCP──► SocketServer ──► ThreadPool worker               │
    │                                        │                             │
    │                                 RequestParser                        │
    │                                        │                             │
    │                              LoggingMiddleware                       │
    │                                        │                             │
    │                                     Router                           │
    │                       ┌────────────────┼────────────────┐           │
    │                  GET /list     GET /entry/:key  PUT /entry/:key/:value
    │                       └───── EntryHandler ──────────────┘           │
    │                                        │                             │
    │                       KeyValueStore (ReadWriteLock)                  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    restkv/
    ├── __init__.py          # Package exports
    ├── __main__.py          # CLI entry point (python -m restkv)
    ├── server.py            # HTTPServer, create_app()
    ├── config.py            # ServerConfig dataclass, listen address parsing
    ├── core/
    │   ├── socket_server.py # Listening socket and accept loop
    │   ├── connection.py    # Buffered client connection
    │   └── thread_pool.py   # Worker threads
    ├── http/
    │   ├── request.py       # Request parsing
    │   ├── response.py      # Response building
    │   ├── router.py        # Method + path routing with :params
    │   └── status_codes.py  # Status codes used by the service
    ├── middleware/
    │   ├── base.py          # Middleware and pipeline
    │   └── logging.py       # Access log
    ├── handlers/
    │   └── entries.py       # show / update
    └── store/
        ├── rwlock.py        # Shared/exclusive lock
        └── kv_store.py      # The map

=============================================================================
QUICK START
=============================================================================

    from restkv import create_app, ServerConfig, KeyValueStore

    store = KeyValueStore({"first": "hello"})
    server = create_app(ServerConfig(addr="127.0.0.1:8080"), store=store)
    server.run()

    $ curl -X PUT localhost:8080/entry/second/hi
    Updated: data[second] = hi
    $ curl localhost:8080/list
    Read list: {first -> hello, second -> hi}

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig
from .server import HTTPServer, create_app
from .store import KeyValueStore

__all__ = ["HTTPServer", "ServerConfig", "KeyValueStore", "create_app", "__version__"]
