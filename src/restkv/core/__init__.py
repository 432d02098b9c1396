"""
Low-level server plumbing: listening socket, client connections, workers.
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState, RequestTooLarge
from .thread_pool import ThreadPool

__all__ = [
    "SocketServer",     # Accepts TCP connections
    "Connection",       # Buffered client socket
    "ConnectionState",  # Connection lifecycle states
    "RequestTooLarge",  # Raised by Connection.read_request()
    "ThreadPool",       # Worker threads, one task per connection
]
