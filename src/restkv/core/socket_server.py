"""
=============================================================================
TCP SOCKET SERVER
=============================================================================

Owns the listening socket and the accept loop.

    socket()   ─►  bind(host, port)  ─►  listen(backlog)  ─►  accept loop
                        │                                         │
                        └── OSError ("Address already in use")    │
                            is logged and re-raised; the caller    │
                            decides that it is fatal.              ▼
                                                  Connection(...) handed
                                                  to the callback

Socket options:
    SO_REUSEADDR   a restarted server need not wait out TIME_WAIT; a port
                   another process is still listening on is refused
    TCP_NODELAY    one-line text responses are sent without Nagle delay

accept() wakes up every second to check whether shutdown() was called.

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from .connection import Connection

logger = logging.getLogger(__name__)

ACCEPT_POLL_INTERVAL = 1.0


class SocketServer:
    """
    Low-level TCP listener.

        def handle_connection(conn: Connection):
            ...

        server = SocketServer(config)
        server.start(handle_connection)   # blocks until shutdown()
    """

    def __init__(self, config: ServerConfig):
        self.config = config
        self._listener: Optional[socket.socket] = None
        self._serving = False
        self._ready = threading.Event()
        self._saved_handlers: dict = {}

    @property
    def address(self) -> Tuple[str, int]:
        """
        The bound (ip, port) once listening, otherwise the configured one.

        With port 0 in the config this is where the OS-assigned port
        shows up.
        """
        listener = self._listener
        if listener is not None:
            try:
                return listener.getsockname()[:2]
            except OSError:
                pass  # closed by a concurrent shutdown
        return (self.config.host, self.config.port)

    def _bind(self) -> socket.socket:
        host, port = self.config.host, self.config.port
        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            listener.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
            listener.settimeout(ACCEPT_POLL_INTERVAL)
            listener.bind((host, port))
            listener.listen(self.config.backlog)
        except OSError as e:
            logger.error(f"Failed to bind to {host}:{port}: {e}")
            listener.close()
            raise
        return listener

    # =========================================================================
    # SIGNALS
    # =========================================================================

    def _install_signal_handlers(self):
        """
        Turn SIGINT/SIGTERM into shutdown().

        Python only allows this on the main thread; a server running on
        any other thread is stopped by calling shutdown() directly.
        """
        if threading.current_thread() is not threading.main_thread():
            return

        def on_signal(signum, frame):
            logger.info(f"Received {signal.Signals(signum).name}, initiating shutdown...")
            self.shutdown()

        for sig in (signal.SIGTERM, signal.SIGINT):
            self._saved_handlers[sig] = signal.signal(sig, on_signal)

    def _restore_signal_handlers(self):
        while self._saved_handlers:
            sig, handler = self._saved_handlers.popitem()
            signal.signal(sig, handler)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def start(self, on_connection: Callable[[Connection], None]):
        """
        Bind, listen and run the accept loop. Blocks until shutdown().

        Raises:
            OSError: If the address cannot be bound (in use, no permission,
                     unknown host). Nothing is retried.
        """
        self._listener = self._bind()
        self._serving = True
        self._install_signal_handlers()

        host, port = self.address
        logger.info(f"Server listening on {host}:{port}")
        self._ready.set()

        try:
            self._accept_loop(on_connection)
        finally:
            self._close()

    def _accept_loop(self, on_connection: Callable[[Connection], None]):
        while self._serving:
            try:
                client, peer = self._listener.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if self._serving:
                    logger.error(f"Accept error: {e}")
                break

            logger.debug(f"Accepted connection from {peer[0]}:{peer[1]}")
            on_connection(Connection(
                socket=client,
                address=peer,
                buffer_size=self.config.buffer_size,
                timeout=self.config.timeout,
                keep_alive_timeout=self.config.keep_alive_timeout,
                max_request_size=self.config.max_request_size,
            ))

    def shutdown(self):
        """Stop the accept loop. Idempotent, callable from any thread."""
        if self._serving:
            logger.info("Shutting down socket server...")
        self._serving = False

    def _close(self):
        self._restore_signal_handlers()
        self._ready.clear()

        listener, self._listener = self._listener, None
        if listener is not None:
            listener.close()

        logger.info("Socket server stopped")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the socket is listening. False on timeout."""
        return self._ready.wait(timeout)
