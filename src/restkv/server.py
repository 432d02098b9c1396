"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the pieces together and wires the key-value routes.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                           HTTPServer                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   SocketServer ──conn──► ThreadPool ──► _process_connection()       │
    │                                              │                       │
    │                        read_request ◄────────┤                       │
    │                        RequestParser         │                       │
    │                        Middleware(Router)  ──┤  LoggingMiddleware    │
    │                                              │     └─► Router        │
    │                        send_response ◄───────┘           └─► handler │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

create_app() builds a server with the three routes of the service:

    GET  /list               show every entry
    GET  /entry/:key         show one entry
    PUT  /entry/:key/:value  create or overwrite an entry

=============================================================================
"""

import logging
from typing import Optional, Callable

from .config import ServerConfig
from .core import SocketServer, Connection, ConnectionState, ThreadPool, RequestTooLarge
from .handlers import EntryHandler
from .http import (
    HTTPRequest, RequestParser, HTTPParseError,
    HTTPResponse, ResponseBuilder, HTTPStatus,
    Router,
)
from .middleware import MiddlewarePipeline, Middleware, LoggingMiddleware
from .store import KeyValueStore

logger = logging.getLogger(__name__)


class HTTPServer:
    """
    Threaded HTTP/1.1 server.

        server = HTTPServer(ServerConfig(addr="127.0.0.1:8080"))

        @server.get("/ping")
        def ping(request):
            return ok("pong")

        server.run()   # blocks until SIGINT/SIGTERM or shutdown()
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._thread_pool = ThreadPool(
            min_workers=self.config.min_workers,
            max_workers=self.config.max_workers,
            queue_size=self.config.queue_size,
        )
        self._parser = RequestParser(max_request_size=self.config.max_request_size)

        self._router = Router()
        self._middleware = MiddlewarePipeline()

        # middleware.wrap(router.handle), built in run()
        self._handler: Optional[Callable[[HTTPRequest], HTTPResponse]] = None
        self._running = False

    # =========================================================================
    # CONFIGURATION
    # =========================================================================

    def use(self, middleware: Middleware) -> "HTTPServer":
        """Add middleware; the first added is the outermost."""
        self._middleware.add(middleware)
        return self

    @property
    def router(self) -> Router:
        return self._router

    @property
    def address(self) -> tuple[str, int]:
        """Bound (host, port) while running, configured one otherwise."""
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._running

    def get(self, path: str):
        """Register a GET route."""
        return self._router.get(path)

    def put(self, path: str):
        """Register a PUT route."""
        return self._router.put(path)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self):
        """
        Serve until shutdown. Blocks.

        Raises:
            OSError: If the listen address cannot be bound. The server is
                     fully torn down before the error propagates.
        """
        self._setup_logging()
        self._handler = self._middleware.wrap(self._router.handle)
        self._running = True
        self._thread_pool.start()

        logger.info(f"Starting {self.config.server_name} on {self.config.addr}")
        for route in self._router.routes():
            logger.debug(f"  {route.method:6} {route.path}")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def shutdown(self):
        """Ask a running server to stop. Safe from any thread."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the server is accepting connections."""
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)
        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("restkv").setLevel(level)

    def _shutdown(self):
        logger.info("Shutting down server...")
        self._running = False
        self._thread_pool.shutdown(wait=True, timeout=30.0)
        logger.info("Server stopped")

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Hand a fresh connection to the pool (called by SocketServer)."""
        # No queue-wait limit: a queued connection is served once a worker frees up
        if not self._thread_pool.submit(self._process_connection, conn):
            logger.warning(f"[{conn.id}] Thread pool full, rejecting connection")
            self._send_error(conn, HTTPStatus.SERVICE_UNAVAILABLE, "Server overloaded")
            conn.close()

    def _process_connection(self, conn: Connection):
        """
        Serve one connection (worker thread).

            read → parse → middleware + router → send → keep-alive? repeat
        """
        with conn:
            while self._running:
                try:
                    raw_request = conn.read_request()
                except TimeoutError:
                    self._send_error(conn, HTTPStatus.REQUEST_TIMEOUT, "Request timeout")
                    break
                except RequestTooLarge as e:
                    self._send_error(conn, HTTPStatus.PAYLOAD_TOO_LARGE, str(e))
                    break

                if raw_request is None:
                    break

                try:
                    request = self._parser.parse(raw_request, conn.address)
                except HTTPParseError as e:
                    logger.debug(f"[{conn.id}] Bad request: {e}")
                    self._send_error(conn, e.status, str(e))
                    break

                conn.state = ConnectionState.PROCESSING
                response = self._dispatch(conn, request)

                keep_alive = request.is_keep_alive and self.config.keep_alive
                if keep_alive:
                    response.headers.setdefault("Connection", "keep-alive")
                    response.headers.setdefault(
                        "Keep-Alive", f"timeout={int(self.config.keep_alive_timeout)}"
                    )
                else:
                    response.headers["Connection"] = "close"

                if not conn.send_response(response.to_bytes(self.config.server_name)):
                    break
                if not keep_alive:
                    break

                conn.set_keep_alive()

    def _dispatch(self, conn: Connection, request: HTTPRequest) -> HTTPResponse:
        try:
            return self._handler(request)
        except Exception as e:
            logger.exception(f"[{conn.id}] Handler error: {e}")
            return (ResponseBuilder()
                .status(HTTPStatus.INTERNAL_SERVER_ERROR)
                .text("Internal Server Error")
                .build())

    def _send_error(self, conn: Connection, status: HTTPStatus, message: str):
        """Error sent outside the handler path (parse errors, timeouts, 503)."""
        response = (ResponseBuilder()
            .status(status)
            .text(message)
            .close_connection()
            .build())
        conn.send_response(response.to_bytes(self.config.server_name))


def create_app(
    config: Optional[ServerConfig] = None,
    store: Optional[KeyValueStore] = None,
) -> HTTPServer:
    """
    Build the key-value service.

    Args:
        config: Server configuration (defaults to ServerConfig()).
        store: Store to serve. A new empty one is created when omitted, so
               every app owns its own data unless a store is shared on
               purpose.

    Returns:
        An HTTPServer with access logging and the entry routes registered.
    """
    server = HTTPServer(config)
    store = store if store is not None else KeyValueStore()
    entries = EntryHandler(store)

    server.use(LoggingMiddleware(log_format=server.config.log_format))

    server.get("/list")(entries.show)
    server.get("/entry/:key")(entries.show)
    server.put("/entry/:key/:value")(entries.update)

    return server
