"""
=============================================================================
MAIN HTTP SERVER
=============================================================================

The orchestrator that ties the components together into a running server.

=============================================================================
ARCHITECTURE OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        ┌─────────────────┐                          │
    │                        │   HTTPServer    │                          │
    │                        └────────┬────────┘                          │
    │            ┌────────────────────┼────────────────────┐              │
    │            ▼                    ▼                    ▼              │
    │    ┌──────────────┐    ┌──────────────┐    ┌──────────────┐         │
    │    │ SocketServer │    │  ThreadPool  │    │    Router    │         │
    │    └──────┬───────┘    └──────────────┘    └──────┬───────┘         │
    │           ▼                                       ▼                 │
    │    ┌──────────────┐              ┌────────────────────────────┐     │
    │    │  Connection  │              │ Static / JsonService / 404 │     │
    │    └──────────────┘              └─────────────┬──────────────┘     │
    │                                                ▼                    │
    │                                   ┌──────────────────────────┐      │
    │                                   │ FileLoader / Dataset     │      │
    │                                   └──────────────────────────┘      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
REQUEST LIFECYCLE
=============================================================================

    1. SocketServer accepts the TCP connection
    2. Connection is queued on the ThreadPool (full queue → 500, close)
    3. Worker reads the request bytes (capped at max_request_size)
    4. respond():
         parse ──► middleware ──► router ──► handler ──► HTTPResponse
           │                                    │
           └─ HTTPParseError → 400              └─ any failure → 500
    5. Response bytes are sent and the connection is closed

One request per connection: there is no keep-alive.

=============================================================================
"""

import logging
from typing import Callable, Optional, Tuple

from .config import ConfigurationError, ServerConfig
from .core import Connection, SocketServer, ThreadPool
from .handlers import (
    CharacterDataset,
    FileLoader,
    JsonServiceHandler,
    NotFoundHandler,
    StaticFileHandler,
)
from .http import (
    HTTPParseError,
    HTTPRequest,
    HTTPResponse,
    RequestParser,
    ResponseBuilder,
    Router,
)
from .http.status_codes import BAD_REQUEST, INTERNAL_SERVER_ERROR
from .middleware import Middleware, MiddlewarePipeline, log_rejected_request

logger = logging.getLogger(__name__)

INTERNAL_ERROR_PAGE = "<html><body><h1>500 Internal Server Error</h1></body></html>"

# Seconds to wait for each worker when stopping
SHUTDOWN_TIMEOUT = 30.0


class HTTPServer:
    """
    Static file and JSON API server.

    =========================================================================
    USAGE
    =========================================================================

        config = ServerConfig(port=3000, public_dir="public", data_dir="data")
        server = HTTPServer(config)
        server.use(LoggingMiddleware())
        server.run()                      # blocks until Ctrl+C

    Construction fails with ConfigurationError when the configuration is
    invalid, 404.html is missing from the asset root, or characters.json
    cannot be loaded.

    =========================================================================
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Initialize the HTTP server.

        Args:
            config: Server configuration. Uses defaults if not provided.

        Raises:
            ConfigurationError: If the configuration or the files it points
                                to are unusable.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        # ─────────────────────────────────────────────────────────────────
        # APPLICATION COMPONENTS
        # ─────────────────────────────────────────────────────────────────

        self._loader = FileLoader(self.config.public_dir)

        self._not_found = NotFoundHandler(self._loader)
        self._not_found.check()

        self._static = StaticFileHandler(self._loader, self._not_found)

        self._dataset = CharacterDataset(self.config.data_dir)
        self._dataset.check()

        self._api = JsonServiceHandler(self._dataset, self._not_found)

        self._router = Router(
            static=self._static,
            api=self._api,
            not_found=self._not_found,
        )

        self._parser = RequestParser(max_request_size=self.config.max_request_size)
        self._middleware = MiddlewarePipeline()

        # ─────────────────────────────────────────────────────────────────
        # CORE COMPONENTS
        # ─────────────────────────────────────────────────────────────────

        self._socket_server = SocketServer(self.config)
        self._thread_pool = ThreadPool(
            workers=self.config.workers,
            queue_size=self.config.queue_size,
        )

        # middleware.wrap(router.handle), rebuilt whenever middleware is added
        self._handler: Callable[[HTTPRequest], HTTPResponse] = self._router.handle

    # =========================================================================
    # CONFIGURATION METHODS
    # =========================================================================

    def use(self, middleware: Middleware) -> "HTTPServer":
        """
        Add middleware to the server (first added = outermost).

        Returns:
            Self for method chaining.
        """
        self._middleware.add(middleware)
        self._handler = self._middleware.wrap(self._router.handle)
        return self

    @property
    def router(self) -> Router:
        return self._router

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def respond(
        self,
        raw_request: bytes,
        client_address: Tuple[str, int] = ("", 0)
    ) -> HTTPResponse:
        """
        Turn raw request bytes into a response.

        This never raises: parse errors become 400 with the 404 page body,
        and any failure inside the handlers becomes a 500.
        """
        try:
            request = self._parser.parse(raw_request, client_address)
        except HTTPParseError as e:
            logger.debug(f"Malformed request from {client_address[0] or '-'}: {e}")
            response = self._error_page(BAD_REQUEST)
            log_rejected_request(client_address[0], response, str(e), self.config.log_format)
            return response

        try:
            return self._handler(request)
        except ConfigurationError as e:
            logger.error(f"Cannot serve {request.resource}: {e}")
        except Exception as e:
            logger.exception(f"Handler error for {request.resource}: {e}")

        return self._internal_error()

    def _error_page(self, status_code: str) -> HTTPResponse:
        """The 404 page with another status code, or a 500 if it is gone."""
        try:
            return self._not_found.page(status_code)
        except ConfigurationError:
            return self._internal_error()

    def _internal_error(self) -> HTTPResponse:
        return (ResponseBuilder()
            .status(INTERNAL_SERVER_ERROR)
            .body(INTERNAL_ERROR_PAGE)
            .build())

    def _handle_connection(self, conn: Connection):
        """
        Queue a connection for the thread pool.

        Called by SocketServer for each new connection.
        """
        submitted = self._thread_pool.submit(self._process_connection, args=(conn,))

        if not submitted:
            logger.warning(f"[{conn.id}] Thread pool full, rejecting connection")
            conn.send_response(self._internal_error().to_bytes())
            conn.close()

    def _process_connection(self, conn: Connection):
        """
        Serve one request on a connection (runs in a worker thread).

            read ──► respond ──► send ──► close
        """
        with conn:
            try:
                raw_request = conn.read_request()
                if raw_request is None:
                    logger.debug(f"[{conn.id}] Connection closed before a request arrived")
                    return

                response = self.respond(raw_request, conn.address)
                conn.send_response(response.to_bytes())
            except OSError as e:
                logger.warning(f"[{conn.id}] Connection error: {e}")

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self):
        """
        Start the server (blocking).

        Returns after shutdown() is called or SIGINT/SIGTERM is received.

        Raises:
            OSError: If the listening address cannot be bound.
        """
        self._setup_logging()

        self._thread_pool.start()

        logger.info(f"Starting HTTP server on {self.config.host}:{self.config.port}")
        self._print_startup_banner()

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def shutdown(self):
        """Ask the accept loop to stop. run() returns once it has."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the server is accepting connections."""
        return self._socket_server.wait_until_ready(timeout)

    def _print_startup_banner(self):
        """Print server startup information."""
        print()
        print("╔══════════════════════════════════════════════════════════════╗")
        print(f"  minihttp running on http://{self.config.host}:{self.config.port}")
        print(f"  Assets:  {self.config.public_dir}")
        print(f"  Data:    {self.config.data_dir}")
        print(f"  Workers: {self.config.workers} threads")
        print("  Press Ctrl+C to stop")
        print("╚══════════════════════════════════════════════════════════════╝")
        print()

    def _setup_logging(self):
        """Configure logging based on config."""
        level = self.config.log_level_number

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("minihttp").setLevel(level)

    def _shutdown(self):
        """
        Graceful shutdown.

        The accept loop has already stopped, so no new work arrives.
        Queued connections are still served before the workers exit.
        """
        logger.info("Shutting down server...")
        self._thread_pool.shutdown(wait=True, timeout=SHUTDOWN_TIMEOUT)
        logger.info("Server stopped")


def create_app(config: Optional[ServerConfig] = None) -> HTTPServer:
    """
    Create an HTTP server application.

    Example:
        app = create_app(ServerConfig(port=8000))
        app.run()
    """
    return HTTPServer(config)


# =============================================================================
# MODULE SUMMARY
# =============================================================================
#
# 1. Construction: validate config, check 404.html and the dataset, wire
#    loader, handlers, router and middleware
# 2. respond(): bytes → HTTPResponse, never raises
# 3. Connections: one request each, processed on the thread pool
# 4. Lifecycle: run() blocks, shutdown() or a signal stops it
#
# =============================================================================
