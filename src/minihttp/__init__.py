"""
=============================================================================
MINIHTTP
=============================================================================

A minimal HTTP/1.1 server built on raw sockets and threads.

It serves two things:

    GET /, /health, /<page>      static pages and assets from the asset root
    GET /api/shipping/characters the character dataset as JSON

Everything else gets the 404 page.

=============================================================================
QUICK START
=============================================================================

    from minihttp import HTTPServer, ServerConfig
    from minihttp.middleware import LoggingMiddleware

    server = HTTPServer(ServerConfig(port=3000))
    server.use(LoggingMiddleware())
    server.run()

Or from the command line:

    python -m minihttp --port 3000

=============================================================================
"""

__version__ = "1.0.0"

from .config import ConfigurationError, ServerConfig
from .server import HTTPServer, create_app
from .http import HTTPRequest, HTTPResponse, RequestParser, ResponseBuilder, Router

__all__ = [
    "__version__",
    "ConfigurationError",
    "ServerConfig",
    "HTTPServer",
    "create_app",
    "HTTPRequest",
    "HTTPResponse",
    "RequestParser",
    "ResponseBuilder",
    "Router",
]
