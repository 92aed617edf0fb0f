"""
=============================================================================
STATIC FILE HANDLER
=============================================================================

Serves pages and assets from the asset root.

=============================================================================
FLOW
=============================================================================

    Request: GET /css/style.css          (router target: "css/style.css")

        1. resolve("css/style.css")
              → file "css/style.css", text/css, read as text
        2. loader.load(...)
              ├── ok           → 200, Content-Type: text/css, file body
              └── not found    → NotFoundHandler (404 page)

    Extensionless names get ".html" appended ("/about" → about.html), and
    unknown extensions are answered with the unsupported-type page.

=============================================================================
"""

import logging

from ..http.mime_types import resolve
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ResponseBuilder
from ..http.status_codes import OK
from .base import Handler
from .files import FileLoader, ResourceNotFound
from .not_found import NotFoundHandler

logger = logging.getLogger(__name__)


class StaticFileHandler(Handler):
    """
    Handler for serving static files.

    Usage:
        loader = FileLoader(config.public_dir)
        not_found = NotFoundHandler(loader)
        static = StaticFileHandler(loader, not_found)

        static.handle(request, "style.css")
    """

    def __init__(
        self,
        loader: FileLoader,
        not_found: NotFoundHandler,
        index_file: str = "index.html",
    ):
        """
        Initialize static file handler.

        Args:
            loader: Reads files from the asset root.
            not_found: Produces the 404 response for missing files.
            index_file: File served when no target is given.
        """
        self.loader = loader
        self.not_found = not_found
        self.index_file = index_file

    def handle(self, request: HTTPRequest, target: str = "") -> HTTPResponse:
        """
        Serve the file named by `target`.

        Falls back to the request path, then to the index file, when the
        router did not supply a target.
        """
        file_name = target or request.path.lstrip("/") or self.index_file
        resolution = resolve(file_name)

        try:
            body = self.loader.load(resolution.file_name, as_text=resolution.is_text)
        except ResourceNotFound as e:
            logger.debug(f"Static file not served: {e}")
            return self.not_found.handle(request)

        return (ResponseBuilder()
            .status(OK)
            .content_type(resolution.content_type)
            .body(body)
            .build())
