"""
Not-found handler.

Answers with the fixed 404 page from the asset root. The same page body
is reused for 400 responses to malformed requests.
"""

import logging

from ..config import ConfigurationError
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ResponseBuilder
from ..http.status_codes import NOT_FOUND
from .base import Handler
from .files import FileLoader, ResourceNotFound

logger = logging.getLogger(__name__)

NOT_FOUND_PAGE = "404.html"


class NotFoundHandler(Handler):
    """
    Returns 404 with the content of 404.html.

    The page must exist: check() verifies it at startup, and if it later
    disappears page() raises ConfigurationError so the server answers 500
    instead of sending an empty error page.
    """

    def __init__(self, loader: FileLoader, page_name: str = NOT_FOUND_PAGE):
        self.loader = loader
        self.page_name = page_name

    def check(self) -> None:
        """Fail startup if the 404 page is missing."""
        self.loader.require(self.page_name)

    def handle(self, request: HTTPRequest, target: str = "") -> HTTPResponse:
        return self.page(NOT_FOUND)

    def page(self, status_code: str) -> HTTPResponse:
        """
        Build a response carrying the 404 page with any status code.

        Raises:
            ConfigurationError: If the 404 page cannot be read.
        """
        try:
            body = self.loader.load(self.page_name, as_text=True)
        except ResourceNotFound as e:
            logger.error(f"Error page {self.page_name} is unavailable: {e}")
            raise ConfigurationError(f"Error page missing: {self.page_name}") from e

        return ResponseBuilder().status(status_code).body(body).build()
