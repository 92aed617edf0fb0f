"""
Handler interface.

Every handler turns a request (plus the target the router picked for it)
into a response. Handlers never see sockets and never raise for ordinary
"not found" situations; they answer with a 404 page instead.
"""

from abc import ABC, abstractmethod

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


class Handler(ABC):
    """
    Abstract base class for request handlers.

    Subclasses implement handle(). The `target` argument is whatever the
    router extracted for this handler, e.g. a file name for the static
    handler.
    """

    @abstractmethod
    def handle(self, request: HTTPRequest, target: str = "") -> HTTPResponse:
        """
        Produce the response for a request.

        Args:
            request: The parsed HTTP request.
            target: Route-specific target chosen by the router.

        Returns:
            The HTTP response to send.
        """
        pass

    @property
    def name(self) -> str:
        """Get the handler name for logging."""
        return self.__class__.__name__
