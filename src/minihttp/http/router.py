"""
=============================================================================
HTTP ROUTER
=============================================================================

Selects exactly one handler for each request.

=============================================================================
ROUTING TABLE
=============================================================================

minihttp has a fixed set of routes. They are checked in order and the
first match wins:

    ┌────┬──────────────────────────┬──────────────────┬───────────────────┐
    │ #  │ Condition                │ Handler          │ Target            │
    ├────┼──────────────────────────┼──────────────────┼───────────────────┤
    │ 1  │ method is not GET        │ NotFoundHandler  │                   │
    │ 2  │ first segment is ""      │ StaticFile       │ index.html        │
    │ 3  │ first segment "health"   │ StaticFile       │ health.html       │
    │ 4  │ first segment "api"      │ JsonService      │ (sub-routes)      │
    │ 5  │ anything else            │ StaticFile       │ path after "/"    │
    └────┴──────────────────────────┴──────────────────┴───────────────────┘

    GET /                         → StaticFile("index.html")
    GET /health                   → StaticFile("health.html")
    GET /api/shipping/characters  → JsonService
    GET /css/style.css            → StaticFile("css/style.css")
    POST /anything                → NotFound

=============================================================================
MATCH IS PURE
=============================================================================

Router.match() only looks at the request; it never touches the disk or
the network. That makes the routing table testable without any files:

    route = router.match(request)
    assert route.handler is static_handler
    assert route.target == "index.html"

Router.handle() is match() followed by the handler call.

=============================================================================
SEGMENT ACCESS
=============================================================================

A path of "/" has a single empty segment, "/api" has one segment and
"/api/shipping/characters" has three. Every lookup goes through
HTTPRequest.segment(i), which returns "" instead of raising when the
path is shorter than i + 1 segments.

=============================================================================
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .request import HTTPRequest, Method
from .response import HTTPResponse

if TYPE_CHECKING:
    from ..handlers.base import Handler

logger = logging.getLogger(__name__)

INDEX_PAGE = "index.html"
HEALTH_PAGE = "health.html"


@dataclass(frozen=True)
class RouteMatch:
    """
    Result of routing a request.

    Attributes:
        handler: The handler that will produce the response.
        target: File name or sub-path the handler should serve.
    """

    handler: "Handler"
    target: str = ""


class Router:
    """
    Dispatches requests to the static, API and not-found handlers.

    Usage:
        router = Router(static=static_handler,
                        api=json_handler,
                        not_found=not_found_handler)

        response = router.handle(request)
    """

    def __init__(self, static: "Handler", api: "Handler", not_found: "Handler"):
        self.static = static
        self.api = api
        self.not_found = not_found

    def match(self, request: HTTPRequest) -> RouteMatch:
        """
        Pick the handler for a request.

        Args:
            request: Parsed HTTP request.

        Returns:
            RouteMatch with the handler and its target.
        """
        if request.method is not Method.GET:
            return RouteMatch(self.not_found)

        first = request.segment(0)

        if first == "":
            return RouteMatch(self.static, INDEX_PAGE)

        if first == "health":
            return RouteMatch(self.static, HEALTH_PAGE)

        if first == "api":
            return RouteMatch(self.api, request.path)

        # Everything after the leading slash is a file name under the asset root
        return RouteMatch(self.static, request.path[1:])

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Route a request and return the handler's response.

        This is the final handler wrapped by the middleware pipeline.
        """
        route = self.match(request)
        logger.debug(
            f"{request.method.value} {request.resource} -> "
            f"{route.handler.name}({route.target!r})"
        )
        return route.handler.handle(request, route.target)
