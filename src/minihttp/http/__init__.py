"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

Everything that deals with HTTP messages, independent of sockets:

    ┌─────────────────────────────────────────────────────────────────────┐
    │ request.py       bytes → HTTPRequest (RequestParser)                │
    │ response.py      HTTPResponse → bytes (ResponseBuilder)             │
    │ status_codes.py  status code → reason phrase                        │
    │ mime_types.py    file name → file to serve + Content-Type           │
    │ router.py        HTTPRequest → handler                              │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .request import (
    HTTPRequest,
    RequestParser,
    HTTPParseError,
    Method,
    Version,
    parse_request,
)
from .response import (
    HTTPResponse,
    ResponseBuilder,
    ResponseBody,
    make_response,
)
from .router import Router, RouteMatch
from .status_codes import status_text, STATUS_TEXT
from .mime_types import (
    ContentResolution,
    get_content_type,
    get_mime_type,
    is_text_extension,
    resolve,
)

__all__ = [
    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "Method",
    "Version",
    "parse_request",

    # Response building
    "HTTPResponse",
    "ResponseBuilder",
    "ResponseBody",
    "make_response",

    # Routing
    "Router",
    "RouteMatch",

    # Status codes
    "status_text",
    "STATUS_TEXT",

    # Content types
    "ContentResolution",
    "get_content_type",
    "get_mime_type",
    "is_text_extension",
    "resolve",
]
