"""
=============================================================================
JSON SERVICE HANDLER
=============================================================================

Serves the character dataset under /api.

=============================================================================
ENDPOINTS
=============================================================================

    ┌──────────────────────────────────┬──────────────────────────────────┐
    │ Path                             │ Response                         │
    ├──────────────────────────────────┼──────────────────────────────────┤
    │ /api/shipping/characters         │ 200, pretty-printed JSON array   │
    │ anything else under /api         │ 404 page                         │
    └──────────────────────────────────┴──────────────────────────────────┘

    $ curl http://localhost:3000/api/shipping/characters
    [
      {
        "name": "Ayla",
        "level": 12,
        ...

A broken dataset raises DatasetError out of handle(); the server turns
that into a 500 for the request and keeps running.

=============================================================================
"""

import json
import logging
from typing import List

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ResponseBuilder
from ..http.status_codes import OK
from .base import Handler
from .dataset import CharacterDataset
from .not_found import NotFoundHandler

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"

# Segments after "/api" that select the character listing
CHARACTERS_ROUTE: List[str] = ["shipping", "characters"]


class JsonServiceHandler(Handler):
    """
    Handler for the JSON API.

    Usage:
        api = JsonServiceHandler(CharacterDataset(config.data_dir), not_found)
        api.handle(request)
    """

    def __init__(self, dataset: CharacterDataset, not_found: NotFoundHandler):
        self.dataset = dataset
        self.not_found = not_found

    def handle(self, request: HTTPRequest, target: str = "") -> HTTPResponse:
        """
        Dispatch on the segments after "/api".

        Raises:
            DatasetError: If the dataset cannot be loaded.
        """
        route = request.segments[1:]
        # "/api/shipping/characters/" names the same listing
        if route and route[-1] == "":
            route = route[:-1]

        if route == CHARACTERS_ROUTE:
            return self.characters()

        logger.debug(f"Unknown API path: {request.path}")
        return self.not_found.handle(request)

    def characters(self) -> HTTPResponse:
        """Return the full character list as pretty-printed JSON."""
        records = [character.to_dict() for character in self.dataset.load()]
        body = json.dumps(records, indent=2, ensure_ascii=False)

        return (ResponseBuilder()
            .status(OK)
            .content_type(JSON_CONTENT_TYPE)
            .body(body)
            .build())
