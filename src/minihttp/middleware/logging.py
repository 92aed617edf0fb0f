"""
=============================================================================
ACCESS LOGGING MIDDLEWARE
=============================================================================

One log line per request, on the "minihttp.access" logger.

=============================================================================
FORMATS
=============================================================================

TEXT (default), close to the Apache common log format:

    127.0.0.1 - - [19/Oct/2026:10:15:02 +0000] "GET /health HTTP/1.1" 200 412 0.38ms

JSON, for log aggregators:

    {"request_id": "1f3a9c2e", "method": "GET", "path": "/health",
     "status_code": "200", "content_length": 412, "duration_ms": 0.38, ...}

Each entry carries a short request id so that an access line can be
matched with the application log lines written while serving it. The id
stays in the logs; it is not added to the response.

=============================================================================
"""

import json
import logging
import time
import uuid
from dataclasses import asdict, dataclass

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse
from .base import Middleware, NextHandler

# Namespaced so it can be routed or silenced on its own:
#   logging.getLogger("minihttp.access").setLevel(logging.WARNING)
logger = logging.getLogger("minihttp.access")


@dataclass
class RequestLog:
    """
    Structured log entry for a request.

    request_id:     Short random id for correlation
    method:         HTTP method
    resource:       Request target as sent (path plus query)
    version:        Protocol version
    client_ip:      Client's IP address
    user_agent:     Client software ("-" when absent)
    status_code:    Response status code
    content_length: Response body size in bytes
    duration_ms:    Time spent in the handler chain
    timestamp:      When the request was processed
    """

    request_id: str
    method: str
    resource: str
    version: str
    client_ip: str
    user_agent: str
    status_code: str
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        data = asdict(self)
        data["duration_ms"] = round(self.duration_ms, 2)
        return data

    def to_text(self) -> str:
        """Format as a single human-readable line."""
        return (
            f'{self.client_ip or "-"} - - [{self.timestamp}] '
            f'"{self.method} {self.resource} {self.version}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


def log_rejected_request(
    client_ip: str,
    response: HTTPResponse,
    reason: str,
    log_format: str = "text",
) -> None:
    """
    Write an access line for a request that never reached the pipeline.

    Malformed requests are answered before an HTTPRequest exists, so
    LoggingMiddleware cannot see them. The request line is replaced by
    the parse error.
    """
    timestamp = time.strftime("%d/%b/%Y:%H:%M:%S %z")

    if log_format == "json":
        logger.info(json.dumps({
            "client_ip": client_ip,
            "status_code": response.status_code,
            "content_length": response.content_length,
            "error": reason,
            "timestamp": timestamp,
        }))
    else:
        logger.info(
            f'{client_ip or "-"} - - [{timestamp}] "-" {response.status_code} '
            f'{response.content_length} ({reason})'
        )


class LoggingMiddleware(Middleware):
    """
    Request logging middleware.

    Should be added FIRST so its timing covers the whole chain and
    failed requests are logged too.

    Usage:
        pipeline.add(LoggingMiddleware(log_format="json"))
    """

    def __init__(self, log_format: str = "text", log_level: int = logging.INFO):
        """
        Args:
            log_format: "text" or "json".
            log_level: Level used for access lines.
        """
        self.log_format = log_format
        self.log_level = log_level

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        request_id = str(uuid.uuid4())[:8]
        start_time = time.time()

        try:
            response = next(request)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"[{request_id}] Request failed: {request.method.value} {request.resource} "
                f"- {type(e).__name__}: {e} ({duration_ms:.2f}ms)"
            )
            raise

        duration_ms = (time.time() - start_time) * 1000

        log_entry = RequestLog(
            request_id=request_id,
            method=request.method.value,
            resource=request.resource,
            version=request.version.value,
            client_ip=request.client_address[0],
            user_agent=request.user_agent or "-",
            status_code=response.status_code,
            content_length=response.content_length,
            duration_ms=duration_ms,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

        if self.log_format == "json":
            logger.log(self.log_level, json.dumps(log_entry.to_dict()))
        else:
            logger.log(self.log_level, log_entry.to_text())

        return response
