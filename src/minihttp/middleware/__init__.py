"""
Middleware for the request pipeline.

    pipeline = MiddlewarePipeline()
    pipeline.add(LoggingMiddleware())
    handler = pipeline.wrap(router.handle)
"""

from .base import Middleware, MiddlewarePipeline, NextHandler
from .logging import LoggingMiddleware, RequestLog, log_rejected_request

__all__ = [
    "Middleware",
    "MiddlewarePipeline",
    "NextHandler",
    "LoggingMiddleware",
    "RequestLog",
    "log_rejected_request",
]
