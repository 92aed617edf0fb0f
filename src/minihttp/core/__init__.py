"""
=============================================================================
CORE NETWORKING
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │ socket_server.py   bind / listen / accept loop, signal handling     │
    │ connection.py      one client socket: read request, send response   │
    │ thread_pool.py     fixed workers + bounded queue                    │
    └─────────────────────────────────────────────────────────────────────┘

Nothing in this package knows about HTTP routing; it moves bytes and
threads. The HTTP layer lives in minihttp.http.

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState
from .thread_pool import ThreadPool, Worker, WorkerState

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
    "ThreadPool",
    "Worker",
    "WorkerState",
]
