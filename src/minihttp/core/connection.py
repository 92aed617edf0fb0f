"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket: read one request, write one response,
close.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL!
=============================================================================

TCP does NOT preserve message boundaries. A request sent in one write
may arrive in several recv() calls:

    Client sends:
        GET /health HTTP/1.1\\r\\nHost: localhost\\r\\n\\r\\n

    Server might receive:
        First recv():  "GET /hea"
        Second recv(): "lth HTTP/1.1\\r\\nHost: localhost\\r\\n\\r\\n"

So we BUFFER until the blank line that ends the headers, then keep
reading until we have the number of body bytes announced in
Content-Length.

=============================================================================
ONE REQUEST PER CONNECTION
=============================================================================

minihttp does not do keep-alive. Every connection follows:

    NEW ──► READING ──► PROCESSING ──► WRITING ──► CLOSING ──► CLOSED

=============================================================================
THE SIZE CAP
=============================================================================

At most max_request_size bytes (16 KiB by default) are read. A larger
request is TRUNCATED to the cap and handed to the parser as-is; it is
not rejected. Headers and single-line bodies fit comfortably.

=============================================================================
"""

import logging
import socket
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)

HEADER_TERMINATOR = b"\r\n\r\n"


class ConnectionState(Enum):
    """
    Connection lifecycle states.

    Used for logging and to make close() idempotent.
    """

    NEW = "new"                # Just accepted, nothing read yet
    READING = "reading"        # Reading request bytes
    PROCESSING = "processing"  # Request handed to the router
    WRITING = "writing"        # Sending the response
    CLOSING = "closing"        # Shutdown sequence in progress
    CLOSED = "closed"          # Socket released


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short connection identifier (for logging).
        state: Current connection state.
        created_at: Timestamp when connection was accepted.
    """

    # Required parameters
    socket: socket.socket
    address: tuple

    # Generated/default parameters
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    # Configuration (passed from ServerConfig)
    buffer_size: int = 4096
    timeout: Optional[float] = 30.0
    max_request_size: int = 16 * 1024

    _buffer: bytes = field(default=b"", repr=False)

    def __post_init__(self):
        self.socket.setblocking(True)
        # The timeout only bounds reads; handling is not time-limited
        self.socket.settimeout(self.timeout)

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def client_ip(self) -> str:
        """Get the client IP address."""
        return self.address[0]

    @property
    def age(self) -> float:
        """Get connection age in seconds."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> Optional[bytes]:
        """
        Read one HTTP request from the socket.

        ┌─────────────────────────────────────────────────────────────────┐
        │                    read_request() Flow                           │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │   while no \\r\\n\\r\\n and under the cap:                          │
        │       recv() → buffer          (EOF with nothing read → None)   │
        │                                                                  │
        │   parse Content-Length from the header section                  │
        │                                                                  │
        │   while body short and under the cap:                           │
        │       recv() → buffer                                           │
        │                                                                  │
        │   return buffer[:max_request_size]                              │
        │                                                                  │
        └─────────────────────────────────────────────────────────────────┘

        A read timeout ends reading early: whatever arrived is returned
        (None if nothing did) and the parser decides if it is usable.

        Returns:
            Request bytes, or None if the client sent nothing.

        Raises:
            ConnectionError: If the connection is reset mid-read.
        """
        self.state = ConnectionState.READING

        try:
            # ─────────────────────────────────────────────────────────────
            # STEP 1: Read until we have complete headers (or hit the cap)
            # ─────────────────────────────────────────────────────────────
            while HEADER_TERMINATOR not in self._buffer and not self._at_capacity():
                chunk = self.socket.recv(self.buffer_size)
                if not chunk:
                    break  # Client closed its side
                self._buffer += chunk

            # ─────────────────────────────────────────────────────────────
            # STEP 2: Read the body announced by Content-Length
            # ─────────────────────────────────────────────────────────────
            header_end = self._buffer.find(HEADER_TERMINATOR)
            if header_end != -1:
                body_start = header_end + len(HEADER_TERMINATOR)
                content_length = self._parse_content_length(self._buffer[:header_end])

                while (len(self._buffer) - body_start < content_length
                       and not self._at_capacity()):
                    chunk = self.socket.recv(self.buffer_size)
                    if not chunk:
                        break  # Connection closed mid-body
                    self._buffer += chunk

        except socket.timeout:
            logger.debug(f"[{self.id}] Read timed out after {len(self._buffer)} bytes")

        if not self._buffer:
            return None

        if len(self._buffer) > self.max_request_size:
            logger.debug(
                f"[{self.id}] Request truncated from {len(self._buffer)} "
                f"to {self.max_request_size} bytes"
            )

        return self._buffer[:self.max_request_size]

    def _at_capacity(self) -> bool:
        return len(self._buffer) >= self.max_request_size

    def _parse_content_length(self, headers: bytes) -> int:
        """
        Find Content-Length in the raw header section.

        Done on raw bytes because we need it BEFORE the request is parsed.
        Returns 0 if the header is absent or not a number.
        """
        header_str = headers.decode("utf-8", errors="replace")
        for line in header_str.split("\r\n"):
            name, _, value = line.partition(":")
            if name.strip().lower() == "content-length":
                try:
                    return max(int(value.strip()), 0)
                except ValueError:
                    return 0
        return 0

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send response data to the client.

        Uses sendall() so that the whole response is written, not just
        as much as fits in the kernel buffer.

        Returns:
            True if send succeeded, False if the connection was lost.
        """
        self.state = ConnectionState.WRITING

        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully.

        1. shutdown(SHUT_WR): send FIN so the client sees end-of-response
        2. Drain anything the client still sends
        3. close(): release the file descriptor
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(1024):
                pass
        except OSError:
            pass  # Includes socket.timeout

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    # =========================================================================
    # CONTEXT MANAGER
    # =========================================================================

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False  # Don't suppress exceptions
