"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Builds HTTP/1.1 responses and serializes them to wire bytes.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ STATUS LINE ──────────────────────────────────────────────────┐ │
    │  │    HTTP/1.1 404 Not Found\r\n                                  │ │
    │  │    ────┬─── ─┬─ ────┬────                                      │ │
    │  │    Version  Code  Phrase (derived from the code)               │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ HEADERS ──────────────────────────────────────────────────────┐ │
    │  │    Content-Type:text/html\r\n          ← "key:value", no space │ │
    │  │    Content-Length: 187\r\n             ← always computed       │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ EMPTY LINE ───────────────────────────────────────────────────┐ │
    │  │    \r\n                                                         │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BODY ─────────────────────────────────────────────────────────┐ │
    │  │    <!DOCTYPE html>...                                           │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
TEXT AND BINARY BODIES
=============================================================================

A body is either TEXT (a str, encoded as UTF-8 on the way out) or BINARY
(bytes, written untouched). Content-Length is always the number of BYTES
written, never the number of characters:

    body = "héllo"      →  Content-Length: 6   (é is two bytes)
    body = b"\\x89PNG"  →  Content-Length: 4

A caller-supplied Content-Length header is ignored; the computed one is
the only one that reaches the wire.

=============================================================================
BUILDER PATTERN
=============================================================================

    response = (ResponseBuilder()
        .status("200")
        .headers({"Content-Type": "text/css"})
        .body(stylesheet)
        .build())

Defaults applied by build():

    status   → "200"
    headers  → {"Content-Type": "text/html"}   (only when none were given)
    body     → ""                              (empty Text)

=============================================================================
INTERVIEW QUESTIONS ABOUT HTTP RESPONSES
=============================================================================

Q: "How does the client know when the response body ends?"
A: "Content-Length gives the exact byte count. We never use chunked
   encoding and we close the connection after every response."

Q: "Why derive the reason phrase instead of storing it?"
A: "Then it can never disagree with the code. HTTPResponse has no
   status_text field at all, only a property."

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Union

from .status_codes import OK, status_text

# A response body: str is the Text variant, bytes the Binary variant
ResponseBody = Union[str, bytes]

HTTP_VERSION = "HTTP/1.1"

DEFAULT_HEADERS: Dict[str, str] = {"Content-Type": "text/html"}


def _default_headers() -> Dict[str, str]:
    return dict(DEFAULT_HEADERS)


@dataclass(frozen=True)
class HTTPResponse:
    """
    Represents an HTTP response to be sent to the client.

    Created by a handler, serialized once by to_bytes(), never mutated.
    Use ResponseBuilder for a more convenient way to construct responses.

    =========================================================================
    RESPONSE LIFECYCLE
    =========================================================================

        Handler returns          to_bytes()              Socket sends
        HTTPResponse    ─────►   serializes    ─────►    raw bytes
            │                       │                        │
        HTTPResponse(            b"HTTP/1.1 200 OK\\r\\n   conn.send_response(
          status_code="200",       Content-Type:...\\r\\n      response_bytes
          headers={...},           ...                    )
          body="...")

    =========================================================================
    """

    status_code: str = OK
    headers: Dict[str, str] = field(default_factory=_default_headers)
    body: ResponseBody = ""
    version: str = HTTP_VERSION

    @property
    def status_text(self) -> str:
        """Reason phrase for status_code ("Not Found" for unknown codes)."""
        return status_text(self.status_code)

    @property
    def status_line(self) -> str:
        """
        Get the HTTP status line.

        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 200 OK"
        """
        return f"{self.version} {self.status_code} {self.status_text}"

    @property
    def is_binary(self) -> bool:
        """True when the body is raw bytes rather than text."""
        return isinstance(self.body, bytes)

    @property
    def body_bytes(self) -> bytes:
        """The body as it will be written to the socket."""
        if isinstance(self.body, bytes):
            return self.body
        return self.body.encode("utf-8")

    @property
    def content_length(self) -> int:
        """Byte length of the body."""
        return len(self.body_bytes)

    def to_bytes(self) -> bytes:
        """
        Serialize the response to bytes for sending over a socket.

        =====================================================================
        SERIALIZATION FORMAT
        =====================================================================

            HTTP/1.1 200 OK\\r\\n           ← Status line
            Content-Type:text/css\\r\\n     ← Each header as key:value
            Content-Length: 1024\\r\\n      ← Auto-calculated
            \\r\\n                          ← Empty line (separator)
            body { ... }                  ← Body bytes

        Header order follows the dict; no ordering is guaranteed between
        responses built from differently ordered mappings.

        =====================================================================
        """
        payload = self.body_bytes

        lines = [f"{self.status_line}\r\n"]
        for name, value in self.headers.items():
            if name.lower() == "content-length":
                continue  # Always replaced by the computed length
            lines.append(f"{name}:{value}\r\n")
        lines.append(f"Content-Length: {len(payload)}\r\n")
        lines.append("\r\n")

        return "".join(lines).encode("utf-8") + payload


class ResponseBuilder:
    """
    Fluent builder for constructing HTTP responses.

    Each method returns `self`, enabling chaining:

        builder.status("404").headers({...}).body(page).build()
        ────────┬──────────────────┬──────────────┬────────┬───
                └──────────────────┴──────────────┘        │
                       All return 'self'              except build()
    """

    def __init__(self):
        self._status_code: str = OK
        self._headers: Optional[Dict[str, str]] = None
        self._body: Optional[ResponseBody] = None

    # =========================================================================
    # STATUS METHODS
    # =========================================================================

    def status(self, status_code: Union[str, int]) -> "ResponseBuilder":
        """
        Set the HTTP status code.

        Args:
            status_code: Code as a string ("404"); ints are converted.

        Returns:
            Self for method chaining
        """
        self._status_code = str(status_code)
        return self

    # =========================================================================
    # HEADER METHODS
    # =========================================================================

    def header(self, name: str, value: str) -> "ResponseBuilder":
        """Add a single response header."""
        if self._headers is None:
            self._headers = {}
        self._headers[name] = value
        return self

    def headers(self, headers: Optional[Dict[str, str]]) -> "ResponseBuilder":
        """
        Add multiple headers at once.

        Passing None leaves the builder without headers, so build()
        falls back to the default Content-Type.
        """
        if headers is not None:
            if self._headers is None:
                self._headers = {}
            self._headers.update(headers)
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        """Set the Content-Type header."""
        return self.header("Content-Type", content_type)

    # =========================================================================
    # BODY METHODS
    # =========================================================================

    def body(self, body: Optional[ResponseBody]) -> "ResponseBuilder":
        """
        Set the response body.

        Args:
            body: str for a Text body, bytes for a Binary body, or None
                  for no body (serialized as zero-length text).

        Returns:
            Self for method chaining
        """
        self._body = body
        return self

    # =========================================================================
    # BUILD METHODS
    # =========================================================================

    def build(self) -> HTTPResponse:
        """
        Build and return the HTTPResponse object.

        Applies the defaults for anything that was not set.
        """
        headers = _default_headers() if self._headers is None else dict(self._headers)
        body = "" if self._body is None else self._body
        return HTTPResponse(
            status_code=self._status_code,
            headers=headers,
            body=body,
        )

    def to_bytes(self) -> bytes:
        """Build and serialize the response to bytes in one step."""
        return self.build().to_bytes()


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

def make_response(
    status_code: str = OK,
    headers: Optional[Dict[str, str]] = None,
    body: Optional[ResponseBody] = None,
) -> HTTPResponse:
    """
    Create a response from a status code, optional headers and optional body.

    Examples:
        make_response("404", None, page)
        make_response("200", {"Content-Type": "application/json"}, data)
    """
    return ResponseBuilder().status(status_code).headers(headers).body(body).build()
