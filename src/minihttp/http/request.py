"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Parses the raw bytes of one read into a structured HTTPRequest.

=============================================================================
HTTP REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ REQUEST LINE ─────────────────────────────────────────────────┐ │
    │  │                                                                 │ │
    │  │    GET /api/shipping/characters HTTP/1.1\r\n                   │ │
    │  │    ─┬─ ────────────┬──────────── ────┬───                      │ │
    │  │     │              │                 │                          │ │
    │  │   Method        Resource          Version                       │ │
    │  │                                                                 │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ HEADERS ──────────────────────────────────────────────────────┐ │
    │  │                                                                 │ │
    │  │    Host: localhost:3000\r\n                                    │ │
    │  │    User-Agent: curl/8.5.0\r\n                                  │ │
    │  │                                                                 │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ EMPTY LINE ───────────────────────────────────────────────────┐ │
    │  │    \r\n                                                         │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BODY (optional) ──────────────────────────────────────────────┐ │
    │  │    name=Ayla                                                    │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PARSER STATE MACHINE
=============================================================================

The parser makes ONE pass over the lines of the message:

    AWAITING_REQUEST_LINE ──► AWAITING_HEADERS ──► READING_BODY
            │                        │                   │
     first line containing     "Name: value" lines   every non-blank
     "HTTP" is the request     until a blank line    line replaces
     line; earlier lines                              the body
     are ignored

There is no backtracking: once the request line has been seen, a later
line that happens to contain "HTTP" is just a header (or body) line.

=============================================================================
WIRE CONTRACT DETAILS
=============================================================================

1. HEADER VALUES ARE VERBATIM:
   "Host: localhost:3000" is split at the FIRST colon only, giving
   key "Host" and value " localhost:3000" WITH its leading space.
   Nothing is trimmed or lowercased. Duplicate keys overwrite.

2. ONLY THE LAST BODY LINE IS KEPT:
   After the blank line, each non-blank line replaces the body, so a
   three-line body arrives as its last line only. Clients of this
   server send single-line bodies; see DESIGN.md for the decision.

3. STRICT METHOD AND VERSION:
   Only GET and POST over HTTP/1.1 are understood. Anything else is a
   malformed request and raises HTTPParseError (surfaced as 400).

4. SIZE CAP:
   Input longer than max_request_size (16 KiB) is truncated before
   parsing. Requests that do not fit are not supported.

=============================================================================
INTERVIEW QUESTIONS ABOUT HTTP PARSING
=============================================================================

Q: "Why raise instead of returning an 'unknown method' value?"
A: "A sentinel value flows onward and can be routed like a real request.
   Raising at the parse boundary forces the caller to answer 400 and
   keeps malformed input out of the router entirely."

Q: "How do you handle bytes that are not valid UTF-8?"
A: "Decode with errors='replace'. The request line and headers are
   ASCII in practice; replacement characters in a body or a header
   value are harmless, and we never crash on a stray byte."

=============================================================================
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Tuple

# Default read cap: 16 KiB, one buffer's worth
DEFAULT_MAX_REQUEST_SIZE = 16 * 1024


class HTTPParseError(Exception):
    """
    Raised when HTTP request parsing fails.

    Carries the HTTP status code that should be returned to the client.
    Every parse failure in minihttp is a 400 Bad Request.
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code  # HTTP status to return


class Method(Enum):
    """HTTP methods the server understands."""

    GET = "GET"
    POST = "POST"


class Version(Enum):
    """HTTP protocol versions the server understands."""

    V1_1 = "HTTP/1.1"


class ParserState(Enum):
    """Where the parser is in the message."""

    AWAITING_REQUEST_LINE = "awaiting_request_line"
    AWAITING_HEADERS = "awaiting_headers"
    READING_BODY = "reading_body"


@dataclass(frozen=True)
class HTTPRequest:
    """
    Represents a parsed HTTP request.

    Created once per inbound message by RequestParser and never modified
    afterwards (the dataclass is frozen).

    =========================================================================
    ATTRIBUTES
    =========================================================================

        method:         Method.GET or Method.POST
        resource:       Request target exactly as sent, always starting
                        with "/" (may include a query string)
        version:        Version.V1_1
        headers:        Header name → value, both exactly as on the wire
        body:           Last non-blank line after the headers, or ""
        client_address: (ip, port) of the peer, for access logging

    =========================================================================
    """

    method: Method
    resource: str
    version: Version = Version.V1_1
    headers: Dict[str, str] = field(default_factory=dict)
    body: str = ""
    client_address: Tuple[str, int] = field(default=("", 0), compare=False)

    # =========================================================================
    # PROPERTIES - Computed values accessed like attributes
    # =========================================================================

    @property
    def path(self) -> str:
        """
        The resource without its query string or fragment.

        "/index.html?v=2" → "/index.html"
        """
        return self.resource.split("?", 1)[0].split("#", 1)[0]

    @property
    def query(self) -> str:
        """The raw query string ("" when there is none)."""
        if "?" not in self.resource:
            return ""
        return self.resource.split("?", 1)[1].split("#", 1)[0]

    @property
    def segments(self) -> List[str]:
        """
        Path segments after the leading slash.

            "/"                          → [""]
            "/health"                    → ["health"]
            "/api/shipping/characters"   → ["api", "shipping", "characters"]
        """
        return self.path.split("/")[1:]

    @property
    def user_agent(self) -> str:
        """The User-Agent header with surrounding whitespace removed."""
        return self.get_header("User-Agent").strip()

    # =========================================================================
    # ACCESSOR METHODS
    # =========================================================================

    def segment(self, index: int) -> str:
        """
        Get one path segment, or "" if the path is shorter than that.

        Bounds-checked so that routing never indexes past the end of a
        short path like "/".
        """
        segments = self.segments
        if 0 <= index < len(segments):
            return segments[index]
        return ""

    def get_header(self, name: str, default: str = "") -> str:
        """
        Get a header value (case-insensitive name lookup).

        The value is returned verbatim, including any leading space.
        """
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return default

    def to_bytes(self) -> bytes:
        """
        Serialize the request back to wire format.

        Headers are written as "key:value" with the value untouched, so
        parsing the output yields the same header mapping again.
        """
        lines = [f"{self.method.value} {self.resource} {self.version.value}\r\n"]
        for key, value in self.headers.items():
            lines.append(f"{key}:{value}\r\n")
        lines.append("\r\n")
        lines.append(self.body)
        return "".join(lines).encode("utf-8")


class RequestParser:
    """
    Parses raw HTTP request bytes into HTTPRequest objects.

    ==========================================================================
    PARSER ARCHITECTURE
    ==========================================================================

        Raw Request Bytes
              │
              ▼
        ┌───────────────────────────────────────────────────────────────────┐
        │  1. Truncate to max_request_size                                  │
        │  2. Decode UTF-8 (errors="replace"), split on "\n", strip "\r"    │
        │  3. Walk the lines through the state machine                      │
        │  4. No request line seen? → HTTPParseError(400)                   │
        │  5. Build HTTPRequest                                             │
        └───────────────────────────────────────────────────────────────────┘
              │
              ▼
        HTTPRequest dataclass

    ==========================================================================
    """

    def __init__(self, max_request_size: int = DEFAULT_MAX_REQUEST_SIZE):
        """
        Initialize the request parser.

        Args:
            max_request_size: Bytes beyond this cap are dropped before
                              parsing. Default is 16 KiB.
        """
        self.max_request_size = max_request_size

    def parse(
        self,
        data: bytes,
        client_address: Tuple[str, int] = ("", 0)
    ) -> HTTPRequest:
        """
        Parse raw HTTP request data into an HTTPRequest object.

        Args:
            data: Raw request bytes from one socket read.
            client_address: Client's (ip, port) tuple for logging.

        Returns:
            Parsed HTTPRequest object.

        Raises:
            HTTPParseError: If there is no valid request line.
        """
        text = data[:self.max_request_size].decode("utf-8", errors="replace")

        state = ParserState.AWAITING_REQUEST_LINE
        request_line = None
        headers: Dict[str, str] = {}
        body = ""

        for raw_line in text.split("\n"):
            line = raw_line.rstrip("\r")

            if state is ParserState.AWAITING_REQUEST_LINE:
                if "HTTP" in line:
                    request_line = self._parse_request_line(line)
                    state = ParserState.AWAITING_HEADERS

            elif state is ParserState.AWAITING_HEADERS:
                if not line.strip():
                    state = ParserState.READING_BODY
                elif ":" in line:
                    # Split at the FIRST colon; the value keeps its leading space
                    key, value = line.split(":", 1)
                    headers[key] = value

            elif line.strip():
                body = line

        if request_line is None:
            raise HTTPParseError("Missing request line")

        method, resource, version = request_line
        return HTTPRequest(
            method=method,
            resource=resource,
            version=version,
            headers=headers,
            body=body,
            client_address=client_address,
        )

    def _parse_request_line(self, line: str) -> Tuple[Method, str, Version]:
        """
        Parse the HTTP request line.

            METHOD SP RESOURCE SP VERSION

        Raises:
            HTTPParseError: If the line does not have exactly three tokens,
                            or the method, resource or version is invalid.
        """
        parts = line.split()
        if len(parts) != 3:
            raise HTTPParseError(f"Invalid request line: {line!r}")

        method_token, resource, version_token = parts

        try:
            method = Method(method_token)
        except ValueError:
            raise HTTPParseError(f"Unsupported method: {method_token}") from None

        try:
            version = Version(version_token)
        except ValueError:
            raise HTTPParseError(f"Unsupported HTTP version: {version_token}") from None

        if not resource.startswith("/"):
            raise HTTPParseError(f"Invalid resource: {resource}")

        return method, resource, version


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

def parse_request(
    data: bytes,
    client_address: Tuple[str, int] = ("", 0),
    max_size: int = DEFAULT_MAX_REQUEST_SIZE
) -> HTTPRequest:
    """
    Parse an HTTP request in one call.

    Use RequestParser directly when parsing many requests with the same
    settings.
    """
    return RequestParser(max_request_size=max_size).parse(data, client_address)
