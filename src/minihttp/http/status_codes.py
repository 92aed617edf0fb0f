"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The reason phrases this server knows how to print on a status line.

=============================================================================
WHY SO FEW?
=============================================================================

Every response minihttp produces comes from one of four situations:

    ┌───────┬──────────────────────────┬─────────────────────────────────────┐
    │ Code  │ Phrase                   │ When                                │
    ├───────┼──────────────────────────┼─────────────────────────────────────┤
    │ 200   │ OK                       │ Page, asset or dataset served       │
    │ 400   │ Bad Request              │ Request line could not be parsed    │
    │ 404   │ Not Found                │ Unknown path, method or file        │
    │ 500   │ Internal Server Error    │ Misconfiguration or handler crash   │
    └───────┴──────────────────────────┴─────────────────────────────────────┘

Status codes travel through the server as STRINGS ("200", "404"), exactly
as they appear on the wire. The reason phrase is never stored; it is
derived from the code every time the status line is written.

=============================================================================
THE FALLBACK
=============================================================================

Any code that is not in the table is printed with the phrase "Not Found":

    status_text("999")  →  "Not Found"

This is long-standing wire behaviour that clients of this server depend
on, so it is kept as-is rather than "corrected" to an empty phrase.

=============================================================================
"""

from typing import Dict


# =============================================================================
# STATUS CODE CONSTANTS
# =============================================================================

OK = "200"
BAD_REQUEST = "400"
NOT_FOUND = "404"
INTERNAL_SERVER_ERROR = "500"


STATUS_TEXT: Dict[str, str] = {
    OK: "OK",
    BAD_REQUEST: "Bad Request",
    NOT_FOUND: "Not Found",
    INTERNAL_SERVER_ERROR: "Internal Server Error",
}

# Phrase used for every code missing from STATUS_TEXT
FALLBACK_STATUS_TEXT = "Not Found"


def status_text(status_code: str) -> str:
    """
    Get the reason phrase for a status code.

    Args:
        status_code: Status code as it appears on the wire (e.g. "404").

    Returns:
        The reason phrase, or "Not Found" for unknown codes.

    Examples:
        >>> status_text("200")
        'OK'

        >>> status_text("999")
        'Not Found'
    """
    return STATUS_TEXT.get(str(status_code), FALLBACK_STATUS_TEXT)
