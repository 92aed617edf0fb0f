"""
=============================================================================
CONTENT TYPE RESOLUTION
=============================================================================

Maps requested file names to the file that should actually be served and
the Content-Type header that goes with it.

=============================================================================
WHAT ARE MIME TYPES?
=============================================================================

MIME (Multipurpose Internet Mail Extensions) types tell the browser how to
interpret the bytes in a response body:

    Content-Type: text/html    →  render as a web page
    Content-Type: text/css     →  apply as a stylesheet
    Content-Type: image/png    →  decode and draw an image

Without the right type a browser may download a stylesheet instead of
applying it, or show an image as garbage text.

=============================================================================
RESOLUTION RULES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     resolve(file_name)                              │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   "about"         no extension    →  "about.html"    text/html      │
    │   "style.css"     known           →  "style.css"     text/css       │
    │   "LOGO.PNG"      known (any case)→  "LOGO.PNG"      image/png      │
    │   "notes.docx"    unknown         →  "unsupported.html" text/html   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

An unknown extension is not an error: the visitor is shown a fixed
"unsupported file type" page instead.

=============================================================================
TEXT VS BINARY
=============================================================================

The loader has to know whether to read a file as text (decoded UTF-8) or
as raw bytes. Only a small whitelist of extensions is read as text:

    html  css  js  xml  json  txt     →  str   (Text body)
    everything else                    →  bytes (Binary body)

=============================================================================
"""

from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Dict, Optional


# =============================================================================
# MIME TYPE DATABASE
# =============================================================================
#
# Keys are lowercase extensions WITHOUT the leading dot.
#
MIME_TYPES: Dict[str, str] = {
    # -------------------------------------------------------------------------
    # TEXT TYPES
    # -------------------------------------------------------------------------
    "html": "text/html",
    "css": "text/css",
    "js": "text/javascript",
    "xml": "text/xml",
    "json": "text/json",
    "txt": "text/plain",

    # -------------------------------------------------------------------------
    # IMAGE TYPES
    # -------------------------------------------------------------------------
    "gif": "image/gif",
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",

    # -------------------------------------------------------------------------
    # ARCHIVE / MEDIA TYPES
    # -------------------------------------------------------------------------
    "zip": "application/zip",
    "mp3": "audio/mpeg",
    "mp4": "video/mp4",
}

# Extensions read from disk as decoded text
TEXT_EXTENSIONS = frozenset({"html", "css", "js", "xml", "json", "txt"})

DEFAULT_EXTENSION = "html"
DEFAULT_MIME_TYPE = MIME_TYPES[DEFAULT_EXTENSION]

# Page served in place of any file whose extension is not in MIME_TYPES
UNSUPPORTED_PAGE = "unsupported.html"


@dataclass(frozen=True)
class ContentResolution:
    """
    The outcome of resolving a requested file name.

    Attributes:
        file_name: File to load, relative to the asset root.
        content_type: Value for the Content-Type header.
        is_text: Whether the file should be read as text.
    """

    file_name: str
    content_type: str
    is_text: bool


# =============================================================================
# PUBLIC FUNCTIONS
# =============================================================================

def get_extension(file_name: str) -> str:
    """
    Get the lowercase extension of a file name, without the dot.

    Returns an empty string when the name has no extension.
    """
    return PurePosixPath(file_name).suffix[1:].lower()


def get_content_type(extension: str) -> Optional[str]:
    """
    Look up the MIME type for an extension.

    Args:
        extension: Extension with or without the leading dot, any case.

    Returns:
        The MIME type, or None if the extension is not supported.

    Examples:
        >>> get_content_type("css")
        'text/css'

        >>> get_content_type(".PNG")
        'image/png'

        >>> get_content_type("docx") is None
        True
    """
    return MIME_TYPES.get(extension.lstrip(".").lower())


def get_mime_type(file_name: str, default: str = DEFAULT_MIME_TYPE) -> str:
    """
    Get the MIME type for a file name based on its extension.

    Unknown or missing extensions fall back to `default` (text/html).
    """
    return get_content_type(get_extension(file_name)) or default


def is_text_extension(extension: str) -> bool:
    """Check whether files with this extension are read as text."""
    return extension.lstrip(".").lower() in TEXT_EXTENSIONS


def resolve(file_name: str) -> ContentResolution:
    """
    Decide which file to serve for a requested name, and its type.

    =====================================================================
    ALGORITHM
    =====================================================================

    1. Strip trailing slashes ("docs/" is treated as "docs")
    2. No extension      → append ".html"
    3. Known extension   → serve as-is with its MIME type
    4. Unknown extension → serve the unsupported page as text/html

    =====================================================================

    Args:
        file_name: Requested file, relative to the asset root.

    Returns:
        ContentResolution describing what to load.
    """
    file_name = file_name.rstrip("/")
    extension = get_extension(file_name)

    if not extension:
        return ContentResolution(
            file_name=f"{file_name}.{DEFAULT_EXTENSION}",
            content_type=DEFAULT_MIME_TYPE,
            is_text=True,
        )

    content_type = get_content_type(extension)
    if content_type is None:
        return ContentResolution(
            file_name=UNSUPPORTED_PAGE,
            content_type=DEFAULT_MIME_TYPE,
            is_text=True,
        )

    return ContentResolution(
        file_name=file_name,
        content_type=content_type,
        is_text=is_text_extension(extension),
    )
