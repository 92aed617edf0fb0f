"""
=============================================================================
FILE LOADER
=============================================================================

Reads files from a root directory on behalf of the handlers.

=============================================================================
WHY A SEPARATE COLLABORATOR?
=============================================================================

Handlers receive a FileLoader instead of opening files themselves:

    static = StaticFileHandler(FileLoader(config.public_dir), not_found)

This keeps the one place that touches the disk small and easy to swap
out in tests (point it at a tmp_path, or pass a fake with a load()
method).

=============================================================================
SECURITY: PATH TRAVERSAL
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │  GET /../../../etc/passwd HTTP/1.1                                  │
    │                                                                      │
    │  Naively joined:   /srv/public/../../../etc/passwd                  │
    │                    → /etc/passwd                                     │
    │                                                                      │
    │  Our protection:                                                    │
    │  1. Resolve the full path (follow .. and symlinks)                 │
    │  2. Check it is still inside the root                               │
    │  3. If not, raise ResourceNotFound (the visitor sees a 404)         │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    PYTHON PROTECTION:

        full_path = (root / user_input).resolve()
        full_path.relative_to(root)  # Raises ValueError if outside root!

We answer 404 rather than 403 so that probing for files outside the
root looks exactly like asking for a file that does not exist.

=============================================================================
"""

import logging
from pathlib import Path
from typing import Optional, Union

from ..config import ConfigurationError
from ..http.mime_types import get_extension, is_text_extension
from ..http.response import ResponseBody

logger = logging.getLogger(__name__)


class ResourceNotFound(Exception):
    """
    Raised when a requested file cannot be served.

    Covers files that do not exist, cannot be read, are directories, or
    resolve to a location outside the root directory.
    """

    def __init__(self, file_name: str, reason: str = "not found"):
        super().__init__(f"{file_name}: {reason}")
        self.file_name = file_name
        self.reason = reason


class FileLoader:
    """
    Loads files relative to a root directory.

    Text files (html, css, js, xml, json, txt) are returned as str,
    everything else as bytes.

    Usage:
        loader = FileLoader("/srv/public")
        page = loader.load("index.html")      # str
        logo = loader.load("img/logo.png")    # bytes
    """

    def __init__(self, root: Union[str, Path]):
        # Resolve once so the traversal check compares absolute paths
        self.root = Path(root).resolve()

    def path_for(self, file_name: str) -> Path:
        """
        Get the absolute path for a file under the root.

        Raises:
            ResourceNotFound: If the name resolves outside the root.
        """
        try:
            full_path = (self.root / file_name).resolve()
            full_path.relative_to(self.root)
        except (OSError, ValueError):
            logger.warning(f"Rejected path outside asset root: {file_name!r}")
            raise ResourceNotFound(file_name, "outside root") from None
        return full_path

    def load(self, file_name: str, as_text: Optional[bool] = None) -> ResponseBody:
        """
        Read a file.

        Args:
            file_name: Path relative to the root.
            as_text: Force text (True) or binary (False) reading. By default
                     this is decided from the file extension.

        Returns:
            The file content: str for text, bytes for binary.

        Raises:
            ResourceNotFound: If the file cannot be read for any reason.
        """
        path = self.path_for(file_name)
        if as_text is None:
            as_text = is_text_extension(get_extension(file_name))

        try:
            if as_text:
                # Decoded from bytes so CRLF line endings are kept as on disk
                return path.read_bytes().decode("utf-8")
            return path.read_bytes()
        except (OSError, UnicodeDecodeError) as e:
            logger.debug(f"Cannot read {path}: {e}")
            raise ResourceNotFound(file_name, type(e).__name__) from e

    def exists(self, file_name: str) -> bool:
        """Check whether a readable regular file exists under the root."""
        try:
            return self.path_for(file_name).is_file()
        except ResourceNotFound:
            return False

    def require(self, file_name: str) -> None:
        """
        Startup check: fail if a file the server depends on is missing.

        Raises:
            ConfigurationError: If the file is not a regular file under the root.
        """
        if not self.exists(file_name):
            raise ConfigurationError(f"Required file missing: {self.root / file_name}")
