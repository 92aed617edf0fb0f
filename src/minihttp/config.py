"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration management for minihttp.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m minihttp --port 8000                             │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── PUBLIC_PATH=/srv/www python -m minihttp                    │
    │                                                                      │
    │   3. Default values (in this dataclass)                             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
ASSET AND DATA ROOTS
=============================================================================

Two directories are read at runtime:

    public_dir   Static pages and assets. Must contain 404.html, which
                 doubles as the body of every error page.
    data_dir     JSON datasets. Must contain characters.json.

Both default to the directories shipped inside the package, so a fresh
install serves a working site with no configuration at all.

=============================================================================
FAIL FAST
=============================================================================

validate() runs when the server is constructed, not on first request.
A typo in PUBLIC_PATH stops the process at startup with a clear message
instead of turning every request into an error page.

=============================================================================
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_PUBLIC_DIR = str(PACKAGE_DIR / "public")
DEFAULT_DATA_DIR = str(PACKAGE_DIR / "data")

LOG_FORMATS = ("text", "json")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigurationError(ValueError):
    """
    Raised when the server is misconfigured.

    Covers invalid settings as well as missing or corrupt files the
    server cannot run without (the 404 page, the character dataset).
    Fatal at startup; answered with 500 if it surfaces mid-request.
    """


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, buffer_size, max_request_size, timeout

    THREADING SETTINGS
    - workers, queue_size

    CONTENT
    - public_dir, data_dir

    LOGGING
    - log_level, log_format

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """
    The IP address to bind to.
    - "127.0.0.1" - Localhost only (development)
    - "0.0.0.0" - All network interfaces (containers)
    """

    port: int = 3000
    """The port number to listen on."""

    backlog: int = 128
    """Maximum number of queued connections waiting for accept()."""

    buffer_size: int = 4096
    """Size of each recv() call in bytes."""

    max_request_size: int = 16 * 1024  # 16 KiB
    """
    Largest request the server reads, in bytes.
    Anything past this is truncated, not rejected.
    """

    timeout: Optional[float] = 30.0
    """
    Socket timeout in seconds for reading the request.
    Only the read phase is bounded; handling a parsed request never blocks.
    """

    # ─────────────────────────────────────────────────────────────────────
    # THREAD POOL SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    workers: int = 4
    """Number of worker threads serving connections."""

    queue_size: int = 100
    """
    Connections allowed to wait for a free worker.
    When the queue is full new connections get a 500 and are closed.
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    public_dir: str = DEFAULT_PUBLIC_DIR
    """Static asset root (PUBLIC_PATH)."""

    data_dir: str = DEFAULT_DATA_DIR
    """Dataset root (DATA_PATH)."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    log_format: str = "text"
    """Access log format: 'text' or 'json'."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        HTTP_HOST       Server host (default: 127.0.0.1)
        HTTP_PORT       Server port (default: 3000)
        HTTP_WORKERS    Worker threads (default: 4)
        HTTP_TIMEOUT    Request read timeout in seconds (default: 30)
        HTTP_LOG_LEVEL  Logging level (default: INFO)
        PUBLIC_PATH     Static asset root (default: bundled public/)
        DATA_PATH       Dataset root (default: bundled data/)

        =====================================================================

        Raises:
            ConfigurationError: If a numeric variable is not a number.
        """
        try:
            return cls(
                host=os.getenv("HTTP_HOST", "127.0.0.1"),
                port=int(os.getenv("HTTP_PORT", "3000")),
                workers=int(os.getenv("HTTP_WORKERS", "4")),
                timeout=float(os.getenv("HTTP_TIMEOUT", "30")),
                log_level=os.getenv("HTTP_LOG_LEVEL", "INFO"),
                public_dir=os.getenv("PUBLIC_PATH", DEFAULT_PUBLIC_DIR),
                data_dir=os.getenv("DATA_PATH", DEFAULT_DATA_DIR),
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid environment configuration: {e}") from e

    @property
    def log_level_number(self) -> int:
        """The log level as a logging module constant."""
        return getattr(logging, self.log_level.upper(), logging.INFO)

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ConfigurationError: On the first invalid setting found.
        """
        if not 0 < self.port < 65536:
            raise ConfigurationError(f"Invalid port: {self.port}. Must be 1-65535.")

        if self.backlog < 1:
            raise ConfigurationError("backlog must be >= 1")

        if self.workers < 1:
            raise ConfigurationError("workers must be >= 1")

        if self.queue_size < 1:
            raise ConfigurationError("queue_size must be >= 1")

        if self.buffer_size < 1024:
            raise ConfigurationError("buffer_size must be >= 1024")

        if self.max_request_size < self.buffer_size:
            raise ConfigurationError("max_request_size must be >= buffer_size")

        if self.timeout is not None and self.timeout <= 0:
            raise ConfigurationError("timeout must be > 0")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigurationError(f"Unknown log level: {self.log_level}")

        if self.log_format not in LOG_FORMATS:
            raise ConfigurationError(
                f"Unknown log format: {self.log_format}. Use 'text' or 'json'."
            )

        if not Path(self.public_dir).is_dir():
            raise ConfigurationError(f"Static asset root is not a directory: {self.public_dir}")

        if not Path(self.data_dir).is_dir():
            raise ConfigurationError(f"Dataset root is not a directory: {self.data_dir}")


# =============================================================================
# MODULE SUMMARY
# =============================================================================
#
# 1. Type-safe configuration with a dataclass
# 2. Environment variable support (PUBLIC_PATH, DATA_PATH, HTTP_*)
# 3. Validation at startup (fail-fast) with ConfigurationError
# 4. Defaults that serve the bundled site out of the box
# =============================================================================
