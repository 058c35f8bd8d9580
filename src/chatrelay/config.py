"""Centralized configuration management for chatrelay.

Reads from environment variables with sensible defaults.
The server, the CLI and the WSGI entry point all use this module.

``PORT`` and ``ADMIN_PASSWORD`` keep their historical unprefixed names;
everything else follows the pattern CHATRELAY_*, plus FLASK_SECRET_KEY.

Example:
    >>> from chatrelay.config import get_config
    >>> config = get_config()
    >>> print(config.server_port)
    3000
"""

import logging
import os
from dataclasses import dataclass, field

log = logging.getLogger(__name__)

DEFAULT_ADMIN_PASSWORD = "midnight2025"


def _getenv_int(key: str, default: int) -> int:
    """Get integer from environment with fallback to default."""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        log.warning(f"Invalid integer value for {key}={value}, using default {default}")
        return default


@dataclass
class ChatRelayConfig:
    """chatrelay configuration loaded from environment variables.

    All fields have defaults that work for local development.
    Production deployments must at least override ``admin_password``.

    Attributes
    ----------
    server_host : str
        Server bind host address.
    server_port : int
        Server bind port number.
    admin_password : str
        Shared secret that unlocks room administration for a session.
    data_file : str
        Path of the JSON snapshot holding rooms and messages.
    public_dir : str
        Directory served as static files.
    upload_dir : str
        Directory uploaded images are written to. Served under /uploads.
    max_upload_mb : int
        Maximum upload size in megabytes.
    log_level : str
        Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    flask_secret_key : str
        Flask session secret key.
    """

    server_host: str = field(
        default_factory=lambda: os.getenv("CHATRELAY_HOST", "0.0.0.0")
    )
    server_port: int = field(default_factory=lambda: _getenv_int("PORT", 3000))

    # Security
    admin_password: str = field(
        default_factory=lambda: os.getenv("ADMIN_PASSWORD", DEFAULT_ADMIN_PASSWORD)
    )
    flask_secret_key: str = field(
        default_factory=lambda: os.getenv(
            "FLASK_SECRET_KEY", "dev-secret-key-change-in-production"
        )
    )

    # Storage
    data_file: str = field(
        default_factory=lambda: os.getenv("CHATRELAY_DATA_FILE", "data.json")
    )
    public_dir: str = field(
        default_factory=lambda: os.getenv("CHATRELAY_PUBLIC_DIR", "public")
    )
    upload_dir: str = field(
        default_factory=lambda: os.getenv("CHATRELAY_UPLOAD_DIR", "public/uploads")
    )
    max_upload_mb: int = field(
        default_factory=lambda: _getenv_int("CHATRELAY_MAX_UPLOAD_MB", 10)
    )

    # Logging
    log_level: str = field(
        default_factory=lambda: os.getenv("CHATRELAY_LOG_LEVEL", "INFO")
    )

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate()
        self._log_config()

    def _validate(self):
        """Validate configuration values.

        Raises
        ------
        ValueError
            If configuration is invalid.
        """
        if not 1 <= self.server_port <= 65535:
            raise ValueError(
                f"Invalid port number: {self.server_port}. Must be between 1 and 65535"
            )

        if not self.admin_password:
            raise ValueError("ADMIN_PASSWORD must not be empty")

        if self.max_upload_mb < 1:
            raise ValueError(
                f"Invalid max upload size: {self.max_upload_mb}MB. Must be at least 1MB"
            )

        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.log_level.upper() not in valid_levels:
            log.warning(
                f"Invalid log level '{self.log_level}', using INFO. "
                f"Valid levels: {', '.join(valid_levels)}"
            )
            self.log_level = "INFO"

    @property
    def uses_default_admin_password(self) -> bool:
        return self.admin_password == DEFAULT_ADMIN_PASSWORD

    def _log_config(self):
        """Log configuration for debugging (excludes sensitive data)."""
        log.info("=" * 80)
        log.info("chatrelay Configuration:")
        log.info(f"  Server: {self.server_host}:{self.server_port}")
        log.info(f"  Data File: {self.data_file}")
        log.info(f"  Public Dir: {self.public_dir}")
        log.info(f"  Upload Dir: {self.upload_dir}")
        log.info(f"  Max Upload: {self.max_upload_mb}MB")
        log.info(f"  Log Level: {self.log_level}")
        log.info("=" * 80)
        if self.uses_default_admin_password:
            log.warning(
                "ADMIN_PASSWORD is the built-in default. "
                "Set ADMIN_PASSWORD for any real deployment."
            )


# Global config instance (singleton pattern)
_config: ChatRelayConfig | None = None


def get_config() -> ChatRelayConfig:
    """Get or create the global configuration instance.

    Returns
    -------
    ChatRelayConfig
        Global configuration instance loaded from environment variables.
    """
    global _config
    if _config is None:
        _config = ChatRelayConfig()
    return _config


def reload_config() -> ChatRelayConfig:
    """Reload configuration from environment.

    Useful for testing or when environment variables change at runtime.

    Returns
    -------
    ChatRelayConfig
        Newly created configuration instance.
    """
    global _config
    _config = ChatRelayConfig()
    return _config
