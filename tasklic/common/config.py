"""
Configuration settings for the license engine.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

# Used only when LICENSE_ENCRYPTION_KEY is unset. Anyone with the source can
# decrypt a database written with it.
DEFAULT_ENCRYPTION_KEY = "taskrep-license-key-2024"


def _env_list(name: str) -> list[str]:
    raw = os.getenv(name, "")
    return [item.strip() for item in raw.split(",") if item.strip()]


def _env_float(name: str) -> float | None:
    raw = os.getenv(name)
    if not raw:
        return None
    return float(raw)


def _env_log_level(name: str) -> int:
    raw = os.getenv(name, "INFO").upper()
    level = logging.getLevelName(raw)
    if not isinstance(level, int):
        logger.warning("Unknown log level %r in %s, using INFO", raw, name)
        return logging.INFO
    return level


class Config:
    """Central configuration class for all engine settings."""

    def __init__(self) -> None:
        # Application identity
        self.APP_ID: str = os.getenv("TASKLIC_APP_ID", "taskrep-task-management")

        # Remote authority; None switches validation to local-only mode
        self.LICENSE_MANAGER_URL: str | None = (
            os.getenv("LICENSE_MANAGER_URL") or None
        )
        self.REQUEST_TIMEOUT: float | None = _env_float("TASKLIC_REQUEST_TIMEOUT")

        # Encryption at rest
        self.ENCRYPTION_KEY: str | None = os.getenv("LICENSE_ENCRYPTION_KEY") or None

        # Validation cache
        self.CACHE_TTL: float = 30  # Seconds a valid result is reused
        self.FAILED_CACHE_TTL: float = 5  # Seconds an invalid result is reused

        # Domain fallback, most specific first
        self.DEV_DOMAIN_MARKERS: list[str] = _env_list("TASKLIC_DEV_DOMAIN_MARKERS")
        self.FALLBACK_DOMAINS: list[str] = _env_list("TASKLIC_FALLBACK_DOMAINS")

        # Server settings
        self.SERVER_HOST: str = os.getenv("TASKLIC_SERVER_HOST", "127.0.0.1")
        self.SERVER_PORT: int = int(os.getenv("TASKLIC_SERVER_PORT", "8000"))

        # File paths
        self.BASE_DIR: Path = Path(__file__).parent.parent
        self.DATA_DIR: Path = self.BASE_DIR / "data"
        self.DB_PATH: Path = Path(
            os.getenv("TASKLIC_DB_PATH", str(self.DATA_DIR / "licenses.db"))
        )

        # Logging
        self.LOG_LEVEL: int = _env_log_level("TASKLIC_LOG_LEVEL")

    def get_encryption_key(self) -> str:
        """Return the field encryption secret, falling back to the built-in one."""
        if self.ENCRYPTION_KEY:
            return self.ENCRYPTION_KEY
        logger.warning(
            "LICENSE_ENCRYPTION_KEY is not set; using the built-in default key. "
            "Stored license secrets are not protected."
        )
        return DEFAULT_ENCRYPTION_KEY
