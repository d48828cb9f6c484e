from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_BASE_URL = "wss://localhost/socket.io/?EIO=4&transport=websocket"


@dataclass
class Settings:
    """Shared baseline settings (the client config builds on top)."""

    base_url: str = DEFAULT_BASE_URL
    test_room_id: str = "507f1f77bcf86cd799439011"
    debug: bool = False
    log_level: str = "INFO"


SETTINGS = Settings()


def _env_flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_settings(env_path: str = ".env") -> Settings:
    """Load shared settings from env/.env."""
    if Path(env_path).exists():
        load_dotenv(env_path)
    SETTINGS.base_url = os.getenv("SIO_BASE_URL", SETTINGS.base_url)
    SETTINGS.test_room_id = os.getenv("SIO_TEST_ROOM_ID", SETTINGS.test_room_id)
    debug = os.getenv("SIO_DEBUG")
    if debug is not None:
        SETTINGS.debug = _env_flag(debug)
    SETTINGS.log_level = os.getenv("SIO_LOG_LEVEL", "DEBUG" if SETTINGS.debug else SETTINGS.log_level)
    return SETTINGS


__all__ = ["Settings", "SETTINGS", "DEFAULT_BASE_URL", "load_settings"]
