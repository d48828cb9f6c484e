from __future__ import annotations

import logging
import os
from typing import Any, Dict

from dotenv import load_dotenv

from shared.settings import DEFAULT_BASE_URL, load_settings

DEFAULT_CONFIG: Dict[str, Any] = {
    "base_url": DEFAULT_BASE_URL,
    "test_room_id": "507f1f77bcf86cd799439011",
    "open_timeout": 10.0,
    "reconnect_backoff": 1.0,
    "max_reconnect_backoff": 30.0,
    "max_reconnect_retries": 5,
    "request_timeout": 10.0,
    "log_level": "INFO",
    "debug_mode": False,
    "validate_payloads": True,
}

CLIENT_CONFIG: Dict[str, Any] = DEFAULT_CONFIG.copy()

# Shared settings seed these keys; CLIENT_* variables still win.
_SHARED_KEYS = {
    "base_url": "base_url",
    "test_room_id": "test_room_id",
    "debug_mode": "debug",
    "log_level": "log_level",
}


class ConfigError(Exception):
    """Raised when configuration values are invalid."""

    pass


def load_config(env_path: str = ".env") -> Dict[str, Any]:
    """Load client configuration from env file/environment variables."""
    if os.path.exists(env_path):
        load_dotenv(env_path)
    settings = load_settings(env_path)

    for key, default_value in DEFAULT_CONFIG.items():
        if key in _SHARED_KEYS:
            default_value = getattr(settings, _SHARED_KEYS[key])
        env_key = f"CLIENT_{key.upper()}"
        value = os.getenv(env_key, default_value)
        CLIENT_CONFIG[key] = _coerce_type(value, type(DEFAULT_CONFIG[key]))

    if CLIENT_CONFIG["debug_mode"] and not os.getenv("CLIENT_LOG_LEVEL"):
        CLIENT_CONFIG["log_level"] = "DEBUG"

    _validate_config()
    logging.getLogger().setLevel(CLIENT_CONFIG["log_level"])
    return CLIENT_CONFIG


def _coerce_type(value: Any, target_type: type) -> Any:
    if isinstance(value, target_type):
        return value
    try:
        if target_type is bool:
            return str(value).lower() in ("1", "true", "yes", "on")
        return target_type(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Cannot convert {value} to {target_type}") from exc


def _validate_config() -> None:
    if not str(CLIENT_CONFIG["base_url"]).startswith(("ws://", "wss://")):
        raise ConfigError("base_url must be a ws:// or wss:// URL")
    if CLIENT_CONFIG["open_timeout"] <= 0:
        raise ConfigError("open_timeout must be positive")
    if CLIENT_CONFIG["request_timeout"] <= 0:
        raise ConfigError("request_timeout must be positive")
    if CLIENT_CONFIG["max_reconnect_retries"] < 0:
        raise ConfigError("max_reconnect_retries must not be negative")


def get(key: str, default: Any = None) -> Any:
    return CLIENT_CONFIG.get(key, default)


__all__ = ["CLIENT_CONFIG", "DEFAULT_CONFIG", "ConfigError", "get", "load_config"]
