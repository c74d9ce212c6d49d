"""Centralized configuration for graby-site-config.

This module reads environment variables (optionally from a .env file) and
exposes simple constants and a small helper to access configuration values.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict

from dotenv import load_dotenv

# If a .env file is present, load it without overriding the real environment.
_env_path = Path(".") / ".env"
if _env_path.exists():
    load_dotenv(dotenv_path=str(_env_path))

_TRUTHY = {"1", "true", "t", "yes", "y", "on"}


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUTHY


def _env_path_value(name: str, default: str) -> Path:
    """Return ``name`` from the environment as a ``Path``.

    Blank values fall back to ``default`` so an exported-but-empty variable
    does not silently point the loader at the current directory.
    """

    value = (os.getenv(name) or "").strip()
    return Path(value or default).expanduser()


# Runtime / deployment context
APP_ENV: str = os.getenv("APP_ENV", os.getenv("ENVIRONMENT", "local"))

# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT_JSON: bool = _env_bool("LOG_FORMAT_JSON", False)

# Rule files (one ``<key>.txt`` per domain, wildcard or subdomain)
SITE_CONFIG_DIR: Path = _env_path_value("SITE_CONFIG_DIR", "ftr-site-config")
SITE_CONFIG_CHECK_WILDCARD_OVERLAP: bool = _env_bool(
    "SITE_CONFIG_CHECK_WILDCARD_OVERLAP", True
)
SITE_CONFIG_LOG_UNKNOWN_DIRECTIVES: bool = _env_bool(
    "SITE_CONFIG_LOG_UNKNOWN_DIRECTIVES", True
)


def get_config() -> Dict[str, Any]:
    """Return a dict of the most important configuration values.

    Useful for log records and tests.
    """
    return {
        "runtime": {
            "environment": APP_ENV,
        },
        "logging": {
            "level": LOG_LEVEL,
            "json": LOG_FORMAT_JSON,
        },
        "site_config": {
            "directory": str(SITE_CONFIG_DIR),
            "check_wildcard_overlap": SITE_CONFIG_CHECK_WILDCARD_OVERLAP,
            "log_unknown_directives": SITE_CONFIG_LOG_UNKNOWN_DIRECTIVES,
        },
    }
