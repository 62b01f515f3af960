"""Django settings for spiritStats.

The calculator has no database and no web surface; Django hosts the app
registry, settings, logging configuration, and management commands. Every
value can be overridden through environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def _env_bool(name: str, *, default: bool) -> bool:
    """Parse a boolean environment variable.

    Args:
        name: Environment variable name.
        default: Value when the variable is not set.

    Returns:
        Parsed boolean value.
    """

    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def _env_str(name: str, *, default: str) -> str:
    """Return a trimmed environment variable, or `default` when unset or blank."""

    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def _env_csv(name: str, *, default: list[str]) -> list[str]:
    """Parse a comma-separated environment variable into a list of strings.

    Args:
        name: Environment variable name.
        default: Value when the variable is not set.

    Returns:
        A list of non-empty, trimmed values.
    """

    raw = os.getenv(name)
    if raw is None:
        return default
    return [part.strip() for part in raw.split(",") if part.strip()]


DEBUG = _env_bool("DJANGO_DEBUG", default=True)

_DEV_SECRET_KEY = "dev-only-insecure-secret-key"
SECRET_KEY = os.getenv("DJANGO_SECRET_KEY") or (_DEV_SECRET_KEY if DEBUG else "")
if not SECRET_KEY:
    raise RuntimeError("DJANGO_SECRET_KEY is required when DJANGO_DEBUG is False.")

ALLOWED_HOSTS: list[str] = []

INSTALLED_APPS = [
    "definitions.apps.DefinitionsConfig",
    "gamedata.apps.GameDataConfig",
    "core.apps.CoreConfig",
]

# Battle logs and spirit metadata live in JSON and text files, not a database.
DATABASES: dict[str, dict[str, str]] = {}

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = False
USE_TZ = True

SPIRIT_CALC_DATA_DIR = Path(_env_str("SPIRIT_CALC_DATA_DIR", default=str(BASE_DIR / "_data")))
SPIRIT_CALC_DEFAULT_PLAYERS: list[str] = _env_csv(
    "SPIRIT_CALC_DEFAULT_PLAYERS",
    default=["Player 1", "Player 2", "Player 3"],
)
SPIRIT_CALC_LOG_LEVEL = _env_str("SPIRIT_CALC_LOG_LEVEL", default="INFO").upper()
SPIRIT_CALC_LOG_FILE = os.getenv("SPIRIT_CALC_LOG_FILE", "").strip()

_LOG_HANDLERS = ["console"] + (["file"] if SPIRIT_CALC_LOG_FILE else [])

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {"format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "standard"},
        **(
            {
                "file": {
                    "class": "logging.FileHandler",
                    "filename": SPIRIT_CALC_LOG_FILE,
                    "encoding": "utf-8",
                    "formatter": "standard",
                }
            }
            if SPIRIT_CALC_LOG_FILE
            else {}
        ),
    },
    "loggers": {
        name: {"handlers": _LOG_HANDLERS, "level": SPIRIT_CALC_LOG_LEVEL, "propagate": False}
        for name in ("analysis", "core", "definitions", "gamedata")
    },
    "root": {"handlers": ["console"], "level": "WARNING"},
}
