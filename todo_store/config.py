"""Settings loaded from environment variables (+ optional .env).

Every variable uses the ``TODO_`` prefix, e.g. ``TODO_DATA_FILE``.
"""

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from zoneinfo import ZoneInfo

from dotenv import find_dotenv, load_dotenv

from todo_store.storage import default_data_file

ENV_PREFIX = "TODO"

DEFAULT_CORS_ORIGINS = ["http://localhost:1420", "http://localhost:3000"]


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None or v.strip() == "" else v.strip()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_list(name: str, default: list[str]) -> list[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    return [p.strip() for p in raw.replace(",", " ").split() if p.strip()]


def _env_path(name: str, default: Path | None) -> Path | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    data_file: Path
    timezone: ZoneInfo
    log_level: str
    log_dir: Path | None
    host: str
    port: int
    cors_origins: list[str]


def load_settings() -> Settings:
    """Read settings from the environment.

    Raises ``zoneinfo.ZoneInfoNotFoundError`` for an unknown ``TODO_TIMEZONE``.
    """
    load_dotenv(find_dotenv(usecwd=True), override=False)
    return Settings(
        data_file=_env_path(_k("DATA_FILE"), default_data_file()),
        timezone=ZoneInfo(_env(_k("TIMEZONE"), "Asia/Jakarta")),
        log_level=_env(_k("LOG_LEVEL"), "INFO").upper(),
        log_dir=_env_path(_k("LOG_DIR"), None),
        host=_env(_k("HOST"), "127.0.0.1"),
        port=_env_int(_k("PORT"), 8000),
        cors_origins=_env_list(_k("CORS_ORIGINS"), DEFAULT_CORS_ORIGINS),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings, loaded on first use."""
    return load_settings()
