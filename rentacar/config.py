"""App configuration. Every value can be overridden through the environment."""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parents[1]


def _env_path(name: str, default: Path | None) -> str | None:
    raw = os.getenv(name)
    if raw is None:
        return str(default) if default is not None else None
    raw = raw.strip()
    # empty value means "memory only"
    return raw or None


class Config:
    SECRET_KEY = os.getenv("RENTACAR_SECRET_KEY", "dev-secret-change-me")
    APP_ENV = os.getenv("APP_ENV", "dev")
    DATA_PATH = _env_path(
        "RENTACAR_DATA_PATH",
        None if os.getenv("APP_ENV") == "test" else BASE_DIR / "data.pkl",
    )
    TIMEZONE = os.getenv("RENTACAR_TIMEZONE", "UTC")
    LOG_LEVEL = os.getenv("RENTACAR_LOG_LEVEL", "INFO").upper()
    DEFAULT_PAGE_SIZE = int(os.getenv("RENTACAR_DEFAULT_PAGE_SIZE", "20"))
    SORT_DIRECTION = "DESC"


class TestConfig(Config):
    TESTING = True
    APP_ENV = "test"
    SECRET_KEY = "test"
    DATA_PATH = None
