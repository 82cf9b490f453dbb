from __future__ import annotations
from pathlib import Path
import os

DEFAULT_API_URL = "http://localhost:3000/api"
DEFAULT_LOG_LEVEL = "WARNING"

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def api_base_url() -> str:
    url = os.getenv("JOTTER_API_URL") or DEFAULT_API_URL
    return url.rstrip("/")


def store_path() -> Path:
    """Location of the local key-value store; parent dir is created on demand."""
    env_path = os.getenv("JOTTER_STORE_PATH")
    if env_path:
        path = Path(env_path)
    else:
        path = Path.home() / ".jotter" / "jotter.db"
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def log_level() -> str:
    level = (os.getenv("JOTTER_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()
    if level not in _LOG_LEVELS:
        raise ValueError(f"Invalid JOTTER_LOG_LEVEL '{level}'. Must be one of: {sorted(_LOG_LEVELS)}")
    return level
