# src/taskboard_client/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time.
- Settings stay injectable: controllers and tests can pass their own object.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKBOARD"

DEFAULT_API_URL = "http://localhost:4000"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Remote API ----
    api_url: str
    timeout_seconds: float
    verify_tls: bool

    # ---- Local data paths (ignored by git) ----
    data_dir: Path

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskboard").strip() or "taskboard"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        api_url = _env(_k("API_URL"), DEFAULT_API_URL).strip().rstrip("/") or DEFAULT_API_URL
        # A zero/negative timeout would make every call fail immediately.
        timeout_seconds = max(1.0, _env_float(_k("TIMEOUT_SECONDS"), 15.0))
        verify_tls = _env_bool(_k("VERIFY_TLS"), True)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskboard"))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            api_url=api_url,
            timeout_seconds=timeout_seconds,
            verify_tls=verify_tls,
            data_dir=data_dir,
        )


_settings: Settings | None = None


def get_settings() -> Settings:
    """Load settings once (reads .env on first call, never overrides real env vars)."""
    global _settings
    if _settings is None:
        load_dotenv(override=False)
        _settings = Settings.from_env()
    return _settings
