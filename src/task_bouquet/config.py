# src/task_bouquet/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time.
- Settings stay injectable: everything downstream takes a settings object.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

ENV_PREFIX = "BOUQUET"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


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
    data_dir: Path

    # ---- Persistence service ----
    api_base_url: str
    api_username: Optional[str]
    api_password: Optional[str]
    http_timeout_seconds: float

    # ---- Board behavior ----
    refresh_interval_seconds: float
    alert_days_threshold: int
    alerts_enabled: bool

    # ---- Presentation ----
    console_enabled: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "task-bouquet").strip() or "task-bouquet"
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/bouquet"))

        api_base_url = _env(_k("API_BASE_URL"), "http://localhost:8000/api").strip().rstrip("/")
        # Basic-auth gate in front of the API; empty means "send no credentials".
        api_username = _env(_k("API_USERNAME")).strip() or None
        api_password = _env(_k("API_PASSWORD")) or None
        http_timeout_seconds = _env_float(_k("HTTP_TIMEOUT_SECONDS"), 10.0)

        refresh_interval_seconds = _env_float(_k("REFRESH_INTERVAL_SECONDS"), 30.0)
        alert_days_threshold = _env_int(_k("ALERT_DAYS_THRESHOLD"), 3)
        alerts_enabled = _env_bool(_k("ALERTS_ENABLED"), True)

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            api_base_url=api_base_url,
            api_username=api_username,
            api_password=api_password,
            http_timeout_seconds=http_timeout_seconds,
            refresh_interval_seconds=refresh_interval_seconds,
            alert_days_threshold=alert_days_threshold,
            alerts_enabled=alerts_enabled,
            console_enabled=console_enabled,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
