# src/todox/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time.
- Components receive settings by injection; get_settings() is for the entrypoint.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "TODOX"

NOTIFIER_CHOICES = ("console", "matrix")


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except ImportError:
        return
    load_dotenv(override=False)


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

    # ---- Connectors ----
    console_enabled: bool
    notifier: str  # "console" | "matrix"
    auto_grant_notifications: bool

    # ---- Reminder tuning ----
    notification_ttl_seconds: float
    urgent_window_hours: float

    # ---- Matrix ----
    matrix_homeserver: str
    matrix_user_id: str
    matrix_password: str
    matrix_room: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    reminders_db_path: Path
    matrix_store_path: Path

    @staticmethod
    def from_env() -> "Settings":
        _load_dotenv_if_available()

        app_name = _env(_k("APP_NAME"), "todox").strip() or "todox"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)
        notifier = _env(_k("NOTIFIER"), "console").strip().lower()
        if notifier not in NOTIFIER_CHOICES:
            notifier = "console"
        auto_grant_notifications = _env_bool(_k("AUTO_GRANT_NOTIFICATIONS"), False)

        notification_ttl_seconds = max(0.0, _env_float(_k("NOTIFICATION_TTL_SECONDS"), 5.0))
        urgent_window_hours = max(0.0, _env_float(_k("URGENT_WINDOW_HOURS"), 24.0))

        matrix_homeserver = _env(_k("MATRIX_HOMESERVER")).strip()
        matrix_user_id = _env(_k("MATRIX_USER_ID")).strip()
        matrix_password = _env(_k("MATRIX_PASSWORD")).strip()
        matrix_room = _env(_k("MATRIX_ROOM")).strip()

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/todox"))
        reminders_db_path = _env_path(_k("REMINDERS_DB_PATH"), data_dir / "reminders.sqlite3")
        matrix_store_path = _env_path(_k("MATRIX_STORE_PATH"), data_dir / "matrix_store")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            console_enabled=console_enabled,
            notifier=notifier,
            auto_grant_notifications=auto_grant_notifications,
            notification_ttl_seconds=notification_ttl_seconds,
            urgent_window_hours=urgent_window_hours,
            matrix_homeserver=matrix_homeserver,
            matrix_user_id=matrix_user_id,
            matrix_password=matrix_password,
            matrix_room=matrix_room,
            data_dir=data_dir,
            reminders_db_path=reminders_db_path,
            matrix_store_path=matrix_store_path,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
