"""Environment-driven application settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[2]


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
    app_name: str
    app_version: str
    log_level: str
    database_path: Path
    storage_backend: str
    admin_token: str | None
    open_hour: int
    close_hour: int
    allowed_durations_hours: tuple[int, ...]
    min_advance_days: int
    moderation_enabled: bool
    quota_policy: str
    max_active_reservations: int
    occupancy_window_hours: int
    seed_rooms: bool


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Read settings once per process; tests derive variants via dataclasses.replace."""
    return Settings(
        app_name=os.getenv("APP_NAME", "Study Room Reservations"),
        app_version=os.getenv("APP_VERSION", "1.0.0"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        database_path=Path(
            os.getenv("DATABASE_PATH", str(PROJECT_ROOT / "data" / "reservations.db"))
        ),
        storage_backend=os.getenv("STORAGE_BACKEND", "sqlite").strip().lower(),
        admin_token=os.getenv("ADMIN_TOKEN") or None,
        open_hour=_env_int("OPEN_HOUR", 7),
        close_hour=_env_int("CLOSE_HOUR", 21),
        allowed_durations_hours=(1, 2),
        min_advance_days=_env_int("MIN_ADVANCE_DAYS", 1),
        moderation_enabled=_env_bool("MODERATION_ENABLED", True),
        quota_policy=os.getenv("QUOTA_POLICY", "one_per_day").strip().lower(),
        max_active_reservations=_env_int("MAX_ACTIVE_RESERVATIONS", 2),
        occupancy_window_hours=_env_int("OCCUPANCY_WINDOW_HOURS", 24),
        seed_rooms=_env_bool("SEED_ROOMS", True),
    )
