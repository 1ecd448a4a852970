"""Configuration loading from environment variables."""
from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class AppConfig:
    data_dir: str
    log_level: str = "INFO"
    file_log_level: str = "DEBUG"
    log_file: str | None = None
    debug_schema: bool = False
    seek_step_seconds: float = 10.0
    volume_step: float = 0.05
    toast_timeout_ms: int = 3000


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_float(name: str, default: float, *, min_value: float, max_value: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return max(min_value, min(max_value, value))


def _env_int(name: str, default: int, *, min_value: int, max_value: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return max(min_value, min(max_value, value))


def load_config(default_data_dir: str) -> AppConfig:
    data_dir = os.getenv("PLAYDECK_DATA_DIR", "").strip() or default_data_dir
    os.makedirs(data_dir, exist_ok=True)
    return AppConfig(
        data_dir=data_dir,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        file_log_level=os.getenv("FILE_LOG_LEVEL", "DEBUG").upper(),
        log_file=os.path.join(data_dir, "playdeck.log"),
        debug_schema=_env_flag("PLAYDECK_DEBUG_SCHEMA"),
        seek_step_seconds=_env_float("PLAYDECK_SEEK_STEP", 10.0, min_value=1.0, max_value=120.0),
        volume_step=_env_float("PLAYDECK_VOLUME_STEP", 0.05, min_value=0.01, max_value=0.5),
        toast_timeout_ms=_env_int("PLAYDECK_TOAST_MS", 3000, min_value=500, max_value=30000),
    )
