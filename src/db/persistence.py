"""Persistence helpers for player settings and the playlist snapshot."""

from __future__ import annotations

import json
import logging
import sqlite3
from typing import Any, Iterable

from core.models import PersistedSettings, RepeatMode, Track
from db.database import get_all_settings, get_init, set_init, set_setting

logger = logging.getLogger(__name__)

KEY_THEME = "theme"
KEY_PLAYLIST = "playlist"
KEY_CURRENT_INDEX = "currentTrackIndex"
KEY_VOLUME = "volume"
KEY_SHUFFLE = "shuffle"
KEY_REPEAT = "repeat"

THEMES = ("dark", "light")
DEFAULT_VOLUME = 0.7


def coerce_float(
    value: Any,
    *,
    default: float,
    min_value: float | None = None,
    max_value: float | None = None,
) -> float:
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        parsed = float(default)
    if parsed != parsed:  # NaN
        parsed = float(default)
    if min_value is not None:
        parsed = max(float(min_value), parsed)
    if max_value is not None:
        parsed = min(float(max_value), parsed)
    return float(parsed)


def coerce_bool(value: Any, *, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"1", "true", "yes", "on"}:
            return True
        if normalized in {"0", "false", "no", "off"}:
            return False
    return bool(default)


def coerce_int(value: Any, *, default: int) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return int(default)


def parse_playlist(raw: str | None) -> list[Track]:
    if not raw:
        return []
    try:
        payload = json.loads(raw)
    except ValueError:
        logger.warning("Stored playlist is not valid JSON; starting empty")
        return []
    if not isinstance(payload, list):
        logger.warning("Stored playlist is not a list; starting empty")
        return []

    tracks: list[Track] = []
    for record in payload:
        track = Track.from_record(record)
        if track is None:
            logger.warning("Dropping malformed playlist entry: %r", record)
            continue
        tracks.append(track)
    return tracks


def serialize_playlist(tracks: Iterable[Track]) -> str:
    # Transient handles point at session-only copies; they cannot be restored.
    return json.dumps([t.to_record() for t in tracks if not t.is_transient], ensure_ascii=False)


class PersistenceAdapter:
    """
    Keyed settings store. Reads are validated and default-filled into
    PersistedSettings; write failures are logged and never reach the player.
    """

    def __init__(self, db: sqlite3.Connection):
        self.db = db

    def load(self) -> PersistedSettings:
        try:
            raw = get_all_settings(self.db)
        except sqlite3.Error:
            logger.exception("Failed to read player settings")
            return PersistedSettings()

        theme = (raw.get(KEY_THEME) or "dark").strip().lower()
        if theme not in THEMES:
            logger.warning("Unknown theme %r; using dark", theme)
            theme = "dark"

        repeat_raw = coerce_int(raw.get(KEY_REPEAT, 0), default=0)
        if repeat_raw not in (0, 1, 2):
            logger.warning("Invalid repeat mode %r; using off", raw.get(KEY_REPEAT))
            repeat_raw = 0

        playlist = parse_playlist(raw.get(KEY_PLAYLIST))

        current_index = coerce_int(raw.get(KEY_CURRENT_INDEX, -1), default=-1)
        if not 0 <= current_index < len(playlist):
            if current_index != -1:
                logger.warning("Stored track index %s out of range; ignoring", current_index)
            current_index = -1

        return PersistedSettings(
            theme=theme,
            volume=coerce_float(raw.get(KEY_VOLUME, DEFAULT_VOLUME), default=DEFAULT_VOLUME, min_value=0.0, max_value=1.0),
            shuffle=coerce_bool(raw.get(KEY_SHUFFLE, False), default=False),
            repeat=RepeatMode(repeat_raw),
            current_index=current_index,
            playlist=playlist,
        )

    def _write(self, key: str, value: str) -> None:
        try:
            set_setting(self.db, key, value)
        except sqlite3.Error:
            logger.exception("Failed to save setting %s", key)

    def save_playlist(self, tracks: Iterable[Track]) -> None:
        self._write(KEY_PLAYLIST, serialize_playlist(tracks))

    def save_current_index(self, index: int) -> None:
        self._write(KEY_CURRENT_INDEX, str(int(index)))

    def save_volume(self, volume: float) -> None:
        self._write(KEY_VOLUME, repr(float(volume)))

    def save_shuffle(self, shuffle: bool) -> None:
        self._write(KEY_SHUFFLE, "true" if shuffle else "false")

    def save_repeat(self, mode: RepeatMode) -> None:
        self._write(KEY_REPEAT, str(int(mode)))

    def save_theme(self, theme: str) -> None:
        if theme not in THEMES:
            raise ValueError(f"unknown theme: {theme}")
        self._write(KEY_THEME, theme)

    def is_first_run(self) -> bool:
        try:
            return not get_init(self.db)
        except sqlite3.Error:
            logger.exception("Failed to read library init flag")
            return False

    def mark_initialized(self) -> None:
        try:
            set_init(self.db, True)
        except sqlite3.Error:
            logger.exception("Failed to write library init flag")
