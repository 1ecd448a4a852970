# core/models.py
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

from core.utils import generate_track_id

logger = logging.getLogger(__name__)


class RepeatMode(IntEnum):
    OFF = 0
    ALL = 1
    ONE = 2

    def next_mode(self) -> "RepeatMode":
        return RepeatMode((int(self) + 1) % 3)

    @property
    def label(self) -> str:
        return {RepeatMode.OFF: "Repeat off", RepeatMode.ALL: "Repeat all", RepeatMode.ONE: "Repeat one"}[self]


@dataclass(eq=False)
class ResourceHandle:
    """
    Reference to a loadable media source.

    A transient handle owns a session-only copy on disk (owned_path) and
    must be released when its track goes away. Released handles stay
    released; release() is safe to call more than once.
    """
    uri: str
    transient: bool = False
    owned_path: str | None = None
    released: bool = False

    def release(self) -> None:
        if self.released or not self.transient:
            return
        self.released = True
        if self.owned_path and os.path.exists(self.owned_path):
            try:
                os.remove(self.owned_path)
            except OSError:
                logger.warning("Could not remove transient media copy %s", self.owned_path)


# Tracks compare by identity: the store relies on `is` between tracks and filtered.
@dataclass(eq=False)
class Track:
    title: str
    artist: str
    album: str
    duration_label: str
    source: ResourceHandle
    cover: ResourceHandle | None = None
    id: str = field(default_factory=generate_track_id)

    @property
    def is_transient(self) -> bool:
        return self.source.transient

    def release(self) -> None:
        self.source.release()
        if self.cover is not None:
            self.cover.release()

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "artist": self.artist,
            "album": self.album,
            "duration": self.duration_label,
            "src": self.source.uri,
            "cover": self.cover.uri if self.cover is not None else None,
        }

    @staticmethod
    def from_record(record: Any) -> "Track | None":
        """Build a track from a persisted record, or None if the record is unusable."""
        if not isinstance(record, dict):
            return None
        src = record.get("src")
        if not isinstance(src, str) or not src.strip():
            return None

        def _text(key: str, default: str) -> str:
            v = record.get(key)
            if not isinstance(v, str) or not v.strip():
                return default
            return v

        cover = record.get("cover")
        track_id = record.get("id")
        track = Track(
            title=_text("title", os.path.splitext(os.path.basename(src))[0] or "Unknown"),
            artist=_text("artist", "Unknown Artist"),
            album=_text("album", "Unknown Album"),
            duration_label=_text("duration", "0:00"),
            source=ResourceHandle(uri=src),
            cover=ResourceHandle(uri=cover) if isinstance(cover, str) and cover else None,
        )
        if isinstance(track_id, str) and track_id:
            track.id = track_id
        return track


@dataclass
class TransportState:
    loaded_resource: ResourceHandle | None = None
    is_playing: bool = False
    position_seconds: float = 0.0
    duration_seconds: float | None = None
    volume: float = 0.7
    muted: bool = False


@dataclass
class PersistedSettings:
    theme: str = "dark"
    volume: float = 0.7
    shuffle: bool = False
    repeat: RepeatMode = RepeatMode.OFF
    current_index: int = -1
    playlist: list[Track] = field(default_factory=list)
