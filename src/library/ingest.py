# library/ingest.py
from __future__ import annotations

import logging
import mimetypes
import os
import tempfile
from dataclasses import dataclass
from typing import Optional

from mutagen import File as MutagenFile
from mutagen._util import MutagenError

from core.models import ResourceHandle, Track
from core.utils import format_time

logger = logging.getLogger(__name__)

AUDIO_EXTS = {".mp3", ".m4a", ".flac", ".ogg", ".oga", ".opus", ".wav", ".aac", ".weba"}

# mimetypes does not know every container on every platform
_EXTRA_TYPES = {
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".m4a": "audio/mp4",
    ".flac": "audio/flac",
    ".opus": "audio/opus",
    ".oga": "audio/ogg",
    ".ogg": "audio/ogg",
    ".weba": "audio/webm",
}


@dataclass(frozen=True)
class ProbeResult:
    title: Optional[str] = None
    artist: Optional[str] = None
    album: Optional[str] = None
    duration_label: str = "0:00"


def media_type_for(name: str) -> Optional[str]:
    ext = os.path.splitext(name)[1].lower()
    if ext in _EXTRA_TYPES:
        return _EXTRA_TYPES[ext]
    guessed, _ = mimetypes.guess_type(name)
    return guessed


def extension_for(media_type: str) -> Optional[str]:
    """File extension for an audio media type, or None if we would not accept it."""
    media_type = (media_type or "").split(";")[0].strip().lower()
    for ext, known in _EXTRA_TYPES.items():
        if known == media_type:
            return ext
    ext = mimetypes.guess_extension(media_type)
    if ext and is_audio_file(f"x{ext}"):
        return ext
    return None


def is_audio_file(name: str) -> bool:
    media_type = media_type_for(name)
    if media_type:
        return media_type.startswith("audio/")
    return os.path.splitext(name)[1].lower() in AUDIO_EXTS


def iter_audio_paths(paths: list[str]) -> list[str]:
    """Expands directories and keeps only audio files, in the given order."""
    out: list[str] = []
    for p in paths:
        if not p:
            continue
        if os.path.isdir(p):
            for dirpath, _, filenames in os.walk(p):
                for fn in sorted(filenames):
                    full = os.path.join(dirpath, fn)
                    if is_audio_file(full):
                        out.append(full)
        elif os.path.isfile(p) and is_audio_file(p):
            out.append(p)
    return out


def _first(easy, key: str) -> str | None:
    v = easy.get(key)
    if not v:
        return None
    if isinstance(v, list):
        return (str(v[0]).strip() if v else None) or None
    s = str(v).strip()
    return s or None


def probe_metadata(path: str) -> ProbeResult:
    """
    Best-effort tag and duration probe. Always returns; unreadable or
    undecodable files produce an empty result with a 0:00 duration.
    """
    try:
        audio = MutagenFile(path, easy=True)
    except (MutagenError, OSError, ValueError) as e:
        logger.warning("Metadata probe failed for %s: %s", path, e)
        return ProbeResult()
    except Exception:
        logger.exception("Unexpected metadata probe failure for %s", path)
        return ProbeResult()

    if audio is None:
        return ProbeResult()

    duration = 0.0
    info = getattr(audio, "info", None)
    if info is not None and getattr(info, "length", None):
        try:
            duration = float(info.length)
        except (TypeError, ValueError):
            duration = 0.0

    tags = audio if getattr(audio, "tags", None) is not None else {}
    return ProbeResult(
        title=_first(tags, "title"),
        artist=_first(tags, "artist"),
        album=_first(tags, "album"),
        duration_label=format_time(duration),
    )


def _build_track(display_name: str, handle: ResourceHandle, probe_path: str) -> Track:
    meta = probe_metadata(probe_path)
    stem = os.path.splitext(os.path.basename(display_name))[0]
    return Track(
        title=meta.title or stem or "Unknown",
        artist=meta.artist or "Unknown Artist",
        album=meta.album or "Unknown Album",
        duration_label=meta.duration_label,
        source=handle,
    )


def track_from_path(path: str) -> Track | None:
    if not is_audio_file(path):
        return None
    path = os.path.abspath(path)
    return _build_track(path, ResourceHandle(uri=path), path)


def track_from_bytes(name: str, data: bytes) -> Track | None:
    """
    Spools raw bytes to a session-only file and wraps it in a transient
    handle. The copy is deleted when the track is removed or the playlist
    is cleared.
    """
    if not is_audio_file(name):
        return None
    suffix = os.path.splitext(name)[1].lower() or ".bin"
    fd, tmp_path = tempfile.mkstemp(prefix="playdeck-", suffix=suffix)
    with os.fdopen(fd, "wb") as f:
        f.write(data)
    handle = ResourceHandle(uri=tmp_path, transient=True, owned_path=tmp_path)
    return _build_track(name, handle, tmp_path)


def added_message(tracks: list[Track]) -> str:
    if len(tracks) == 1:
        return f'Added "{tracks[0].title}" to playlist'
    return f"Added {len(tracks)} songs to playlist"
