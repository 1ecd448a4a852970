# src/player/transport.py
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from PySide6.QtCore import QObject, Signal

from core.errors import PlaybackRejected
from core.models import ResourceHandle, TransportState
from core.utils import clamp

logger = logging.getLogger(__name__)


class Transport(QObject):
    """
    Owns the single playable resource and its play/pause/seek/volume state.

    The media backend does the actual decoding; it reports back through
    its own signals (loading, loaded(uri), durationChanged, positionChanged,
    finished, failed) which we turn into the lifecycle signals below.
    """
    metadataReady = Signal(float)       # duration, seconds
    positionChanged = Signal(float)     # seconds
    ended = Signal()
    error = Signal(str)                 # reason
    loadStarted = Signal()
    readyToPlay = Signal()
    playingChanged = Signal(bool)
    volumeChanged = Signal(float, bool)  # volume, muted

    def __init__(self, backend, volume: float = 0.7):
        super().__init__()
        self.backend = backend
        self._state = TransportState(volume=clamp(float(volume), 0.0, 1.0))
        self._ready_emitted = False
        self._scrubbing = False

        self.backend.set_volume(self._state.volume)
        self.backend.set_muted(False)

        self.backend.loading.connect(self._on_backend_loading)
        self.backend.loaded.connect(self._on_backend_loaded)
        self.backend.durationChanged.connect(self._on_backend_duration)
        self.backend.positionChanged.connect(self._on_backend_position)
        self.backend.finished.connect(self._on_backend_finished)
        self.backend.failed.connect(self._on_backend_failed)

    # ----------------------------
    # State
    # ----------------------------

    @property
    def state(self) -> TransportState:
        return replace(self._state)

    @property
    def is_playing(self) -> bool:
        return self._state.is_playing

    @property
    def loaded_resource(self) -> Optional[ResourceHandle]:
        return self._state.loaded_resource

    @property
    def duration(self) -> Optional[float]:
        return self._state.duration_seconds

    @property
    def position(self) -> float:
        return self._state.position_seconds

    @property
    def is_scrubbing(self) -> bool:
        return self._scrubbing

    def _set_playing(self, playing: bool) -> None:
        if self._state.is_playing != playing:
            self._state.is_playing = playing
            self.playingChanged.emit(playing)

    # ----------------------------
    # Source
    # ----------------------------

    def load(self, resource: ResourceHandle) -> None:
        self._set_playing(False)
        self._state.loaded_resource = resource
        self._state.position_seconds = 0.0
        self._state.duration_seconds = None
        self._ready_emitted = False
        logger.debug("Loading %s", resource.uri)
        self.backend.set_source(resource.uri)

    def unload(self) -> None:
        self._set_playing(False)
        self._state.loaded_resource = None
        self._state.position_seconds = 0.0
        self._state.duration_seconds = None
        self._ready_emitted = False
        self.backend.set_source(None)

    # ----------------------------
    # Playback
    # ----------------------------

    def play(self) -> None:
        if self._state.loaded_resource is None:
            raise PlaybackRejected("No track loaded")
        if self._state.is_playing:
            return
        try:
            self.backend.play()
        except PlaybackRejected:
            self._set_playing(False)
            raise
        self._set_playing(True)

    def pause(self) -> None:
        if not self._state.is_playing:
            return
        self.backend.pause()
        self._set_playing(False)

    def stop(self) -> None:
        self.pause()
        self.seek(0.0)

    def seek(self, seconds: float) -> None:
        duration = self._state.duration_seconds
        if not duration:
            return
        target = clamp(float(seconds), 0.0, duration)
        self.backend.set_position(target)
        self._state.position_seconds = target
        if not self._scrubbing:
            self.positionChanged.emit(target)

    def seek_relative(self, delta: float) -> None:
        self.seek(self._state.position_seconds + float(delta))

    def seek_fraction(self, fraction: float) -> None:
        duration = self._state.duration_seconds
        if not duration:
            return
        self.seek(clamp(float(fraction), 0.0, 1.0) * duration)

    # ----------------------------
    # Scrubbing (press / drag / release)
    # ----------------------------

    def begin_scrub(self) -> None:
        self._scrubbing = True

    def scrub_to(self, seconds: float) -> None:
        # Seek live while dragging; position reflection stays suspended.
        self.seek(seconds)

    def end_scrub(self, seconds: Optional[float] = None) -> None:
        if seconds is not None:
            self.seek(seconds)
        self._scrubbing = False
        self.positionChanged.emit(self._state.position_seconds)

    # ----------------------------
    # Volume
    # ----------------------------

    def set_volume(self, volume: float) -> None:
        v = clamp(float(volume), 0.0, 1.0)
        if v == self._state.volume:
            return
        self._state.volume = v
        self.backend.set_volume(v)
        self.volumeChanged.emit(v, self._state.muted)

    def set_muted(self, muted: bool) -> None:
        muted = bool(muted)
        if muted == self._state.muted:
            return
        self._state.muted = muted
        self.backend.set_muted(muted)
        self.volumeChanged.emit(self._state.volume, muted)

    def toggle_muted(self) -> None:
        self.set_muted(not self._state.muted)

    # ----------------------------
    # Backend handlers
    # ----------------------------

    def _on_backend_loading(self) -> None:
        if self._state.loaded_resource is not None:
            self.loadStarted.emit()

    def _on_backend_loaded(self, uri: str) -> None:
        resource = self._state.loaded_resource
        if resource is None or self._ready_emitted:
            return
        if uri and uri != resource.uri:
            logger.debug("Ignoring ready for replaced source %s", uri)
            return
        self._ready_emitted = True
        self.readyToPlay.emit()

    def _on_backend_duration(self, seconds: float) -> None:
        if self._state.loaded_resource is None or not seconds or seconds <= 0:
            return
        self._state.duration_seconds = float(seconds)
        self.metadataReady.emit(float(seconds))

    def _on_backend_position(self, seconds: float) -> None:
        if self._state.loaded_resource is None:
            return
        self._state.position_seconds = max(0.0, float(seconds))
        if not self._scrubbing:
            self.positionChanged.emit(self._state.position_seconds)

    def _on_backend_finished(self) -> None:
        if self._state.loaded_resource is None:
            return
        self._set_playing(False)
        self.ended.emit()

    def _on_backend_failed(self, reason: str) -> None:
        # Failures for a source we already dropped are stale.
        if self._state.loaded_resource is None:
            logger.debug("Ignoring backend failure with no source loaded: %s", reason)
            return
        self._set_playing(False)
        self.error.emit(reason or "Unknown media error")
