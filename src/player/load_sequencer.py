# src/player/load_sequencer.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from PySide6.QtCore import QObject, Signal

from core.errors import MediaLoadError, PlaybackRejected
from core.models import Track

logger = logging.getLogger(__name__)


class LoadState(Enum):
    IDLE = auto()
    LOADING = auto()
    CANCELLING = auto()


@dataclass
class LoadSession:
    """
    One pending load. Its continuation (commit + optional autoplay) only
    runs while it is still the sequencer's current session.
    """
    session_id: int
    track: Track
    autoplay: bool
    active: bool = True

    def invalidate(self) -> None:
        self.active = False


class LoadSequencer(QObject):
    """
    Swaps the transport's source and decides what a late readyToPlay or
    error means. All source changes go through here.
    """
    stateChanged = Signal(object)     # LoadState
    trackLoading = Signal(object)     # Track
    trackCommitted = Signal(object)   # Track
    loadCancelled = Signal(object)    # last committed Track | None
    loadFailed = Signal(str)          # reason

    def __init__(self, transport, app_state=None):
        super().__init__()
        self.transport = transport
        self.app_state = app_state

        self._state = LoadState.IDLE
        self._session_counter = 0
        self._pending: Optional[LoadSession] = None
        self._committed: Optional[Track] = None

        self.transport.readyToPlay.connect(self._on_ready)
        self.transport.error.connect(self._on_error)

    # ----------------------------
    # State
    # ----------------------------

    @property
    def state(self) -> LoadState:
        return self._state

    @property
    def session_id(self) -> int:
        return self._session_counter

    @property
    def is_loading(self) -> bool:
        return self._state is LoadState.LOADING

    @property
    def pending_track(self) -> Optional[Track]:
        return self._pending.track if self._pending is not None else None

    @property
    def pending_autoplay(self) -> bool:
        return bool(self._pending is not None and self._pending.autoplay)

    @property
    def committed_track(self) -> Optional[Track]:
        return self._committed

    def _set_state(self, state: LoadState) -> None:
        if self._state is not state:
            logger.debug("Load state %s -> %s", self._state.name, state.name)
            self._state = state
            self.stateChanged.emit(state)

    def _notify(self, message: str, notify_type: str) -> None:
        if self.app_state is not None:
            self.app_state.notify(message, notify_type)

    def _invalidate_pending(self) -> None:
        if self._pending is not None:
            self._pending.invalidate()
            self._pending = None

    # ----------------------------
    # Operations
    # ----------------------------

    def load(self, track: Track, autoplay: bool = False) -> LoadSession:
        self._invalidate_pending()
        self._session_counter += 1
        session = LoadSession(session_id=self._session_counter, track=track, autoplay=bool(autoplay))
        self._pending = session
        self._set_state(LoadState.LOADING)
        self.trackLoading.emit(track)

        # The backend may report ready synchronously; the session is already current.
        self.transport.load(track.source)
        return session

    def set_autoplay(self, autoplay: bool) -> bool:
        """Changes the intent of the pending load. Returns False if nothing is pending."""
        if self._pending is None or self._state is not LoadState.LOADING:
            return False
        self._pending.autoplay = bool(autoplay)
        return True

    def cancel(self) -> bool:
        if self._state is not LoadState.LOADING:
            return False

        cancelled = self._pending
        self._set_state(LoadState.CANCELLING)
        try:
            self._invalidate_pending()
            self.transport.unload()
            if cancelled is not None:
                logger.info("Cancelled loading of %r", cancelled.track.title)
            self.loadCancelled.emit(self._committed)
            self._notify("Loading cancelled", "info")
        finally:
            self._set_state(LoadState.IDLE)
        return True

    def reset(self) -> None:
        self._invalidate_pending()
        self._committed = None
        self.transport.unload()
        self._set_state(LoadState.IDLE)

    def forget(self, track: Track) -> None:
        if self._committed is track:
            self._committed = None

    # ----------------------------
    # Transport reactions
    # ----------------------------

    def _on_ready(self) -> None:
        session = self._pending
        if session is None or not session.active or session.session_id != self._session_counter:
            logger.debug("Dropping stale ready signal")
            return
        if self._state is not LoadState.LOADING:
            return

        # Consume before acting so a re-entrant ready cannot run it twice.
        self._pending = None
        session.invalidate()
        self._committed = session.track
        self._set_state(LoadState.IDLE)
        self.trackCommitted.emit(session.track)

        if not session.autoplay:
            return
        try:
            self.transport.play()
        except PlaybackRejected as e:
            logger.warning("Autoplay of %r rejected: %s", session.track.title, e)
            self._notify("Error playing audio. Please try another file.", "error")

    def _on_error(self, reason: str) -> None:
        if self._state is LoadState.CANCELLING:
            logger.debug("Suppressed media error during cancel: %s", reason)
            return

        resource = self.transport.loaded_resource
        err = MediaLoadError(reason, resource.uri if resource is not None else None)
        logger.warning("Media error for %s: %s", err.uri, err.reason)

        self._invalidate_pending()
        self.transport.pause()
        self._set_state(LoadState.IDLE)
        self.loadFailed.emit(err.reason)
        self._notify("Error playing audio file", "error")
