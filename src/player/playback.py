# src/player/playback.py
from __future__ import annotations

import logging
import random
from typing import Iterable, Optional

from PySide6.QtCore import QObject, Signal

from core.errors import EmptyPlaylistOperation, OutOfRangeIndex, PlaybackRejected
from core.models import PersistedSettings, RepeatMode, Track
from library.ingest import added_message

logger = logging.getLogger(__name__)

EMPTY_PLAYLIST_MESSAGE = "No songs in playlist. Add some music first!"


class PlaybackController(QObject):
    """
    Selection, shuffle/repeat policy and the next/previous/ended transitions.

    The selection is held as a Track reference so it survives search
    changes; `current_index` is derived from it against the filtered view.
    """
    selectionChanged = Signal(int)        # current_index
    modesChanged = Signal(bool, object)   # shuffle, RepeatMode

    def __init__(self, app_state, store, transport, sequencer, persistence=None, rng: Optional[random.Random] = None):
        super().__init__()
        self.app_state = app_state
        self.store = store
        self.transport = transport
        self.sequencer = sequencer
        self.persistence = persistence
        self._rng = rng or random.Random()

        self._selected: Optional[Track] = None
        self.shuffle = False
        self.repeat = RepeatMode.OFF

        self.transport.ended.connect(self.on_ended)
        self.sequencer.loadCancelled.connect(self._on_load_cancelled)

    # ----------------------------
    # Selection
    # ----------------------------

    @property
    def selected_track(self) -> Optional[Track]:
        return self._selected

    @property
    def selection_visible(self) -> bool:
        return self.store.index_of(self._selected) >= 0

    @property
    def current_index(self) -> int:
        n = self.store.visible_count()
        if n == 0 or self._selected is None:
            return -1
        idx = self.store.index_of(self._selected)
        if idx >= 0:
            return idx
        return min(self.store.insertion_point(self._selected), n - 1)

    def _select(self, track: Optional[Track]) -> None:
        self._selected = track
        self._save_current_index()
        self.selectionChanged.emit(self.current_index)

    def _ensure_selection(self) -> None:
        if self._selected is None and self.store.visible_count() > 0:
            self.load_track(0, autoplay=False)

    def _persisted_index(self) -> int:
        # Position among the tracks that actually get saved.
        if self._selected is None or self._selected.is_transient:
            return -1
        i = 0
        for t in self.store:
            if t.is_transient:
                continue
            if t is self._selected:
                return i
            i += 1
        return -1

    # ----------------------------
    # Helpers
    # ----------------------------

    def _notify(self, message: str, notify_type: str = "info") -> None:
        if self.app_state is not None:
            self.app_state.notify(message, notify_type)

    def _require_tracks(self, visible: bool = False) -> None:
        if self.store.is_empty or (visible and self.store.visible_count() == 0):
            raise EmptyPlaylistOperation(EMPTY_PLAYLIST_MESSAGE)

    def _save_current_index(self) -> None:
        if self.persistence is not None:
            self.persistence.save_current_index(self._persisted_index())

    def _save_playlist(self) -> None:
        if self.persistence is not None:
            self.persistence.save_playlist(self.store.tracks)

    def _try_play(self) -> None:
        try:
            self.transport.play()
        except PlaybackRejected as e:
            logger.warning("Playback rejected: %s", e)
            self._notify("Error playing audio. Please try another file.", "error")

    # ----------------------------
    # Loading
    # ----------------------------

    def load_track(self, index: int, autoplay: bool = False) -> bool:
        try:
            track = self.store.track_at(index)
        except OutOfRangeIndex as e:
            logger.debug("Ignoring load: %s", e)
            return False
        self._select(track)
        self.sequencer.load(track, autoplay)
        return True

    def cancel_loading(self) -> bool:
        return self.sequencer.cancel()

    def _on_load_cancelled(self, committed: Optional[Track]) -> None:
        if committed is not None and self.store.contains(committed):
            self._select(committed)
        else:
            self.selectionChanged.emit(self.current_index)

    # ----------------------------
    # Transport control
    # ----------------------------

    def toggle_play_pause(self) -> None:
        try:
            self._require_tracks()
        except EmptyPlaylistOperation as e:
            self._notify(str(e), "warning")
            return

        if self.transport.is_playing:
            self.pause()
        else:
            self.play()

    def play(self) -> None:
        try:
            self._require_tracks()
        except EmptyPlaylistOperation as e:
            self._notify(str(e), "warning")
            return

        sel = self._selected
        if sel is None:
            self._ensure_selection()
            sel = self._selected
            if sel is None:
                return

        if self.sequencer.is_loading and self.sequencer.pending_track is sel:
            self.sequencer.set_autoplay(True)
            return
        if self.transport.loaded_resource is not sel.source:
            self.sequencer.load(sel, autoplay=True)
            return
        self._try_play()

    def pause(self) -> None:
        self.sequencer.set_autoplay(False)
        self.transport.pause()

    def next(self) -> None:
        try:
            self._require_tracks(visible=True)
        except EmptyPlaylistOperation as e:
            self._notify(str(e), "warning")
            return
        self.load_track(self._next_index(), autoplay=True)

    def previous(self) -> None:
        try:
            self._require_tracks(visible=True)
        except EmptyPlaylistOperation as e:
            self._notify(str(e), "warning")
            return
        self.load_track(self._previous_index(), autoplay=True)

    def _next_index(self) -> int:
        n = self.store.visible_count()
        cur = self.current_index
        if self.shuffle:
            # A hidden selection has no row of its own to skip.
            return self._random_index(n, cur if self.selection_visible else -1)
        if self._selected is not None and not self.selection_visible:
            ip = self.store.insertion_point(self._selected)
            return ip if ip < n else 0
        return cur + 1 if cur < n - 1 else 0

    def _previous_index(self) -> int:
        n = self.store.visible_count()
        if self._selected is not None and not self.selection_visible:
            ip = self.store.insertion_point(self._selected)
            return ip - 1 if ip > 0 else n - 1
        cur = self.current_index
        return cur - 1 if cur > 0 else n - 1

    def _random_index(self, n: int, exclude: int) -> int:
        if n <= 1:
            return 0
        if not 0 <= exclude < n:
            return self._rng.randrange(n)
        # Uniform over the other n - 1 positions.
        r = self._rng.randrange(n - 1)
        return r + 1 if r >= exclude else r

    def on_ended(self) -> None:
        n = self.store.visible_count()
        if self.repeat is RepeatMode.ONE:
            self.transport.seek(0.0)
            self._try_play()
        elif n > 0 and (self.repeat is RepeatMode.ALL or self.current_index < n - 1):
            self.next()
        else:
            self.transport.pause()
            self.transport.seek(0.0)

    # ----------------------------
    # Modes
    # ----------------------------

    def cycle_repeat(self) -> RepeatMode:
        mode = self.repeat.next_mode()
        self.set_repeat(mode)
        self._notify(mode.label, "success")
        return mode

    def set_repeat(self, mode) -> None:
        self.repeat = RepeatMode(mode)
        if self.persistence is not None:
            self.persistence.save_repeat(self.repeat)
        self.modesChanged.emit(self.shuffle, self.repeat)

    def set_shuffle(self, enabled: bool) -> None:
        self.shuffle = bool(enabled)
        if self.persistence is not None:
            self.persistence.save_shuffle(self.shuffle)
        self.modesChanged.emit(self.shuffle, self.repeat)

    def toggle_shuffle(self) -> bool:
        self.set_shuffle(not self.shuffle)
        self._notify("Shuffle enabled" if self.shuffle else "Shuffle disabled", "success")
        return self.shuffle

    # ----------------------------
    # Volume
    # ----------------------------

    def set_volume(self, volume: float) -> None:
        self.transport.set_volume(volume)
        if self.persistence is not None:
            self.persistence.save_volume(self.transport.state.volume)

    def change_volume(self, delta: float) -> None:
        self.set_volume(self.transport.state.volume + float(delta))

    def toggle_mute(self) -> None:
        self.transport.toggle_muted()

    # ----------------------------
    # Playlist
    # ----------------------------

    def add_tracks(self, tracks: Iterable[Track], announce: bool = True) -> list[Track]:
        added = self.store.add(tracks)
        if not added:
            return []
        self._save_playlist()
        self._ensure_selection()
        self.selectionChanged.emit(self.current_index)
        if announce:
            self._notify(added_message(added), "success")
        return added

    def remove_track(self, filtered_index: int) -> Optional[Track]:
        try:
            track = self.store.track_at(filtered_index)
        except OutOfRangeIndex as e:
            logger.debug("Ignoring remove: %s", e)
            return None

        was_selected = track is self._selected
        was_playing = self.transport.is_playing or (
            self.sequencer.is_loading and self.sequencer.pending_autoplay
        )
        if was_selected:
            # Drop the source before its file can go away.
            self.sequencer.reset()
        self.sequencer.forget(track)
        self.store.remove(filtered_index)
        self._save_playlist()

        if was_selected:
            self._selected = None
            n = self.store.visible_count()
            if n > 0:
                self.load_track(min(filtered_index, n - 1), autoplay=was_playing)
            else:
                self._select(None)
        else:
            self._save_current_index()
            self.selectionChanged.emit(self.current_index)

        self._notify(f'Removed "{track.title}"', "success")
        return track

    def clear_playlist(self) -> None:
        if self.store.is_empty:
            return
        self.sequencer.reset()
        self.store.clear()
        self._select(None)
        self._save_playlist()
        self._notify("Playlist cleared", "success")

    def search(self, term: str) -> None:
        self.store.search(term)
        self._ensure_selection()
        self.selectionChanged.emit(self.current_index)

    # ----------------------------
    # Startup
    # ----------------------------

    def restore(self, settings: PersistedSettings) -> None:
        self.transport.set_volume(settings.volume)
        self.shuffle = bool(settings.shuffle)
        self.repeat = RepeatMode(settings.repeat)
        self.modesChanged.emit(self.shuffle, self.repeat)

        self.store.replace(settings.playlist)
        if self.store.visible_count() == 0:
            self.selectionChanged.emit(-1)
            return
        index = settings.current_index
        if not 0 <= index < self.store.visible_count():
            index = 0
        self.load_track(index, autoplay=False)
