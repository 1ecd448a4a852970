# library/track_store.py
from __future__ import annotations

import logging
from typing import Iterable, Iterator, Optional

from PySide6.QtCore import QObject, Signal

from core.errors import OutOfRangeIndex
from core.models import Track
from core.utils import matches_search, normalize_search_term

logger = logging.getLogger(__name__)


class TrackStore(QObject):
    """
    Ordered playlist plus the filtered view shown under the active search.

    `filtered` only ever holds the same Track objects as `tracks`, in the
    same relative order.
    """
    changed = Signal()

    def __init__(self):
        super().__init__()
        self._tracks: list[Track] = []
        self._filtered: list[Track] = []
        self._needle = ""

    # ----------------------------
    # Views
    # ----------------------------

    @property
    def tracks(self) -> list[Track]:
        return list(self._tracks)

    @property
    def filtered(self) -> list[Track]:
        return list(self._filtered)

    @property
    def search_term(self) -> str:
        return self._needle

    @property
    def is_empty(self) -> bool:
        return not self._tracks

    def __len__(self) -> int:
        return len(self._tracks)

    def __iter__(self) -> Iterator[Track]:
        return iter(list(self._tracks))

    def visible_count(self) -> int:
        return len(self._filtered)

    def track_at(self, filtered_index: int) -> Track:
        if not 0 <= filtered_index < len(self._filtered):
            raise OutOfRangeIndex(filtered_index, len(self._filtered))
        return self._filtered[filtered_index]

    def index_of(self, track: Optional[Track]) -> int:
        """Position of `track` in the filtered view, or -1."""
        if track is None:
            return -1
        for i, t in enumerate(self._filtered):
            if t is track:
                return i
        return -1

    def contains(self, track: Optional[Track]) -> bool:
        return track is not None and any(t is track for t in self._tracks)

    def insertion_point(self, track: Track) -> int:
        """
        Number of visible tracks that precede `track` in playlist order.
        For a hidden track this is where it would appear in the view.
        """
        count = 0
        visible = {id(t) for t in self._filtered}
        for t in self._tracks:
            if t is track:
                break
            if id(t) in visible:
                count += 1
        return count

    # ----------------------------
    # Mutations
    # ----------------------------

    def add(self, tracks: Iterable[Track]) -> list[Track]:
        added = [t for t in tracks if t is not None]
        if not added:
            return []
        self._tracks.extend(added)
        self._refilter()
        logger.debug("Added %d track(s); playlist now %d", len(added), len(self._tracks))
        self.changed.emit()
        return added

    def replace(self, tracks: Iterable[Track]) -> None:
        self._tracks = [t for t in tracks if t is not None]
        self._refilter()
        self.changed.emit()

    def remove(self, filtered_index: int) -> Optional[Track]:
        if not 0 <= filtered_index < len(self._filtered):
            logger.debug("Ignoring remove of out-of-range index %s", filtered_index)
            return None

        track = self._filtered[filtered_index]
        pos = self._position_in_tracks(track)
        if pos != -1:
            del self._tracks[pos]
        del self._filtered[filtered_index]
        track.release()

        self.changed.emit()
        return track

    def search(self, term: str) -> None:
        self._needle = normalize_search_term(term)
        self._refilter()
        self.changed.emit()

    def clear(self) -> None:
        for t in self._tracks:
            t.release()
        self._tracks = []
        self._filtered = []
        self.changed.emit()

    def release_all(self) -> None:
        """Release transient handles at shutdown; the playlist itself stays intact."""
        for t in self._tracks:
            t.release()

    # ----------------------------
    # Helpers
    # ----------------------------

    def _position_in_tracks(self, track: Track) -> int:
        for i, t in enumerate(self._tracks):
            if t is track:
                return i
        for i, t in enumerate(self._tracks):
            if t.id == track.id:
                return i
        return -1

    def _refilter(self) -> None:
        self._filtered = [t for t in self._tracks if matches_search(t, self._needle)]
