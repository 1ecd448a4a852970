# ui/models/playlist_model.py
from __future__ import annotations
from PySide6.QtCore import QAbstractTableModel, Qt, QModelIndex
from PySide6.QtGui import QFont

from core.models import Track

HEADERS = ["Title", "Artist", "Album", "Duration"]


class PlaylistModel(QAbstractTableModel):
    """Rows are the store's filtered view, in order."""

    def __init__(self, rows=None):
        super().__init__()
        self._rows: list[Track] = list(rows or [])
        self._active_row = -1

    def set_rows(self, rows):
        self.beginResetModel()
        self._rows = list(rows)
        self.endResetModel()

    def set_active_row(self, row: int):
        old = self._active_row
        self._active_row = row
        for r in (old, row):
            if 0 <= r < len(self._rows):
                self.dataChanged.emit(self.index(r, 0), self.index(r, len(HEADERS) - 1))

    def rowCount(self, parent=QModelIndex()) -> int:
        return len(self._rows)

    def columnCount(self, parent=QModelIndex()) -> int:
        return len(HEADERS)

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        if role != Qt.DisplayRole or orientation != Qt.Horizontal:
            return None
        return HEADERS[section]

    def data(self, index: QModelIndex, role=Qt.DisplayRole):
        if not index.isValid():
            return None
        track = self._rows[index.row()]
        col = index.column()

        if role == Qt.DisplayRole:
            if col == 0:
                return ("♪ " if index.row() == self._active_row else "") + track.title
            if col == 1:
                return track.artist
            if col == 2:
                return track.album
            if col == 3:
                return track.duration_label
        if role == Qt.FontRole and index.row() == self._active_row:
            f = QFont()
            f.setBold(True)
            return f
        if role == Qt.ToolTipRole and track.is_transient:
            return "Added this session only; not kept after restart"
        if role == Qt.UserRole:
            return track
        return None

    def track_at(self, row: int) -> Track | None:
        if row < 0 or row >= len(self._rows):
            return None
        return self._rows[row]
