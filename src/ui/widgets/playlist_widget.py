# ui/widgets/playlist_widget.py
from __future__ import annotations

from PySide6.QtCore import Signal, Qt, QItemSelectionModel
from PySide6.QtWidgets import QWidget, QVBoxLayout, QTableView, QMenu, QLabel, QStackedLayout

from ui.models.playlist_model import PlaylistModel


class PlaylistWidget(QWidget):
    playRequested = Signal(int)     # filtered index
    removeRequested = Signal(int)   # filtered index

    def __init__(self, app_state):
        super().__init__()
        self.app_state = app_state

        self.table = QTableView()
        self.model = PlaylistModel([])
        self.table.setModel(self.model)

        self.table.setSelectionBehavior(QTableView.SelectionBehavior.SelectRows)
        self.table.setSelectionMode(QTableView.SelectionMode.SingleSelection)
        self.table.verticalHeader().setVisible(False)
        self.table.setShowGrid(False)
        self.table.setAlternatingRowColors(True)

        self.table.setColumnWidth(0, 320)
        self.table.setColumnWidth(1, 180)
        self.table.setColumnWidth(2, 180)
        self.table.horizontalHeader().setStretchLastSection(True)
        self.table.setObjectName("PlaylistTable")
        self.table.verticalHeader().setDefaultSectionSize(24)

        self.table.doubleClicked.connect(self._on_double_click)
        self.table.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)
        self.table.customContextMenuRequested.connect(self._on_context_menu)

        self.empty_label = QLabel("Your playlist is empty. Drop audio files here or use Add files.")
        self.empty_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.empty_label.setObjectName("EmptyPlaylist")

        self._stack = QStackedLayout()
        self._stack.addWidget(self.table)
        self._stack.addWidget(self.empty_label)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addLayout(self._stack)

        self._apply_styles()

        store = self.app_state.store
        if store is not None:
            store.changed.connect(self.refresh)
        if self.app_state.controller is not None:
            self.app_state.controller.selectionChanged.connect(self.set_now_playing)
        self.refresh()

    # -------------------------
    # External API
    # -------------------------
    def refresh(self):
        store = self.app_state.store
        rows = store.filtered if store is not None else []
        self.model.set_rows(rows)
        self._stack.setCurrentWidget(self.table if rows else self.empty_label)
        if store is not None and not store.is_empty and not rows:
            self.empty_label.setText("No songs match your search.")
        else:
            self.empty_label.setText("Your playlist is empty. Drop audio files here or use Add files.")

        controller = self.app_state.controller
        if controller is not None:
            self.set_now_playing(controller.current_index)

    def set_now_playing(self, row: int):
        controller = self.app_state.controller
        visible = controller is not None and controller.selection_visible
        self.model.set_active_row(row if visible else -1)

        if row < 0 or not visible:
            self.table.clearSelection()
            return

        idx = self.model.index(row, 0)
        sm = self.table.selectionModel()
        if sm is None:
            return
        sm.setCurrentIndex(idx, QItemSelectionModel.ClearAndSelect | QItemSelectionModel.Rows)
        self.table.scrollTo(idx, QTableView.ScrollHint.EnsureVisible)

    def selected_row(self) -> int:
        idx = self.table.currentIndex()
        return idx.row() if idx.isValid() else -1

    # -------------------------
    # UI Events
    # -------------------------
    def _on_double_click(self, index):
        if index.isValid():
            self.playRequested.emit(index.row())

    def _on_context_menu(self, pos):
        idx = self.table.indexAt(pos)
        if not idx.isValid():
            return
        row = idx.row()

        menu = QMenu(self)
        act_play = menu.addAction("Play")
        act_remove = menu.addAction("Remove from playlist")

        chosen = menu.exec(self.table.viewport().mapToGlobal(pos))
        if chosen == act_play:
            self.playRequested.emit(row)
        elif chosen == act_remove:
            self.removeRequested.emit(row)

    def _apply_styles(self):
        self.setStyleSheet("""
        QTableView#PlaylistTable {
            border: none;
            selection-background-color: rgba(56, 189, 248, 0.2);
        }
        QTableView::item {
            padding: 4px 6px;
        }
        QLabel#EmptyPlaylist {
            color: #9ca3af;
            font-size: 13px;
        }
        """)
