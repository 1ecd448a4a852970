import logging

from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QLabel, QPushButton, QProgressBar,
    QMessageBox, QLineEdit, QHBoxLayout, QFileDialog, QToolButton, QStyle, QApplication,
)
from PySide6.QtGui import QShortcut, QKeySequence

from library.ingest import AUDIO_EXTS, extension_for, is_audio_file
from player.load_sequencer import LoadState
from ui.player_bar import PlayerBar
from ui.theme import other_theme, stylesheet_for
from ui.widgets.playlist_widget import PlaylistWidget
from ui.widgets.toast import ToastManager
from ui.workers.ingest_queue import IngestQueue

logger = logging.getLogger(__name__)


def audio_blobs(mime, stem: str = "pasted") -> list[tuple[str, bytes]]:
    """(name, data) for every audio/* payload carried by `mime`."""
    out = []
    for fmt in mime.formats():
        if not fmt.startswith("audio/"):
            continue
        ext = extension_for(fmt)
        data = bytes(mime.data(fmt))
        if ext and data:
            out.append((f"{stem}{ext}", data))
    return out


class MainWindow(QMainWindow):
    def __init__(self, app_state):
        super().__init__()
        self.setWindowTitle("Playdeck")
        self.resize(960, 620)
        self.setAcceptDrops(True)
        self.app_state = app_state
        self.controller = app_state.controller
        self.transport = app_state.transport
        self.ingest = IngestQueue(self)

        config = app_state.config
        self._seek_step = getattr(config, "seek_step_seconds", 10.0)
        self._volume_step = getattr(config, "volume_step", 0.05)
        self._toast_ms = getattr(config, "toast_timeout_ms", 3000)

        self.central_widget = QWidget()
        self.setCentralWidget(self.central_widget)
        self.layout = QVBoxLayout(self.central_widget)

        self.toasts = ToastManager(self)
        self.app_state.notification.connect(self._on_notify)

        # --- Top controls (search + playlist actions) ---
        top_bar = QHBoxLayout()

        self.search_box = QLineEdit()
        self.search_box.setPlaceholderText("Search title / artist / album...")
        self.search_box.setClearButtonEnabled(True)
        top_bar.addWidget(self.search_box, stretch=1)

        self.btn_add = QPushButton("Add files")
        self.btn_add.clicked.connect(self.open_add_files_dialog)
        self.btn_remove = QPushButton("Remove")
        self.btn_remove.clicked.connect(self.remove_selected)
        self.btn_clear = QPushButton("Clear")
        self.btn_clear.clicked.connect(self.clear_playlist)
        self.btn_cancel = QPushButton("Cancel loading")
        self.btn_cancel.setEnabled(False)
        self.btn_cancel.clicked.connect(self.controller.cancel_loading)

        self.btn_theme = QToolButton()
        self.btn_theme.setIcon(self.style().standardIcon(QStyle.StandardPixmap.SP_DesktopIcon))
        self.btn_theme.setToolTip("Toggle theme")
        self.btn_theme.clicked.connect(self.toggle_theme)

        for w in (self.btn_add, self.btn_remove, self.btn_clear, self.btn_cancel, self.btn_theme):
            top_bar.addWidget(w)
        self.layout.addLayout(top_bar)

        # --- Playlist ---
        self.playlist = PlaylistWidget(self.app_state)
        self.playlist.playRequested.connect(lambda row: self.controller.load_track(row, autoplay=True))
        self.playlist.removeRequested.connect(self.controller.remove_track)
        self.layout.addWidget(self.playlist, 1)

        # --- Ingest progress (hidden when idle) ---
        self.ingest_row = QWidget()
        ingest_layout = QHBoxLayout(self.ingest_row)
        ingest_layout.setContentsMargins(8, 4, 8, 4)
        self.ingest_label = QLabel("Adding files…")
        self.progress_bar = QProgressBar()
        self.progress_bar.setTextVisible(False)
        self.progress_bar.setRange(0, 100)
        ingest_layout.addWidget(self.ingest_label)
        ingest_layout.addWidget(self.progress_bar, 1)
        self.layout.addWidget(self.ingest_row)
        self.ingest_row.setVisible(False)

        # --- PlayerBar ---
        self.player_bar = PlayerBar(self.app_state, self)
        self.layout.addWidget(self.player_bar)

        # --- Wiring ---
        self.search_box.textChanged.connect(self.controller.search)
        self.ingest.progressChanged.connect(self._update_ingest_progress)
        self.ingest.batchFinished.connect(self._ingest_finished)
        self.ingest.idle.connect(lambda: self.ingest_row.setVisible(False))
        self.app_state.sequencer.stateChanged.connect(self._on_load_state)
        self._bind_shortcuts()

        self.apply_theme(self.app_state.theme)
        self.playlist.refresh()
        self.player_bar._on_modes_changed(self.controller.shuffle, self.controller.repeat)
        self.player_bar._on_selection_changed(self.controller.current_index)
        self.show_queued_notifications()

    # ------------------ shortcuts ------------------
    def _bind_shortcuts(self):
        c = self.controller
        t = self.transport
        bindings = {
            "Space": c.toggle_play_pause,
            "Right": lambda: t.seek_relative(self._seek_step),
            "Left": lambda: t.seek_relative(-self._seek_step),
            "Up": lambda: c.change_volume(self._volume_step),
            "Down": lambda: c.change_volume(-self._volume_step),
            "N": c.next,
            "P": c.previous,
            "S": c.toggle_shuffle,
            "R": c.cycle_repeat,
            "M": c.toggle_mute,
            "T": self.toggle_theme,
            "Escape": c.cancel_loading,
            "Delete": self.remove_selected,
            "Return": self._play_selected,
            "Enter": self._play_selected,
            "Ctrl+V": self.paste_from_clipboard,
        }
        for key, fn in bindings.items():
            QShortcut(QKeySequence(key), self, activated=fn)

    # ------------------ theme ------------------
    def apply_theme(self, theme: str):
        self.app_state.theme = theme
        self.setStyleSheet(stylesheet_for(theme))

    def toggle_theme(self):
        theme = other_theme(self.app_state.theme)
        self.apply_theme(theme)
        if self.app_state.persistence is not None:
            self.app_state.persistence.save_theme(theme)

    # ------------------ playlist actions ------------------
    def open_add_files_dialog(self):
        patterns = " ".join(f"*{ext}" for ext in sorted(AUDIO_EXTS))
        paths, _ = QFileDialog.getOpenFileNames(self, "Add music", "", f"Audio files ({patterns})")
        if paths:
            self.add_paths(paths)

    def add_paths(self, paths: list[str]):
        self._start_ingest(paths=paths)

    def add_blobs(self, blobs: list[tuple[str, bytes]]):
        self._start_ingest(blobs=blobs)

    def _start_ingest(self, paths=None, blobs=None):
        self.ingest_row.setVisible(True)
        self.progress_bar.setRange(0, 0)
        self.ingest_label.setText("Adding files…")
        self.ingest.add(paths=paths, blobs=blobs)

    def _update_ingest_progress(self, done: int, total: int):
        if total <= 0:
            self.progress_bar.setRange(0, 0)
            return
        self.progress_bar.setRange(0, 100)
        percent = max(0, min(100, int(done / total * 100)))
        self.progress_bar.setValue(percent)
        self.ingest_label.setText(f"Adding files… {done}/{total}")

    def _ingest_finished(self, tracks: list, skipped: list):
        if tracks:
            self.controller.add_tracks(tracks)
        if skipped and not tracks:
            self.app_state.notify("Please add audio files only", "warning")
        elif skipped:
            logger.info("Skipped %d non-audio file(s)", len(skipped))

    def paste_from_clipboard(self):
        mime = QApplication.clipboard().mimeData()
        if mime is None or not self._ingest_mime(mime):
            self.app_state.notify("Nothing to paste. Copy audio files first.", "info")

    def remove_selected(self):
        row = self.playlist.selected_row()
        if row < 0:
            row = self.controller.current_index
        self.controller.remove_track(row)

    def clear_playlist(self):
        if self.app_state.store.is_empty:
            return
        res = QMessageBox.question(
            self,
            "Clear playlist",
            "Are you sure you want to clear the entire playlist?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
        )
        if res == QMessageBox.StandardButton.Yes:
            self.controller.clear_playlist()

    def _play_selected(self):
        row = self.playlist.selected_row()
        if row >= 0:
            self.controller.load_track(row, autoplay=True)

    # ------------------ drag & drop / paste ------------------
    def dragEnterEvent(self, event):
        mime = event.mimeData()
        if mime.hasUrls() or any(f.startswith("audio/") for f in mime.formats()):
            event.acceptProposedAction()

    def dropEvent(self, event):
        if not self._ingest_mime(event.mimeData(), stem="dropped"):
            self.app_state.notify("Please drop audio files only", "warning")
            return
        event.acceptProposedAction()

    def _ingest_mime(self, mime, stem: str = "pasted") -> bool:
        paths = [u.toLocalFile() for u in mime.urls() if u.isLocalFile()] if mime.hasUrls() else []
        audio = [p for p in paths if is_audio_file(p)]
        if audio:
            self.add_paths(audio)
            return True
        # Raw audio data (no file behind it) becomes a session-only copy.
        blobs = audio_blobs(mime, stem)
        if blobs:
            self.add_blobs(blobs)
            return True
        return False

    # ------------------ player + notifications ------------------
    def _on_load_state(self, state):
        loading = state is LoadState.LOADING
        self.btn_cancel.setEnabled(loading)
        if loading:
            self.statusBar().showMessage("Loading…")
        else:
            self.statusBar().clearMessage()

    def _on_notify(self, n):
        msg = getattr(n, "message", "") or ""
        if not msg:
            return
        kind = (getattr(n, "notify_type", "info") or "info").lower()
        self.toasts.show_toast(msg, notify_type=kind, timeout_ms=self._toast_ms)

    def show_queued_notifications(self):
        for n in self.app_state.queued_notifications:
            self._on_notify(n)
        self.app_state.queued_notifications.clear()

    def closeEvent(self, event):
        self.ingest.cancel_all()
        if self.transport is not None:
            self.transport.unload()
        if self.app_state.store is not None:
            self.app_state.store.release_all()
        super().closeEvent(event)
