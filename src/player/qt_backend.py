# src/player/qt_backend.py
from __future__ import annotations

import logging
import os
from typing import Optional

from PySide6.QtCore import QObject, QUrl, Signal
from PySide6.QtMultimedia import QAudioOutput, QMediaPlayer

from core.errors import PlaybackRejected

logger = logging.getLogger(__name__)


def to_qurl(uri: str) -> QUrl:
    if os.path.exists(uri):
        return QUrl.fromLocalFile(os.path.abspath(uri))
    url = QUrl(uri)
    if not url.scheme():
        return QUrl.fromLocalFile(uri)
    return url


class QtMediaBackend(QObject):
    """QMediaPlayer + QAudioOutput behind the transport's backend signals."""
    loading = Signal()
    loaded = Signal(str)              # uri that became playable
    durationChanged = Signal(float)   # seconds
    positionChanged = Signal(float)   # seconds
    finished = Signal()
    failed = Signal(str)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.audio = QAudioOutput()
        self.media = QMediaPlayer()
        self._uri: Optional[str] = None
        self.media.setAudioOutput(self.audio)

        self.media.mediaStatusChanged.connect(self._on_media_status)
        self.media.errorOccurred.connect(self._on_error)
        self.media.durationChanged.connect(lambda ms: self.durationChanged.emit(int(ms) / 1000.0))
        self.media.positionChanged.connect(lambda ms: self.positionChanged.emit(int(ms) / 1000.0))

    def _on_media_status(self, status: QMediaPlayer.MediaStatus) -> None:
        if status == QMediaPlayer.MediaStatus.LoadingMedia:
            self.loading.emit()
        elif status in (QMediaPlayer.MediaStatus.LoadedMedia, QMediaPlayer.MediaStatus.BufferedMedia):
            self.loaded.emit(self._uri or "")
        elif status == QMediaPlayer.MediaStatus.EndOfMedia:
            self.finished.emit()
        elif status == QMediaPlayer.MediaStatus.InvalidMedia:
            self.failed.emit(self.media.errorString() or "Unsupported or unreadable media")

    def _on_error(self, error, error_string: str = "") -> None:
        if error == QMediaPlayer.Error.NoError:
            return
        logger.warning("QMediaPlayer error %s: %s", error, error_string)
        self.failed.emit(error_string or str(error))

    # ----------------------------
    # Backend API used by Transport
    # ----------------------------

    def set_source(self, uri: Optional[str]) -> None:
        self._uri = uri or None
        if not uri:
            self.media.stop()
            self.media.setSource(QUrl())
            return
        self.media.setSource(to_qurl(uri))

    def play(self) -> None:
        status = self.media.mediaStatus()
        if status in (QMediaPlayer.MediaStatus.NoMedia, QMediaPlayer.MediaStatus.InvalidMedia):
            raise PlaybackRejected("Media is not playable")
        if self.media.error() != QMediaPlayer.Error.NoError:
            raise PlaybackRejected(self.media.errorString() or "Media is not playable")
        self.media.play()

    def pause(self) -> None:
        self.media.pause()

    def set_position(self, seconds: float) -> None:
        self.media.setPosition(int(max(0.0, float(seconds)) * 1000))

    def set_volume(self, volume_0_to_1: float) -> None:
        self.audio.setVolume(min(1.0, max(0.0, float(volume_0_to_1))))

    def set_muted(self, muted: bool) -> None:
        self.audio.setMuted(bool(muted))

    def backend_name(self) -> str:
        return "qt-multimedia"


class UnavailableBackend(QObject):
    """Stands in when no audio output could be created; every play is rejected."""
    loading = Signal()
    loaded = Signal(str)
    durationChanged = Signal(float)
    positionChanged = Signal(float)
    finished = Signal()
    failed = Signal(str)

    def __init__(self, reason: str = "", parent=None):
        super().__init__(parent)
        self.reason = reason or "Audio output unavailable"

    def set_source(self, uri: Optional[str]) -> None:
        if uri:
            self.loaded.emit(uri)

    def play(self) -> None:
        raise PlaybackRejected(self.reason)

    def pause(self) -> None:
        pass

    def set_position(self, seconds: float) -> None:
        pass

    def set_volume(self, volume_0_to_1: float) -> None:
        pass

    def set_muted(self, muted: bool) -> None:
        pass

    def backend_name(self) -> str:
        return "unavailable"
