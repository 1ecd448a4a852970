"""Shared fixtures: a headless Qt app, a scriptable media backend and a wired player."""

from __future__ import annotations

import os
import random
from types import SimpleNamespace

import pytest
from PySide6.QtCore import QObject, Signal
from PySide6.QtWidgets import QApplication

from core.errors import PlaybackRejected
from core.state import AppState
from core.models import ResourceHandle, Track
from library.track_store import TrackStore
from player.load_sequencer import LoadSequencer
from player.playback import PlaybackController
from player.transport import Transport


@pytest.fixture(scope="session", autouse=True)
def qt_app():
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    app = QApplication.instance() or QApplication([])
    yield app


class FakeBackend(QObject):
    """Records calls; tests fire the media events by hand."""
    loading = Signal()
    loaded = Signal(str)
    durationChanged = Signal(float)
    positionChanged = Signal(float)
    finished = Signal()
    failed = Signal(str)

    def __init__(self):
        super().__init__()
        self.source = None
        self.sources = []
        self.calls = []
        self.reject_play = False
        self.volume = None
        self.muted = None
        self.position = 0.0

    def set_source(self, uri):
        self.source = uri
        self.sources.append(uri)
        self.calls.append(("set_source", uri))

    def play(self):
        if self.reject_play:
            raise PlaybackRejected("not allowed")
        self.calls.append(("play", self.source))

    def pause(self):
        self.calls.append(("pause", self.source))

    def set_position(self, seconds):
        self.position = seconds
        self.calls.append(("set_position", seconds))

    def set_volume(self, volume):
        self.volume = volume

    def set_muted(self, muted):
        self.muted = muted

    # --- scripted media events ---
    def ready(self, uri=None, duration=180.0):
        uri = self.source if uri is None else uri
        self.loaded.emit(uri)
        if duration:
            self.durationChanged.emit(duration)

    def end(self):
        self.finished.emit()

    def fail(self, reason="decode error"):
        self.failed.emit(reason)

    def count(self, name):
        return sum(1 for c in self.calls if c[0] == name)


class RecordingAppState(QObject):
    """Stands in for AppState; keeps every notification."""

    def __init__(self):
        super().__init__()
        self.notifications = []

    def notify(self, message, notify_type="info"):
        self.notifications.append((message, notify_type))

    def messages(self, notify_type=None):
        return [m for m, t in self.notifications if notify_type is None or t == notify_type]


class RecordingPersistence:
    def __init__(self):
        self.saved = {}

    def save_playlist(self, tracks):
        self.saved["playlist"] = [t.title for t in tracks if not t.is_transient]

    def save_current_index(self, index):
        self.saved["currentTrackIndex"] = index

    def save_volume(self, volume):
        self.saved["volume"] = volume

    def save_shuffle(self, shuffle):
        self.saved["shuffle"] = shuffle

    def save_repeat(self, mode):
        self.saved["repeat"] = int(mode)


def make_track(title, artist="Artist", album="Album", transient=False, owned_path=None):
    uri = owned_path or f"/music/{title}.mp3"
    handle = ResourceHandle(uri=uri, transient=transient, owned_path=owned_path)
    return Track(title=title, artist=artist, album=album, duration_label="3:00", source=handle)


@pytest.fixture
def track_factory():
    return make_track


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def app_state():
    return RecordingAppState()


@pytest.fixture
def player(backend, app_state):
    """Transport + sequencer + store + controller wired the way main.py wires them."""
    transport = Transport(backend)
    sequencer = LoadSequencer(transport, app_state)
    store = TrackStore()
    persistence = RecordingPersistence()
    controller = PlaybackController(
        app_state, store, transport, sequencer, persistence=persistence, rng=random.Random(1234)
    )
    return SimpleNamespace(
        backend=backend,
        transport=transport,
        sequencer=sequencer,
        store=store,
        controller=controller,
        persistence=persistence,
        app_state=app_state,
    )


@pytest.fixture
def ui_state(player):
    """A real AppState carrying the wired player, for widget tests."""
    state = AppState()
    state.store = player.store
    state.transport = player.transport
    state.sequencer = player.sequencer
    state.controller = player.controller
    return state
