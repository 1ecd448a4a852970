import logging
import sys
from pathlib import Path

from PySide6.QtCore import QStandardPaths
from PySide6.QtWidgets import QApplication

ROOT = Path(__file__).resolve().parent
SRC_DIR = ROOT / "src"

if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from core.config import AppConfig, load_config
from core.logging_config import setup_logging
from core.state import AppState, Notify
from db.database import debug_schema, initialize_database
from db.persistence import PersistenceAdapter
from library.track_store import TrackStore
from player.load_sequencer import LoadSequencer
from player.playback import PlaybackController
from player.qt_backend import QtMediaBackend, UnavailableBackend
from player.transport import Transport
from ui.main_window import MainWindow

logger = logging.getLogger("playdeck")

WELCOME_MESSAGE = "Welcome! Add your music files to get started."


def get_app_data_dir() -> str:
    return QStandardPaths.writableLocation(QStandardPaths.AppDataLocation)


def init_app_state(config: AppConfig) -> AppState:
    app_state = AppState(config)

    app_state.db = initialize_database(config.data_dir)
    if config.debug_schema:
        debug_schema(app_state.db)

    app_state.persistence = PersistenceAdapter(app_state.db)
    settings = app_state.persistence.load()
    app_state.theme = settings.theme

    try:
        backend = QtMediaBackend()
    except Exception as e:
        logger.exception("Failed to initialize audio backend")
        backend = UnavailableBackend(str(e))
        app_state.queued_notifications.append(
            Notify(message=f"Failed to initialize audio player: {e}", notify_type="error")
        )

    logger.info("Audio backend: %s", backend.backend_name())
    app_state.transport = Transport(backend, volume=settings.volume)
    app_state.sequencer = LoadSequencer(app_state.transport, app_state)
    app_state.store = TrackStore()
    app_state.controller = PlaybackController(
        app_state,
        app_state.store,
        app_state.transport,
        app_state.sequencer,
        persistence=app_state.persistence,
    )
    app_state.controller.restore(settings)
    logger.info("Restored %d track(s)", len(app_state.store))

    if app_state.persistence.is_first_run():
        if app_state.store.is_empty:
            app_state.queued_notifications.append(Notify(message=WELCOME_MESSAGE, notify_type="info"))
        app_state.persistence.mark_initialized()

    return app_state


def main() -> int:
    qt_app = QApplication(sys.argv)
    qt_app.setApplicationName("Playdeck")

    config = load_config(get_app_data_dir())
    setup_logging(config)
    logger.info("Data directory: %s", config.data_dir)

    app_state = init_app_state(config)
    qt_app.aboutToQuit.connect(app_state.store.release_all)

    main_window = MainWindow(app_state)
    main_window.show()

    return qt_app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
