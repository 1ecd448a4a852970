# ui/workers/ingest_worker.py
import logging
import os

from PySide6.QtCore import QThread, Signal

from library.ingest import iter_audio_paths, track_from_bytes, track_from_path

logger = logging.getLogger(__name__)


class IngestWorker(QThread):
    """
    Probes files off the GUI thread. Tracks are only handed over through
    `finished_signal`; the playlist is mutated by whoever receives it.
    """
    progress_signal = Signal(object, int, int)       # worker, probed, total
    finished_signal = Signal(object, list, list)     # worker, tracks, skipped names

    def __init__(self, paths: list[str] | None = None, blobs: list[tuple[str, bytes]] | None = None):
        super().__init__()
        self.paths = list(paths or [])
        self.blobs = list(blobs or [])
        self.cancel_requested = False

    def cancel(self):
        self.cancel_requested = True

    def run(self):
        tracks = []
        skipped: list[str] = []
        try:
            audio_paths = iter_audio_paths(self.paths)
            skipped.extend(p for p in self.paths if p not in audio_paths and not os.path.isdir(p))
            total = len(audio_paths) + len(self.blobs)
            done = 0

            for p in audio_paths:
                if self.cancel_requested:
                    break
                t = track_from_path(p)
                done += 1
                if t is not None:
                    tracks.append(t)
                else:
                    skipped.append(p)
                self.progress_signal.emit(self, done, total)

            for name, data in self.blobs:
                if self.cancel_requested:
                    break
                t = track_from_bytes(name, data)
                done += 1
                if t is not None:
                    tracks.append(t)
                else:
                    skipped.append(name)
                self.progress_signal.emit(self, done, total)
        except Exception:
            logger.exception("Adding files failed")

        if self.cancel_requested:
            # Nobody will take ownership of these; drop any spooled copies now.
            for t in tracks:
                t.release()
            tracks = []
        self.finished_signal.emit(self, tracks, skipped)
