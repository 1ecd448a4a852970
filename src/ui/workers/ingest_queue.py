# ui/workers/ingest_queue.py
import logging

from PySide6.QtCore import QObject, Signal, Slot

from ui.workers.ingest_worker import IngestWorker

logger = logging.getLogger(__name__)


class IngestQueue(QObject):
    """
    Runs one IngestWorker per batch. Batches are independent: a new batch
    never cancels an earlier one, and every batch's tracks are reported.
    Workers are only cancelled on shutdown.
    """
    progressChanged = Signal(int, int)      # probed, total over all live batches
    batchFinished = Signal(list, list)      # tracks, skipped names
    idle = Signal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self._workers: list[IngestWorker] = []
        self._progress: dict[int, tuple[int, int]] = {}

    @property
    def is_idle(self) -> bool:
        return not self._workers

    @property
    def active_count(self) -> int:
        return len(self._workers)

    def add(self, paths=None, blobs=None) -> IngestWorker:
        worker = IngestWorker(paths=paths, blobs=blobs)
        # Bound slots on this QObject run on the GUI thread (queued).
        worker.progress_signal.connect(self._on_worker_progress)
        worker.finished_signal.connect(self._on_worker_finished)
        self._workers.append(worker)
        self._progress[id(worker)] = (0, len(worker.paths) + len(worker.blobs))
        self._emit_progress()
        worker.start()
        return worker

    def cancel_all(self, wait_ms: int = 2000) -> None:
        for worker in list(self._workers):
            worker.cancel()
        for worker in list(self._workers):
            if not worker.wait(wait_ms):
                logger.warning("Ingest worker did not stop within %d ms", wait_ms)

    @Slot(object, int, int)
    def _on_worker_progress(self, worker, done: int, total: int):
        if worker not in self._workers:
            return
        self._progress[id(worker)] = (done, total)
        self._emit_progress()

    @Slot(object, list, list)
    def _on_worker_finished(self, worker, tracks: list, skipped: list):
        if worker in self._workers:
            self._workers.remove(worker)
        self._progress.pop(id(worker), None)
        worker.wait()
        worker.deleteLater()

        logger.debug("Ingest batch done: %d track(s), %d skipped", len(tracks), len(skipped))
        self.batchFinished.emit(tracks, skipped)
        if self._workers:
            self._emit_progress()
        else:
            self.idle.emit()

    def _emit_progress(self):
        done = sum(d for d, _ in self._progress.values())
        total = sum(t for _, t in self._progress.values())
        self.progressChanged.emit(done, total)
