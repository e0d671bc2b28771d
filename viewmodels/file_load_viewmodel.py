"""
File loading view model.

QObject that orchestrates EDF decoding, owns FileLoadWorker instances, and
emits signals for the view layer to update the UI.

Only the most recent load may publish: starting a new load cancels the
previous worker, and results from superseded workers are dropped.
"""

import time
from pathlib import Path
from typing import Callable, Optional

from PyQt6.QtCore import QObject, pyqtSignal

from core.domain.file_loading import RecordingLoadResult
from core.services.file_load_service import FileLoadService


class FileLoadViewModel(QObject):
    """
    ViewModel for file loading operations.

    Owns worker threads and emits typed signals when loading completes.
    The view layer (MainWindow) connects to these signals for UI updates.
    """

    # --- Signals ---
    file_loaded = pyqtSignal(object)            # RecordingLoadResult
    load_error = pyqtSignal(str, str)           # title, message
    load_cancelled = pyqtSignal(str)            # source name
    loading_started = pyqtSignal(str)           # description (for progress UI)
    loading_finished = pyqtSignal()
    progress_updated = pyqtSignal(int, str)     # percent (0-100), message

    def __init__(
        self,
        service: FileLoadService,
        error_logger: Optional[Callable] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self._service = service
        self._error_logger = error_logger

        # Keep workers referenced until each one reports back
        self._load_worker = None
        self._retired_workers = set()

        # Loading context
        self._generation = 0
        self._loading_name: str = ""
        self._loading_path: Optional[Path] = None
        self._loading_t_start: float = 0.0

    @property
    def is_loading(self) -> bool:
        return self._load_worker is not None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def load_file(self, path: Path) -> None:
        """Decode a local .edf file in a background thread."""
        from core import edf_io

        path = Path(path)
        self._start(edf_io.load_edf_file, path, name=path.name, path=path)

    def load_bytes(self, data: bytes, name: str) -> None:
        """Decode an already-fetched buffer (e.g. a remote download) in a background thread."""
        from core import edf_io

        self._start(edf_io.decode_edf, data, name=name, path=None)

    def cancel(self) -> None:
        """Abandon the in-flight decode, if any. Nothing is published for it."""
        worker = self._load_worker
        if worker is None:
            return
        self._generation += 1
        self._retire(worker)
        self.loading_finished.emit()
        self.load_cancelled.emit(self._loading_name)

    def shutdown(self) -> None:
        """Cancel any load and block until every worker thread has exited (call before app exit)."""
        self.cancel()
        for worker in list(self._retired_workers):
            worker.wait()
            self._retired_workers.discard(worker)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _start(self, load_func, *args, name: str, path: Optional[Path]) -> None:
        from core.file_load_worker import FileLoadWorker

        if self._load_worker is not None:
            print(f"[file-load] Superseding in-flight load of {self._loading_name}")
            self._retire(self._load_worker)

        self._generation += 1
        gen = self._generation
        self._loading_name = name
        self._loading_path = path
        self._loading_t_start = time.time()

        self.loading_started.emit(f"Opening {name}")

        worker = FileLoadWorker(load_func, *args)
        worker.progress.connect(
            lambda c, t, m, g=gen: self._on_progress(g, c, f"{m}\n{name}")
        )
        worker.finished.connect(lambda result, g=gen, w=worker: self._on_loaded(g, w, result))
        worker.error_exc.connect(lambda exc, g=gen, w=worker: self._on_error(g, w, exc))
        worker.cancelled.connect(lambda w=worker: self._release(w))
        self._load_worker = worker
        worker.start()

    def _retire(self, worker) -> None:
        worker.cancel()
        self._retired_workers.add(worker)
        if self._load_worker is worker:
            self._load_worker = None

    def _release(self, worker) -> None:
        self._retired_workers.discard(worker)
        if self._load_worker is worker:
            self._load_worker = None

    def _is_current(self, gen: int) -> bool:
        return gen == self._generation

    def _on_progress(self, gen: int, percent: int, message: str) -> None:
        if self._is_current(gen):
            self.progress_updated.emit(percent, message)

    def _on_loaded(self, gen: int, worker, recording) -> None:
        """Publish a finished decode, unless it was superseded or cancelled."""
        self._release(worker)
        if not self._is_current(gen):
            return

        load_duration = time.time() - self._loading_t_start
        result = RecordingLoadResult(
            recording=recording,
            source_name=self._loading_name,
            summary=self._service.build_recording_summary(recording, self._loading_name),
            source_path=self._loading_path,
            load_duration_seconds=load_duration,
        )
        print(f"[file-load] Loaded {self._loading_name}: {recording.channel_count} channels, "
              f"{recording.duration:.2f}s in {load_duration:.2f}s")

        self.loading_finished.emit()
        self.file_loaded.emit(result)

    def _on_error(self, gen: int, worker, exc) -> None:
        self._release(worker)
        if not self._is_current(gen):
            return

        if self._error_logger is not None:
            self._error_logger(exc, "edf_decode", {'file': self._loading_name})

        title, message = self._service.describe_decode_error(exc, self._loading_name)
        self.loading_finished.emit()
        self.load_error.emit(title, message)
