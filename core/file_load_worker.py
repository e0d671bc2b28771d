"""
FileLoadWorker - Background QThread for EDF decoding.

Wraps any callable (loader function) and runs it in a background thread,
emitting progress/finished/error signals so the UI stays responsive.

The worker is cancellable: cancel() requests interruption, and loaders that
accept a should_cancel kwarg poll it and stop early. A cancelled run emits
`cancelled` instead of `finished`, so no partial result is ever published.
"""

import inspect
import traceback

from PyQt6.QtCore import QThread, pyqtSignal

from core.domain.recording import DecodeCancelledError


class FileLoadWorker(QThread):
    """Background thread for all file loading operations."""

    progress = pyqtSignal(int, int, str)   # current, total, message
    finished = pyqtSignal(object)          # loader result (Recording)
    error = pyqtSignal(str)                # error message string
    error_exc = pyqtSignal(object)         # actual exception object (for typed exception handling)
    cancelled = pyqtSignal()

    def __init__(self, load_func, *args, inject_progress=True, **kwargs):
        """
        Args:
            load_func: The callable to run in the background thread
                       (e.g., edf_io.load_edf_file, edf_io.decode_edf)
            inject_progress: If True, automatically inject progress_callback and
                            should_cancel kwargs when the function signature
                            accepts them.
            *args, **kwargs: Arguments passed to load_func
        """
        super().__init__()
        self._load_func = load_func
        self._args = args
        self._kwargs = kwargs
        self._inject_progress = inject_progress

    def cancel(self):
        """Ask the running loader to stop at its next checkpoint."""
        self.requestInterruption()

    def is_cancelled(self) -> bool:
        return self.isInterruptionRequested()

    def run(self):
        try:
            if self._inject_progress:
                try:
                    params = inspect.signature(self._load_func).parameters
                    if 'progress_callback' in params:
                        self._kwargs['progress_callback'] = self._emit_progress
                    if 'should_cancel' in params:
                        self._kwargs['should_cancel'] = self.is_cancelled
                except (ValueError, TypeError):
                    pass

            result = self._load_func(*self._args, **self._kwargs)
            if self.is_cancelled():
                self.cancelled.emit()
                return
            self.finished.emit(result)
        except DecodeCancelledError:
            self.cancelled.emit()
        except Exception as e:
            # Emit both the exception object and the string message
            self.error_exc.emit(e)
            self.error.emit(f"{str(e)}\n\n{traceback.format_exc()}")

    def _emit_progress(self, current, total, message):
        self.progress.emit(current, total, message)
