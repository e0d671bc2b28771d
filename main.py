from PyQt6.QtWidgets import (
    QApplication, QMainWindow, QFileDialog, QMessageBox, QWidget,
    QHBoxLayout, QVBoxLayout, QFormLayout, QLabel, QPushButton,
    QSlider, QDoubleSpinBox, QCheckBox,
)
from PyQt6.QtCore import Qt

from pathlib import Path
import sys

from core import config
from core import error_reporting
from core.domain.viewer import MIN_TIME_WINDOW_S
from core.services.file_load_service import FileLoadService
from core.services.pan_service import PanService
from plotting.pyqtgraph_backend import PyQtGraphFrameHost
from viewmodels import FileLoadViewModel, ViewerViewModel

# Import version
from version_info import VERSION_STRING


ORG = "EDFView"
APP = "EDFView"

AMPLITUDE_SLIDER_STEPS = 10     # slider units per 1.0x
WINDOW_SPIN_RANGE = (MIN_TIME_WINDOW_S, 3600.0)   # seconds; floor matches ViewState


class MainWindow(QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle(f"EDFView v{VERSION_STRING}")
        self.resize(1200, 800)

        cfg = config.load_config()
        self._last_directory = cfg.get('last_directory', '')

        # View models
        error_logger = error_reporting.log_error if cfg.get('error_log_enabled', True) else None
        self.file_vm = FileLoadViewModel(FileLoadService(), error_logger=error_logger, parent=self)
        self.viewer_vm = ViewerViewModel(
            view_state=config.view_state_from_config(cfg),
            pan=PanService(config.get_drag_sensitivity_divisor()),
            parent=self,
        )

        self._build_ui()
        self._connect()
        self._sync_controls()

        self.statusBar().setStyleSheet("""
            QStatusBar {
                background-color: #1e1e1e;
                color: #d4d4d4;
                border-top: 1px solid #3e3e42;
            }
        """)
        self.statusBar().showMessage("Open an EDF file to begin")

    # ------------------------------------------------------------------
    # UI
    # ------------------------------------------------------------------

    def _build_ui(self):
        central = QWidget(self)
        layout = QHBoxLayout(central)

        panel = QWidget(central)
        panel.setFixedWidth(280)
        panel_layout = QVBoxLayout(panel)

        self.open_button = QPushButton("Open EDF File...", panel)
        panel_layout.addWidget(self.open_button)

        self.file_info_label = QLabel("No file loaded", panel)
        self.file_info_label.setWordWrap(True)
        self.file_info_label.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
        panel_layout.addWidget(self.file_info_label)

        form = QFormLayout()
        self.amplitude_slider = QSlider(Qt.Orientation.Horizontal, panel)
        self.amplitude_slider.setRange(1, 10 * AMPLITUDE_SLIDER_STEPS)
        self.amplitude_value = QLabel(panel)
        form.addRow("Amplitude", self.amplitude_slider)
        form.addRow("", self.amplitude_value)

        self.window_spin = QDoubleSpinBox(panel)
        self.window_spin.setDecimals(2)
        self.window_spin.setRange(*WINDOW_SPIN_RANGE)
        self.window_spin.setSuffix(" s")
        form.addRow("Time window", self.window_spin)

        self.scroll_slider = QSlider(Qt.Orientation.Horizontal, panel)
        self.scroll_slider.setRange(0, 1000)
        self.scroll_value = QLabel(panel)
        form.addRow("Position", self.scroll_slider)
        form.addRow("", self.scroll_value)

        self.auto_scale_check = QCheckBox("Auto-scale visible window", panel)
        form.addRow(self.auto_scale_check)
        panel_layout.addLayout(form)
        panel_layout.addStretch(1)

        self.plot_host = PyQtGraphFrameHost(central)

        layout.addWidget(panel)
        layout.addWidget(self.plot_host, 1)
        self.setCentralWidget(central)

    def _connect(self):
        self.open_button.clicked.connect(self.open_file)

        # Controls -> view model
        self.amplitude_slider.valueChanged.connect(
            lambda v: self.viewer_vm.set_amplitude_scale(v / AMPLITUDE_SLIDER_STEPS))
        self.window_spin.valueChanged.connect(self.viewer_vm.set_time_window)
        self.scroll_slider.valueChanged.connect(
            lambda v: self.viewer_vm.set_scroll_percent(v / 10.0))
        self.auto_scale_check.toggled.connect(self.viewer_vm.set_auto_scale)

        # Surface -> view model
        self.plot_host.pointer_pressed.connect(self.viewer_vm.pointer_down)
        self.plot_host.pointer_moved.connect(self.viewer_vm.pointer_move)
        self.plot_host.pointer_released.connect(self.viewer_vm.pointer_up)
        self.plot_host.pointer_left.connect(self.viewer_vm.pointer_leave)
        self.plot_host.viewport_resized.connect(self.viewer_vm.set_viewport)
        self.plot_host.page_requested.connect(
            lambda d: self.viewer_vm.navigate_next() if d > 0 else self.viewer_vm.navigate_prev())

        # View model -> surface / controls
        self.viewer_vm.frame_ready.connect(self.plot_host.draw_frame)
        self.viewer_vm.frame_ready.connect(lambda _frame: self._sync_controls())

        # File loading
        self.file_vm.loading_started.connect(lambda msg: self.statusBar().showMessage(msg))
        self.file_vm.progress_updated.connect(
            lambda pct, msg: self.statusBar().showMessage(f"{pct}% {msg.splitlines()[0]}"))
        self.file_vm.file_loaded.connect(self._on_file_loaded)
        self.file_vm.load_error.connect(self._on_load_error)
        self.file_vm.load_cancelled.connect(
            lambda name: self.statusBar().showMessage(f"Cancelled loading {name}", 3000))

    def _sync_controls(self):
        """Reflect the view state in the controls without feeding back into it."""
        state = self.viewer_vm.view_state
        widgets = (self.amplitude_slider, self.window_spin, self.scroll_slider, self.auto_scale_check)
        for w in widgets:
            w.blockSignals(True)
        self.amplitude_slider.setValue(int(round(state.amplitude_scale * AMPLITUDE_SLIDER_STEPS)))
        self.window_spin.setValue(state.time_window_seconds)
        self.scroll_slider.setValue(int(round(state.scroll_percent * 10)))
        self.auto_scale_check.setChecked(state.auto_scale)
        for w in widgets:
            w.blockSignals(False)

        self.amplitude_value.setText(f"{state.amplitude_scale:.1f}x")
        self.scroll_value.setText(f"{state.scroll_percent:.1f}%")

    # ------------------------------------------------------------------
    # File loading
    # ------------------------------------------------------------------

    def open_file(self):
        path, _ = QFileDialog.getOpenFileName(
            self, "Open EDF File", self._last_directory, "EDF files (*.edf *.EDF);;All files (*)"
        )
        if not path:
            return
        path = Path(path)
        self._last_directory = str(path.parent)
        config.set_last_directory(path.parent)
        self.file_vm.load_file(path)

    def _on_file_loaded(self, result):
        self.file_info_label.setText(result.summary)
        self.statusBar().showMessage(
            f"Loaded {result.source_name} in {result.load_duration_seconds:.2f}s", 5000)
        self.viewer_vm.set_recording(result.recording)

    def _on_load_error(self, title, message):
        self.statusBar().showMessage(title, 5000)
        QMessageBox.critical(self, title, message)

    def closeEvent(self, event):
        # A QThread must not be destroyed while still running
        self.file_vm.shutdown()
        super().closeEvent(event)


def main():
    app = QApplication(sys.argv)
    app.setOrganizationName(ORG)
    app.setApplicationName(APP)

    w = MainWindow()
    w.show()

    if len(sys.argv) > 1:
        w.file_vm.load_file(Path(sys.argv[1]))

    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
