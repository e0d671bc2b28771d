"""
ViewerViewModel - Qt integration for the windowed waveform view.

Owns the ViewState for one viewer and wraps NavigationService, PanService and
the render service with pyqtSignals. Every mutation re-renders the full frame
and emits it; the view only replays the primitives it receives.

All methods must be called from the thread that owns this object, so a render
never observes a half-updated ViewState.
"""

from typing import List, Optional

from PyQt6.QtCore import QObject, pyqtSignal

from core.domain.recording import Recording
from core.domain.viewer import TimeWindow, ViewState
from core.services import render_service
from core.services.navigation_service import NavigationService
from core.services.pan_service import PanService


class ViewerViewModel(QObject):
    """ViewModel for one waveform viewer.

    Signals:
        frame_ready(list): Draw primitives for the current frame
        window_changed(float, float): Visible (start, end) in seconds
        scroll_changed(float): Scroll percent after a drag or page step
        recording_changed(): A different recording was attached
    """

    frame_ready = pyqtSignal(list)
    window_changed = pyqtSignal(float, float)
    scroll_changed = pyqtSignal(float)
    recording_changed = pyqtSignal()

    def __init__(
        self,
        view_state: Optional[ViewState] = None,
        navigation: Optional[NavigationService] = None,
        pan: Optional[PanService] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self._state = view_state if view_state is not None else ViewState()
        self._navigation = navigation if navigation is not None else NavigationService()
        self._pan = pan if pan is not None else PanService()
        self._recording: Optional[Recording] = None
        self._viewport = (0.0, 0.0)
        self._last_frame: List = []

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def view_state(self) -> ViewState:
        return self._state

    @property
    def recording(self) -> Optional[Recording]:
        return self._recording

    @property
    def last_frame(self) -> List:
        return self._last_frame

    @property
    def is_dragging(self) -> bool:
        return self._state.drag_state.is_dragging

    def current_window(self) -> TimeWindow:
        if self._recording is None:
            return TimeWindow(0.0, 0.0)
        return NavigationService.window_for(self._recording, self._state)

    # ------------------------------------------------------------------
    # Data / geometry
    # ------------------------------------------------------------------

    def set_recording(self, recording: Optional[Recording]) -> None:
        """Attach a decoded recording (shared read-only) and redraw from the start."""
        self._recording = recording
        self._pan.pointer_up(self._state)
        self._state.set_scroll_percent(0.0)
        self.recording_changed.emit()
        self.render()

    def set_viewport(self, width: float, height: float) -> None:
        self._viewport = (float(width), float(height))
        self.render()

    # ------------------------------------------------------------------
    # Configuration surface
    # ------------------------------------------------------------------

    def set_amplitude_scale(self, scale: float) -> None:
        self._state.set_amplitude_scale(scale)
        self.render()

    def set_time_window(self, seconds: float) -> None:
        self._state.set_time_window(seconds)
        self.render()

    def set_scroll_percent(self, percent: float) -> None:
        self._state.set_scroll_percent(percent)
        self.render()

    def set_auto_scale(self, enabled: bool) -> None:
        self._state.set_auto_scale(enabled)
        self.render()

    # ------------------------------------------------------------------
    # Pointer commands (pan state machine)
    # ------------------------------------------------------------------

    def pointer_down(self, x: float) -> None:
        self._pan.pointer_down(self._state, x)

    def pointer_move(self, x: float) -> None:
        if self._pan.pointer_move(self._state, x, self._viewport[0]):
            self.scroll_changed.emit(self._state.scroll_percent)
            self.render()

    def pointer_up(self) -> None:
        self._pan.pointer_up(self._state)

    def pointer_leave(self) -> None:
        self._pan.pointer_leave(self._state)

    # ------------------------------------------------------------------
    # Paging
    # ------------------------------------------------------------------

    def navigate_next(self) -> None:
        self._apply_page(self._navigation.next_window(self._state, self._duration()))

    def navigate_prev(self) -> None:
        self._apply_page(self._navigation.prev_window(self._state, self._duration()))

    def _apply_page(self, result) -> None:
        if not result.scroll_changed:
            return
        self._state.set_scroll_percent(result.new_scroll_percent)
        self.scroll_changed.emit(self._state.scroll_percent)
        if result.needs_redraw:
            self.render()

    def _duration(self) -> float:
        return self._recording.duration if self._recording is not None else 0.0

    # ------------------------------------------------------------------
    # Render
    # ------------------------------------------------------------------

    def render(self) -> List:
        """Recompute the whole frame from recording + view state and emit it."""
        width, height = self._viewport
        if self._recording is None:
            frame = []
        else:
            frame = render_service.render_frame(self._recording, self._state, width, height)
            window = self.current_window()
            self.window_changed.emit(window.start_time, window.end_time)
        self._last_frame = frame
        self.frame_ready.emit(frame)
        return frame
