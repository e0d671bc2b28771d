"""
Viewer domain models.

This module contains the view state and the draw primitives produced by the
render service, designed to be independent of any UI framework (Qt-free).
"""

import math
from dataclasses import dataclass, field
from enum import Enum

import numpy as np


MIN_AMPLITUDE_SCALE = 0.01
MIN_TIME_WINDOW_S = 0.01


class DragPhase(Enum):
    """Phase of the pan interaction."""
    IDLE = "idle"
    DRAGGING = "dragging"


@dataclass(frozen=True)
class DragState:
    """
    Pan interaction state.

    Anchors are only meaningful while DRAGGING: they hold the scroll position
    and pointer x recorded at pointer-down.
    """
    phase: DragPhase = DragPhase.IDLE
    anchor_scroll_percent: float = 0.0
    anchor_pointer_x: float = 0.0

    @property
    def is_dragging(self) -> bool:
        return self.phase == DragPhase.DRAGGING


IDLE = DragState()


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


@dataclass
class ViewState:
    """
    Mutable viewer configuration, read by the render service each frame.

    Use the setters rather than assigning fields directly: they clamp
    out-of-range input instead of rejecting it.
    """
    amplitude_scale: float = 1.0
    time_window_seconds: float = 10.0
    scroll_percent: float = 0.0
    auto_scale: bool = False
    drag_state: DragState = field(default_factory=DragState)

    def __post_init__(self):
        # Constructor values get the same clamping as the setters;
        # non-finite ones fall back to the defaults.
        amplitude, window, scroll = self.amplitude_scale, self.time_window_seconds, self.scroll_percent
        self.amplitude_scale, self.time_window_seconds, self.scroll_percent = 1.0, 10.0, 0.0
        self.set_amplitude_scale(amplitude)
        self.set_time_window(window)
        self.set_scroll_percent(scroll)
        self.set_auto_scale(self.auto_scale)

    def set_amplitude_scale(self, value: float) -> None:
        value = float(value)
        if math.isfinite(value):
            self.amplitude_scale = max(MIN_AMPLITUDE_SCALE, value)

    def set_time_window(self, seconds: float) -> None:
        seconds = float(seconds)
        if math.isfinite(seconds):
            self.time_window_seconds = max(MIN_TIME_WINDOW_S, seconds)

    def set_scroll_percent(self, percent: float) -> None:
        percent = float(percent)
        if math.isfinite(percent):
            self.scroll_percent = _clamp(percent, 0.0, 100.0)

    def set_auto_scale(self, enabled: bool) -> None:
        self.auto_scale = bool(enabled)


@dataclass(frozen=True)
class TimeWindow:
    """Visible span of the timeline, in seconds."""
    start_time: float
    end_time: float

    @property
    def width(self) -> float:
        return self.end_time - self.start_time


@dataclass(frozen=True)
class SampleRange:
    """Half-open sample index range [start, end) of one channel."""
    start: int
    end: int

    def __len__(self) -> int:
        return self.end - self.start

    @property
    def is_empty(self) -> bool:
        return self.end <= self.start


# ---------------------------------------------------------------------------
# Draw primitives (absolute pixel coordinates, origin top-left)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LinePrimitive:
    """Straight segment: time grid line, channel separator, or baseline."""
    x0: float
    y0: float
    x1: float
    y1: float
    role: str                           # 'time_grid', 'channel_grid', 'baseline'
    color: str = "#1a1a1a"
    width: float = 1.0


@dataclass(frozen=True)
class PolylinePrimitive:
    """Waveform of one channel over the visible window."""
    xs: np.ndarray
    ys: np.ndarray
    channel_index: int
    color: str = "#ffffff"
    width: float = 1.5

    def __len__(self) -> int:
        return int(self.xs.shape[0])


@dataclass(frozen=True)
class TextPrimitive:
    """Text anchored at its baseline-left corner."""
    x: float
    y: float
    text: str
    role: str                           # 'time_label', 'channel_label'
    color: str = "#666666"
    font_size: int = 11
    bold: bool = False
