"""
NavigationService - Pure Python time-window logic.

No Qt dependencies. Maps the scroll position of a ViewState onto a visible
time window, and that window onto per-channel sample index ranges.
"""

import math
from dataclasses import dataclass
from typing import List, Optional

from core.domain.recording import Recording
from core.domain.viewer import MIN_TIME_WINDOW_S, SampleRange, TimeWindow, ViewState


@dataclass
class NavigationResult:
    """Result of a paging action."""
    new_scroll_percent: float
    scroll_changed: bool = False
    window_bounds: Optional[tuple] = None  # (start, end) seconds
    needs_redraw: bool = False


class NavigationService:
    """Pure navigation logic, no Qt or widget references.

    Windowing is stateless (everything is recomputed from the ViewState);
    only the paging parameters live on the instance.
    """

    def __init__(self, win_overlap_frac: float = 0.10, win_min_overlap_s: float = 0.50):
        self._win_overlap_frac = win_overlap_frac
        self._win_min_overlap_s = win_min_overlap_s

    # ------------------------------------------------------------------
    # Windowing
    # ------------------------------------------------------------------

    @staticmethod
    def effective_window(window_seconds: float) -> float:
        """Window width actually used: floored at MIN_TIME_WINDOW_S, NaN treated as the floor."""
        if math.isnan(window_seconds) or window_seconds < MIN_TIME_WINDOW_S:
            return MIN_TIME_WINDOW_S
        return window_seconds

    @staticmethod
    def compute_time_window(duration: float, window_seconds: float, scroll_percent: float) -> TimeWindow:
        """
        Visible [start, end] for a scroll position.

        start = scroll/100 * max(0, duration - window); end = min(start + window, duration).
        When the window is at least as long as the recording, the whole
        recording is visible regardless of scroll.
        """
        if duration <= 0:
            return TimeWindow(0.0, 0.0)

        window_seconds = NavigationService.effective_window(window_seconds)
        pct = scroll_percent if math.isfinite(scroll_percent) else 0.0
        pct = max(0.0, min(100.0, pct))
        max_start = max(0.0, duration - window_seconds)
        start = (pct / 100.0) * max_start
        if start >= max_start:
            # Pin the right edge so scroll=100 ends exactly at the recording end
            return TimeWindow(max_start, duration)
        return TimeWindow(start, min(start + window_seconds, duration))

    @staticmethod
    def window_for(recording: Recording, view_state: ViewState) -> TimeWindow:
        return NavigationService.compute_time_window(
            recording.duration, view_state.time_window_seconds, view_state.scroll_percent
        )

    @staticmethod
    def sample_range(window: TimeWindow, sampling_rate: float, sample_count: int) -> SampleRange:
        """
        Sample indices covering [start, end) at one channel's own rate.

        Always satisfies 0 <= start <= end <= sample_count.
        """
        if sampling_rate <= 0 or sample_count <= 0 or window.width <= 0:
            return SampleRange(0, 0)
        end = min(int(math.ceil(window.end_time * sampling_rate)), sample_count)
        end = max(0, end)
        start = int(math.floor(window.start_time * sampling_rate))
        start = max(0, min(start, end))
        return SampleRange(start, end)

    @staticmethod
    def channel_ranges(recording: Recording, window: TimeWindow) -> List[SampleRange]:
        """Per-channel sample ranges; channels with different rates get different counts."""
        return [
            NavigationService.sample_range(window, recording.sampling_rate(i), ch.sample_count)
            for i, ch in enumerate(recording.channels)
        ]

    # ------------------------------------------------------------------
    # Window paging
    # ------------------------------------------------------------------

    def _window_step(self, W: float) -> float:
        """Step size when paging windows: W - overlap."""
        overlap = max(self._win_min_overlap_s, self._win_overlap_frac * W)
        step = max(0.0, W - overlap)
        if step <= 0:
            step = 0.9 * W
        return step

    def _page(self, view_state: ViewState, duration: float, direction: int) -> NavigationResult:
        current = view_state.scroll_percent
        W = self.effective_window(view_state.time_window_seconds)
        max_start = duration - W
        if duration <= 0 or max_start <= 0:
            # Whole recording already visible
            return NavigationResult(new_scroll_percent=current)

        window = self.compute_time_window(duration, W, current)
        new_start = window.start_time + direction * self._window_step(W)
        new_start = max(0.0, min(max_start, new_start))
        new_pct = new_start / max_start * 100.0

        bounds = (new_start, min(new_start + W, duration))
        changed = abs(new_pct - current) > 1e-9
        return NavigationResult(
            new_scroll_percent=new_pct,
            scroll_changed=changed,
            window_bounds=bounds,
            needs_redraw=changed,
        )

    def next_window(self, view_state: ViewState, duration: float) -> NavigationResult:
        """Step forward one window, clamped at the end of the recording."""
        return self._page(view_state, duration, +1)

    def prev_window(self, view_state: ViewState, duration: float) -> NavigationResult:
        """Step backward one window, clamped at the start of the recording."""
        return self._page(view_state, duration, -1)
