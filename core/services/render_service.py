"""
Render service - builds one frame of draw primitives.

Pure function of (recording, view_state, viewport). No Qt imports; the
pyqtgraph backend only replays the primitives returned here.
"""

import math
from dataclasses import dataclass
from typing import List, Union

import numpy as np

from core.domain.recording import Channel, ChannelDescriptor, Recording
from core.domain.viewer import (
    MIN_AMPLITUDE_SCALE,
    LinePrimitive,
    PolylinePrimitive,
    SampleRange,
    TextPrimitive,
    TimeWindow,
    ViewState,
)
from core.services.navigation_service import NavigationService


GRID_DIVISIONS = 10
FIXED_SCALE_FILL = 0.4      # fraction of channel height used by the declared range
AUTO_SCALE_FILL = 0.8       # fraction of channel height used by the visible range

BACKGROUND_COLOR = '#0a0a0a'
GRID_COLOR = '#1a1a1a'
TIME_LABEL_COLOR = '#666666'
BASELINE_COLOR = '#222222'
CHANNEL_LABEL_COLOR = '#ffffff'
CHANNEL_COLORS = [
    '#ffffff', '#dddddd', '#bbbbbb', '#999999',
    '#cccccc', '#aaaaaa', '#888888', '#e5e5e5',
]

Primitive = Union[LinePrimitive, PolylinePrimitive, TextPrimitive]


@dataclass(frozen=True)
class ChannelScale:
    """Vertical mapping of one channel: y = center_y - (v - center) * pixel_scale."""
    center: float
    pixel_scale: float

    def to_pixels(self, values: np.ndarray, center_y: float) -> np.ndarray:
        return center_y - (values - self.center) * self.pixel_scale


def channel_color(index: int) -> str:
    return CHANNEL_COLORS[index % len(CHANNEL_COLORS)]


def fixed_scale(descriptor: ChannelDescriptor, channel_height: float, amplitude_scale: float) -> ChannelScale:
    """Scale from the declared physical range, identical on every frame."""
    value_range = descriptor.physical_max - descriptor.physical_min
    center = (descriptor.physical_max + descriptor.physical_min) / 2
    if value_range == 0:
        return ChannelScale(center, 1.0)
    return ChannelScale(center, channel_height * FIXED_SCALE_FILL / value_range * amplitude_scale)


def auto_scale(visible: np.ndarray, channel_height: float, amplitude_scale: float) -> ChannelScale:
    """Scale from the min/max of the visible samples; flat windows use unit scale."""
    if visible.size == 0:
        return ChannelScale(0.0, 1.0)
    vmin = float(np.min(visible))
    vmax = float(np.max(visible))
    value_range = vmax - vmin
    center = (vmax + vmin) / 2
    if value_range > 0:
        return ChannelScale(center, channel_height * AUTO_SCALE_FILL / value_range * amplitude_scale)
    return ChannelScale(center, 1.0)


def effective_amplitude(amplitude_scale: float) -> float:
    """Amplitude actually applied: floored at MIN_AMPLITUDE_SCALE, NaN treated as the floor."""
    if math.isnan(amplitude_scale) or amplitude_scale < MIN_AMPLITUDE_SCALE:
        return MIN_AMPLITUDE_SCALE
    return amplitude_scale


def channel_scale(channel: Channel, visible: np.ndarray, view_state: ViewState,
                  channel_height: float) -> ChannelScale:
    amplitude = effective_amplitude(view_state.amplitude_scale)
    if view_state.auto_scale:
        return auto_scale(visible, channel_height, amplitude)
    return fixed_scale(channel.descriptor, channel_height, amplitude)


# ----------------------------------------------------------------------
# Frame pieces
# ----------------------------------------------------------------------

def _grid(window: TimeWindow, n_channels: int, width: float, height: float) -> List[Primitive]:
    items: List[Primitive] = []
    for i in range(GRID_DIVISIONS + 1):
        frac = i / GRID_DIVISIONS
        x = frac * width
        items.append(LinePrimitive(x, 0.0, x, height, 'time_grid', GRID_COLOR, 1.0))
        t = window.start_time + window.width * frac
        items.append(TextPrimitive(x + 2, height - 5, f"{t:.1f}s", 'time_label',
                                   TIME_LABEL_COLOR, 11, False))

    for i in range(n_channels + 1):
        y = (i / n_channels) * height
        items.append(LinePrimitive(0.0, y, width, y, 'channel_grid', GRID_COLOR, 1.0))
    return items


def _trace(channel: Channel, index: int, rng: SampleRange, view_state: ViewState,
           center_y: float, channel_height: float, width: float) -> List[Primitive]:
    items: List[Primitive] = []
    if not rng.is_empty:
        visible = channel.samples[rng.start:rng.end]
        scale = channel_scale(channel, visible, view_state, channel_height)
        n = len(rng)
        xs = np.arange(n, dtype=np.float64) / n * width
        ys = scale.to_pixels(visible, center_y)
        items.append(PolylinePrimitive(xs, ys, index, channel_color(index), 1.5))

    items.append(LinePrimitive(0.0, center_y, width, center_y, 'baseline', BASELINE_COLOR, 0.5))
    return items


def render_frame(recording: Recording, view_state: ViewState,
                 viewport_width: float, viewport_height: float) -> List[Primitive]:
    """
    Build the draw primitives for one frame.

    Order: time grid + labels, channel separators, then per channel its
    polyline and baseline, then channel labels on top.

    Returns an empty list when there is nothing to draw (no channels,
    zero-duration recording, or an empty viewport).
    """
    n_channels = recording.channel_count
    duration = recording.duration
    if n_channels == 0 or duration <= 0 or viewport_width <= 0 or viewport_height <= 0:
        return []

    window = NavigationService.window_for(recording, view_state)
    ranges = NavigationService.channel_ranges(recording, window)
    channel_height = viewport_height / n_channels

    frame = _grid(window, n_channels, viewport_width, viewport_height)

    for index, (channel, rng) in enumerate(zip(recording.channels, ranges)):
        center_y = channel_height * (index + 0.5)
        frame.extend(_trace(channel, index, rng, view_state, center_y,
                            channel_height, viewport_width))

    for index, channel in enumerate(recording.channels):
        desc = channel.descriptor
        text = f"{desc.display_label(index)} ({desc.physical_unit})"
        frame.append(TextPrimitive(5.0, channel_height * index + 15, text, 'channel_label',
                                   CHANNEL_LABEL_COLOR, 12, True))
    return frame
