# Viewer domain models
from .models import (
    MIN_AMPLITUDE_SCALE,
    MIN_TIME_WINDOW_S,
    DragPhase,
    DragState,
    IDLE,
    ViewState,
    TimeWindow,
    SampleRange,
    LinePrimitive,
    PolylinePrimitive,
    TextPrimitive,
)

__all__ = [
    'MIN_AMPLITUDE_SCALE',
    'MIN_TIME_WINDOW_S',
    # State
    'DragPhase',
    'DragState',
    'IDLE',
    'ViewState',
    # Windowing
    'TimeWindow',
    'SampleRange',
    # Primitives
    'LinePrimitive',
    'PolylinePrimitive',
    'TextPrimitive',
]
