# Domain layer - data models with no UI dependencies
from .recording import (
    RecordingHeader,
    ChannelDescriptor,
    Channel,
    Recording,
    DecodeError,
    MalformedFieldError,
    TruncatedDataError,
    DegenerateChannelRangeError,
    InvalidDimensionsError,
    DecodeCancelledError,
)
from .viewer import (
    DragPhase,
    DragState,
    ViewState,
    TimeWindow,
    SampleRange,
    LinePrimitive,
    PolylinePrimitive,
    TextPrimitive,
)

__all__ = [
    # Recording
    'RecordingHeader',
    'ChannelDescriptor',
    'Channel',
    'Recording',
    'DecodeError',
    'MalformedFieldError',
    'TruncatedDataError',
    'DegenerateChannelRangeError',
    'InvalidDimensionsError',
    'DecodeCancelledError',
    # Viewer
    'DragPhase',
    'DragState',
    'ViewState',
    'TimeWindow',
    'SampleRange',
    'LinePrimitive',
    'PolylinePrimitive',
    'TextPrimitive',
]
