# Recording domain models
from .models import RecordingHeader, ChannelDescriptor, Channel, Recording
from .errors import (
    DecodeError,
    MalformedFieldError,
    TruncatedDataError,
    DegenerateChannelRangeError,
    InvalidDimensionsError,
    DecodeCancelledError,
)

__all__ = [
    # Models
    'RecordingHeader',
    'ChannelDescriptor',
    'Channel',
    'Recording',
    # Errors
    'DecodeError',
    'MalformedFieldError',
    'TruncatedDataError',
    'DegenerateChannelRangeError',
    'InvalidDimensionsError',
    'DecodeCancelledError',
]
