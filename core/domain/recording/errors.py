"""
Decode errors raised by the EDF decoder.

All DecodeError subclasses are terminal for a decode attempt: the caller gets
no Recording and must surface the message.
"""

from typing import Optional


class DecodeError(ValueError):
    """Base class for EDF decode failures."""


class MalformedFieldError(DecodeError):
    """A fixed-width text field did not parse as its declared numeric type."""

    def __init__(self, field: str, channel: Optional[int] = None, raw: str = ""):
        self.field = field
        self.channel = channel
        self.raw = raw
        where = f" (channel {channel})" if channel is not None else ""
        super().__init__(f"Malformed header field '{field}'{where}: {raw!r}")


class TruncatedDataError(DecodeError):
    """The buffer is shorter than the declared layout requires."""

    def __init__(self, expected_bytes: int, actual_bytes: int):
        self.expected_bytes = expected_bytes
        self.actual_bytes = actual_bytes
        super().__init__(
            f"Truncated EDF data: expected at least {expected_bytes} bytes, got {actual_bytes}"
        )


class DegenerateChannelRangeError(DecodeError):
    """A channel's min equals its max, so the digital/physical map is undefined."""

    def __init__(self, channel: int, kind: str = "digital"):
        self.channel = channel
        self.kind = kind
        super().__init__(f"Channel {channel} has a degenerate {kind} range (min == max)")


class InvalidDimensionsError(DecodeError):
    """A count or size field holds a negative or impossible value."""

    def __init__(self, field: str, value, channel: Optional[int] = None):
        self.field = field
        self.value = value
        self.channel = channel
        where = f" (channel {channel})" if channel is not None else ""
        super().__init__(f"Invalid value for '{field}'{where}: {value}")


class DecodeCancelledError(Exception):
    """Raised when a decode is abandoned through its should_cancel callback."""
