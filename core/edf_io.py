"""
EDF (European Data Format) decoder.

Decodes a fully materialised byte buffer into an immutable Recording:

    [0, 256)                 fixed header (fixed-width ASCII fields)
    [256, 256 + 256 * ns)    signal header, laid out field-major
                             (all labels, then all transducer types, ...)
    [header_bytes, ...)      data records; each record holds, per channel in
                             declared order, samples_per_record int16 (LE)

The decoder performs no I/O of its own; load_edf_file() is the convenience
wrapper that reads a local file first.
"""

import math
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import numpy as np

from core.domain.recording import (
    Channel,
    ChannelDescriptor,
    Recording,
    RecordingHeader,
    DecodeCancelledError,
    DegenerateChannelRangeError,
    InvalidDimensionsError,
    MalformedFieldError,
    TruncatedDataError,
)


HEADER_SIZE = 256
SIGNAL_HEADER_SIZE = 256     # bytes per signal across all field-major blocks
SAMPLE_DTYPE = np.dtype('<i2')

# (name, width) in file order
HEADER_FIELDS = [
    ('version', 8),
    ('patient_id', 80),
    ('recording_id', 80),
    ('start_date', 8),
    ('start_time', 8),
    ('header_byte_count', 8),
    ('reserved', 44),
    ('record_count', 8),
    ('record_duration_seconds', 8),
    ('channel_count', 4),
]

SIGNAL_FIELDS = [
    ('label', 16),
    ('transducer_type', 80),
    ('physical_unit', 8),
    ('physical_min', 8),
    ('physical_max', 8),
    ('digital_min', 8),
    ('digital_max', 8),
    ('prefiltering', 80),
    ('samples_per_record', 8),
    ('reserved', 32),
]

_INT_FIELDS = {'header_byte_count', 'record_count', 'channel_count',
               'digital_min', 'digital_max', 'samples_per_record'}
_FLOAT_FIELDS = {'record_duration_seconds', 'physical_min', 'physical_max'}


# ----------------------------------------------------------------------
# Field parsing
# ----------------------------------------------------------------------

def _as_buffer(data) -> memoryview:
    buf = memoryview(data)
    if buf.ndim != 1 or buf.itemsize != 1:
        buf = buf.cast('B')
    return buf


def _read_text(buf: memoryview, offset: int, length: int) -> str:
    """Decode a fixed-width field one byte per character, trimmed."""
    return bytes(buf[offset:offset + length]).decode('latin-1').strip()


def _parse_int(text: str, field: str, channel: Optional[int] = None) -> int:
    try:
        return int(text)
    except ValueError:
        raise MalformedFieldError(field, channel, text) from None


def _parse_float(text: str, field: str, channel: Optional[int] = None) -> float:
    try:
        value = float(text)
    except ValueError:
        raise MalformedFieldError(field, channel, text) from None
    if not math.isfinite(value):
        raise MalformedFieldError(field, channel, text)
    return value


def _parse_field(name: str, text: str, channel: Optional[int] = None):
    if name in _INT_FIELDS:
        return _parse_int(text, name, channel)
    if name in _FLOAT_FIELDS:
        return _parse_float(text, name, channel)
    return text


# ----------------------------------------------------------------------
# Header
# ----------------------------------------------------------------------

def _read_fixed_header(buf: memoryview) -> RecordingHeader:
    if buf.nbytes < HEADER_SIZE:
        raise TruncatedDataError(HEADER_SIZE, buf.nbytes)

    values = {}
    offset = 0
    for name, width in HEADER_FIELDS:
        values[name] = _parse_field(name, _read_text(buf, offset, width))
        offset += width

    for name in ('header_byte_count', 'record_count', 'channel_count'):
        if values[name] < 0:
            raise InvalidDimensionsError(name, values[name])
    if values['record_duration_seconds'] < 0:
        raise InvalidDimensionsError('record_duration_seconds', values['record_duration_seconds'])

    return RecordingHeader(**values)


def _read_signal_header(buf: memoryview, ns: int) -> List[ChannelDescriptor]:
    expected = HEADER_SIZE + ns * SIGNAL_HEADER_SIZE
    if buf.nbytes < expected:
        raise TruncatedDataError(expected, buf.nbytes)

    # Field-major: each field is a block of ns consecutive entries
    columns = {}
    offset = HEADER_SIZE
    for name, width in SIGNAL_FIELDS:
        columns[name] = [
            _parse_field(name, _read_text(buf, offset + i * width, width), i)
            for i in range(ns)
        ]
        offset += ns * width

    descriptors = []
    for i in range(ns):
        spr = columns['samples_per_record'][i]
        if spr < 0:
            raise InvalidDimensionsError('samples_per_record', spr, i)

        dmin, dmax = columns['digital_min'][i], columns['digital_max'][i]
        pmin, pmax = columns['physical_min'][i], columns['physical_max'][i]
        if dmin == dmax:
            raise DegenerateChannelRangeError(i, 'digital')
        if pmin == pmax:
            raise DegenerateChannelRangeError(i, 'physical')

        descriptors.append(ChannelDescriptor(
            label=columns['label'][i],
            transducer_type=columns['transducer_type'][i],
            physical_unit=columns['physical_unit'][i],
            physical_min=pmin,
            physical_max=pmax,
            digital_min=dmin,
            digital_max=dmax,
            prefiltering=columns['prefiltering'][i],
            samples_per_record=spr,
        ))
    return descriptors


def read_header(data) -> Tuple[RecordingHeader, List[ChannelDescriptor]]:
    """
    Parse the fixed header and the signal header without touching sample data.

    Returns (header, channel_descriptors).
    Raises a DecodeError subclass on malformed or truncated headers.
    """
    buf = _as_buffer(data)
    header = _read_fixed_header(buf)
    # Data records cannot start inside the header blocks
    if header.header_byte_count < HEADER_SIZE + header.channel_count * SIGNAL_HEADER_SIZE:
        raise InvalidDimensionsError('header_byte_count', header.header_byte_count)
    descriptors = _read_signal_header(buf, header.channel_count)
    return header, descriptors


def data_region_size(header: RecordingHeader, descriptors: List[ChannelDescriptor]) -> int:
    """Bytes occupied by all data records."""
    record_samples = sum(d.samples_per_record for d in descriptors)
    return header.record_count * record_samples * SAMPLE_DTYPE.itemsize


# ----------------------------------------------------------------------
# Conversion
# ----------------------------------------------------------------------

def digital_to_physical(digital, descriptor: ChannelDescriptor):
    """
    Convert raw digital values to physical units.

        physical = (digital - dmin) * (pmax - pmin) / (dmax - dmin) + pmin

    Accepts a scalar or an array; returns float / float64 array.
    """
    dmin, dmax = descriptor.digital_min, descriptor.digital_max
    pmin, pmax = descriptor.physical_min, descriptor.physical_max
    if dmax == dmin:
        raise ZeroDivisionError("digital_min == digital_max")

    d = np.asarray(digital, dtype=np.float64)
    physical = (d - dmin) * (pmax - pmin) / (dmax - dmin) + pmin
    # Declared extremes map exactly onto the physical extremes
    physical = np.where(d == dmin, pmin, physical)
    physical = np.where(d == dmax, pmax, physical)

    if physical.ndim == 0:
        return float(physical)
    return physical


# ----------------------------------------------------------------------
# Decode
# ----------------------------------------------------------------------

def decode_edf(
    data,
    progress_callback: Optional[Callable[[int, int, str], None]] = None,
    should_cancel: Optional[Callable[[], bool]] = None,
) -> Recording:
    """
    Decode an EDF byte buffer into a Recording.

    Args:
        data: bytes-like buffer holding the whole file
        progress_callback: optional function(current, total, message)
        should_cancel: optional function() -> bool, polled between channels.
                       When it returns True, DecodeCancelledError is raised
                       and nothing is returned.

    Returns:
        Recording with one float64 sample array per channel.

    Raises:
        MalformedFieldError, TruncatedDataError, DegenerateChannelRangeError,
        InvalidDimensionsError, DecodeCancelledError
    """
    buf = _as_buffer(data)

    if progress_callback:
        progress_callback(0, 100, "Reading EDF header...")

    header, descriptors = read_header(buf)

    spr = [d.samples_per_record for d in descriptors]
    record_samples = sum(spr)
    expected = header.header_byte_count + data_region_size(header, descriptors)
    if buf.nbytes < expected:
        raise TruncatedDataError(expected, buf.nbytes)

    n_records = header.record_count
    total = n_records * record_samples
    if total > 0:
        raw = np.frombuffer(buf, dtype=SAMPLE_DTYPE, count=total,
                            offset=header.header_byte_count)
        records = raw.reshape(n_records, record_samples)
    else:
        records = np.empty((n_records, 0), dtype=SAMPLE_DTYPE)

    if progress_callback:
        progress_callback(10, 100, "Converting channel data...")

    bounds = np.concatenate(([0], np.cumsum(spr, dtype=np.int64))) if spr else np.zeros(1, dtype=np.int64)
    channels = []
    ns = len(descriptors)
    for i, desc in enumerate(descriptors):
        if should_cancel is not None and should_cancel():
            raise DecodeCancelledError(f"Decode cancelled at channel {i + 1}/{ns}")

        block = records[:, bounds[i]:bounds[i + 1]].reshape(-1)
        samples = np.ascontiguousarray(digital_to_physical(block, desc), dtype=np.float64)
        samples.setflags(write=False)
        channels.append(Channel(descriptor=desc, samples=samples))

        if progress_callback:
            pct = 10 + int(85 * (i + 1) / ns)
            progress_callback(pct, 100, f"Converted channel {i + 1}/{ns} ({desc.label or 'unlabeled'})")

    if should_cancel is not None and should_cancel():
        raise DecodeCancelledError("Decode cancelled before publish")

    if progress_callback:
        progress_callback(100, 100, "Complete")

    return Recording(header=header, channels=tuple(channels))


def load_edf_file(
    path: Path,
    progress_callback: Optional[Callable[[int, int, str], None]] = None,
    should_cancel: Optional[Callable[[], bool]] = None,
) -> Recording:
    """Read a local .edf file and decode it (see decode_edf)."""
    path = Path(path)
    if progress_callback:
        progress_callback(0, 100, f"Opening {path.name}...")
    data = path.read_bytes()
    return decode_edf(data, progress_callback=progress_callback, should_cancel=should_cancel)
