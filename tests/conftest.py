import numpy as np
import pytest


def _field(value, width):
    text = str(value).encode('latin-1')
    assert len(text) <= width, f"{value!r} does not fit in {width} bytes"
    return text.ljust(width, b' ')


def build_edf(channels, record_count=1, record_duration=1.0, *,
              header_bytes=None, version="0", patient_id="X", recording_id="R",
              start_date="01.02.03", start_time="04.05.06", reserved="",
              overrides=None, signal_overrides=None, truncate_by=0):
    """
    Build an EDF byte buffer.

    channels: list of dicts with keys label, samples (list of per-record
    int lists or a flat list), and optional transducer, unit, pmin, pmax,
    dmin, dmax, prefilter, spr.
    overrides: {header_field: raw text} replaces a fixed-header field.
    signal_overrides: {(field, channel): raw text} replaces one signal field.
    """
    overrides = overrides or {}
    signal_overrides = signal_overrides or {}
    ns = len(channels)
    if header_bytes is None:
        header_bytes = 256 + 256 * ns

    fixed = [
        ('version', version, 8),
        ('patient_id', patient_id, 80),
        ('recording_id', recording_id, 80),
        ('start_date', start_date, 8),
        ('start_time', start_time, 8),
        ('header_byte_count', header_bytes, 8),
        ('reserved', reserved, 44),
        ('record_count', record_count, 8),
        ('record_duration_seconds', record_duration, 8),
        ('channel_count', ns, 4),
    ]
    out = b''.join(_field(overrides.get(name, value), width) for name, value, width in fixed)

    fields = [
        ('label', 16, lambda c: c.get('label', '')),
        ('transducer_type', 80, lambda c: c.get('transducer', '')),
        ('physical_unit', 8, lambda c: c.get('unit', 'uV')),
        ('physical_min', 8, lambda c: c.get('pmin', -100.0)),
        ('physical_max', 8, lambda c: c.get('pmax', 100.0)),
        ('digital_min', 8, lambda c: c.get('dmin', -32768)),
        ('digital_max', 8, lambda c: c.get('dmax', 32767)),
        ('prefiltering', 80, lambda c: c.get('prefilter', '')),
        ('samples_per_record', 8, lambda c: c['spr']),
        ('reserved', 32, lambda c: ''),
    ]
    for name, width, getter in fields:
        for i, ch in enumerate(channels):
            out += _field(signal_overrides.get((name, i), getter(ch)), width)

    out = out.ljust(header_bytes, b' ')

    data = b''
    flat = [np.asarray(ch.get('samples', []), dtype='<i2').reshape(-1) for ch in channels]
    for r in range(record_count):
        for ch, samples in zip(channels, flat):
            spr = ch['spr']
            data += samples[r * spr:(r + 1) * spr].astype('<i2').tobytes()

    buf = out + data
    if truncate_by:
        buf = buf[:-truncate_by]
    return buf


@pytest.fixture
def edf_builder():
    return build_edf


@pytest.fixture
def scenario_a_bytes():
    """One channel, one 1 s record, four samples spanning the full int16 range."""
    return build_edf(
        [{'label': 'EEG Fp1', 'unit': 'uV', 'pmin': -100.0, 'pmax': 100.0,
          'dmin': -32768, 'dmax': 32767, 'spr': 4,
          'samples': [-32768, 0, 16384, 32767]}],
        record_count=1, record_duration=1.0,
    )


@pytest.fixture
def mixed_rate_bytes():
    """Two channels at 100 Hz and 10 Hz, ten 1 s records."""
    fast = np.arange(1000) % 200 - 100
    slow = np.arange(100) % 20 - 10
    return build_edf(
        [
            {'label': 'EEG', 'unit': 'uV', 'spr': 100, 'samples': fast,
             'pmin': -100.0, 'pmax': 100.0, 'dmin': -100, 'dmax': 100},
            {'label': 'Resp', 'unit': 'mV', 'spr': 10, 'samples': slow,
             'pmin': -1.0, 'pmax': 1.0, 'dmin': -10, 'dmax': 10},
        ],
        record_count=10, record_duration=1.0,
    )


@pytest.fixture(scope="session")
def qapp():
    """Qt event loop object for QObject-based view models (no widgets)."""
    from PyQt6.QtCore import QCoreApplication
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    yield app
