import numpy as np
import pytest

from core import edf_io
from core.domain.recording import (
    ChannelDescriptor,
    DecodeCancelledError,
    DegenerateChannelRangeError,
    InvalidDimensionsError,
    MalformedFieldError,
    TruncatedDataError,
)


def _expected(d, dmin=-32768, dmax=32767, pmin=-100.0, pmax=100.0):
    return (d - dmin) * (pmax - pmin) / (dmax - dmin) + pmin


def test_scenario_a_physical_values(scenario_a_bytes):
    rec = edf_io.decode_edf(scenario_a_bytes)
    samples = rec.channels[0].samples
    assert samples[0] == -100.0
    assert samples[3] == 100.0
    assert samples[1] == pytest.approx(_expected(0))
    assert samples[2] == pytest.approx(_expected(16384))
    assert samples.tolist() == pytest.approx([-100.0, 0.0, 50.0, 100.0], abs=0.005)


def test_header_fields_are_trimmed(scenario_a_bytes):
    rec = edf_io.decode_edf(scenario_a_bytes)
    h = rec.header
    assert h.version == "0"
    assert h.patient_id == "X"
    assert h.recording_id == "R"
    assert h.start_date == "01.02.03"
    assert h.start_time == "04.05.06"
    assert h.header_byte_count == 512
    assert h.record_count == 1
    assert h.record_duration_seconds == 1.0
    assert h.channel_count == 1

    desc = rec.channels[0].descriptor
    assert desc.label == "EEG Fp1"
    assert desc.physical_unit == "uV"
    assert desc.samples_per_record == 4


def test_decode_is_deterministic(mixed_rate_bytes):
    a = edf_io.decode_edf(mixed_rate_bytes)
    b = edf_io.decode_edf(mixed_rate_bytes)
    assert a.header == b.header
    for ca, cb in zip(a.channels, b.channels):
        assert ca.descriptor == cb.descriptor
        assert ca.samples.tobytes() == cb.samples.tobytes()


def test_sample_counts_and_duration(mixed_rate_bytes):
    rec = edf_io.decode_edf(mixed_rate_bytes)
    assert rec.duration == 10.0
    assert [ch.sample_count for ch in rec.channels] == [1000, 100]
    assert rec.sampling_rates() == [100.0, 10.0]
    assert rec.sampling_rate(5) == 0.0


def test_records_are_deinterleaved_in_time_order(edf_builder):
    buf = edf_builder(
        [
            {'label': 'A', 'spr': 2, 'samples': [1, 2, 3, 4, 5, 6],
             'pmin': -32768, 'pmax': 32767},
            {'label': 'B', 'spr': 1, 'samples': [10, 20, 30],
             'pmin': -32768, 'pmax': 32767},
        ],
        record_count=3,
    )
    rec = edf_io.decode_edf(buf)
    # physical range equals digital range, so values come through unchanged
    assert rec.channels[0].samples.tolist() == [1, 2, 3, 4, 5, 6]
    assert rec.channels[1].samples.tolist() == [10, 20, 30]


def test_signal_header_is_field_major(edf_builder):
    buf = edf_builder(
        [
            {'label': 'First', 'unit': 'uV', 'spr': 1, 'samples': [0]},
            {'label': 'Second', 'unit': 'mV', 'spr': 3, 'samples': [0, 0, 0]},
        ],
    )
    # Labels sit back to back right after the fixed header
    assert buf[256:272].strip() == b'First'
    assert buf[272:288].strip() == b'Second'

    rec = edf_io.decode_edf(buf)
    assert [c.descriptor.label for c in rec.channels] == ['First', 'Second']
    assert [c.descriptor.physical_unit for c in rec.channels] == ['uV', 'mV']
    assert [c.descriptor.samples_per_record for c in rec.channels] == [1, 3]


def test_samples_are_read_only(scenario_a_bytes):
    rec = edf_io.decode_edf(scenario_a_bytes)
    with pytest.raises(ValueError):
        rec.channels[0].samples[0] = 1.0


def test_text_is_decoded_byte_per_character(edf_builder):
    buf = bytearray(edf_builder([{'label': 'X', 'spr': 1, 'samples': [0]}]))
    buf[8:12] = b'J\xe9r\xf4'
    rec = edf_io.decode_edf(bytes(buf))
    assert rec.header.patient_id == 'Jérô'


def test_accepts_memoryview_and_bytearray(scenario_a_bytes):
    a = edf_io.decode_edf(memoryview(scenario_a_bytes))
    b = edf_io.decode_edf(bytearray(scenario_a_bytes))
    assert a.channels[0].samples.tolist() == b.channels[0].samples.tolist()


def test_trailing_bytes_are_ignored(scenario_a_bytes):
    rec = edf_io.decode_edf(scenario_a_bytes + b'\x00' * 10)
    assert rec.channels[0].sample_count == 4


# ----------------------------------------------------------------------
# Empty but valid recordings
# ----------------------------------------------------------------------

def test_zero_channels(edf_builder):
    rec = edf_io.decode_edf(edf_builder([], record_count=5))
    assert rec.channel_count == 0
    assert rec.duration == 5.0


def test_zero_records(edf_builder):
    rec = edf_io.decode_edf(edf_builder([{'label': 'A', 'spr': 4, 'samples': []}], record_count=0))
    assert rec.duration == 0.0
    assert rec.channels[0].sample_count == 0


def test_scenario_b_zero_samples_per_record(edf_builder):
    buf = edf_builder(
        [
            {'label': 'Empty', 'spr': 0, 'samples': []},
            {'label': 'Data', 'spr': 2, 'samples': [1, 2, 3, 4]},
        ],
        record_count=2,
    )
    rec = edf_io.decode_edf(buf)
    assert rec.channels[0].sample_count == 0
    assert rec.channels[1].sample_count == 4


# ----------------------------------------------------------------------
# Failures
# ----------------------------------------------------------------------

def test_scenario_c_truncated_data(scenario_a_bytes):
    with pytest.raises(TruncatedDataError) as info:
        edf_io.decode_edf(scenario_a_bytes[:-1])
    assert info.value.expected_bytes == 512 + 8
    assert info.value.actual_bytes == 512 + 7


def test_truncated_fixed_header():
    with pytest.raises(TruncatedDataError) as info:
        edf_io.decode_edf(b'0' * 100)
    assert info.value.expected_bytes == 256


def test_truncated_signal_header(scenario_a_bytes):
    with pytest.raises(TruncatedDataError) as info:
        edf_io.decode_edf(scenario_a_bytes[:300])
    assert info.value.expected_bytes == 512


def test_scenario_d_degenerate_digital_range(edf_builder):
    buf = edf_builder([{'label': 'A', 'spr': 2, 'samples': [5, 5], 'dmin': 5, 'dmax': 5}])
    with pytest.raises(DegenerateChannelRangeError) as info:
        edf_io.decode_edf(buf)
    assert info.value.channel == 0
    assert info.value.kind == 'digital'


def test_degenerate_physical_range(edf_builder):
    buf = edf_builder([
        {'label': 'A', 'spr': 1, 'samples': [0]},
        {'label': 'B', 'spr': 1, 'samples': [0], 'pmin': 3.0, 'pmax': 3.0},
    ])
    with pytest.raises(DegenerateChannelRangeError) as info:
        edf_io.decode_edf(buf)
    assert info.value.channel == 1
    assert info.value.kind == 'physical'


@pytest.mark.parametrize("field", ['header_byte_count', 'record_count',
                                   'record_duration_seconds', 'channel_count'])
def test_malformed_fixed_header_number(edf_builder, field):
    buf = edf_builder([{'label': 'A', 'spr': 1, 'samples': [0]}], overrides={field: 'abc'})
    with pytest.raises(MalformedFieldError) as info:
        edf_io.decode_edf(buf)
    assert info.value.field == field
    assert info.value.channel is None


def test_malformed_signal_field_reports_channel(edf_builder):
    buf = edf_builder(
        [{'label': 'A', 'spr': 1, 'samples': [0]}, {'label': 'B', 'spr': 1, 'samples': [0]}],
        signal_overrides={('physical_max', 1): 'high'},
    )
    with pytest.raises(MalformedFieldError) as info:
        edf_io.decode_edf(buf)
    assert info.value.field == 'physical_max'
    assert info.value.channel == 1


def test_blank_numeric_field_is_malformed(edf_builder):
    buf = edf_builder([{'label': 'A', 'spr': 1, 'samples': [0]}],
                      signal_overrides={('samples_per_record', 0): ''})
    with pytest.raises(MalformedFieldError):
        edf_io.decode_edf(buf)


def test_non_finite_float_is_malformed(edf_builder):
    buf = edf_builder([{'label': 'A', 'spr': 1, 'samples': [0]}],
                      signal_overrides={('physical_min', 0): 'nan'})
    with pytest.raises(MalformedFieldError):
        edf_io.decode_edf(buf)


def test_negative_record_count_is_invalid(edf_builder):
    buf = edf_builder([{'label': 'A', 'spr': 1, 'samples': [0]}], overrides={'record_count': '-1'})
    with pytest.raises(InvalidDimensionsError) as info:
        edf_io.decode_edf(buf)
    assert info.value.field == 'record_count'


def test_negative_samples_per_record_is_invalid(edf_builder):
    buf = edf_builder([{'label': 'A', 'spr': 1, 'samples': [0]}],
                      signal_overrides={('samples_per_record', 0): '-4'})
    with pytest.raises(InvalidDimensionsError) as info:
        edf_io.decode_edf(buf)
    assert info.value.channel == 0


def test_inverted_physical_range_is_preserved(edf_builder):
    buf = edf_builder([{'label': 'A', 'spr': 2, 'samples': [-32768, 32767],
                        'pmin': 50.0, 'pmax': -50.0}])
    rec = edf_io.decode_edf(buf)
    assert rec.channels[0].samples.tolist() == [50.0, -50.0]


# ----------------------------------------------------------------------
# Conversion
# ----------------------------------------------------------------------

def _descriptor(**kw):
    base = dict(label='A', transducer_type='', physical_unit='uV',
                physical_min=-200.0, physical_max=200.0,
                digital_min=-2048, digital_max=2047, prefiltering='',
                samples_per_record=1)
    base.update(kw)
    return ChannelDescriptor(**base)


def test_conversion_endpoints_are_exact():
    desc = _descriptor(physical_min=-3.3, physical_max=7.1, digital_min=-1000, digital_max=3000)
    assert edf_io.digital_to_physical(-1000, desc) == -3.3
    assert edf_io.digital_to_physical(3000, desc) == 7.1


def test_conversion_is_non_decreasing():
    desc = _descriptor()
    digital = np.arange(-2048, 2048)
    physical = edf_io.digital_to_physical(digital, desc)
    assert np.all(np.diff(physical) >= 0)
    assert physical[0] == -200.0
    assert physical[-1] == 200.0


def test_conversion_rejects_equal_digital_bounds():
    with pytest.raises(ZeroDivisionError):
        edf_io.digital_to_physical(1, _descriptor(digital_min=3, digital_max=3))


# ----------------------------------------------------------------------
# Progress / cancellation / files
# ----------------------------------------------------------------------

def test_progress_reaches_complete(mixed_rate_bytes):
    calls = []
    edf_io.decode_edf(mixed_rate_bytes, progress_callback=lambda c, t, m: calls.append((c, t)))
    assert calls[0] == (0, 100)
    assert calls[-1] == (100, 100)
    assert [c for c, _ in calls] == sorted(c for c, _ in calls)


def test_cancel_raises_and_returns_nothing(mixed_rate_bytes):
    polls = []

    def should_cancel():
        polls.append(1)
        return len(polls) > 1

    with pytest.raises(DecodeCancelledError):
        edf_io.decode_edf(mixed_rate_bytes, should_cancel=should_cancel)


def test_read_header_skips_sample_data(scenario_a_bytes):
    # Header parsing alone does not need the data region
    header, descriptors = edf_io.read_header(scenario_a_bytes[:512])
    assert header.channel_count == 1
    assert descriptors[0].label == "EEG Fp1"


def test_load_edf_file(tmp_path, scenario_a_bytes):
    path = tmp_path / "sample.edf"
    path.write_bytes(scenario_a_bytes)
    rec = edf_io.load_edf_file(path)
    assert rec.channels[0].samples[3] == 100.0


@pytest.mark.parametrize("declared", ['0', '256', '511'])
def test_header_byte_count_inside_header_is_invalid(edf_builder, declared):
    buf = edf_builder([{'label': 'A', 'spr': 1, 'samples': [0]}],
                      overrides={'header_byte_count': declared})
    with pytest.raises(InvalidDimensionsError) as info:
        edf_io.decode_edf(buf)
    assert info.value.field == 'header_byte_count'


def test_padded_header_is_skipped(edf_builder):
    buf = edf_builder([{'label': 'A', 'spr': 2, 'samples': [-32768, 32767]}], header_bytes=1024)
    rec = edf_io.decode_edf(buf)
    assert rec.channels[0].samples.tolist() == [-100.0, 100.0]
