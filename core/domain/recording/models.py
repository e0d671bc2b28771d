"""
Recording domain models.

Pure Python dataclasses, no Qt imports. A Recording is produced once by the
EDF decoder and is read-only afterwards; it can be shared between any number
of viewers.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

import numpy as np


@dataclass(frozen=True)
class RecordingHeader:
    """Fixed 256-byte EDF header, with text fields trimmed."""
    version: str
    patient_id: str
    recording_id: str
    start_date: str
    start_time: str
    header_byte_count: int              # offset of the first data record
    record_count: int
    record_duration_seconds: float
    channel_count: int
    reserved: str = ""                  # "EDF+C"/"EDF+D" for EDF+ files, reported only

    @property
    def duration(self) -> float:
        """Total recording length in seconds."""
        return self.record_count * self.record_duration_seconds


@dataclass(frozen=True)
class ChannelDescriptor:
    """Per-signal metadata from the field-major signal header block."""
    label: str
    transducer_type: str
    physical_unit: str
    physical_min: float
    physical_max: float
    digital_min: int
    digital_max: int
    prefiltering: str
    samples_per_record: int

    def sampling_rate(self, record_duration_seconds: float) -> float:
        """Effective sampling rate in Hz (0 when the record duration is not positive)."""
        if record_duration_seconds <= 0:
            return 0.0
        return self.samples_per_record / record_duration_seconds

    def display_label(self, index: int) -> str:
        return self.label or f"Channel {index + 1}"


@dataclass(frozen=True)
class Channel:
    """One decoded signal: its descriptor and physical-unit samples."""
    descriptor: ChannelDescriptor
    samples: np.ndarray                 # float64, read-only

    @property
    def sample_count(self) -> int:
        return int(self.samples.shape[0])


@dataclass(frozen=True)
class Recording:
    """
    Decoded EDF recording.

    Every channel holds exactly samples_per_record * record_count samples;
    the decoder never builds a partial Recording.
    """
    header: RecordingHeader
    channels: Tuple[Channel, ...] = field(default_factory=tuple)

    @property
    def duration(self) -> float:
        return self.header.duration

    @property
    def channel_count(self) -> int:
        return len(self.channels)

    @property
    def channel_labels(self) -> list[str]:
        return [ch.descriptor.display_label(i) for i, ch in enumerate(self.channels)]

    def sampling_rate(self, index: int) -> float:
        """Sampling rate of channel `index`, or 0.0 when out of range."""
        if index < 0 or index >= len(self.channels):
            return 0.0
        return self.channels[index].descriptor.sampling_rate(self.header.record_duration_seconds)

    def sampling_rates(self) -> list[float]:
        return [self.sampling_rate(i) for i in range(len(self.channels))]

    def channel_by_label(self, label: str) -> Optional[Channel]:
        for ch in self.channels:
            if ch.descriptor.label == label:
                return ch
        return None
