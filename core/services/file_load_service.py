"""
File loading service: business logic around EDF decoding.

Pure Python, no Qt imports. Turns decode results and failures into the text
shown by the view layer. Used by FileLoadViewModel.
"""

from typing import Tuple

from core.domain.recording import (
    DecodeError,
    DegenerateChannelRangeError,
    InvalidDimensionsError,
    MalformedFieldError,
    Recording,
    TruncatedDataError,
)


class FileLoadService:
    """Business logic for file loading operations."""

    def build_recording_summary(self, recording: Recording, file_name: str) -> str:
        """
        Build the file information block for a freshly loaded recording.

        Returns a multi-line string: file, patient/recording ids, start,
        duration, channel count, labels and per-channel sampling rates.
        """
        header = recording.header
        rates = ", ".join(f"{r:.1f} Hz" for r in recording.sampling_rates())
        labels = ", ".join(ch.descriptor.label for ch in recording.channels)

        lines = [
            f"File: {file_name}",
            f"Patient ID: {header.patient_id or 'N/A'}",
            f"Recording ID: {header.recording_id or 'N/A'}",
            f"Start Date: {header.start_date} {header.start_time}",
            f"Duration: {recording.duration:.2f} seconds",
            f"Number of Channels: {recording.channel_count}",
            f"Channels: {labels}",
            f"Sampling Rates: {rates}",
        ]
        return "\n".join(lines)

    def describe_decode_error(self, exc: Exception, file_name: str) -> Tuple[str, str]:
        """
        Map a decode failure to a (title, message) pair for the error dialog.

        Non-DecodeError exceptions (e.g. OSError while reading) get a generic title.
        """
        if isinstance(exc, TruncatedDataError):
            title = "Truncated EDF file"
        elif isinstance(exc, MalformedFieldError):
            title = "Malformed EDF header"
        elif isinstance(exc, DegenerateChannelRangeError):
            title = "Invalid channel range"
        elif isinstance(exc, InvalidDimensionsError):
            title = "Invalid EDF dimensions"
        elif isinstance(exc, DecodeError):
            title = "EDF decode error"
        else:
            title = "Load error"
        return title, f"Failed to parse EDF file {file_name}:\n\n{exc}"
