"""
File loading domain models.

Pure Python dataclasses, no Qt imports. These represent the results
of file loading operations and are passed between service, viewmodel,
and view layers.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from core.domain.recording import Recording


@dataclass
class RecordingLoadResult:
    """Result from decoding a single EDF buffer or file."""
    recording: Recording
    source_name: str
    summary: str
    source_path: Optional[Path] = None  # None when decoded from an in-memory buffer
    load_duration_seconds: float = 0.0
