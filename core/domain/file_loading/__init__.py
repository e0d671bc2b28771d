# File loading domain models
from .models import RecordingLoadResult

__all__ = [
    'RecordingLoadResult',
]
