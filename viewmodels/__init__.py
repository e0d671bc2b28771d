# ViewModel layer - Qt integration for domain/service layers
from .file_load_viewmodel import FileLoadViewModel
from .viewer_viewmodel import ViewerViewModel

__all__ = [
    'FileLoadViewModel',
    'ViewerViewModel',
]
