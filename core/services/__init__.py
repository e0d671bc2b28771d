# Service layer - orchestrates domain operations
from .navigation_service import NavigationService, NavigationResult
from .pan_service import PanService
from .file_load_service import FileLoadService
from . import render_service

__all__ = [
    'NavigationService',
    'NavigationResult',
    'PanService',
    'FileLoadService',
    'render_service',
]
