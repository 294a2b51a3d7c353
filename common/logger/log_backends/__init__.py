"""
Log persistence backends.

Selected through LOG_BACKEND; see registry.py.
"""

from .base import LogBackend
from .file_backend import FileBackend
from .registry import get_active_backends, get_all_metrics

__all__ = [
    "LogBackend",
    "FileBackend",
    "get_active_backends",
    "get_all_metrics",
]
