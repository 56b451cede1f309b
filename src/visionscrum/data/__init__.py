"""
Data management submodule: storage of projects on disk.
"""

from .core import DataCore, BoardContext
from .store import ProjectStore
from .io import atomic_write, load_model, DATA_JSON, DATA_YAML

__all__ = [
    'DataCore',
    'BoardContext',
    'ProjectStore',
    'atomic_write',
    'load_model',
    'DATA_JSON',
    'DATA_YAML',
]
