"""
Data management submodule: the YAML-backed store and its atomic file I/O.
"""

from .store import YAMLStore
from .io import atomic_write, load_document

__all__ = [
    'YAMLStore',
    'atomic_write',
    'load_document',
]
