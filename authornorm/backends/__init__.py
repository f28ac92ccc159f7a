"""Persistence backends for the learning engine."""

from authornorm.backends.base import DeletableBackend, MappingBackend
from authornorm.backends.memory import MemoryBackend
from authornorm.backends.sqlite import SqliteBackend

__all__ = [
    "DeletableBackend",
    "MappingBackend",
    "MemoryBackend",
    "SqliteBackend",
]
