"""Persistence for pages, databases, templates and settings."""

from .backends import KeyValueBackend, MemoryBackend, DuckDBBackend, StorageError
from .manager import (
    PersistenceStore, ImportResult,
    PAGES_KEY, DATABASES_KEY, TEMPLATES_KEY, SETTINGS_KEY
)

__all__ = [
    "KeyValueBackend",
    "MemoryBackend",
    "DuckDBBackend",
    "StorageError",
    "PersistenceStore",
    "ImportResult",
    "PAGES_KEY",
    "DATABASES_KEY",
    "TEMPLATES_KEY",
    "SETTINGS_KEY"
]
