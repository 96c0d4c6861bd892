"""
Key-value storage backends for Pagesmith.

A backend is the durable medium behind the PersistenceStore: a flat namespace
of string keys, each holding one JSON document. The DuckDB backend keeps the
namespace in a single table of a local database file.
"""

import duckdb
import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional


class StorageError(Exception):
    """Raised when the storage medium cannot complete a read or write."""


class KeyValueBackend(ABC):
    """
    Abstract base class for all storage media.

    Each backend maps string keys to string values. Writes replace the whole
    value; there are no partial writes.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Returns:
            The stored string, or None if nothing is stored
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Store a value under a key, replacing any previous value.

        Raises:
            StorageError: If the medium refuses the write
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a key if present."""
        pass

    @abstractmethod
    def keys(self) -> List[str]:
        """List all stored keys."""
        pass


class MemoryBackend(KeyValueBackend):
    """
    In-process backend, optionally limited to a total size like a browser's
    local storage quota.
    """

    def __init__(self, quota_bytes: Optional[int] = None):
        """
        Initialize the memory backend.

        Args:
            quota_bytes: Maximum total size of keys and values, or None for no limit
        """
        self.quota_bytes = quota_bytes
        self._data: Dict[str, str] = {}

    def _size_with(self, key: str, value: str) -> int:
        total = len(key.encode('utf-8')) + len(value.encode('utf-8'))
        for existing_key, existing_value in self._data.items():
            if existing_key != key:
                total += len(existing_key.encode('utf-8')) + len(existing_value.encode('utf-8'))
        return total

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.quota_bytes is not None and self._size_with(key, value) > self.quota_bytes:
            raise StorageError(f"Storage quota of {self.quota_bytes} bytes exceeded writing '{key}'")
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> List[str]:
        return sorted(self._data)


class DuckDBBackend(KeyValueBackend):
    """
    Stores the key-value namespace in a DuckDB database file.
    """

    def __init__(self, db_path: str = "pagesmith.db"):
        """
        Initialize the DuckDB backend.

        Args:
            db_path: Path to the DuckDB database file
        """
        self.db_path = db_path
        self.connection = None
        self._lock = threading.Lock()

    def connect(self):
        """Establish connection to the database and create the table."""
        try:
            self.connection = duckdb.connect(self.db_path)
        except duckdb.Error as e:
            raise StorageError(f"Failed to open database {self.db_path}: {e}")
        self.initialize_database()

    def disconnect(self):
        """Close the database connection."""
        if self.connection:
            self.connection.close()
            self.connection = None

    def __enter__(self):
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.disconnect()

    def initialize_database(self):
        """
        Create the key-value table if it doesn't exist.
        """
        if not self.connection:
            raise RuntimeError("Database connection not established")

        self.connection.execute("""
            CREATE TABLE IF NOT EXISTS kv_store (
                key VARCHAR PRIMARY KEY,
                value VARCHAR NOT NULL,
                saved_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

    def get(self, key: str) -> Optional[str]:
        if not self.connection:
            raise RuntimeError("Database connection not established")

        with self._lock:
            try:
                result = self.connection.execute(
                    "SELECT value FROM kv_store WHERE key = ?", [key]
                ).fetchone()
            except duckdb.Error as e:
                raise StorageError(f"Failed to read '{key}': {e}")

        return result[0] if result else None

    def set(self, key: str, value: str) -> None:
        if not self.connection:
            raise RuntimeError("Database connection not established")

        with self._lock:
            try:
                self.connection.execute("""
                    INSERT INTO kv_store (key, value, saved_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT (key) DO UPDATE SET
                        value = excluded.value,
                        saved_at = excluded.saved_at
                """, [key, value, datetime.now()])
            except duckdb.Error as e:
                raise StorageError(f"Failed to write '{key}': {e}")

        logging.debug(f"Stored {len(value)} characters under '{key}'")

    def delete(self, key: str) -> None:
        if not self.connection:
            raise RuntimeError("Database connection not established")

        with self._lock:
            try:
                self.connection.execute("DELETE FROM kv_store WHERE key = ?", [key])
            except duckdb.Error as e:
                raise StorageError(f"Failed to delete '{key}': {e}")

    def keys(self) -> List[str]:
        if not self.connection:
            raise RuntimeError("Database connection not established")

        with self._lock:
            results = self.connection.execute(
                "SELECT key FROM kv_store ORDER BY key"
            ).fetchall()

        return [row[0] for row in results]
