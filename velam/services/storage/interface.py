"""
Abstract Persistence Port

DESIGN DECISION: The ledger talks to storage through a tiny key-value
interface. This allows us to:
1. Keep the browser's localStorage model (one key per collection)
2. Use in-memory storage for testing
3. Swap to a JSON file or Google Sheets without touching ledger logic

The interface is intentionally simple - every save replaces the whole
collection stored under a key. There is no append or partial write.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

# A stored collection: JSON-array-of-flat-objects semantics
Collection = list[dict[str, Any]]


class PersistencePort(ABC):
    """
    Abstract interface for collection storage.

    Any storage implementation (memory, JSON files, Google Sheets)
    must implement these methods.
    """

    @abstractmethod
    def load(self, key: str) -> Optional[Collection]:
        """
        Load the collection stored under a key.

        Args:
            key: Collection key (e.g. 'velam_loans')

        Returns:
            The stored entries in their saved order, or None if the
            key has never been written

        Raises:
            StorageError: If the backend cannot be read
            CorruptDataError: If the stored payload cannot be decoded
        """
        pass

    @abstractmethod
    def save(self, key: str, value: Collection) -> None:
        """
        Replace the collection stored under a key.

        Args:
            key: Collection key
            value: The full collection, in order

        Raises:
            StorageError: If the write fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class CorruptDataError(StorageError):
    """Stored payload could not be decoded into ledger entries."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
