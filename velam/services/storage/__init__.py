"""
Storage Services Package

Provides the abstract persistence port and its concrete implementations.
The JSON file backend is the default; Google Sheets and in-memory
storage plug in behind the same interface.
"""

from velam.services.storage.interface import (
    Collection,
    ConnectionError,
    CorruptDataError,
    PersistencePort,
    StorageError,
)
from velam.services.storage.memory import InMemoryStorage
from velam.services.storage.json_file import JsonFileStorage
from velam.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsStorage,
)

__all__ = [
    # Interface
    "Collection",
    "PersistencePort",
    # Exceptions
    "ConnectionError",
    "CorruptDataError",
    "StorageError",
    # Implementations
    "GoogleSheetsClient",
    "GoogleSheetsStorage",
    "InMemoryStorage",
    "JsonFileStorage",
]
