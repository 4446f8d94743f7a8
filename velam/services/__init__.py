"""Services package."""

from velam.services.storage import (
    ConnectionError,
    CorruptDataError,
    GoogleSheetsClient,
    GoogleSheetsStorage,
    InMemoryStorage,
    JsonFileStorage,
    PersistencePort,
    StorageError,
)

__all__ = [
    "ConnectionError",
    "CorruptDataError",
    "GoogleSheetsClient",
    "GoogleSheetsStorage",
    "InMemoryStorage",
    "JsonFileStorage",
    "PersistencePort",
    "StorageError",
]
