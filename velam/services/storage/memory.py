"""In-memory storage, used by tests and throwaway sessions."""

import copy
from typing import Optional

from velam.services.storage.interface import Collection, PersistencePort


class InMemoryStorage(PersistencePort):
    """
    Dict-backed persistence port.

    Collections are deep-copied on the way in and out so callers can
    never mutate what is "on disk".
    """

    def __init__(self, initial: Optional[dict[str, Collection]] = None):
        self._data: dict[str, Collection] = copy.deepcopy(initial) if initial else {}
        self.save_count = 0

    def load(self, key: str) -> Optional[Collection]:
        if key not in self._data:
            return None
        return copy.deepcopy(self._data[key])

    def save(self, key: str, value: Collection) -> None:
        self._data[key] = copy.deepcopy(value)
        self.save_count += 1

    def keys(self) -> list[str]:
        return list(self._data)
