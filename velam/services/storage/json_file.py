"""
JSON File Storage Implementation

DESIGN DECISION: The local-disk analogue of the browser's localStorage.
Each key lives in its own `<key>.json` file holding a JSON array of flat
objects, so an export from the browser version can be dropped straight
into the data directory.

Writes go to a temporary file in the same directory and are then moved
over the old file, so a crash mid-write never leaves half a collection.
"""

import json
import os
import re
import tempfile
from pathlib import Path
from typing import Optional, Union

from velam.services.storage.interface import (
    Collection,
    CorruptDataError,
    PersistencePort,
    StorageError,
)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class JsonFileStorage(PersistencePort):
    """
    File-per-key persistence port.

    The data directory is created on first write.
    """

    def __init__(self, data_dir: Union[str, Path]):
        self._data_dir = Path(data_dir)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _path_for(self, key: str) -> Path:
        """Map a key to its file, refusing anything that could escape the directory."""
        if not _KEY_PATTERN.match(key) or key in {".", ".."}:
            raise StorageError(f"Invalid storage key: {key!r}")
        return self._data_dir / f"{key}.json"

    def load(self, key: str) -> Optional[Collection]:
        path = self._path_for(key)
        if not path.exists():
            return None

        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise CorruptDataError(f"Collection {key} is not valid JSON: {e}")
        except OSError as e:
            raise StorageError(f"Failed to read collection {key}: {e}")

        if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
            raise CorruptDataError(
                f"Collection {key} must be a JSON array of objects"
            )

        return data

    def save(self, key: str, value: Collection) -> None:
        path = self._path_for(key)

        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._data_dir,
                prefix=f".{key}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(value, f, ensure_ascii=False, indent=2)
                os.replace(tmp_name, path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Failed to save collection {key}: {e}")
