"""
JSON File Storage: infrastructure adapter persisting slots on disk.

Implements StorageBackend with one ``<key>.json`` file per slot.
"""

import logging
import os
import tempfile
from pathlib import Path

from eduquest.domain.constants import STORAGE_FILE_SUFFIX
from eduquest.domain.srs.ports import StorageBackend

logger = logging.getLogger(__name__)


class JsonFileStorage(StorageBackend):
    """
    Stores each slot as a file in ``directory``.

    Writes go to a temporary file in the same directory and are moved into
    place with ``os.replace``, so readers see either the old or the new table.
    Concurrent writers are not coordinated: the last write wins.
    """

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key in (".", ".."):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}{STORAGE_FILE_SUFFIX}"

    def get_item(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set_item(self, key: str, value: str) -> None:
        path = self.path_for(key)
        self.directory.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug(f"Wrote {len(value)} bytes to {path}")

    def remove_item(self, key: str) -> None:
        self.path_for(key).unlink(missing_ok=True)
