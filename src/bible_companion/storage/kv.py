"""
Key-value persistence.

Async string storage, one value per key. Collections are stored as whole
serialized blobs under fixed keys.
"""

import asyncio
import logging
import os
from pathlib import Path
import re
import tempfile
from typing import Optional

logger = logging.getLogger(__name__)


class KeyValueStore:
    """Interface for async key-value storage."""

    async def get_item(self, key: str) -> Optional[str]:
        raise NotImplementedError

    async def set_item(self, key: str, value: str) -> None:
        raise NotImplementedError

    async def remove_item(self, key: str) -> None:
        raise NotImplementedError


class MemoryKeyValueStore(KeyValueStore):
    """Dictionary-backed store for tests and ephemeral sessions."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self.data: dict[str, str] = dict(initial or {})

    async def get_item(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self.data[key] = value

    async def remove_item(self, key: str) -> None:
        self.data.pop(key, None)


class FileKeyValueStore(KeyValueStore):
    """
    One file per key inside a directory.

    Writes go to a temporary file that is then renamed over the target, so a
    crash mid-write leaves the previous value intact. Errors propagate as
    OSError.

    Usage:
        store = FileKeyValueStore("data/storage")
        await store.set_item("@bible_app_notes", "[]")
    """

    def __init__(self, directory: Path | str):
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        name = re.sub(r"[^A-Za-z0-9_.-]", "_", key).strip("._") or "_"
        return self.directory / f"{name}.json"

    async def get_item(self, key: str) -> Optional[str]:
        return await asyncio.to_thread(self._read, self.path_for(key))

    async def set_item(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._write, self.path_for(key), value)

    async def remove_item(self, key: str) -> None:
        await asyncio.to_thread(self.path_for(key).unlink, True)

    @staticmethod
    def _read(path: Path) -> Optional[str]:
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def _write(self, path: Path, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.directory, prefix=".tmp-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp, path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise
        logger.debug("Wrote %d bytes to %s", len(value), path)
