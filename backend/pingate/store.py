"""Local key-value store backends."""

import asyncio
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, Optional, Union

from .exceptions import StoreFailureError

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """
    Async string-keyed store.

    Every backend raises StoreFailureError for I/O problems. Writes are
    last-write-wins; there are no multi-key transactions.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    async def remove(self, key: str) -> None:
        ...

    async def multi_remove(self, keys: Iterable[str]) -> None:
        for key in keys:
            await self.remove(key)


class MemoryKeyValueStore(KeyValueStore):
    """Dict-backed store. Contents are lost when the process exits."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)

    async def multi_remove(self, keys: Iterable[str]) -> None:
        for key in keys:
            self._data.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        """Return a copy of the stored values."""
        return dict(self._data)


class JsonFileKeyValueStore(KeyValueStore):
    """
    Store backed by a single JSON object file.

    Blocking file I/O runs in a worker thread. Each write replaces the file
    atomically (temp file + os.replace), so a crash never leaves a
    half-written file behind.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, ValueError) as e:
            raise StoreFailureError(f"Cannot read store file {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StoreFailureError(f"Store file {self.path} does not contain an object")
        return data

    def _write_all(self, data: dict[str, str]) -> None:
        directory = self.path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=f".{self.path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(data, fh, indent=2, sort_keys=True)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise StoreFailureError(f"Cannot write store file {self.path}: {e}") from e

    def _get(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def _set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def _remove_many(self, keys: list[str]) -> None:
        data = self._read_all()
        removed = [key for key in keys if data.pop(key, None) is not None]
        if removed:
            self._write_all(data)

    async def get(self, key: str) -> Optional[str]:
        return await asyncio.to_thread(self._get, key)

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._set, key, value)
        logger.debug(f"Stored key {key} in {self.path}")

    async def remove(self, key: str) -> None:
        await asyncio.to_thread(self._remove_many, [key])

    async def multi_remove(self, keys: Iterable[str]) -> None:
        await asyncio.to_thread(self._remove_many, list(keys))
