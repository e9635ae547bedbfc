"""Key-value store backends for cached grades and settings.

A store holds one JSON-compatible document. ``get(None)`` returns the
whole document, ``get(key)`` returns ``{key: value}`` or ``{}`` when the
key is absent, and ``set(items)`` replaces the given top-level keys while
leaving the others alone.
"""

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Protocol, Union

import aiofiles

from gradetools.errors import StoreError

_LOGGER = logging.getLogger(__name__)

Keys = Optional[Union[str, Iterable[str]]]


class KeyValueStore(Protocol):
    async def get(self, keys: Keys = None) -> Dict[str, Any]: ...

    async def set(self, items: Dict[str, Any]) -> None: ...


def _select(data: Dict[str, Any], keys: Keys) -> Dict[str, Any]:
    if keys is None:
        return copy.deepcopy(data)
    if isinstance(keys, str):
        keys = [keys]
    return {key: copy.deepcopy(data[key]) for key in keys if key in data}


class MemoryStore:
    """In-process store, mainly for tests and one-shot runs."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = copy.deepcopy(initial) if initial else {}
        self.set_calls = 0

    async def get(self, keys: Keys = None) -> Dict[str, Any]:
        return _select(self._data, keys)

    async def set(self, items: Dict[str, Any]) -> None:
        self.set_calls += 1
        self._data.update(copy.deepcopy(items))


class JsonFileStore:
    """Store backed by a single JSON file.

    A missing or unreadable file is treated as an empty store. Each ``set``
    rewrites the file in one write.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    async def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as handle:
                raw = await handle.read()
        except OSError as exc:
            raise StoreError(f"Cannot read store file {self.path}: {exc}") from exc
        if not raw.strip():
            return {}
        try:
            data = json.loads(raw)
        except ValueError:
            _LOGGER.warning("Store file %s is not valid JSON, ignoring it", self.path)
            return {}
        if not isinstance(data, dict):
            _LOGGER.warning("Store file %s does not hold an object, ignoring it", self.path)
            return {}
        return data

    async def get(self, keys: Keys = None) -> Dict[str, Any]:
        return _select(await self._read(), keys)

    async def set(self, items: Dict[str, Any]) -> None:
        data = await self._read()
        data.update(items)
        text = json.dumps(data, ensure_ascii=False, indent=2)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(self.path, "w", encoding="utf-8") as handle:
                await handle.write(text)
        except OSError as exc:
            raise StoreError(f"Cannot write store file {self.path}: {exc}") from exc
