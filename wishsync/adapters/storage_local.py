from __future__ import annotations

import copy
import json
import os
import re
import tempfile
from typing import Any, Dict

from wishsync.domain.ports import KeyValueStorePort

_KEY_RE = re.compile(r"[^0-9A-Za-z_.-]+")


class StorageLocal(KeyValueStorePort):
    """Durable device-local key-value store: one JSON file per key."""

    def __init__(self, root_dir: str = ".") -> None:
        self.root = root_dir

    def _path(self, key: str) -> str:
        safe = _KEY_RE.sub("_", str(key)).strip("._")
        if not safe:
            raise ValueError(f"Invalid storage key: {key!r}")
        return os.path.join(self.root, f"{safe}.json")

    def get(self, key: str) -> Any:
        path = self._path(key)
        if not os.path.exists(path):
            return None
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    def set(self, key: str, value: Any) -> None:
        path = self._path(key)
        os.makedirs(self.root, exist_ok=True)
        # write to a sibling temp file, then swap it in atomically
        fd, tmp = tempfile.mkstemp(prefix=f"{os.path.basename(path)}.", suffix=".tmp", dir=self.root)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(value, f, ensure_ascii=False, indent=2)
            os.replace(tmp, path)
        except BaseException:
            if os.path.exists(tmp):
                os.remove(tmp)
            raise

    def remove(self, key: str) -> None:
        path = self._path(key)
        if os.path.exists(path):
            os.remove(path)


class MemoryStorage(KeyValueStorePort):
    """Process-local store for ephemeral sessions and tests."""

    def __init__(self, initial: Dict[str, Any] | None = None) -> None:
        self._data: Dict[str, Any] = copy.deepcopy(dict(initial or {}))

    def get(self, key: str) -> Any:
        return copy.deepcopy(self._data.get(key))

    def set(self, key: str, value: Any) -> None:
        # reject anything the durable store could not persist
        self._data[key] = json.loads(json.dumps(value))

    def remove(self, key: str) -> None:
        self._data.pop(key, None)
