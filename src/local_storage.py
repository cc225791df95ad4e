"""
Durable key/value storage for the portal.

Values are plain strings, like a browser's localStorage. Every adapter exposes
get / set / remove; a missing key reads as None and reads never raise.
"""

import json
import os
import tempfile
from pathlib import Path

from loguru import logger


class MemoryStorage:
    """In-memory adapter, used by tests and as a fallback."""

    def __init__(self, initial=None):
        self._data = dict(initial or {})

    def get(self, key):
        return self._data.get(key)

    def set(self, key, value):
        self._data[key] = str(value)

    def remove(self, key):
        self._data.pop(key, None)

    def keys(self):
        return list(self._data)


class JsonFileStorage:
    """
    Adapter backed by a single JSON object on disk.

    The file is re-read on every access and rewritten synchronously on every
    mutation, so separate instances pointing at the same path stay in step.
    A missing or corrupt file reads as empty.
    """

    def __init__(self, path):
        self.path = Path(path)

    def _read(self):
        if not self.path.exists():
            return {}
        try:
            with open(self.path, mode="r", encoding="utf-8") as file:
                data = json.load(file)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable storage file {self.path}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Ignoring storage file {self.path}: expected a JSON object")
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _write(self, data):
        if self.path.parent and not self.path.parent.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent or ".", suffix=".tmp")
        try:
            with os.fdopen(fd, mode="w", encoding="utf-8") as file:
                json.dump(data, file, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def get(self, key):
        return self._read().get(key)

    def set(self, key, value):
        data = self._read()
        data[key] = str(value)
        self._write(data)

    def remove(self, key):
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    def keys(self):
        return list(self._read())


def read_json(storage, key, default=None):
    """
    Read and decode a JSON value from storage.

    Args:
        storage: Any storage adapter
        key: Storage key
        default: Returned when the key is absent or the value is not valid JSON

    Returns:
        Decoded value or default
    """
    raw = storage.get(key)
    if raw is None:
        return default
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.warning(f"Discarding malformed value stored under {key!r}: {e}")
        return default


def write_json(storage, key, value):
    storage.set(key, json.dumps(value))
