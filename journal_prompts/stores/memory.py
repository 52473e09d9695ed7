"""In-process key-value store."""

from typing import Dict, Optional

from journal_prompts.stores.base import KeyValueStore


class MemoryStore(KeyValueStore):
    """Dictionary-backed store for tests and single-process use."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)
