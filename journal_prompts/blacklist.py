"""Case-insensitive word blacklist applied after extraction."""

import json
import logging
from typing import Iterable, List

from journal_prompts.config import BLACKLIST_KEY
from journal_prompts.errors import StoreUnavailable
from journal_prompts.stores.base import KeyValueStore

logger = logging.getLogger(__name__)


def normalize_word(word: str) -> str:
    return word.strip().lower()


class Blacklist:
    """Blocked words persisted as a JSON list in a key-value store.

    Every operation is a single read-modify-write. When the store is
    unavailable reads return an empty list and writes are skipped.
    """

    def __init__(self, store: KeyValueStore, key: str = BLACKLIST_KEY):
        self.store = store
        self.key = key

    def get(self) -> List[str]:
        try:
            raw = self.store.get(self.key)
        except StoreUnavailable as e:
            logger.warning(f"Blacklist unavailable, treating as empty: {e}")
            return []
        if not raw:
            return []
        try:
            words = json.loads(raw)
        except ValueError as e:
            logger.error(f"Stored blacklist is unreadable: {e}")
            return []
        return [normalize_word(w) for w in words if isinstance(w, str)]

    def _save(self, words: List[str]) -> None:
        try:
            self.store.set(self.key, json.dumps(words))
        except StoreUnavailable as e:
            logger.warning(f"Blacklist unavailable, change not saved: {e}")

    def add(self, word: str) -> None:
        normalized = normalize_word(word)
        words = self.get()
        if normalized and normalized not in words:
            words.append(normalized)
            self._save(words)

    def remove(self, word: str) -> None:
        normalized = normalize_word(word)
        words = self.get()
        if normalized in words:
            self._save([w for w in words if w != normalized])

    def clear(self) -> None:
        try:
            self.store.remove(self.key)
        except StoreUnavailable as e:
            logger.warning(f"Blacklist unavailable, not cleared: {e}")

    def is_blacklisted(self, word: str) -> bool:
        return normalize_word(word) in self.get()

    def filter(self, words: Iterable[str]) -> List[str]:
        """Drop blacklisted words, reading the list once."""
        blocked = set(self.get())
        return [w for w in words if normalize_word(w) not in blocked]
