"""Journal entry store on top of a key-value store."""

import json
import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from journal_prompts.config import ENTRIES_KEY
from journal_prompts.schemas import ExtractedMetadata, JournalEntry
from journal_prompts.stores.base import KeyValueStore

logger = logging.getLogger(__name__)


class EntryStore(ABC):
    """Supplies prior entries and accepts metadata updates."""

    @abstractmethod
    def list_entries(self) -> List[JournalEntry]:
        pass

    @abstractmethod
    def get_entry(self, entry_id: str) -> Optional[JournalEntry]:
        pass

    @abstractmethod
    def save_entry(self, entry: JournalEntry) -> None:
        """Insert or replace an entry by id."""
        pass

    @abstractmethod
    def update_metadata(self, entry_id: str, metadata: ExtractedMetadata) -> bool:
        """Merge extraction results into a saved entry.

        Returns:
            False when the entry no longer exists
        """
        pass


class KeyValueEntryStore(EntryStore):
    """Keeps all entries as one JSON list under a single key."""

    def __init__(self, store: KeyValueStore, key: str = ENTRIES_KEY):
        self.store = store
        self.key = key

    def _load(self) -> List[JournalEntry]:
        raw = self.store.get(self.key)
        if not raw:
            return []
        try:
            return [JournalEntry.model_validate(item) for item in json.loads(raw)]
        except (ValueError, TypeError) as e:
            logger.error(f"Stored entries under {self.key} are unreadable: {e}")
            return []

    def _dump(self, entries: List[JournalEntry]) -> None:
        payload = [entry.model_dump(mode="json") for entry in entries]
        self.store.set(self.key, json.dumps(payload))

    def list_entries(self) -> List[JournalEntry]:
        return self._load()

    def get_entry(self, entry_id: str) -> Optional[JournalEntry]:
        for entry in self._load():
            if entry.id == entry_id:
                return entry
        return None

    def save_entry(self, entry: JournalEntry) -> None:
        entries = self._load()
        for index, existing in enumerate(entries):
            if existing.id == entry.id:
                entries[index] = entry
                break
        else:
            entries.append(entry)
        self._dump(entries)

    def update_metadata(self, entry_id: str, metadata: ExtractedMetadata) -> bool:
        entries = self._load()
        for index, entry in enumerate(entries):
            if entry.id == entry_id:
                entries[index] = entry.with_metadata(metadata)
                self._dump(entries)
                return True
        logger.warning(f"Entry {entry_id} not found; dropping metadata update")
        return False
