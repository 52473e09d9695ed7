"""Store exports."""
from journal_prompts.stores.base import KeyValueStore
from journal_prompts.stores.entries import EntryStore, KeyValueEntryStore
from journal_prompts.stores.memory import MemoryStore

__all__ = ["EntryStore", "KeyValueEntryStore", "KeyValueStore", "MemoryStore"]
