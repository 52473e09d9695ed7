"""Rolling windows of prior entries used as prompt source pools.

Person prompts draw from the last few days of saved entries for continuity;
topic suggestions draw from only the most recent entries to stay fresh.
"""

import logging
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from journal_prompts.config import PERSON_WINDOW_DAYS, TOPIC_WINDOW_ENTRIES
from journal_prompts.extract import MetadataExtractor
from journal_prompts.schemas import ExtractedMetadata, JournalEntry

logger = logging.getLogger(__name__)


def _naive(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment
    return moment.astimezone().replace(tzinfo=None)


def saved_entries(
    entries: Iterable[JournalEntry], exclude_id: Optional[str] = None
) -> List[JournalEntry]:
    """Non-draft entries, newest first."""
    kept = [e for e in entries if not e.draft and e.id != exclude_id]
    return sorted(kept, key=lambda e: _naive(e.created_at), reverse=True)


def entry_metadata(entry: JournalEntry, extractor: MetadataExtractor) -> ExtractedMetadata:
    """Cached metadata for an entry, extracting when nothing was cached."""
    cached = entry.cached_metadata()
    if cached is not None:
        return cached
    return extractor.extract(entry.content)


def people_window(
    entries: Iterable[JournalEntry],
    extractor: MetadataExtractor,
    now: datetime,
    days: int = PERSON_WINDOW_DAYS,
    exclude_id: Optional[str] = None,
) -> ExtractedMetadata:
    """Aggregate metadata over saved entries from the last ``days`` days."""
    cutoff = _naive(now) - timedelta(days=days)
    result = ExtractedMetadata()
    for entry in saved_entries(entries, exclude_id):
        if _naive(entry.created_at) < cutoff:
            break
        result = result.merge(entry_metadata(entry, extractor))
    return result


def topic_window(
    entries: Iterable[JournalEntry],
    extractor: MetadataExtractor,
    size: int = TOPIC_WINDOW_ENTRIES,
    exclude_id: Optional[str] = None,
) -> ExtractedMetadata:
    """Aggregate metadata over the ``size`` most recent saved entries."""
    result = ExtractedMetadata()
    for entry in saved_entries(entries, exclude_id)[:size]:
        result = result.merge(entry_metadata(entry, extractor))
    return result
