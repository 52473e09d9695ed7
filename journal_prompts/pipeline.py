"""Async orchestration of extraction, saving and prompt assembly."""

import asyncio
import logging
from datetime import datetime
from typing import Optional, Set

from journal_prompts.config import DEFAULT_PROMPT_COUNT, DEFAULT_TONE, TOPIC_SUGGESTION_CAP
from journal_prompts.errors import StoreUnavailable
from journal_prompts.extract import MetadataExtractor
from journal_prompts.lifecycle import PromptLifecycleManager
from journal_prompts.prompts import PromptGenerator
from journal_prompts.schemas import ExtractedMetadata, JournalEntry, PromptPanel, Tone
from journal_prompts.stores.entries import EntryStore
from journal_prompts.suggestions import TopicSuggestionBuilder
from journal_prompts.windows import people_window, saved_entries, topic_window

logger = logging.getLogger(__name__)


async def run_extraction(
    extractor: MetadataExtractor, text: str, strict: bool = False
) -> ExtractedMetadata:
    """Run extraction on text without blocking the event loop.

    Args:
        extractor: Metadata extractor
        text: Entry content
        strict: Propagate failures, including degraded phases, instead of
            returning empty metadata

    Returns:
        Extracted metadata, empty on failure when not strict
    """
    try:
        # Tagging is CPU-bound, run it in a worker thread
        return await asyncio.to_thread(extractor.extract, text, strict=strict)
    except Exception as e:
        if strict:
            raise
        logger.warning(f"Extraction failed: {e}")
        return ExtractedMetadata()


class DeferredExtraction:
    """Background extraction owned by one open document.

    Results are merged into the entry store only while the document is
    open; once ``close`` is called any late result is dropped.
    """

    def __init__(self, store: EntryStore, extractor: MetadataExtractor):
        self.store = store
        self.extractor = extractor
        self.closed = False
        self._tasks: Set[asyncio.Task] = set()

    def schedule(self, entry_id: str, text: str) -> asyncio.Task:
        if self.closed:
            raise RuntimeError("Cannot schedule extraction on a closed document")
        task = asyncio.create_task(self._run(entry_id, text))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, entry_id: str, text: str) -> Optional[ExtractedMetadata]:
        try:
            metadata = await run_extraction(self.extractor, text, strict=True)
        except Exception as e:
            # Left pending so the windows extract it again later
            logger.warning(f"Extraction for {entry_id} failed, metadata left pending: {e}")
            return None
        if self.closed:
            logger.info(f"Document closed before extraction finished, dropping result for {entry_id}")
            return None
        try:
            await asyncio.to_thread(self.store.update_metadata, entry_id, metadata)
        except StoreUnavailable as e:
            logger.warning(f"Failed to merge metadata for {entry_id}: {e}")
            return None
        logger.debug(f"Merged metadata for {entry_id}")
        return metadata

    async def close(self) -> None:
        """Close the document, cancelling pending extractions."""
        self.closed = True
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)


async def save_entry(
    store: EntryStore,
    entry: JournalEntry,
    extractor: MetadataExtractor,
    lifecycle: Optional[PromptLifecycleManager] = None,
    draft_id: Optional[str] = None,
    document: Optional[DeferredExtraction] = None,
) -> Optional[asyncio.Task]:
    """Persist an entry immediately and merge its metadata in the background.

    Drafts are saved as-is: no extraction runs and inserted prompts stay
    temporarily used. Saving a non-draft commits the draft's inserted
    prompts as permanently used.

    Args:
        store: Entry store
        entry: Entry to save
        extractor: Metadata extractor
        lifecycle: Prompt lifecycle manager, if prompts are tracked
        draft_id: Editor session whose inserted prompts belong to this entry
        document: Open document that owns the background extraction

    Returns:
        The background extraction task, or None for drafts
    """
    prompt_ids = list(entry.prompt_ids)
    if lifecycle is not None and draft_id is not None:
        for prompt_id in sorted(lifecycle.inserted_prompt_ids(draft_id)):
            if prompt_id not in prompt_ids:
                prompt_ids.append(prompt_id)

    pending = entry.model_copy(
        update={
            "updated_at": datetime.now(),
            "prompt_ids": prompt_ids,
            "extracted_people": None,
            "extracted_topics": None,
            "extracted_dates": None,
        }
    )
    await asyncio.to_thread(store.save_entry, pending)

    if entry.draft:
        logger.info(f"Saved draft {entry.id}")
        return None

    if lifecycle is not None and draft_id is not None:
        committed = lifecycle.commit_draft(draft_id)
        logger.info(f"Saved entry {entry.id}, {len(committed)} prompt(s) marked used")

    owner = document or DeferredExtraction(store, extractor)
    return owner.schedule(entry.id, entry.content)


async def rebuild_all_metadata(store: EntryStore, extractor: MetadataExtractor) -> dict:
    """Re-extract cached metadata for every saved entry.

    Use after extraction heuristics change; drafts are skipped.

    Returns:
        Dictionary with 'updated' and 'failed' counts
    """
    updated = 0
    failed = 0
    entries = await asyncio.to_thread(store.list_entries)

    for entry in saved_entries(entries):
        try:
            metadata = await asyncio.to_thread(extractor.extract, entry.content, strict=True)
            if await asyncio.to_thread(store.update_metadata, entry.id, metadata):
                updated += 1
            else:
                failed += 1
        except Exception as e:
            logger.error(f"Metadata rebuild failed for entry {entry.id}: {e}")
            failed += 1

    logger.info(f"Metadata rebuild complete: updated={updated}, failed={failed}")
    return {"updated": updated, "failed": failed}


async def build_prompt_panel(
    store: EntryStore,
    extractor: MetadataExtractor,
    generator: PromptGenerator,
    suggestion_builder: TopicSuggestionBuilder,
    tone: Tone = DEFAULT_TONE,
    count: int = DEFAULT_PROMPT_COUNT,
    now: Optional[datetime] = None,
    exclude_id: Optional[str] = None,
) -> PromptPanel:
    """Build prompts and topic chips from the rolling windows.

    Args:
        store: Entry store supplying prior entries
        extractor: Extractor for entries without cached metadata
        generator: Prompt generator
        suggestion_builder: Topic suggestion builder
        tone: Prompt tone
        count: Maximum number of prompts
        now: Reference time for the person window
        exclude_id: Entry currently being edited, left out of both windows

    Returns:
        PromptPanel with prompts and topic suggestions
    """
    now = now or datetime.now()
    try:
        entries = await asyncio.to_thread(store.list_entries)
    except StoreUnavailable as e:
        logger.warning(f"Entry store unavailable, building panel without history: {e}")
        entries = []

    people_meta, topic_meta = await asyncio.gather(
        asyncio.to_thread(people_window, entries, extractor, now, exclude_id=exclude_id),
        asyncio.to_thread(topic_window, entries, extractor, exclude_id=exclude_id),
    )

    prompts = generator.generate_prompts(
        people_meta if not people_meta.is_empty() else None, tone, count
    )
    suggestions = suggestion_builder.get_topic_suggestions(
        topic_meta,
        TOPIC_SUGGESTION_CAP,
        exclude_names=[*people_meta.people, *topic_meta.people],
    )
    return PromptPanel(prompts=prompts, topic_suggestions=suggestions)
