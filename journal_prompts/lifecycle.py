"""Prompt lifecycle: available, temporarily used, permanently used, expired.

Permanently used prompts and first-seen times are persisted in a JSON ledger
in the key-value store. Temporary marks for prompts placed in an open draft
live only in memory and are either committed on save or dropped on discard.
An available prompt expires once its period runs out; generating it again
starts a new period. Only permanent use is final.
"""

import json
import logging
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional, Set

from journal_prompts.config import PROMPT_EXPIRY_DAYS, USED_PROMPTS_KEY
from journal_prompts.errors import StoreUnavailable
from journal_prompts.schemas import Prompt, PromptState, PromptUseRecord
from journal_prompts.stores.base import KeyValueStore

logger = logging.getLogger(__name__)


class PromptLifecycleManager:
    """Tracks which prompts may still be shown."""

    def __init__(
        self,
        store: KeyValueStore,
        key: str = USED_PROMPTS_KEY,
        expiry_days: int = PROMPT_EXPIRY_DAYS,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.store = store
        self.key = key
        self.expiry_days = expiry_days
        self.clock = clock
        self._inserted: Dict[str, Set[str]] = {}

    def _load(self) -> Dict[str, PromptUseRecord]:
        try:
            raw = self.store.get(self.key)
        except StoreUnavailable as e:
            logger.warning(f"Prompt ledger unavailable, treating as empty: {e}")
            return {}
        if not raw:
            return {}
        try:
            return {
                prompt_id: PromptUseRecord.model_validate(record)
                for prompt_id, record in json.loads(raw).items()
            }
        except (ValueError, TypeError, AttributeError) as e:
            logger.error(f"Stored prompt ledger is unreadable: {e}")
            return {}

    def _save(self, records: Dict[str, PromptUseRecord]) -> None:
        payload = {pid: record.model_dump(mode="json") for pid, record in records.items()}
        try:
            self.store.set(self.key, json.dumps(payload))
        except StoreUnavailable as e:
            logger.warning(f"Prompt ledger unavailable, change not saved: {e}")

    def record_seen(
        self, prompt_ids: Iterable[str], days: Optional[int] = None
    ) -> Dict[str, datetime]:
        """Persist a first-seen time for prompts shown now.

        New ids and ids whose available period has run out start a fresh
        period, so an expired prompt is reusable once it is generated again.
        Other expired available records are pruned from the ledger.

        Returns:
            First-seen time of every given id
        """
        days = self.expiry_days if days is None else days
        records = self._load()
        now = self.clock()
        changed = False
        seen = {}
        for prompt_id in prompt_ids:
            record = records.get(prompt_id)
            if record is None or self._is_reusable(record, days):
                records[prompt_id] = PromptUseRecord(prompt_id=prompt_id, first_seen_at=now)
                changed = True
            seen[prompt_id] = records[prompt_id].first_seen_at

        stale = [
            prompt_id
            for prompt_id, record in records.items()
            if prompt_id not in seen
            and not self._is_inserted(prompt_id)
            and self._is_reusable(record, days)
        ]
        for prompt_id in stale:
            del records[prompt_id]

        if changed or stale:
            self._save(records)
        return seen

    def active_first_seen_times(
        self, prompt_ids: Iterable[str], days: Optional[int] = None
    ) -> Dict[str, datetime]:
        """First-seen times of ids whose current period has not expired."""
        days = self.expiry_days if days is None else days
        records = self._load()
        return {
            pid: records[pid].first_seen_at
            for pid in prompt_ids
            if pid in records and not self._is_reusable(records[pid], days)
        }

    def first_seen_times(self, prompt_ids: Iterable[str]) -> Dict[str, datetime]:
        """First-seen times of ids already in the ledger, without recording."""
        records = self._load()
        return {pid: records[pid].first_seen_at for pid in prompt_ids if pid in records}

    def first_seen_at(self, prompt_id: str) -> Optional[datetime]:
        return self.first_seen_times([prompt_id]).get(prompt_id)

    def _is_inserted(self, prompt_id: str) -> bool:
        return any(prompt_id in ids for ids in self._inserted.values())

    def _is_expired(self, first_seen_at: datetime, days: int) -> bool:
        # A prompt exactly at the threshold is still valid
        return self.clock() - first_seen_at > timedelta(days=days)

    def _is_reusable(self, record: PromptUseRecord, days: int) -> bool:
        return record.state != PromptState.PERMANENTLY_USED and self._is_expired(
            record.first_seen_at, days
        )

    def get_record(self, prompt_id: str) -> PromptUseRecord:
        """Current lifecycle record, with the state resolved for this moment."""
        record = self._load().get(prompt_id)
        if record is None:
            record = PromptUseRecord(prompt_id=prompt_id, first_seen_at=self.clock())
        if record.state == PromptState.PERMANENTLY_USED:
            return record
        if self._is_inserted(prompt_id):
            state = PromptState.TEMPORARILY_USED
        elif self._is_expired(record.first_seen_at, self.expiry_days):
            state = PromptState.EXPIRED
        else:
            state = PromptState.AVAILABLE
        return record.model_copy(update={"state": state})

    def state_of(self, prompt_id: str) -> PromptState:
        return self.get_record(prompt_id).state

    def mark_prompt_as_used(self, prompt_id: str) -> None:
        """Mark a prompt permanently used. Repeated calls change nothing."""
        records = self._load()
        record = records.get(prompt_id)
        if record is not None and record.state == PromptState.PERMANENTLY_USED:
            return
        first_seen_at = record.first_seen_at if record else self.clock()
        records[prompt_id] = PromptUseRecord(
            prompt_id=prompt_id,
            state=PromptState.PERMANENTLY_USED,
            first_seen_at=first_seen_at,
        )
        self._save(records)
        logger.debug(f"Prompt {prompt_id} permanently used")

    def insert_prompt(self, draft_id: str, prompt_id: str) -> None:
        """Mark a prompt temporarily used by an open draft."""
        self._inserted.setdefault(draft_id, set()).add(prompt_id)

    def remove_prompt(self, draft_id: str, prompt_id: str) -> None:
        """Return a prompt removed from a draft before save to available."""
        self._inserted.get(draft_id, set()).discard(prompt_id)

    def inserted_prompt_ids(self, draft_id: str) -> Set[str]:
        return set(self._inserted.get(draft_id, ()))

    def commit_draft(self, draft_id: str) -> List[str]:
        """Persist every prompt inserted in a saved draft as permanently used."""
        prompt_ids = sorted(self._inserted.pop(draft_id, set()))
        for prompt_id in prompt_ids:
            self.mark_prompt_as_used(prompt_id)
        return prompt_ids

    def discard_draft(self, draft_id: str) -> None:
        """Drop a draft's temporary marks; nothing is persisted."""
        dropped = self._inserted.pop(draft_id, set())
        if dropped:
            logger.debug(f"Draft {draft_id} discarded, released {len(dropped)} prompt(s)")

    def filter_used_prompts(self, prompts: List[Prompt]) -> List[Prompt]:
        """Drop permanently used prompts and prompts placed in an open draft.

        Filler prompts are never filtered.
        """
        records = self._load()
        kept = []
        for prompt in prompts:
            if not prompt.is_filler:
                record = records.get(prompt.id)
                if record is not None and record.state == PromptState.PERMANENTLY_USED:
                    continue
                if self._is_inserted(prompt.id):
                    continue
            kept.append(prompt)
        return kept

    def filter_expired_prompts(self, prompts: List[Prompt], days: Optional[int] = None) -> List[Prompt]:
        """Drop available prompts older than ``days`` (default: expiry_days).

        Only available prompts expire. Fillers and prompts inserted in an
        open draft are kept regardless of age.
        """
        days = self.expiry_days if days is None else days
        return [
            prompt
            for prompt in prompts
            if prompt.is_filler
            or self._is_inserted(prompt.id)
            or not self._is_expired(prompt.created_at, days)
        ]
