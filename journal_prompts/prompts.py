"""Prompt generation from extracted metadata."""

import hashlib
import logging
import re
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence

from journal_prompts.blacklist import Blacklist
from journal_prompts.config import DEFAULT_PROMPT_COUNT, DEFAULT_TONE, PROMPT_EXPIRY_DAYS
from journal_prompts.lifecycle import PromptLifecycleManager
from journal_prompts.schemas import ExtractedMetadata, Prompt, PromptType, Tone

logger = logging.getLogger(__name__)

# Entity-independent prompts shown when no personalized candidate remains
DEFAULT_PROMPTS = [
    "How are you feeling?",
    "What's on your mind?",
    "What did you do today?",
    "Who is on your mind?",
]

# Templates differ between tones so each tone renders its own text
PROMPT_TEMPLATES: Dict[str, Dict[PromptType, List[str]]] = {
    "cozy": {
        PromptType.PERSON: [
            "How's {entity} doing these days?",
            "Any cozy moments with {entity} lately?",
            "What's on your heart about {entity}?",
            "Anything new with {entity}? Tell me all about it.",
        ],
        PromptType.TOPIC: [
            "Tell me more about {entity}.",
            "What's been happening with {entity}?",
        ],
        PromptType.DATE: [
            "How did {entity} go?",
            "What made {entity} memorable?",
        ],
    },
    "neutral": {
        PromptType.PERSON: [
            "Tell me about {entity}.",
            "Anything happen with {entity}?",
            "What's new with {entity}?",
        ],
        PromptType.TOPIC: [
            "Write about {entity}.",
            "What happened with {entity}?",
        ],
        PromptType.DATE: [
            "What happened {entity}?",
            "Describe {entity}.",
        ],
    },
}

_ENTITY_ORDER = (PromptType.PERSON, PromptType.DATE, PromptType.TOPIC)


def generate_prompt_id(entity: str, prompt_type: PromptType) -> str:
    """Stable id from entity text and type; tone and template do not matter."""
    key = f"{prompt_type.value}:{entity.strip().lower()}"
    return f"prompt-{hashlib.sha1(key.encode('utf-8')).hexdigest()[:12]}"


def format_relative_date(date: datetime, now: datetime) -> str:
    """Render a date relative to now by calendar day."""
    days = (date.date() - now.date()).days
    if days == 0:
        return "today"
    if days == -1:
        return "yesterday"
    if days == 1:
        return "tomorrow"
    if days > 0:
        return f"in {days} days"
    return f"{abs(days)} days ago"


def uses_possessive(topic: str, source_text: Optional[str]) -> bool:
    """True when the source text refers to the topic as "my/our/your topic"."""
    if not source_text:
        return False
    pattern = rf"\b(?:my|our|your)\s+{re.escape(topic.lower())}\b"
    return re.search(pattern, source_text.lower()) is not None


class PromptGenerator:
    """Turns metadata into tone-rendered prompts, filtered by lifecycle state.

    Filtering order: drop blacklisted entities, drop used prompts, drop
    expired prompts, then fall back to filler prompts when nothing is left.
    ``generate_prompts`` never raises.
    """

    def __init__(
        self,
        lifecycle: Optional[PromptLifecycleManager] = None,
        blacklist: Optional[Blacklist] = None,
        expiry_days: int = PROMPT_EXPIRY_DAYS,
        entity_types: Sequence[PromptType] = (PromptType.PERSON,),
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.lifecycle = lifecycle
        self.blacklist = blacklist
        self.expiry_days = expiry_days
        self.entity_types = [t for t in _ENTITY_ORDER if t in set(entity_types)]
        self.clock = clock

    def generate_prompts(
        self,
        metadata: Optional[ExtractedMetadata],
        tone: Tone = DEFAULT_TONE,
        count: int = DEFAULT_PROMPT_COUNT,
        source_text: Optional[str] = None,
    ) -> List[Prompt]:
        """Generate up to ``count`` prompts for the metadata.

        Args:
            metadata: Aggregated metadata, or None when there is no source data
            tone: Template tone, "cozy" or "neutral"
            count: Maximum number of prompts
            source_text: Original text, used for possessive topic phrasing

        Returns:
            Personalized prompts, or filler prompts when none survive filtering
        """
        if count <= 0:
            return []
        if tone not in PROMPT_TEMPLATES:
            logger.warning(f"Unknown tone {tone!r}, using {DEFAULT_TONE!r}")
            tone = DEFAULT_TONE

        try:
            if metadata is None:
                return self.filler_prompts(count)

            candidates = self.build_candidates(metadata, tone, source_text)
            candidates = self._drop_blacklisted(candidates)
            if self.lifecycle is not None:
                candidates = self._apply_lifecycle(candidates)

            if not candidates:
                logger.debug("No personalized prompts left, using fillers")
                return self.filler_prompts(count)

            selected = candidates[:count]
            if self.lifecycle is not None:
                self.lifecycle.record_seen((p.id for p in selected), self.expiry_days)
            return selected

        except Exception as e:
            logger.warning(f"Prompt generation failed, using fillers: {e}")
            return self.filler_prompts(count)

    def build_candidates(
        self, metadata: ExtractedMetadata, tone: Tone, source_text: Optional[str] = None
    ) -> List[Prompt]:
        """Render one prompt per entity, people first, before any filtering."""
        templates = PROMPT_TEMPLATES[tone]
        now = self.clock()
        candidates: List[Prompt] = []
        seen_ids = set()

        def add(entity: str, display: str, prompt_type: PromptType) -> None:
            prompt_id = generate_prompt_id(entity, prompt_type)
            if prompt_id in seen_ids:
                return
            seen_ids.add(prompt_id)
            choices = templates[prompt_type]
            # Rotate templates within one batch for variety
            template = choices[len(candidates) % len(choices)]
            candidates.append(
                Prompt(
                    id=prompt_id,
                    text=template.format(entity=display),
                    type=prompt_type,
                    created_at=now,
                    entity=entity,
                )
            )

        for prompt_type in self.entity_types:
            if prompt_type == PromptType.PERSON:
                for person in metadata.people:
                    add(person, person, PromptType.PERSON)
            elif prompt_type == PromptType.DATE:
                for date in metadata.dates:
                    # Only past and present days make sense to write about
                    if date.date() <= now.date():
                        add(date.date().isoformat(), format_relative_date(date, now), PromptType.DATE)
            elif prompt_type == PromptType.TOPIC:
                for topic in metadata.topics:
                    display = f"your {topic}" if uses_possessive(topic, source_text) else topic
                    add(topic, display, PromptType.TOPIC)

        return candidates

    def filler_prompts(self, count: int) -> List[Prompt]:
        now = self.clock()
        return [
            Prompt(
                id=generate_prompt_id(text, PromptType.FILLER),
                text=text,
                type=PromptType.FILLER,
                created_at=now,
            )
            for text in DEFAULT_PROMPTS[:max(count, 0)]
        ]

    def _drop_blacklisted(self, candidates: List[Prompt]) -> List[Prompt]:
        if self.blacklist is None:
            return candidates
        blocked = set(self.blacklist.get())
        return [p for p in candidates if (p.entity or "").lower() not in blocked]

    def _apply_lifecycle(self, candidates: List[Prompt]) -> List[Prompt]:
        # Prompts inside their current period keep its start; expired ones start over
        known = self.lifecycle.active_first_seen_times(
            (p.id for p in candidates), self.expiry_days
        )
        candidates = [
            p.model_copy(update={"created_at": known[p.id]}) if p.id in known else p
            for p in candidates
        ]
        candidates = self.lifecycle.filter_used_prompts(candidates)
        return self.lifecycle.filter_expired_prompts(candidates, self.expiry_days)
