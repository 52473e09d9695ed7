"""Display-only topic suggestions."""

import logging
from typing import Iterable, List, Optional

from journal_prompts.blacklist import Blacklist
from journal_prompts.config import TOPIC_SUGGESTION_CAP
from journal_prompts.schemas import ExtractedMetadata, TopicSuggestion
from journal_prompts.taggers.base import PartOfSpeechTagger, Tag
from journal_prompts.topics import is_topic_word

logger = logging.getLogger(__name__)

DEFAULT_TOPICS = ["family", "friends", "work", "health", "gratitude", "goals"]


class TopicSuggestionBuilder:
    """Builds topic chips that never collide with a person name."""

    def __init__(
        self,
        tagger: Optional[PartOfSpeechTagger] = None,
        blacklist: Optional[Blacklist] = None,
    ):
        self.tagger = tagger
        self.blacklist = blacklist

    def get_topic_suggestions(
        self,
        metadata: Optional[ExtractedMetadata],
        cap: int = TOPIC_SUGGESTION_CAP,
        exclude_names: Iterable[str] = (),
    ) -> List[TopicSuggestion]:
        """Get up to ``cap`` (at most 8) topic suggestions.

        Args:
            metadata: Metadata from the topic window, may be None
            cap: Maximum number of suggestions
            exclude_names: Person names from either aggregation window

        Returns:
            Suggestions, or the default topics when nothing survives
        """
        cap = max(0, min(cap, TOPIC_SUGGESTION_CAP))
        names = {name.lower().strip() for name in exclude_names}
        if metadata is not None:
            names.update(person.lower().strip() for person in metadata.people)
        names.update(word for name in list(names) for word in name.split())
        blocked = set(self.blacklist.get()) if self.blacklist is not None else set()

        def allowed(topic: str) -> bool:
            lower = topic.lower().strip()
            return lower not in names and lower not in blocked

        topics = metadata.topics if metadata is not None else []
        chosen = []
        for topic in topics:
            lower = topic.lower().strip()
            if lower in {c.lower() for c in chosen}:
                continue
            if not is_topic_word(lower) or not allowed(lower) or self._is_likely_name(topic):
                continue
            chosen.append(lower)
            if len(chosen) >= cap:
                break

        if not chosen:
            chosen = [topic for topic in DEFAULT_TOPICS if allowed(topic)][:cap]

        return [TopicSuggestion(word=topic.capitalize(), entity=topic) for topic in chosen]

    def _is_likely_name(self, word: str) -> bool:
        """Catch lowercase names that were not extracted as people."""
        if self.tagger is None:
            return False
        lowered = word.lower().strip()
        sentence = f"I met {word} yesterday."
        try:
            if any(p.lower().strip() == lowered for p in self.tagger.people(sentence)):
                return True
            return any(
                t.text.lower() == lowered and t.has(Tag.PROPER_NOUN, Tag.PERSON)
                for t in self.tagger.tag(sentence)
            )
        except Exception as e:
            logger.debug(f"Name check failed for topic {word!r}: {e}")
            return False
