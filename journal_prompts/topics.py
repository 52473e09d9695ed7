"""Topic extraction from the tagger's noun phrases."""

import logging
import re
from typing import List

from journal_prompts.config import MAX_TOPICS
from journal_prompts.taggers.base import PartOfSpeechTagger, Tag

logger = logging.getLogger(__name__)

# Terms carrying any of these tags are removed from noun phrases
EXCLUDED_TAGS = (
    Tag.PRONOUN,
    Tag.DETERMINER,
    Tag.PREPOSITION,
    Tag.CONJUNCTION,
    Tag.ADJECTIVE,
    Tag.ADVERB,
    Tag.VALUE,
    Tag.PROPER_NOUN,
    Tag.PERSON,
)

LINKING_VERBS = frozenset(
    ["is", "are", "was", "were", "be", "been", "being", "have", "has", "had", "do", "does", "did"]
)

# Pronoun-like words the tagger tends to mis-tag as nouns
PRONOUN_NOUNS = frozenset(
    [
        "it", "its", "he", "him", "she", "her", "they", "them", "we", "us",
        "his", "hers", "theirs", "ours", "yours", "mine",
        "this", "that", "these", "those",
        "what", "which", "who", "whom", "whose", "where", "when", "why", "how",
        "guy", "guys", "person", "people", "thing", "things", "stuff",
        "anyone", "anything", "everyone", "everything", "someone", "something",
        "nobody", "nothing", "somebody", "everybody",
    ]
)

# Adjectives, adverbs and temporal deictics sometimes mis-tagged as nouns
NON_TOPIC_WORDS = frozenset(
    [
        "great", "good", "bad", "nice", "fine", "okay", "well", "better", "best", "worst",
        "big", "small", "large", "little", "huge", "tiny", "long", "short", "high", "low",
        "new", "old", "young", "hot", "cold", "warm", "cool", "fast", "slow", "quick",
        "easy", "hard", "difficult", "simple", "complex", "important", "special", "normal",
        "today", "tomorrow", "yesterday", "now", "then", "here", "there", "tonight",
        "very", "really", "quite", "too", "much", "many", "more", "most", "less", "least",
        "lot", "lots", "alot",
    ]
)

_STRIP = re.compile(r"[.,!?;:\"'()\[\]‘’“”]")


def is_topic_word(word: str) -> bool:
    """Check a lowercase word against the closed non-topic lists."""
    return not (
        len(word) <= 2
        or word in LINKING_VERBS
        or word in PRONOUN_NOUNS
        or word in NON_TOPIC_WORDS
    )


class TopicFilter:
    """Extracts single-word topic nouns in encounter order."""

    def __init__(self, tagger: PartOfSpeechTagger, max_topics: int = MAX_TOPICS):
        self.tagger = tagger
        self.max_topics = max_topics

    def extract(self, text: str) -> List[str]:
        """Extract up to ``max_topics`` lowercase topic words.

        Args:
            text: Normalized text to analyze

        Returns:
            Distinct topics, first encountered first
        """
        phrases = self.tagger.noun_phrases(text, exclude=EXCLUDED_TAGS)

        topics: List[str] = []
        seen = set()
        for phrase in phrases:
            for raw in phrase.split():
                word = _STRIP.sub("", raw)
                lower = word.lower()
                if lower in seen or not is_topic_word(lower):
                    continue
                if self._hides_name(word):
                    continue
                seen.add(lower)
                topics.append(lower)
                if len(topics) >= self.max_topics:
                    return topics
        return topics

    def _hides_name(self, word: str) -> bool:
        """Re-tag a word in isolation to catch names inside noun phrases."""
        try:
            tokens = self.tagger.tag(word)
        except Exception as e:
            logger.debug(f"Isolated re-tag failed for {word!r}, keeping it: {e}")
            return False
        lower = word.lower()
        return any(
            t.text.lower() == lower and t.has(Tag.PROPER_NOUN, Tag.PERSON) for t in tokens
        )
