"""Base interface for part-of-speech taggers."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Iterable, List, Set

from pydantic import BaseModel, Field


class Tag(str, Enum):
    """Grammatical and entity classes a tagger can assign to a token."""

    NOUN = "Noun"
    PROPER_NOUN = "ProperNoun"
    PERSON = "Person"
    VERB = "Verb"
    ADJECTIVE = "Adjective"
    ADVERB = "Adverb"
    PRONOUN = "Pronoun"
    DETERMINER = "Determiner"
    PREPOSITION = "Preposition"
    CONJUNCTION = "Conjunction"
    VALUE = "Value"


class TaggedToken(BaseModel):
    """One token of tagged text.

    Proper nouns also carry ``Tag.NOUN``; a common noun is a token tagged
    ``NOUN`` without ``PROPER_NOUN``.
    """

    text: str
    tags: Set[Tag] = Field(default_factory=set)

    def has(self, *tags: Tag) -> bool:
        return any(tag in self.tags for tag in tags)

    @property
    def is_common_noun(self) -> bool:
        return Tag.NOUN in self.tags and not self.has(Tag.PROPER_NOUN, Tag.PERSON)


class PartOfSpeechTagger(ABC):
    """Abstract base class for tagging capabilities."""

    @abstractmethod
    def tag(self, text: str) -> List[TaggedToken]:
        """Tag every token of the text.

        Args:
            text: Text to tag

        Returns:
            Tokens in document order, punctuation included
        """
        pass

    @abstractmethod
    def people(self, text: str) -> List[str]:
        """Extract person spans in document order.

        Args:
            text: Text to analyze

        Returns:
            Surface text of every detected person span
        """
        pass

    @abstractmethod
    def noun_phrases(self, text: str, exclude: Iterable[Tag] = ()) -> List[str]:
        """Extract noun phrases, dropping terms carrying any excluded tag.

        Args:
            text: Text to analyze
            exclude: Tags whose terms are removed from each phrase

        Returns:
            Non-empty phrases in document order
        """
        pass

    @abstractmethod
    def date_phrases(self, text: str) -> List[str]:
        """Extract natural-language date phrases in document order.

        Args:
            text: Text to analyze

        Returns:
            Surface text of every date phrase
        """
        pass
