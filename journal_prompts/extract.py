"""Metadata extraction: people, topics and dates from journal text."""

import logging
from typing import Dict, List, Optional

from journal_prompts.blacklist import Blacklist
from journal_prompts.dates import DateParser
from journal_prompts.errors import ExtractionDegraded
from journal_prompts.names import NameValidator, normalize_names
from journal_prompts.schemas import ExtractedMetadata
from journal_prompts.taggers import PartOfSpeechTagger, get_tagger
from journal_prompts.text import normalize_text
from journal_prompts.topics import TopicFilter

logger = logging.getLogger(__name__)


def _drop_name_fragments(names: List[str]) -> List[str]:
    """Drop single words already covered by an accepted multi-word name."""
    covered = {
        word.lower() for name in names if " " in name for word in name.split()
    }
    return [name for name in names if " " in name or name.lower() not in covered]


class MetadataExtractor:
    """Runs the extraction phases over one piece of text.

    Each phase degrades to an empty result on tagger failure while the
    other phases continue. ``extract`` never raises unless ``strict`` is set,
    which callers that cache results use so a partial result is never stored.
    """

    def __init__(
        self,
        tagger: Optional[PartOfSpeechTagger] = None,
        blacklist: Optional[Blacklist] = None,
        validator: Optional[NameValidator] = None,
        topic_filter: Optional[TopicFilter] = None,
        date_parser: Optional[DateParser] = None,
    ):
        self.tagger = tagger or get_tagger()
        self.blacklist = blacklist
        self.validator = validator or NameValidator(self.tagger)
        self.topic_filter = topic_filter or TopicFilter(self.tagger)
        self.date_parser = date_parser or DateParser(self.tagger)

    def extract(self, text: str, strict: bool = False) -> ExtractedMetadata:
        """Extract people, topics and dates from editor content.

        Args:
            text: Entry content, possibly containing markup
            strict: Raise instead of returning a partial result when a phase fails

        Returns:
            ExtractedMetadata, empty for blank input

        Raises:
            ExtractionDegraded: In strict mode, when any phase failed
        """
        if not text or not text.strip():
            return ExtractedMetadata()

        plain = normalize_text(text)
        if not plain:
            return ExtractedMetadata()

        failed: List[str] = []
        people = self._run_phase("people", self.extract_people, plain, failed)
        topics = self._run_phase("topics", self.topic_filter.extract, plain, failed)
        dates = self._run_phase("dates", self.date_parser.parse, plain, failed)
        if strict and failed:
            raise ExtractionDegraded(failed)

        if self.blacklist is not None:
            people = self.blacklist.filter(people)
            topics = self.blacklist.filter(topics)

        # A name is never also a topic
        name_words = set()
        for name in people:
            name_words.add(name.lower())
            name_words.update(word.lower() for word in name.split())
        topics = [topic for topic in topics if topic not in name_words]

        logger.debug(
            f"Extracted {len(people)} people, {len(topics)} topics, {len(dates)} dates"
        )
        return ExtractedMetadata(people=people, topics=topics, dates=dates)

    def extract_people(self, plain: str) -> List[str]:
        """Validate capitalized tokens and bulk person spans as names."""
        tokens = self.tagger.tag(plain)
        spans = [span for span in self.tagger.people(plain) if span[:1].isupper()]
        candidates = spans + [t.text for t in tokens if self.validator.is_candidate(t)]

        verdicts: Dict[str, bool] = {}
        accepted = []
        for candidate in candidates:
            key = candidate.lower()
            if key not in verdicts:
                verdicts[key] = self.validator.is_valid_name(candidate, plain)
            if verdicts[key]:
                accepted.append(candidate)

        return _drop_name_fragments(normalize_names(accepted))

    def _run_phase(self, name, phase, plain: str, failed: List[str]) -> list:
        try:
            return phase(plain)
        except Exception as e:
            logger.warning(f"Extraction phase '{name}' failed: {e}")
            failed.append(name)
            return []
