"""Person-name validation by contextual re-tagging votes.

The underlying tagger both over- and under-fires on isolated words, so a
candidate is re-embedded into fixed carrier sentences that force
disambiguating grammar and the tagger's verdicts are tallied. Tokens the
votes cannot settle fall back to a positional check against relational
indicator words in the original text. False negatives are preferred over
false positives.
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from journal_prompts.taggers.base import PartOfSpeechTagger, Tag, TaggedToken

logger = logging.getLogger(__name__)

# Grammatical function words that can never be names
FUNCTION_WORDS = frozenset(
    [
        # prepositions
        "on", "in", "at", "to", "from", "with", "about", "after", "before",
        "during", "until", "for", "by", "under", "over", "through", "between",
        "among", "into", "onto", "upon", "of", "off", "near", "without",
        # conjunctions
        "and", "or", "but", "so", "yet", "nor", "because", "although",
        "though", "since", "if", "unless", "while", "when", "then",
        # determiners
        "the", "a", "an", "this", "that", "these", "those", "some", "any",
        "each", "every", "either", "neither", "both", "all",
        # pronouns
        "i", "me", "my", "mine", "myself", "you", "your", "yours", "yourself",
        "he", "him", "his", "himself", "she", "her", "hers", "herself", "it",
        "its", "itself", "we", "us", "our", "ours", "ourselves", "they",
        "them", "their", "theirs", "themselves",
        # common adverbs
        "not", "very", "too", "just", "only", "also", "even", "still",
        "already", "there", "here", "now", "really",
    ]
)

CARRIER_SENTENCES = (
    "I met {token} yesterday.",
    "{token} is a person.",
    "I was talking with {token}.",
)

# Words and phrases that usually precede a person in journal prose
RELATIONAL_INDICATORS = (
    "met",
    "with",
    "called",
    "texted",
    "emailed",
    "saw",
    "visited",
    "spoke to",
    "spoke with",
    "talked to",
    "talked with",
    "talking to",
    "talking with",
    "went with",
    "hung out with",
    "hanging out with",
    "jumped on",
)
_INDICATOR_WORDS = frozenset(
    word for indicator in RELATIONAL_INDICATORS for word in indicator.split()
)

_DISQUALIFYING_TAGS = (Tag.VERB, Tag.ADJECTIVE, Tag.ADVERB)

_PUNCTUATION = re.compile(r"[.,!?;:\"'`()\[\]{}‘’“”]")
_POSSESSIVE = re.compile(r"['’]s\b", re.IGNORECASE)
_NAME_WORD = re.compile(r"[^\W\d_]+(?:-[^\W\d_]+)*")

MAX_CANDIDATE_LENGTH = 20
MAX_UNSPACED_NAME_LENGTH = 25


def clean_token(token: str) -> str:
    """Strip punctuation, quotes and a possessive suffix; collapse spaces."""
    text = _POSSESSIVE.sub("", token)
    text = _PUNCTUATION.sub("", text)
    return " ".join(text.split())


@dataclass
class VoteTally:
    """Votes collected for one token across all carrier sentences."""

    name_votes: int = 0
    noun_votes: int = 0
    disqualified: bool = False

    @property
    def accepted(self) -> bool:
        if self.disqualified:
            return False
        return self.name_votes >= 2 or (self.name_votes > 0 and self.noun_votes == 0)


def _find_span(tokens: Sequence[TaggedToken], words: List[str]) -> Optional[List[TaggedToken]]:
    size = len(words)
    for start in range(len(tokens) - size + 1):
        window = tokens[start:start + size]
        if [t.text.lower() for t in window] == words:
            return list(window)
    return None


class CarrierVote:
    """Re-tag a token inside carrier sentences and tally the verdicts.

    Per carrier: +2 name votes when the tagger's person detector returns the
    token, +1 name vote when it is tagged a proper noun, +1 noun vote when it
    is tagged a common noun. A verb, adjective or adverb tag in any carrier
    disqualifies the token.
    """

    def __init__(self, tagger: PartOfSpeechTagger, carriers: Sequence[str] = CARRIER_SENTENCES):
        self.tagger = tagger
        self.carriers = tuple(carriers)

    def tally(self, token: str) -> VoteTally:
        result = VoteTally()
        lowered = token.lower()
        words = lowered.split()

        for carrier in self.carriers:
            sentence = carrier.format(token=token)

            detected = self.tagger.people(sentence)
            if any(person.lower().strip() == lowered for person in detected):
                result.name_votes += 2

            span = _find_span(self.tagger.tag(sentence), words)
            if span is None:
                continue
            if all(t.has(Tag.PROPER_NOUN) for t in span):
                result.name_votes += 1
            elif all(t.is_common_noun for t in span):
                result.noun_votes += 1
            if any(t.has(*_DISQUALIFYING_TAGS) for t in span):
                result.disqualified = True

        return result


def follows_indicator(token: str, text: str) -> bool:
    """Check whether the token follows a relational indicator in the text.

    The token may come right after the indicator or one filler word later,
    as long as the filler is not itself an indicator word.
    """
    target = re.escape(token.lower())
    lowered = text.lower()
    for indicator in RELATIONAL_INDICATORS:
        phrase = r"\s+".join(re.escape(word) for word in indicator.split())
        pattern = re.compile(rf"\b{phrase}\s+(?:(\w+)\s+)?{target}\b")
        for match in pattern.finditer(lowered):
            filler = match.group(1)
            if filler is None or filler not in _INDICATOR_WORDS:
                return True
    return False


class NameValidator:
    """Decides whether a candidate token is a person name."""

    def __init__(self, tagger: PartOfSpeechTagger, vote: Optional[CarrierVote] = None):
        self.tagger = tagger
        self.vote = vote or CarrierVote(tagger)

    def is_valid_name(self, token: str, full_text: str) -> bool:
        clean = clean_token(token)
        if len(clean) <= 1 or clean.lower() in FUNCTION_WORDS:
            return False

        try:
            tally = self.vote.tally(clean)
        except Exception as e:
            logger.debug(f"Carrier vote failed for {clean!r}: {e}")
            return False

        if tally.disqualified:
            return False
        if tally.accepted:
            return True
        return follows_indicator(clean, full_text)

    def is_candidate(self, token: TaggedToken) -> bool:
        """Pre-screen a token from the tagged document.

        Only capitalized letter/hyphen words that the document context does
        not already mark as grammatical or as a common noun are candidates.
        """
        text = clean_token(token.text)
        if not (2 <= len(text) <= MAX_CANDIDATE_LENGTH):
            return False
        if not _NAME_WORD.fullmatch(text) or not text[0].isupper():
            return False
        if text.lower() in FUNCTION_WORDS:
            return False
        if token.has(Tag.PRONOUN, Tag.DETERMINER, *_DISQUALIFYING_TAGS):
            return False
        return not token.is_common_noun


def normalize_name(raw: str) -> Optional[str]:
    """Normalize an accepted name for display, or None to discard it."""
    clean = clean_token(raw)
    if len(clean) <= 1:
        return None
    # A long unspaced token is a mis-joined phrase, not a name
    if len(clean) > MAX_UNSPACED_NAME_LENGTH and " " not in clean:
        return None

    seen = set()
    words = []
    for word in clean.split():
        if not _NAME_WORD.fullmatch(word):
            continue
        titled = "-".join(part[:1].upper() + part[1:].lower() for part in word.split("-"))
        if titled.lower() not in seen:
            seen.add(titled.lower())
            words.append(titled)

    name = " ".join(words)
    return name if len(name) > 1 else None


def normalize_names(names: Iterable[str]) -> List[str]:
    """Normalize names and deduplicate them case-insensitively, first seen wins."""
    seen = set()
    result = []
    for raw in names:
        name = normalize_name(raw)
        if name is None or name.lower() in seen:
            continue
        seen.add(name.lower())
        result.append(name)
    return result
