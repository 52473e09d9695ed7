"""spaCy-backed part-of-speech tagger."""

import logging
import threading
from functools import lru_cache
from typing import Dict, Iterable, List, Set

import spacy

from journal_prompts.config import SPACY_MODEL
from journal_prompts.errors import TaggerFailure
from journal_prompts.taggers.base import PartOfSpeechTagger, Tag, TaggedToken

logger = logging.getLogger(__name__)

# Module-level state for lazy loading, one pipeline per model name
_models: Dict[str, spacy.Language] = {}
_models_lock = threading.Lock()

_POS_TAGS: Dict[str, Set[Tag]] = {
    "NOUN": {Tag.NOUN},
    "PROPN": {Tag.NOUN, Tag.PROPER_NOUN},
    "VERB": {Tag.VERB},
    "AUX": {Tag.VERB},
    "ADJ": {Tag.ADJECTIVE},
    "ADV": {Tag.ADVERB},
    "PRON": {Tag.PRONOUN},
    "DET": {Tag.DETERMINER},
    "ADP": {Tag.PREPOSITION},
    "CCONJ": {Tag.CONJUNCTION},
    "SCONJ": {Tag.CONJUNCTION},
    "NUM": {Tag.VALUE},
}


def _get_nlp(model: str) -> spacy.Language:
    """Lazy-load a spaCy model with error handling."""
    nlp = _models.get(model)
    if nlp is None:
        with _models_lock:
            nlp = _models.get(model)
            if nlp is None:  # Double-check after acquiring lock
                try:
                    nlp = spacy.load(model)
                except Exception as e:
                    raise TaggerFailure(
                        f"Failed to load spaCy model '{model}'. "
                        f"Ensure it's installed: python -m spacy download {model}. "
                        f"Error: {e}"
                    ) from e
                _models[model] = nlp
    return nlp


def _token_tags(token) -> Set[Tag]:
    tags = set(_POS_TAGS.get(token.pos_, ()))
    if token.ent_type_ == "PERSON":
        tags.add(Tag.PERSON)
    return tags


class SpacyTagger(PartOfSpeechTagger):
    """Tagger built on a spaCy pipeline's POS tags and named entities."""

    def __init__(self, model: str = SPACY_MODEL, cache_size: int = 256):
        self.model = model
        # Carrier sentences repeat across candidates, so parses are memoized
        self._parse = lru_cache(maxsize=cache_size)(self._parse_uncached)

    def _parse_uncached(self, text: str):
        nlp = _get_nlp(self.model)
        try:
            return nlp(text)
        except Exception as e:
            raise TaggerFailure(f"spaCy failed to parse text: {e}") from e

    def tag(self, text: str) -> List[TaggedToken]:
        doc = self._parse(text)
        return [
            TaggedToken(text=token.text, tags=_token_tags(token))
            for token in doc
            if not token.is_space
        ]

    def people(self, text: str) -> List[str]:
        doc = self._parse(text)
        return [ent.text for ent in doc.ents if ent.label_ == "PERSON"]

    def noun_phrases(self, text: str, exclude: Iterable[Tag] = ()) -> List[str]:
        excluded = set(exclude)
        doc = self._parse(text)
        phrases = []
        for chunk in doc.noun_chunks:
            words = [
                token.text
                for token in chunk
                if not token.is_punct
                and not token.is_space
                and not (_token_tags(token) & excluded)
            ]
            if words:
                phrases.append(" ".join(words))
        return phrases

    def date_phrases(self, text: str) -> List[str]:
        doc = self._parse(text)
        return [ent.text for ent in doc.ents if ent.label_ == "DATE"]
