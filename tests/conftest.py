"""Shared fixtures: a scriptable fake tagger and in-memory stores."""

import re
from datetime import datetime

import pytest

from journal_prompts.errors import TaggerFailure
from journal_prompts.stores import MemoryStore
from journal_prompts.taggers.base import PartOfSpeechTagger, Tag, TaggedToken

_TOKEN = re.compile(r"[^\W_]+(?:[-'][^\W_]+)*|[^\w\s]")

N = {Tag.NOUN}
PN = {Tag.NOUN, Tag.PROPER_NOUN}

BASE_LEXICON = {
    "i": {Tag.PRONOUN},
    "he": {Tag.PRONOUN},
    "she": {Tag.PRONOUN},
    "his": {Tag.PRONOUN},
    "her": {Tag.PRONOUN},
    "my": {Tag.PRONOUN},
    "we": {Tag.PRONOUN},
    "it": {Tag.PRONOUN},
    "the": {Tag.DETERMINER},
    "a": {Tag.DETERMINER},
    "met": {Tag.VERB},
    "is": {Tag.VERB},
    "was": {Tag.VERB},
    "were": {Tag.VERB},
    "went": {Tag.VERB},
    "talking": {Tag.VERB},
    "had": {Tag.VERB},
    "ate": {Tag.VERB},
    "at": {Tag.PREPOSITION},
    "with": {Tag.PREPOSITION},
    "to": {Tag.PREPOSITION},
    "and": {Tag.CONJUNCTION},
    "because": {Tag.CONJUNCTION},
    "there": {Tag.ADVERB},
    "too": {Tag.ADVERB},
    "then": {Tag.ADVERB},
    "yesterday": {Tag.ADVERB},
    "today": {Tag.ADVERB},
    "great": {Tag.ADJECTIVE},
    "two": {Tag.VALUE},
    "person": N,
    "house": N,
    "pizza": N,
    "garden": N,
    "work": N,
    "project": N,
    "dinner": N,
    "thing": N,
}


class FakeTagger(PartOfSpeechTagger):
    """Deterministic tagger driven by a word lexicon.

    Words in ``people`` are tagged person + proper noun and consecutive ones
    form a person span. ``overrides`` maps an exact sentence to per-word
    tags for context-specific verdicts. Method names in ``fail`` raise
    TaggerFailure.
    """

    def __init__(self, lexicon=None, people=(), dates=(), overrides=None, fail=()):
        self.lexicon = {**BASE_LEXICON, **{k.lower(): set(v) for k, v in (lexicon or {}).items()}}
        self.person_words = {p.lower() for p in people}
        self.dates = list(dates)
        self.overrides = {
            sentence: {w.lower(): set(tags) for w, tags in words.items()}
            for sentence, words in (overrides or {}).items()
        }
        self.fail = set(fail)
        self.calls = []

    def _check(self, method, text):
        self.calls.append((method, text))
        if method in self.fail:
            raise TaggerFailure(f"{method} failed")

    def _tags(self, word, sentence):
        lower = word.lower()
        override = self.overrides.get(sentence, {})
        if lower in override:
            return set(override[lower])
        if lower in self.person_words:
            return {Tag.NOUN, Tag.PROPER_NOUN, Tag.PERSON}
        if not word[0].isalnum():
            return set()
        return set(self.lexicon.get(lower, N))

    def tag(self, text):
        self._check("tag", text)
        return [TaggedToken(text=w, tags=self._tags(w, text)) for w in _TOKEN.findall(text)]

    def people(self, text):
        self._check("people", text)
        spans, current = [], []
        for token in self.tag(text):
            if Tag.PERSON in token.tags:
                current.append(token.text)
            elif current:
                spans.append(" ".join(current))
                current = []
        if current:
            spans.append(" ".join(current))
        return spans

    def noun_phrases(self, text, exclude=()):
        self._check("noun_phrases", text)
        excluded = set(exclude)
        phrases, current = [], []
        for token in self.tag(text) + [TaggedToken(text=".")]:
            if Tag.NOUN in token.tags:
                current.append(token)
                continue
            words = [t.text for t in current if not (t.tags & excluded)]
            if words:
                phrases.append(" ".join(words))
            current = []
        return phrases

    def date_phrases(self, text):
        self._check("date_phrases", text)
        lowered = text.lower()
        found = [(lowered.find(d.lower()), d) for d in self.dates if d.lower() in lowered]
        return [d for _, d in sorted(found)]


@pytest.fixture
def fake_tagger():
    """Fake tagger that knows Henry, Sarah and Zayn as people."""
    return FakeTagger(people=["Henry", "Sarah", "Zayn"])


@pytest.fixture
def kv_store():
    return MemoryStore()


@pytest.fixture
def now():
    return datetime(2026, 3, 10, 12, 0, 0)
