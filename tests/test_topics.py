"""Tests for topic extraction."""

import pytest

from journal_prompts.taggers.base import Tag
from journal_prompts.topics import TopicFilter, is_topic_word
from tests.conftest import PN, FakeTagger


@pytest.mark.parametrize(
    "word,expected",
    [
        ("house", True),
        ("pizza", True),
        ("it", False),
        ("guy", False),
        ("person", False),
        ("was", False),
        ("today", False),
        ("good", False),
        ("lot", False),
        ("ox", False),
    ],
)
def test_is_topic_word(word, expected):
    """Test the closed non-topic lists and the short-word cut-off."""
    assert is_topic_word(word) is expected


def test_extract_keeps_encounter_order_and_lowercases(fake_tagger):
    """Test topics come back lowercase in the order they appear."""
    topics = TopicFilter(fake_tagger).extract("Pizza at the house, then Garden work.")

    assert topics == ["pizza", "house", "garden", "work"]


def test_extract_deduplicates(fake_tagger):
    """Test repeated topics are reported once."""
    topics = TopicFilter(fake_tagger).extract("The house. A house. My house")

    assert topics == ["house"]


def test_extract_drops_names_and_pronoun_nouns(fake_tagger):
    """Test proper nouns, people and pronoun-like nouns never become topics."""
    topics = TopicFilter(fake_tagger).extract("Henry had a thing with the person at work")

    assert topics == ["work"]


def test_extract_caps_topic_count():
    """Test no more than max_topics are returned."""
    words = ["alpha", "bravo", "charlie", "delta", "echo", "foxtrot"]
    topics = TopicFilter(FakeTagger(), max_topics=3).extract(" ".join(words))

    assert topics == ["alpha", "bravo", "charlie"]


def test_isolated_retag_removes_hidden_name():
    """Test a word tagged a noun in context but a name alone is dropped."""
    tagger = FakeTagger(overrides={"Jasper": {"jasper": PN}})

    topics = TopicFilter(tagger).extract("garden Jasper dinner")

    assert topics == ["garden", "dinner"]


def test_isolated_retag_failure_keeps_word():
    """Test a failing isolated re-tag keeps the candidate topic."""

    class FlakyTagger(FakeTagger):
        def tag(self, text):
            if " " not in text:
                raise RuntimeError("tagger crashed")
            return super().tag(text)

    topics = TopicFilter(FlakyTagger()).extract("garden dinner")

    assert topics == ["garden", "dinner"]


def test_excluded_tags_stripped_from_phrases():
    """Test adjectives inside noun phrases are not reported."""
    tagger = FakeTagger(lexicon={"lovely": {Tag.NOUN, Tag.ADJECTIVE}})

    assert TopicFilter(tagger).extract("lovely garden") == ["garden"]
