"""Tests for the spaCy tagger."""

from unittest.mock import MagicMock, patch

import pytest

from journal_prompts.errors import TaggerFailure
from journal_prompts.extract import MetadataExtractor
from journal_prompts.taggers import Tag, get_tagger
from journal_prompts.taggers.spacy import SpacyTagger, _get_nlp


# Helper to check if spaCy model is available
def _spacy_model_available():
    """Check if spaCy model is installed."""
    try:
        import spacy

        spacy.load("en_core_web_sm")
        return True
    except (OSError, ImportError):
        return False


requires_spacy_model = pytest.mark.skipif(
    not _spacy_model_available(), reason="spaCy model en_core_web_sm not installed"
)


def test_get_tagger_spacy():
    """Test the factory returns the spaCy tagger."""
    with patch("journal_prompts.taggers.TAGGER_PROVIDER", "spacy"):
        assert isinstance(get_tagger(), SpacyTagger)


def test_get_tagger_unknown_provider():
    """Test an unknown provider is a configuration error."""
    with patch("journal_prompts.taggers.TAGGER_PROVIDER", "nltk"):
        with pytest.raises(RuntimeError, match="Unknown TAGGER_PROVIDER"):
            get_tagger()


def test_missing_model_raises_tagger_failure():
    """Test a model that cannot load surfaces as TaggerFailure."""
    with pytest.raises(TaggerFailure, match="not_a_real_model"):
        _get_nlp("not_a_real_model")


def test_parses_are_memoized():
    """Test repeated texts are parsed once."""
    nlp = MagicMock()
    with patch("journal_prompts.taggers.spacy._get_nlp", return_value=nlp):
        tagger = SpacyTagger()
        tagger.tag("I met Henry yesterday.")
        tagger.people("I met Henry yesterday.")

    nlp.assert_called_once_with("I met Henry yesterday.")


def test_parse_error_raises_tagger_failure():
    """Test pipeline errors surface as TaggerFailure."""
    nlp = MagicMock(side_effect=ValueError("bad input"))
    with patch("journal_prompts.taggers.spacy._get_nlp", return_value=nlp):
        with pytest.raises(TaggerFailure):
            SpacyTagger().tag("text")


@requires_spacy_model
def test_tag_maps_pos_and_entities():
    """Test spaCy tags map onto tagger classes."""
    tokens = {t.text: t for t in SpacyTagger().tag("I met Henry yesterday.")}

    assert tokens["I"].has(Tag.PRONOUN)
    assert tokens["met"].has(Tag.VERB)
    assert tokens["Henry"].has(Tag.PROPER_NOUN)
    assert tokens["Henry"].has(Tag.NOUN)
    assert tokens["."].tags == set()


@requires_spacy_model
def test_people_spans():
    """Test person entities are returned as spans."""
    assert "Steve Jobs" in SpacyTagger().people("I had lunch with Steve Jobs in Cupertino.")


@requires_spacy_model
def test_noun_phrases_drop_excluded_tags():
    """Test determiners and pronouns are removed from noun phrases."""
    phrases = SpacyTagger().noun_phrases(
        "My garden needs the new fence.", exclude=(Tag.PRONOUN, Tag.DETERMINER)
    )

    assert "garden" in phrases
    assert all("the" not in p.split() and "My" not in p.split() for p in phrases)


@requires_spacy_model
def test_extract_henry_and_sarah():
    """Test end-to-end extraction with the real model."""
    result = MetadataExtractor(tagger=SpacyTagger()).extract(
        "I met Henry at his house. Sarah was there too."
    )

    assert "Henry" in result.people
    assert "house" in result.topics
    assert all(topic == topic.lower() for topic in result.topics)
    assert "henry" not in result.topics


@requires_spacy_model
def test_extract_lowercase_text_has_no_people():
    """Test text without capitalized tokens yields no people."""
    result = MetadataExtractor(tagger=SpacyTagger()).extract(
        "went to the park and had a picnic with friends"
    )

    assert result.people == []
