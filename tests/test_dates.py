"""Tests for date phrase resolution."""

from datetime import datetime

import pytest

from journal_prompts.dates import DateParser, resolve_date_phrase
from tests.conftest import FakeTagger

# 2026-03-10 is a Tuesday
NOW = datetime(2026, 3, 10, 12, 0, 0)


@pytest.mark.parametrize(
    "phrase,expected",
    [
        ("today", datetime(2026, 3, 10)),
        ("Tonight", datetime(2026, 3, 10)),
        ("yesterday", datetime(2026, 3, 9)),
        ("tomorrow", datetime(2026, 3, 11)),
        ("3 days ago", datetime(2026, 3, 7)),
        ("in 2 days", datetime(2026, 3, 12)),
        ("last week", datetime(2026, 3, 3)),
        ("next week", datetime(2026, 3, 17)),
        ("Monday", datetime(2026, 3, 9)),
        ("friday", datetime(2026, 3, 6)),
        ("tuesday", datetime(2026, 3, 10)),
        ("next monday", datetime(2026, 3, 16)),
        ("last tuesday", datetime(2026, 3, 3)),
        ("this friday", datetime(2026, 3, 13)),
        ("March 3rd", datetime(2026, 3, 3)),
        ("the 1st of February", datetime(2026, 2, 1)),
        ("2 weeks ago", datetime(2026, 2, 24)),
        ("a month ago", datetime(2026, 2, 10)),
        ("two years ago", datetime(2024, 3, 10)),
        ("in 3 weeks", datetime(2026, 3, 31)),
        ("in a month", datetime(2026, 4, 10)),
        ("last month", datetime(2026, 2, 10)),
        ("next year", datetime(2027, 3, 10)),
    ],
)
def test_resolve_date_phrase(phrase, expected):
    """Test relative and absolute phrases resolve to midnight of the day."""
    assert resolve_date_phrase(phrase, NOW) == expected


def test_unresolvable_phrase_returns_none():
    """Test phrases with no date content are skipped."""
    assert resolve_date_phrase("someday soon", NOW) is None


def test_parser_keeps_document_order():
    """Test resolved dates follow their order in the text."""
    tagger = FakeTagger(dates=["March 3rd", "yesterday"])
    parser = DateParser(tagger, clock=lambda: NOW)

    dates = parser.parse("Yesterday I remembered March 3rd.")

    assert dates == [datetime(2026, 3, 9), datetime(2026, 3, 3)]


def test_parser_drops_unresolvable_phrases():
    """Test phrases the resolver rejects are left out."""
    tagger = FakeTagger(dates=["someday soon", "today"])
    parser = DateParser(tagger, clock=lambda: NOW)

    assert parser.parse("Someday soon, maybe today.") == [datetime(2026, 3, 10)]


@pytest.mark.parametrize(
    "phrase",
    ["3 days", "20 years", "the past two weeks", "a few months", "20 years old", "two hours"],
)
def test_durations_are_not_dates(phrase):
    """Test lengths of time are not read as a day of the month."""
    assert resolve_date_phrase(phrase, NOW) is None


def test_parser_skips_durations():
    """Test duration spans from the tagger produce no dates."""
    tagger = FakeTagger(dates=["20 years", "2 weeks ago"])
    parser = DateParser(tagger, clock=lambda: NOW)

    assert parser.parse("Friends for 20 years, we spoke 2 weeks ago.") == [datetime(2026, 2, 24)]
