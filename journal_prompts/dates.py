"""Date phrase resolution on top of the tagger's date spans."""

import logging
import re
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from journal_prompts.taggers.base import PartOfSpeechTagger

logger = logging.getLogger(__name__)

_WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]
_DAY_OFFSETS = {"today": 0, "tonight": 0, "yesterday": -1, "tomorrow": 1}
_NUMBER_WORDS = {
    "a": 1, "an": 1, "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
    "six": 6, "seven": 7, "eight": 8, "nine": 9, "ten": 10, "eleven": 11, "twelve": 12,
}
_COUNT = rf"(\d+|{'|'.join(_NUMBER_WORDS)})"
_UNIT = r"(day|week|month|year)s?"
_AGO = re.compile(rf"^{_COUNT}\s+{_UNIT}\s+ago$")
_IN = re.compile(rf"^in\s+{_COUNT}\s+{_UNIT}$")
_PERIOD = re.compile(r"^(last|next|this)\s+(week|month|year)$")
_WEEKDAY = re.compile(rf"^(?:(last|next|this)\s+)?({'|'.join(_WEEKDAYS)})$")
# Spans naming a length of time rather than a point in time, e.g. "3 days"
_DURATION_WORD = re.compile(r"\b(?:days?|weeks?|months?|years?|decades?|hours?|minutes?|old)\b")


def _midnight(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def _count(token: str) -> int:
    return int(token) if token.isdigit() else _NUMBER_WORDS[token]


def _offset(count: int, unit: str) -> relativedelta:
    return relativedelta(**{f"{unit}s": count})


def resolve_date_phrase(phrase: str, now: datetime) -> Optional[datetime]:
    """Resolve one date phrase relative to ``now``.

    Returns:
        Midnight of the resolved day, or None when the phrase is not a date
    """
    lowered = " ".join(phrase.lower().strip(" .,!?").split())
    if lowered.startswith("the "):
        lowered = lowered[4:]
    today = _midnight(now)

    if lowered in _DAY_OFFSETS:
        return today + timedelta(days=_DAY_OFFSETS[lowered])

    match = _AGO.match(lowered)
    if match:
        return today - _offset(_count(match.group(1)), match.group(2))

    match = _IN.match(lowered)
    if match:
        return today + _offset(_count(match.group(1)), match.group(2))

    match = _PERIOD.match(lowered)
    if match:
        direction = {"last": -1, "next": 1, "this": 0}[match.group(1)]
        return today + _offset(direction, match.group(2))

    match = _WEEKDAY.match(lowered)
    if match:
        modifier, name = match.groups()
        delta = _WEEKDAYS.index(name) - today.weekday()
        if modifier == "next":
            delta = delta + 7 if delta <= 0 else delta
        elif modifier == "last":
            delta = delta - 7 if delta >= 0 else delta
        elif modifier is None and delta > 0:
            # A bare weekday in a journal refers to the past
            delta -= 7
        return today + timedelta(days=delta)

    if _DURATION_WORD.search(lowered):
        logger.debug(f"Skipping duration phrase {phrase!r}")
        return None

    try:
        return _midnight(date_parser.parse(phrase, default=today, fuzzy=True))
    except (ValueError, OverflowError) as e:
        logger.debug(f"Unresolvable date phrase {phrase!r}: {e}")
        return None


class DateParser:
    """Resolves the date phrases in a text to timestamps in document order."""

    def __init__(self, tagger: PartOfSpeechTagger, clock: Callable[[], datetime] = datetime.now):
        self.tagger = tagger
        self.clock = clock

    def parse(self, text: str) -> List[datetime]:
        now = self.clock()
        dates = []
        for phrase in self.tagger.date_phrases(text):
            resolved = resolve_date_phrase(phrase, now)
            if resolved is not None:
                dates.append(resolved)
        return dates
