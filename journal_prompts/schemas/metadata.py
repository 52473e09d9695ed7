"""Extracted metadata schema."""
from datetime import datetime
from typing import List

from pydantic import BaseModel


def _union(first: List[str], second: List[str]) -> List[str]:
    seen = set()
    merged = []
    for value in [*first, *second]:
        key = value.lower().strip()
        if key and key not in seen:
            seen.add(key)
            merged.append(value)
    return merged


class ExtractedMetadata(BaseModel):
    """People, topics and dates mentioned in one piece of journal text."""
    people: List[str] = []
    topics: List[str] = []
    dates: List[datetime] = []

    def is_empty(self) -> bool:
        return not (self.people or self.topics or self.dates)

    def merge(self, other: "ExtractedMetadata") -> "ExtractedMetadata":
        """Order-preserving, case-insensitive union of two results."""
        return ExtractedMetadata(
            people=_union(self.people, other.people),
            topics=_union(self.topics, other.topics),
            dates=[*self.dates, *other.dates],
        )
