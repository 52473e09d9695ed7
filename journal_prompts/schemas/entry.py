"""Journal entry schema as supplied by the entry store."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from journal_prompts.schemas.metadata import ExtractedMetadata


class JournalEntry(BaseModel):
    """A journal entry with optionally cached extraction results."""
    id: str
    content: str = ""
    created_at: datetime
    updated_at: Optional[datetime] = None
    draft: bool = False
    prompt_ids: List[str] = []
    extracted_people: Optional[List[str]] = None
    extracted_topics: Optional[List[str]] = None
    extracted_dates: Optional[List[datetime]] = None

    def cached_metadata(self) -> Optional[ExtractedMetadata]:
        """Return cached metadata, or None when extraction never ran."""
        if self.extracted_people is None and self.extracted_topics is None:
            return None
        return ExtractedMetadata(
            people=self.extracted_people or [],
            topics=self.extracted_topics or [],
            dates=self.extracted_dates or [],
        )

    def with_metadata(self, metadata: ExtractedMetadata) -> "JournalEntry":
        return self.model_copy(
            update={
                "extracted_people": list(metadata.people),
                "extracted_topics": list(metadata.topics),
                "extracted_dates": list(metadata.dates),
            }
        )
