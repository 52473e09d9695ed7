"""Prompt, prompt state and topic suggestion schemas."""
from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel

Tone = Literal["cozy", "neutral"]


class PromptType(str, Enum):
    PERSON = "person"
    TOPIC = "topic"
    DATE = "date"
    FILLER = "filler"


class PromptState(str, Enum):
    AVAILABLE = "available"
    TEMPORARILY_USED = "temporarily_used"
    PERMANENTLY_USED = "permanently_used"
    EXPIRED = "expired"


class Prompt(BaseModel):
    """A rendered writing prompt."""
    id: str
    text: str
    type: PromptType
    created_at: datetime
    entity: Optional[str] = None  # None for filler prompts

    @property
    def is_filler(self) -> bool:
        return self.type == PromptType.FILLER


class PromptUseRecord(BaseModel):
    """Lifecycle state of one prompt id."""
    prompt_id: str
    state: PromptState = PromptState.AVAILABLE
    first_seen_at: datetime


class TopicSuggestion(BaseModel):
    """A display-only topic chip."""
    word: str
    entity: str = ""


class PromptPanel(BaseModel):
    """Everything shown next to the editor for one document."""
    prompts: List[Prompt] = []
    topic_suggestions: List[TopicSuggestion] = []
