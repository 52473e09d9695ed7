"""Schema exports."""

from journal_prompts.schemas.entry import JournalEntry
from journal_prompts.schemas.metadata import ExtractedMetadata
from journal_prompts.schemas.prompt import (
    Prompt,
    PromptPanel,
    PromptState,
    PromptType,
    PromptUseRecord,
    Tone,
    TopicSuggestion,
)

__all__ = [
    "ExtractedMetadata",
    "JournalEntry",
    "Prompt",
    "PromptPanel",
    "PromptState",
    "PromptType",
    "PromptUseRecord",
    "Tone",
    "TopicSuggestion",
]
