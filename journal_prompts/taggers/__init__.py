"""Tagger factory and exports."""
from journal_prompts.config import TAGGER_PROVIDER
from journal_prompts.taggers.base import PartOfSpeechTagger, Tag, TaggedToken


def get_tagger() -> PartOfSpeechTagger:
    """Get the configured tagger.

    Returns:
        PartOfSpeechTagger instance based on TAGGER_PROVIDER config
    """
    if TAGGER_PROVIDER == "spacy":
        from journal_prompts.taggers.spacy import SpacyTagger
        return SpacyTagger()
    raise RuntimeError(f"Unknown TAGGER_PROVIDER: {TAGGER_PROVIDER!r}")


__all__ = ["PartOfSpeechTagger", "Tag", "TaggedToken", "get_tagger"]
