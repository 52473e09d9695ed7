"""Exception types raised at the tagger and store seams."""


class JournalPromptsError(Exception):
    """Base class for errors raised by this package."""


class TaggerFailure(JournalPromptsError, RuntimeError):
    """The part-of-speech tagger could not be loaded or failed on input."""


class StoreUnavailable(JournalPromptsError, RuntimeError):
    """A key-value store backend could not be reached."""


class ExtractionDegraded(TaggerFailure):
    """One or more extraction phases failed, so the result is incomplete."""

    def __init__(self, phases):
        self.phases = list(phases)
        super().__init__(f"Extraction phases failed: {', '.join(self.phases)}")
