"""Exception hierarchy for Bible Companion."""

from typing import Optional


class BibleCompanionError(Exception):
    """Base class for all application errors."""


class CorpusError(BibleCompanionError):
    """The scripture corpus could not be loaded or is malformed."""


class ReferenceParseError(BibleCompanionError, ValueError):
    """A textual verse reference could not be parsed."""


class DuplicateBookmarkError(BibleCompanionError):
    """A bookmark already exists for the requested verse."""

    def __init__(self, reference):
        self.reference = reference
        super().__init__(f"Bookmark already exists for {reference.format()}")


class UnknownHighlightColorError(BibleCompanionError):
    """A highlight referenced a color id missing from the palette."""

    def __init__(self, color_id: str):
        self.color_id = color_id
        super().__init__(f"Unknown highlight color: {color_id}")


class PersistenceError(BibleCompanionError):
    """Reading or writing a persisted collection failed."""

    def __init__(self, key: str, message: str, cause: Optional[BaseException] = None):
        self.key = key
        self.cause = cause
        super().__init__(f"{message} ({key})")


class ChatGatewayError(BibleCompanionError):
    """The remote chat completion call failed."""
