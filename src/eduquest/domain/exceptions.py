"""Exception hierarchy shared by every layer."""


class EduquestError(Exception):
    """Base class for errors raised by eduquest itself."""


class CorruptMasteryTableError(EduquestError, ValueError):
    """The persisted mastery table could not be decoded."""

    def __init__(self, storage_key: str, reason: str):
        self.storage_key = storage_key
        self.reason = reason
        super().__init__(f"Mastery table '{storage_key}' is corrupt: {reason}")


class DeckFormatError(EduquestError, ValueError):
    """A deck file does not contain a list of flashcards."""
