"""
Domain models for flashcard mastery.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Flashcard:
    """
    A flashcard as produced by the lecture generator.

    Attributes:
        front: Question side. Its text is the card's identity.
        back: Answer side.
        hint: Optional hint shown on the back.
    """

    front: str
    back: str
    hint: str | None = None


@dataclass(frozen=True)
class CardMastery:
    """
    Mastery record for one distinct flashcard front-text.

    Attributes:
        id: Identity derived from the front-text (``card_<hash>``).
        level: 0 (new or just reset) to 5.
        next_review: Epoch milliseconds after which the card is due again.
        last_interval: Days until the next review as of the latest update.
    """

    id: str
    level: int = 0
    next_review: int = 0
    last_interval: int = 0

    def is_due(self, now_ms: int) -> bool:
        return self.next_review <= now_ms


MasteryTable = dict[str, CardMastery]
