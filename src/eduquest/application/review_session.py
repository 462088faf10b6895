"""In-session review loop: walk a queue, record outcomes, re-enqueue skips."""

from collections import deque

from eduquest.application.srs.service import MasteryStore
from eduquest.domain.srs.models import CardMastery, Flashcard


class ReviewSession:
    """
    Steps through a list of cards.

    A skipped card goes to the back of the session queue so it comes up
    again before the session ends. That requeue lives only in memory; the
    persisted schedule is whatever ``MasteryStore.record_review`` wrote.
    """

    def __init__(self, store: MasteryStore, cards: list[Flashcard]):
        self._store = store
        self._cards = list(cards)
        self._queue: deque[Flashcard] = deque(self._cards)
        self.mastered_count = 0
        self.skipped_count = 0

    @property
    def current(self) -> Flashcard | None:
        return self._queue[0] if self._queue else None

    @property
    def remaining(self) -> int:
        return len(self._queue)

    @property
    def finished(self) -> bool:
        return not self._queue

    def mastery(self) -> CardMastery | None:
        """Stored mastery of the current card, for badge rendering."""
        card = self.current
        return self._store.get_card_mastery(card.front) if card else None

    def answer(self, mastered: bool) -> CardMastery:
        """Record the outcome for the current card and advance."""
        if not self._queue:
            raise IndexError("review session is finished")

        card = self._queue.popleft()
        result = self._store.record_review(card.front, mastered)
        if mastered:
            self.mastered_count += 1
        else:
            self.skipped_count += 1
            self._queue.append(card)
        return result

    def restart(self) -> None:
        self._queue = deque(self._cards)
        self.mastered_count = 0
        self.skipped_count = 0
