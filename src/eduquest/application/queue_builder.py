"""
Queue builder for flashcard review sessions.

Builds ordered study queues by:
1. Looking up the stored mastery of every card in the deck
2. Splitting the deck into due and upcoming cards
3. Ordering due cards weakest first
"""

import logging
from dataclasses import dataclass

from eduquest.application.card_identity import card_id
from eduquest.application.srs.service import MasteryStore
from eduquest.domain.srs.models import CardMastery, Flashcard

logger = logging.getLogger(__name__)


@dataclass
class QueuedCard:
    card: Flashcard
    mastery: CardMastery


@dataclass
class ReviewQueueResult:
    """Result of queue building operation."""

    due: list[QueuedCard]  # Study now, lowest level first
    upcoming: list[QueuedCard]  # Not yet due, soonest first
    duplicates: list[Flashcard]  # Fronts sharing an id with an earlier card
    truncated: int = 0  # Due cards dropped by the limit


def build_review_queue(
    store: MasteryStore,
    cards: list[Flashcard],
    now: int | None = None,
    limit: int | None = None,
) -> ReviewQueueResult:
    """
    Build a study queue for a deck.

    Args:
        store: Mastery store to read levels from.
        cards: Deck in its original order.
        now: Epoch ms to evaluate due-ness at; defaults to the store clock.
        limit: Maximum number of due cards to keep.

    Returns:
        ReviewQueueResult with ordered queues and diagnostics
    """
    at = store.now() if now is None else now
    # One table read for the whole deck
    table = store.get_all_mastery()

    seen: set[str] = set()
    due: list[QueuedCard] = []
    upcoming: list[QueuedCard] = []
    duplicates: list[Flashcard] = []

    for card in cards:
        cid = card_id(card.front)
        if cid in seen:
            duplicates.append(card)
            continue
        seen.add(cid)

        mastery = table.get(cid) or CardMastery(id=cid)
        entry = QueuedCard(card=card, mastery=mastery)
        if mastery.is_due(at):
            due.append(entry)
        else:
            upcoming.append(entry)

    # sorted() is stable, so ties keep deck order
    due = sorted(due, key=lambda q: (q.mastery.level, q.mastery.next_review))
    upcoming = sorted(upcoming, key=lambda q: q.mastery.next_review)

    truncated = 0
    if limit is not None and len(due) > limit:
        truncated = len(due) - limit
        due = due[:limit]

    if duplicates:
        logger.info(f"{len(duplicates)} card(s) share an identity with an earlier card")

    return ReviewQueueResult(
        due=due, upcoming=upcoming, duplicates=duplicates, truncated=truncated
    )
