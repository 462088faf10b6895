"""
Interval scheduler for the six-level mastery scheme.

This is a pure computation module with no I/O. The only impurity is the
random draw used for jitter, which comes from an injected generator.
"""

import random
from dataclasses import replace

from eduquest.domain.constants import MAX_LEVEL, MS_PER_DAY
from eduquest.domain.srs.models import CardMastery


def interval_days(level: int, rng: random.Random) -> int:
    """
    Days until the next review for a card that just reached ``level``.

    Level 1 is always one day. Higher levels double per level with a coin-flip
    extra day: ``2**level`` or ``2**level + 1``.
    """
    if level == 1:
        return 1
    return 2**level + int(rng.random() * 2)


class IntervalScheduler:
    """
    Computes the next mastery record from a review outcome.

    Stateless apart from the random source.
    """

    def __init__(self, rng: random.Random | None = None):
        self._rng = rng or random.Random()

    def apply(self, mastery: CardMastery, mastered: bool, now_ms: int) -> CardMastery:
        """
        Return the record that results from reviewing ``mastery`` at ``now_ms``.

        A successful recall climbs one level (capped at ``MAX_LEVEL``) and
        schedules the card ``interval_days`` ahead. A skip or failure drops
        the card to level 0, due immediately.
        """
        if not mastered:
            return replace(mastery, level=0, last_interval=0, next_review=now_ms)

        level = min(mastery.level + 1, MAX_LEVEL)
        days = interval_days(level, self._rng)
        return replace(
            mastery,
            level=level,
            last_interval=days,
            next_review=now_ms + days * MS_PER_DAY,
        )
