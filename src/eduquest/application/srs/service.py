"""
Mastery Store: application layer owner of the persisted mastery table.

Coordinates the storage backend, the table codec and the interval scheduler.
Every update is a full read-modify-write of the single table slot.
"""

import logging
import random
import threading
import time
from collections.abc import Callable

from eduquest.application.card_identity import card_id
from eduquest.domain.constants import SRS_STORAGE_KEY
from eduquest.domain.exceptions import CorruptMasteryTableError
from eduquest.domain.srs.models import CardMastery, MasteryTable
from eduquest.domain.srs.ports import StorageBackend

from .scheduler import IntervalScheduler
from .serialization import decode_table, encode_table

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


class MasteryStore:
    """
    Per-card mastery state keyed by flashcard front-text.

    Follows Dependency Inversion: depends on the StorageBackend port, so
    tests use an in-memory backend and production a file-backed one.
    """

    def __init__(
        self,
        storage: StorageBackend,
        storage_key: str = SRS_STORAGE_KEY,
        rng: random.Random | None = None,
        clock: Callable[[], int] | None = None,
        recover_corrupt: bool = False,
    ):
        """
        Args:
            storage: Backend holding the serialized table.
            storage_key: Name of the slot the table lives in.
            rng: Source of interval jitter; seed it for reproducible schedules.
            clock: Returns the current time in epoch milliseconds.
            recover_corrupt: Treat an undecodable table as empty instead of
                raising CorruptMasteryTableError.
        """
        self._storage = storage
        self._key = storage_key
        self._scheduler = IntervalScheduler(rng)
        self._clock = clock or now_ms
        self._recover_corrupt = recover_corrupt
        # Serializes read-modify-write cycles within this process
        self._lock = threading.Lock()

    @property
    def storage_key(self) -> str:
        return self._key

    def get_all_mastery(self) -> MasteryTable:
        """Load and decode the whole table. A missing slot is an empty table."""
        try:
            return self._load_table()
        except CorruptMasteryTableError as e:
            if not self._recover_corrupt:
                raise
            logger.warning(f"{e}; treating it as empty")
            return {}

    def _load_table(self) -> MasteryTable:
        try:
            payload = self._storage.get_item(self._key)
        except UnicodeDecodeError as e:
            raise CorruptMasteryTableError(self._key, f"not valid UTF-8 ({e})") from e
        return decode_table(payload, self._key)

    def get_card_mastery(self, front: str) -> CardMastery:
        """
        Current mastery for a card.

        Cards never reviewed get a transient level-0 record that is not
        written to storage.
        """
        return self._lookup(self.get_all_mastery(), front)

    def record_review(self, front: str, mastered: bool) -> CardMastery:
        """
        Apply a review outcome and persist it.

        Args:
            front: Front-text of the reviewed card.
            mastered: True if recalled, False if skipped or failed.

        Returns:
            The updated record, as written to storage.
        """
        with self._lock:
            table = self.get_all_mastery()
            current = self._lookup(table, front)
            updated = self._scheduler.apply(current, mastered, self._clock())

            table[updated.id] = updated
            self._storage.set_item(self._key, encode_table(table))

        logger.debug(
            f"Review {updated.id}: level {current.level} -> {updated.level}, "
            f"next in {updated.last_interval}d"
        )
        return updated

    def due_cards(self, now: int | None = None) -> list[CardMastery]:
        """Stored records due at ``now``, oldest due first."""
        at = self._clock() if now is None else now
        due = [m for m in self.get_all_mastery().values() if m.is_due(at)]
        return sorted(due, key=lambda m: m.next_review)

    def now(self) -> int:
        return self._clock()

    def clear(self) -> None:
        """Drop the whole table, as part of a full profile reset."""
        with self._lock:
            self._storage.remove_item(self._key)
        logger.info(f"Cleared mastery table '{self._key}'")

    @staticmethod
    def _lookup(table: MasteryTable, front: str) -> CardMastery:
        cid = card_id(front)
        return table.get(cid) or CardMastery(id=cid)
