import json
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from eduquest.application.card_identity import card_id
from eduquest.application.srs.service import MasteryStore
from eduquest.domain.constants import MS_PER_DAY, SRS_STORAGE_KEY
from eduquest.domain.exceptions import CorruptMasteryTableError
from eduquest.domain.srs.models import CardMastery
from eduquest.infrastructure.storage.json_file import JsonFileStorage
from eduquest.infrastructure.storage.memory import InMemoryStorage


def _store_at_level(storage, front, level, rng, now):
    store = MasteryStore(storage, rng=rng, clock=lambda: now)
    for _ in range(level):
        store.record_review(front, True)
    return store


# --- get_card_mastery ---


def test_default_read_for_unknown_card(store):
    mastery = store.get_card_mastery("Never seen")
    assert mastery == CardMastery(
        id=card_id("Never seen"), level=0, next_review=0, last_interval=0
    )


def test_default_read_does_not_write(store, storage):
    store.get_card_mastery("Never seen")
    assert SRS_STORAGE_KEY not in storage


def test_get_card_mastery_empty_front(store):
    assert store.get_card_mastery("").id == "card_0"


# --- record_review scenarios ---


def test_first_success_schedules_one_day(store, now):
    mastery = store.record_review("Capital of France?", True)

    assert mastery.level == 1
    assert mastery.last_interval == 1
    assert mastery.next_review == now + MS_PER_DAY


def test_level_three_to_four(storage, now, make_rng):
    store = _store_at_level(storage, "Front", 3, make_rng(0.2), now)
    assert store.get_card_mastery("Front").level == 3

    mastery = store.record_review("Front", True)
    assert mastery.level == 4
    assert mastery.last_interval in {16, 17}
    assert mastery.last_interval == 16


def test_level_five_stays_capped(storage, now, make_rng):
    store = _store_at_level(storage, "Front", 5, make_rng(0.8), now)

    mastery = store.record_review("Front", True)
    assert mastery.level == 5
    assert mastery.last_interval == 33
    assert mastery.next_review == now + 33 * MS_PER_DAY


def test_ten_successes_never_exceed_five(store):
    levels = [store.record_review("Front", True).level for _ in range(10)]
    assert levels == [1, 2, 3, 4, 5, 5, 5, 5, 5, 5]


def test_interval_growth_formula(store):
    for expected_level in range(1, 6):
        mastery = store.record_review("Front", True)
        assert mastery.level == expected_level
        if expected_level == 1:
            assert mastery.last_interval == 1
        else:
            assert mastery.last_interval in {2**expected_level, 2**expected_level + 1}


@pytest.mark.parametrize("level", range(6))
def test_failure_resets_from_any_level(storage, level, now, make_rng):
    store = _store_at_level(storage, "Front", level, make_rng(0.5), now)

    mastery = store.record_review("Front", False)
    assert mastery.level == 0
    assert mastery.last_interval == 0
    assert mastery.next_review == now


def test_failure_next_review_is_wall_clock_now():
    store = MasteryStore(InMemoryStorage())
    before = int(time.time() * 1000)
    mastery = store.record_review("Front", False)

    assert abs(mastery.next_review - before) <= 1000
    assert mastery.is_due(int(time.time() * 1000))


# --- persistence ---


def test_persistence_round_trip(storage, now):
    written = MasteryStore(storage, clock=lambda: now).record_review("What is 2+2?", True)

    # A fresh store over the same backend simulates a reload
    reloaded = MasteryStore(storage).get_card_mastery("What is 2+2?")
    assert reloaded.level == written.level
    assert reloaded.last_interval == written.last_interval
    assert reloaded.next_review == written.next_review


def test_record_review_writes_full_table(store, storage, now):
    store.record_review("A", True)
    store.record_review("B", False)

    data = json.loads(storage.get_item(SRS_STORAGE_KEY))
    assert set(data) == {card_id("A"), card_id("B")}
    assert data[card_id("A")] == {
        "id": card_id("A"),
        "level": 1,
        "nextReview": now + MS_PER_DAY,
        "lastInterval": 1,
    }


def test_key_isolation(store):
    store.record_review("Card B", True)
    store.record_review("Card B", True)
    before = store.get_card_mastery("Card B")

    store.record_review("Card A", True)
    store.record_review("Card A", False)

    assert store.get_card_mastery("Card B") == before


def test_colliding_fronts_share_a_record(store):
    store.record_review("Aa", True)
    assert store.get_card_mastery("BB").level == 1


def test_storage_key_is_configurable(storage):
    store = MasteryStore(storage, storage_key="profile_2_srs")
    store.record_review("Front", True)

    assert "profile_2_srs" in storage
    assert SRS_STORAGE_KEY not in storage


def test_storage_errors_propagate():
    class BrokenStorage(InMemoryStorage):
        def set_item(self, key, value):
            raise OSError("disk full")

    store = MasteryStore(BrokenStorage())
    with pytest.raises(OSError, match="disk full"):
        store.record_review("Front", True)


# --- get_all_mastery / due_cards / clear ---


def test_get_all_mastery(store):
    store.record_review("A", True)
    store.record_review("B", True)
    table = store.get_all_mastery()

    assert set(table) == {card_id("A"), card_id("B")}
    assert all(m.level == 1 for m in table.values())


def test_due_cards(store, now):
    store.record_review("Skipped", False)
    store.record_review("Learned", True)

    due_now = store.due_cards()
    assert [m.id for m in due_now] == [card_id("Skipped")]

    due_later = store.due_cards(now=now + 2 * MS_PER_DAY)
    assert {m.id for m in due_later} == {card_id("Skipped"), card_id("Learned")}
    assert due_later[0].id == card_id("Skipped")


def test_clear(store, storage):
    store.record_review("A", True)
    store.clear()

    assert SRS_STORAGE_KEY not in storage
    assert store.get_all_mastery() == {}
    assert store.get_card_mastery("A").level == 0


# --- corrupt state ---


def test_corrupt_table_raises_by_default():
    storage = InMemoryStorage({SRS_STORAGE_KEY: "{not json"})
    store = MasteryStore(storage)

    with pytest.raises(CorruptMasteryTableError):
        store.get_card_mastery("Front")
    with pytest.raises(CorruptMasteryTableError):
        store.record_review("Front", True)
    # Nothing was overwritten
    assert storage.get_item(SRS_STORAGE_KEY) == "{not json"


def test_corrupt_table_recovered_when_enabled(now):
    storage = InMemoryStorage({SRS_STORAGE_KEY: "[1, 2, 3]"})
    store = MasteryStore(storage, clock=lambda: now, recover_corrupt=True)

    assert store.get_card_mastery("Front").level == 0
    assert store.record_review("Front", True).level == 1
    assert set(json.loads(storage.get_item(SRS_STORAGE_KEY))) == {card_id("Front")}


def test_corrupt_numbers_recovered_when_enabled(now):
    storage = InMemoryStorage({SRS_STORAGE_KEY: '{"a": {"level": NaN}}'})
    store = MasteryStore(storage, clock=lambda: now, recover_corrupt=True)

    assert store.get_card_mastery("Front").level == 0
    assert store.get_all_mastery() == {}


@pytest.mark.parametrize("recover", [False, True])
def test_undecodable_bytes_count_as_corrupt(tmp_path, recover):
    (tmp_path / f"{SRS_STORAGE_KEY}.json").write_bytes(b'{"\xff": 1}')
    store = MasteryStore(JsonFileStorage(tmp_path), recover_corrupt=recover)

    if recover:
        assert store.get_all_mastery() == {}
        assert store.record_review("Front", True).level == 1
    else:
        with pytest.raises(CorruptMasteryTableError, match="UTF-8"):
            store.get_card_mastery("Front")


def test_stored_id_never_overrides_table_key(now):
    key = card_id("a")
    storage = InMemoryStorage({SRS_STORAGE_KEY: json.dumps({key: {"id": "legacy", "level": 2}})})
    store = MasteryStore(storage, clock=lambda: now)

    assert store.record_review("a", True).level == 3
    assert set(json.loads(storage.get_item(SRS_STORAGE_KEY))) == {key}
    assert store.get_card_mastery("a").level == 3


# --- concurrency ---


def test_concurrent_reviews_of_distinct_cards_are_all_stored(tmp_path):
    store = MasteryStore(JsonFileStorage(tmp_path))
    fronts = [f"Question {i}?" for i in range(200)]

    with ThreadPoolExecutor(max_workers=16) as pool:
        list(pool.map(lambda f: store.record_review(f, True), fronts))

    table = store.get_all_mastery()
    assert len(table) == 200
    assert all(m.level == 1 for m in table.values())


def test_concurrent_reviews_of_one_card_all_count(storage):
    store = MasteryStore(storage)

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(lambda _: store.record_review("Front", True), range(4)))

    assert store.get_card_mastery("Front").level == 4
