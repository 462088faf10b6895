"""
JSON codec for the persisted mastery table.

Wire layout: one object mapping card id to
``{"id", "level", "nextReview", "lastInterval"}``.
"""

import json
import math
from typing import Any

from eduquest.domain.constants import MAX_LEVEL
from eduquest.domain.exceptions import CorruptMasteryTableError
from eduquest.domain.srs.models import CardMastery, MasteryTable


def mastery_to_dict(mastery: CardMastery) -> dict[str, Any]:
    return {
        "id": mastery.id,
        "level": mastery.level,
        "nextReview": mastery.next_review,
        "lastInterval": mastery.last_interval,
    }


def _int_field(raw: dict[str, Any], name: str) -> int:
    value = raw.get(name)
    if value is None:
        return 0
    # bool is an int subclass, but true/false is not a valid count
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"field '{name}' must be a number, got {type(value).__name__}")
    if not math.isfinite(value):
        raise ValueError(f"field '{name}' must be finite, got {value}")
    return int(value)


def mastery_from_dict(key: str, raw: dict[str, Any]) -> CardMastery:
    """
    Build a record from its stored form.

    Missing fields are filled with defaults so data written by an older
    record shape still loads. The id always comes from the table key. The
    level is clamped into [0, MAX_LEVEL].
    """
    level = max(0, min(_int_field(raw, "level"), MAX_LEVEL))
    return CardMastery(
        id=key,
        level=level,
        next_review=_int_field(raw, "nextReview"),
        last_interval=_int_field(raw, "lastInterval"),
    )


def encode_table(table: MasteryTable) -> str:
    return json.dumps({key: mastery_to_dict(m) for key, m in table.items()})


def decode_table(payload: str | None, storage_key: str) -> MasteryTable:
    """
    Decode a stored table.

    Args:
        payload: Raw slot content; None means the slot was never written.
        storage_key: Slot name, used in error messages.

    Raises:
        CorruptMasteryTableError: If the payload is not a JSON object of
            objects, or a field has the wrong type or a non-finite value.
    """
    if payload is None:
        return {}

    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise CorruptMasteryTableError(storage_key, f"invalid JSON ({e})") from e

    if not isinstance(data, dict):
        raise CorruptMasteryTableError(
            storage_key, f"expected an object, got {type(data).__name__}"
        )

    table: MasteryTable = {}
    for key, raw in data.items():
        if not isinstance(raw, dict):
            raise CorruptMasteryTableError(storage_key, f"entry '{key}' is not an object")
        try:
            table[key] = mastery_from_dict(key, raw)
        except (TypeError, ValueError) as e:
            raise CorruptMasteryTableError(storage_key, f"entry '{key}': {e}") from e
    return table
