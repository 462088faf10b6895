"""Load flashcard decks from JSON or YAML files."""

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from eduquest.domain.constants import DECK_SUFFIXES
from eduquest.domain.exceptions import DeckFormatError
from eduquest.domain.srs.models import Flashcard

logger = logging.getLogger(__name__)


def _parse(path: Path) -> Any:
    content = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() == ".json":
            return json.loads(content)
        return yaml.safe_load(content)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise DeckFormatError(f"{path.name}: could not parse deck ({e})") from e


def parse_flashcards(data: Any, source: str = "deck") -> list[Flashcard]:
    """
    Convert raw deck data into flashcards.

    Accepts either a bare list of ``{front, back, hint?}`` objects or a
    lecture payload with the list under ``flashcards``.
    """
    if isinstance(data, dict) and "flashcards" in data:
        data = data["flashcards"]

    if not isinstance(data, list):
        raise DeckFormatError(f"{source}: expected a list of flashcards")

    cards: list[Flashcard] = []
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            raise DeckFormatError(f"{source}: card #{i + 1} is not an object")
        front = item.get("front")
        back = item.get("back")
        if not isinstance(front, str) or not isinstance(back, str):
            raise DeckFormatError(f"{source}: card #{i + 1} needs string 'front' and 'back'")
        hint = item.get("hint")
        cards.append(Flashcard(front=front, back=back, hint=str(hint) if hint else None))
    return cards


def load_deck(path: Path) -> list[Flashcard]:
    path = Path(path)
    if path.suffix.lower() not in DECK_SUFFIXES:
        raise DeckFormatError(
            f"{path.name}: unsupported deck format (use {', '.join(DECK_SUFFIXES)})"
        )
    cards = parse_flashcards(_parse(path), source=path.name)
    logger.debug(f"Loaded {len(cards)} cards from {path}")
    return cards
