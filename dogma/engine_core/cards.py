"""
Card content - Card records and the card database.

Card definitions are read-only content supplied from outside the engine:
- Age (1-10)
- Color (red, yellow, green, blue, purple)
- Icons (4 slots: top, left, middle, right)
- Dogma icon and rules text

The database is loaded from JSON. The bundled file lives in
dogma/games/innovation/data/cards.json; DOGMA_CARD_DATA overrides it.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Iterable, Iterator

from .errors import UnknownCardError

logger = logging.getLogger(__name__)


class Icon(str, Enum):
    """Innovation icon types."""
    CASTLE = "castle"
    CROWN = "crown"
    LEAF = "leaf"
    LIGHTBULB = "lightbulb"
    FACTORY = "factory"
    CLOCK = "clock"

    # Empty slot
    EMPTY = "empty"


class Color(str, Enum):
    """Card colors, one board stack each."""
    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"
    BLUE = "blue"
    PURPLE = "purple"


class IconSlot(str, Enum):
    """Icon positions on a card.

    The top slot sits above the title; left, middle and right run along
    the bottom edge.
    """
    TOP = "top"
    LEFT = "left"
    MIDDLE = "middle"
    RIGHT = "right"


MAX_AGE = 10


@dataclass(frozen=True)
class Card:
    """A single card definition."""
    card_id: int
    age: int
    color: Color
    title: str
    top: Icon = Icon.EMPTY
    left: Icon = Icon.EMPTY
    middle: Icon = Icon.EMPTY
    right: Icon = Icon.EMPTY
    dogma_icon: Icon = Icon.EMPTY
    dogma_effects: tuple[str, ...] = ()

    def icon_at(self, slot: IconSlot) -> Icon:
        return getattr(self, slot.value)

    @property
    def icons(self) -> tuple[Icon, Icon, Icon, Icon]:
        """Icons in slot order [top, left, middle, right]."""
        return (self.top, self.left, self.middle, self.right)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Card:
        icons = data.get("icons", {})
        return cls(
            card_id=int(data["id"]),
            age=int(data["age"]),
            color=Color(data["color"]),
            title=data["title"],
            top=Icon(icons.get("top", "empty")),
            left=Icon(icons.get("left", "empty")),
            middle=Icon(icons.get("middle", "empty")),
            right=Icon(icons.get("right", "empty")),
            dogma_icon=Icon(data.get("dogma_icon", "empty")),
            dogma_effects=tuple(data.get("dogma_effects", ())),
        )


class CardDatabase:
    """
    Read-only lookup of card definitions by id.

    Loaded once per process and shared by every game.
    """

    def __init__(self, cards: Iterable[Card]):
        self._cards: dict[int, Card] = {}
        for card in cards:
            if card.card_id in self._cards:
                raise ValueError(f"Duplicate card id: {card.card_id}")
            self._cards[card.card_id] = card
        self._by_title = {card.title.lower(): card for card in self._cards.values()}

    def __contains__(self, card_id: object) -> bool:
        return card_id in self._cards

    def __iter__(self) -> Iterator[Card]:
        return iter(sorted(self._cards.values(), key=lambda c: c.card_id))

    def __len__(self) -> int:
        return len(self._cards)

    def get(self, card_id: int) -> Card:
        try:
            return self._cards[card_id]
        except KeyError:
            raise UnknownCardError(card_id) from None

    def by_title(self, title: str) -> Card:
        try:
            return self._by_title[title.lower()]
        except KeyError:
            raise UnknownCardError(title) from None

    def by_age(self, age: int) -> list[Card]:
        return [card for card in self if card.age == age]

    @property
    def ages(self) -> list[int]:
        return sorted({card.age for card in self._cards.values()})

    @classmethod
    def from_json(cls, text: str) -> CardDatabase:
        data = json.loads(text)
        return cls(Card.from_dict(entry) for entry in data["cards"])

    @classmethod
    def load(cls, path: str | Path | None = None) -> CardDatabase:
        """Load card data from a JSON file, or the bundled data when no path is given."""
        if path is None:
            source = resources.files("dogma.games.innovation") / "data" / "cards.json"
            text = source.read_text(encoding="utf-8")
        else:
            text = Path(path).read_text(encoding="utf-8")
        db = cls.from_json(text)
        logger.info(f"Loaded {len(db)} cards from {path or 'bundled data'}")
        return db


@lru_cache(maxsize=1)
def get_card_database() -> CardDatabase:
    """The process-wide card database."""
    from ..config import get_settings

    return CardDatabase.load(get_settings().card_data)
