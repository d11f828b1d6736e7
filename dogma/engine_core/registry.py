"""
Effect registry - Card id to effect function table.

The table is validated when the registry is built, never at call time:
- every key must be a card in the database
- every card of a covered age must have exactly one effect
- no effect may belong to a card outside the covered ages
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, Mapping

from .cards import CardDatabase, get_card_database
from .effect_resolver import EffectFunction
from .errors import RegistryError, UnknownCardError

logger = logging.getLogger(__name__)


def check_effects(effects: Mapping[int, EffectFunction], cards: CardDatabase,
                  ages: Iterable[int]) -> list[str]:
    """Return every problem with an effect table (empty if valid)."""
    errors = []
    ages = set(ages)
    for card_id, effect in effects.items():
        if card_id not in cards:
            errors.append(f"Effect registered for unknown card {card_id!r}")
            continue
        card = cards.get(card_id)
        if card.age not in ages:
            errors.append(f"{card.title} (age {card.age}) is outside covered ages {sorted(ages)}")
        if not callable(effect):
            errors.append(f"Effect for {card.title} is not callable")
    for age in sorted(ages):
        for card in cards.by_age(age):
            if card.card_id not in effects:
                errors.append(f"No effect for {card.title} (id {card.card_id}, age {age})")
    return errors


class EffectRegistry:
    """Validated, read-only lookup of card effects."""

    def __init__(self, effects: Mapping[int, EffectFunction], ages: Iterable[int],
                 cards: CardDatabase | None = None):
        self.cards = cards if cards is not None else get_card_database()
        self.ages = tuple(sorted(set(ages)))
        errors = check_effects(effects, self.cards, self.ages)
        if errors:
            raise RegistryError(errors)
        self._effects = dict(effects)
        logger.info(f"Registered {len(self._effects)} effects for ages {list(self.ages)}")

    def __contains__(self, card_id: object) -> bool:
        return card_id in self._effects

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._effects))

    def __len__(self) -> int:
        return len(self._effects)

    def get(self, card_id: int) -> EffectFunction:
        try:
            return self._effects[card_id]
        except KeyError:
            raise UnknownCardError(card_id) from None
