"""
Innovation effect registry.

Maps card ids to their dogma programs for the ages the engine covers.
"""

from __future__ import annotations

from functools import lru_cache

from ...engine_core.cards import CardDatabase, get_card_database
from ...engine_core.registry import EffectRegistry
from .effects import AGE_1_EFFECTS

COVERED_AGES = (1,)


def create_innovation_registry(cards: CardDatabase | None = None) -> EffectRegistry:
    """Build and validate the registry for the covered ages."""
    db = cards if cards is not None else get_card_database()
    effects = {db.by_title(title).card_id: program for title, program in AGE_1_EFFECTS.items()}
    return EffectRegistry(effects, ages=COVERED_AGES, cards=db)


@lru_cache(maxsize=1)
def default_registry() -> EffectRegistry:
    return create_innovation_registry()
