"""
Innovation - Card content for the dogma engine.

Innovation is a card game about civilizations progressing through the ages.
Key mechanics:
- Cards have ages (1-10), colors (5), and icons
- Players meld cards to board, building stacks by color
- Splaying reveals icons on cards below
- Dogma effects activate based on icon counts

This module contains:
- Card data for all ten ages (data/cards.json)
- Dogma programs for the age 1 cards
- The validated effect registry
- Snapshot builders for demos and tests
"""

from .effects import AGE_1_EFFECTS
from .registry import COVERED_AGES, create_innovation_registry, default_registry
from .setup import arrange, create_snapshot

__all__ = [
    "AGE_1_EFFECTS",
    "COVERED_AGES",
    "create_innovation_registry",
    "default_registry",
    "arrange",
    "create_snapshot",
]
