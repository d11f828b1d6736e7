"""
Pytest fixtures for Dogma tests.

Supply piles are built in card id order, so the top of the age 1 pile is
Writing (15), then Tools (14), The Wheel (13) and so on, minus whatever a
test moved out with `arrange`.
"""

import pytest

from ..engine_core.cards import CardDatabase, get_card_database
from ..engine_core.effect_resolver import EffectResolver
from ..engine_core.registry import EffectRegistry
from ..engine_core.state import Snapshot
from ..games.innovation import create_innovation_registry, create_snapshot


# Age 1 card ids
AGRICULTURE = 1
ARCHERY = 2
CITY_STATES = 3
CLOTHING = 4
CODE_OF_LAWS = 5
DOMESTICATION = 6
MASONRY = 7
METALWORKING = 8
MYSTICISM = 9
OARS = 10
POTTERY = 11
SAILING = 12
THE_WHEEL = 13
TOOLS = 14
WRITING = 15

# A few higher cards
CALENDAR = 16  # age 2
CONSTRUCTION = 18  # age 2


class StubRegistry:
    """Registry stand-in mapping a handful of card ids to test effects."""

    def __init__(self, effects):
        self.effects = dict(effects)

    def get(self, card_id):
        return self.effects[card_id]


@pytest.fixture
def cards() -> CardDatabase:
    return get_card_database()


@pytest.fixture
def registry(cards) -> EffectRegistry:
    return create_innovation_registry(cards)


@pytest.fixture
def resolver(registry, cards) -> EffectResolver:
    """Resolver for the age 1 content, without choice deadlines."""
    return EffectResolver(registry, cards=cards, choice_timeout=None)


@pytest.fixture
def two_player() -> Snapshot:
    """A 2-player snapshot with empty boards and the full supply."""
    return create_snapshot(num_players=2, game_id="test_game")


@pytest.fixture
def three_player() -> Snapshot:
    return create_snapshot(num_players=3, game_id="test_game")
