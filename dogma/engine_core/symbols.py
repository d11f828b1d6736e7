"""
Symbol comparison - Who a dogma reaches.

- Demands hit every other player with strictly fewer of the dogma icon
  than the activating player
- Non-demand effects are shared with every other player with at least as
  many of the dogma icon
- Players are visited in turn order, starting left of the activator

Counts are recomputed on every call. Nothing here is cached, since the
board changes between a demand's targets being chosen and the next level.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from .cards import CardDatabase, Icon
from .icons import count_icons
from .state import Snapshot


@dataclass(frozen=True)
class SymbolComparison:
    """
    Players grouped by their count of one icon.

    A player can appear in more than one group (ties for most and least,
    everyone tied, or at_least/below against a threshold).
    """
    icon: Icon
    counts: tuple[int, ...]
    most: tuple[int, ...]
    least: tuple[int, ...]
    at_least: tuple[int, ...] = ()
    below: tuple[int, ...] = ()


def compare_icons(snapshot: Snapshot, icon: Icon, threshold: int | None = None,
                  cards: CardDatabase | None = None) -> SymbolComparison:
    """Rank every player by visible count of `icon`."""
    counts = tuple(count_icons(snapshot, p, icon, cards) for p in range(snapshot.num_players))
    high = max(counts, default=0)
    low = min(counts, default=0)
    players = range(len(counts))
    at_least: tuple[int, ...] = ()
    below: tuple[int, ...] = ()
    if threshold is not None:
        at_least = tuple(p for p in players if counts[p] >= threshold)
        below = tuple(p for p in players if counts[p] < threshold)
    return SymbolComparison(
        icon=icon,
        counts=counts,
        most=tuple(p for p in players if counts[p] == high),
        least=tuple(p for p in players if counts[p] == low),
        at_least=at_least,
        below=below,
    )


def turn_order(snapshot: Snapshot, after: int) -> list[int]:
    """Every other player, starting with the one after `after`."""
    n = snapshot.num_players
    return [(after + offset) % n for offset in range(1, n)]


def demand_targets(snapshot: Snapshot, activating_player: int, icon: Icon,
                   cards: CardDatabase | None = None) -> list[int]:
    """Opponents with strictly fewer `icon` than the activating player."""
    own = count_icons(snapshot, activating_player, icon, cards)
    return [p for p in turn_order(snapshot, activating_player)
            if count_icons(snapshot, p, icon, cards) < own]


def sharing_players(snapshot: Snapshot, activating_player: int, icon: Icon,
                    cards: CardDatabase | None = None) -> list[int]:
    """Opponents with at least as many `icon` as the activating player."""
    own = count_icons(snapshot, activating_player, icon, cards)
    return [p for p in turn_order(snapshot, activating_player)
            if count_icons(snapshot, p, icon, cards) >= own]


def affected_players(snapshot: Snapshot, activating_player: int,
                     condition: Callable[[Snapshot, int], bool]) -> list[int]:
    """Opponents, in turn order, for which `condition(snapshot, player)` holds."""
    return [p for p in turn_order(snapshot, activating_player) if condition(snapshot, p)]
