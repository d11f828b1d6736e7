"""
Game State - Immutable snapshot of one game.

Design principles:
- Immutable: every update returns a new snapshot
- Structural sharing: untouched players, piles and stacks are reused
- Serializable: snapshots round-trip through JSON (see serialize.py)
- Observable: every state change is recorded in the event log

Card ids are ints referencing the card database. Players are identified
by their index in `players` (0..n-1), which is also turn order.

Turn state (`current_player`, `turn_number`, `actions_remaining`) is only
changed by the action layer (actions.py). The first turn of a game has a
single action.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Iterator

from .cards import Color
from .choices import Choice
from .events import GameEvent
from .errors import ZoneError
from .zones import SplayDirection, Zone


class GamePhase(str, Enum):
    """High-level game phases."""
    PLAYING = "playing"
    AWAITING_CHOICE = "awaiting_choice"
    GAME_OVER = "game_over"


@dataclass(frozen=True)
class ColorStack:
    """
    A player's stack of one color, bottom to top.

    Splay only matters while the stack holds two or more cards; removing
    cards below that resets it.
    """
    color: Color
    cards: tuple[int, ...] = ()
    splay: SplayDirection = SplayDirection.NONE

    def __len__(self) -> int:
        return len(self.cards)

    @property
    def top(self) -> int | None:
        """The top card of the stack."""
        return self.cards[-1] if self.cards else None

    @property
    def is_empty(self) -> bool:
        return not self.cards

    def add_top(self, card_id: int) -> ColorStack:
        """Return new stack with card added on top (meld)."""
        return replace(self, cards=self.cards + (card_id,))

    def add_bottom(self, card_id: int) -> ColorStack:
        """Return new stack with card added on bottom (tuck)."""
        return replace(self, cards=(card_id,) + self.cards)

    def remove(self, card_id: int) -> ColorStack:
        """Return new stack without the card."""
        cards = remove_one(self.cards, card_id)
        splay = self.splay if len(cards) >= 2 else SplayDirection.NONE
        return replace(self, cards=cards, splay=splay)

    def set_splay(self, direction: SplayDirection) -> ColorStack:
        """Return new stack with different splay direction."""
        return replace(self, splay=direction)


@dataclass(frozen=True)
class PlayerBoard:
    """
    Everything one player owns.

    Hand and score pile are unordered multisets stored as tuples;
    stacks hold at most one ColorStack per color, never an empty one.
    """
    hand: tuple[int, ...] = ()
    score: tuple[int, ...] = ()
    stacks: tuple[ColorStack, ...] = ()

    def stack(self, color: Color) -> ColorStack | None:
        for stack in self.stacks:
            if stack.color == color:
                return stack
        return None

    def with_stack(self, stack: ColorStack) -> PlayerBoard:
        """Return board with the stack of that color replaced (or removed if empty)."""
        others = [s for s in self.stacks if s.color != stack.color]
        if not stack.is_empty:
            others.append(stack)
        order = list(Color)
        others.sort(key=lambda s: order.index(s.color))
        return replace(self, stacks=tuple(others))

    def zone_cards(self, zone: Zone) -> tuple[int, ...]:
        if zone == Zone.HAND:
            return self.hand
        if zone == Zone.SCORE:
            return self.score
        return self.board_cards

    @property
    def board_cards(self) -> tuple[int, ...]:
        return tuple(card for stack in self.stacks for card in stack.cards)

    @property
    def colors(self) -> tuple[Color, ...]:
        return tuple(stack.color for stack in self.stacks)

    def find_on_board(self, card_id: int) -> ColorStack | None:
        for stack in self.stacks:
            if card_id in stack.cards:
                return stack
        return None

    def all_cards(self) -> Iterator[int]:
        yield from self.hand
        yield from self.score
        yield from self.board_cards


@dataclass(frozen=True)
class SupplyPile:
    """An age pile, bottom to top. Draws take the top (last) card."""
    age: int
    cards: tuple[int, ...] = ()

    def __len__(self) -> int:
        return len(self.cards)

    @property
    def top(self) -> int | None:
        return self.cards[-1] if self.cards else None


@dataclass(frozen=True)
class SuspendedEffect:
    """
    An effect waiting on a choice.

    `state` is the effect's continuation: plain JSON data with a `step`
    key, enough for the effect function to pick up where it stopped.
    """
    card_id: int
    activating_player: int
    choice_id: str
    state: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Snapshot:
    """
    The complete state of one game at one instant.

    Primitives never modify a snapshot; they return a new one.
    """
    game_id: str
    players: tuple[PlayerBoard, ...]
    supply: tuple[SupplyPile, ...]
    events: tuple[GameEvent, ...] = ()
    next_event_id: int = 1
    phase: GamePhase = GamePhase.PLAYING
    clock: float = 0.0
    choice_seq: int = 0
    pending_choice: Choice | None = None
    suspended: SuspendedEffect | None = None
    winners: tuple[int, ...] = ()
    current_player: int = 0
    turn_number: int = 1
    actions_remaining: int = 1
    version: int = 1

    @property
    def num_players(self) -> int:
        return len(self.players)

    def player(self, player: int) -> PlayerBoard:
        if not 0 <= player < len(self.players):
            raise ZoneError(f"No player {player} in game {self.game_id}")
        return self.players[player]

    def with_player(self, player: int, board: PlayerBoard) -> Snapshot:
        """Return new snapshot with one player's board replaced."""
        self.player(player)
        players = self.players[:player] + (board,) + self.players[player + 1:]
        return replace(self, players=players)

    def pile(self, age: int) -> SupplyPile:
        for pile in self.supply:
            if pile.age == age:
                return pile
        raise ZoneError(f"No supply pile for age {age}")

    def with_pile(self, pile: SupplyPile) -> Snapshot:
        supply = tuple(pile if p.age == pile.age else p for p in self.supply)
        return replace(self, supply=supply)

    def at(self, clock: float) -> Snapshot:
        """Return snapshot with the logical clock moved to `clock`."""
        return replace(self, clock=clock)

    @property
    def is_over(self) -> bool:
        return self.phase == GamePhase.GAME_OVER


def remove_one(cards: tuple[int, ...], card_id: int) -> tuple[int, ...]:
    """Remove one occurrence of card_id, keeping order."""
    index = cards.index(card_id)
    return cards[:index] + cards[index + 1:]
