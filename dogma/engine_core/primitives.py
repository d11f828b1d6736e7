"""
Primitive operations - The only code that moves cards.

Each primitive takes a snapshot, the acting player, its parameters and an
`events` list, and returns a new snapshot. Events emitted by the primitive
are appended to the new snapshot's log and to `events`, so a caller can
collect everything one step produced.

Primitives:
- draw: supply -> hand, falling back to higher (then lower) ages
- meld: hand -> top of color stack
- score: hand -> score pile
- tuck: hand -> bottom of color stack
- splay: set a stack's splay direction
- transfer: between zones of the same or different players
- return_card: hand -> bottom of supply pile
- reveal: show a card from hand, nothing moves
- exchange: swap cards between hand and score pile

Composites (draw_and_meld, draw_and_score, ...) draw and immediately apply
a second primitive to each drawn card. Failures propagate unchanged.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from .cards import CardDatabase, Color, MAX_AGE, get_card_database
from .errors import CardNotFoundError, GameEnded, SplayError, SupplyExhaustedError
from .events import EventType, GameEvent, emit
from .state import ColorStack, GamePhase, PlayerBoard, Snapshot, remove_one
from .zones import SplayDirection, Zone

logger = logging.getLogger(__name__)


def _db(cards: CardDatabase | None) -> CardDatabase:
    return cards if cards is not None else get_card_database()


def _take(board: PlayerBoard, card_id: int, zone: Zone, player: int) -> PlayerBoard:
    """Remove a card from one of the player's zones."""
    if zone == Zone.HAND:
        if card_id not in board.hand:
            raise CardNotFoundError(card_id, player, zone.value)
        return replace(board, hand=remove_one(board.hand, card_id))
    if zone == Zone.SCORE:
        if card_id not in board.score:
            raise CardNotFoundError(card_id, player, zone.value)
        return replace(board, score=remove_one(board.score, card_id))
    stack = board.find_on_board(card_id)
    if stack is None:
        raise CardNotFoundError(card_id, player, zone.value)
    return board.with_stack(stack.remove(card_id))


def _place(board: PlayerBoard, card_id: int, zone: Zone, color: Color) -> PlayerBoard:
    """Add a card to one of the player's zones (board: top of its color stack)."""
    if zone == Zone.HAND:
        return replace(board, hand=board.hand + (card_id,))
    if zone == Zone.SCORE:
        return replace(board, score=board.score + (card_id,))
    stack = board.stack(color) or ColorStack(color=color)
    return board.with_stack(stack.add_top(card_id))


# ============================================================================
# Game end
# ============================================================================

def end_game(snapshot: Snapshot, events: list[GameEvent], reason: str, source: str = "draw",
             cards: CardDatabase | None = None) -> Snapshot:
    """
    Finish the game on score.

    Winners are the players with the highest score total (ties share).
    Logs game_end and raises GameEnded with the final snapshot.
    """
    db = _db(cards)
    totals = [score_total(snapshot, p, db) for p in range(snapshot.num_players)]
    best = max(totals)
    winners = tuple(p for p, total in enumerate(totals) if total == best)
    snapshot = replace(snapshot, phase=GamePhase.GAME_OVER, winners=winners,
                       pending_choice=None, suspended=None)
    snapshot = emit(snapshot, EventType.GAME_END, events, source=source,
                    reason=reason, winners=list(winners), scores=totals)
    logger.info(f"Game {snapshot.game_id} over ({reason}), winners {list(winners)}")
    raise GameEnded(snapshot)


# ============================================================================
# Primitives
# ============================================================================

def draw(snapshot: Snapshot, player: int, age: int, events: list[GameEvent],
         source: str = "draw", cards: CardDatabase | None = None) -> Snapshot:
    """
    Draw the top card of the `age` pile into the player's hand.

    An empty pile falls through to the lowest non-empty higher pile, then
    to the lowest non-empty pile of any age. Drawing above the highest
    age ends the game.
    """
    if age > MAX_AGE:
        end_game(snapshot, events, reason=f"draw of age {age}", source=source, cards=cards)

    stocked = sorted((p for p in snapshot.supply if p.cards), key=lambda p: p.age)
    if not stocked:
        raise SupplyExhaustedError(f"No cards left in any supply pile (requested age {age})")
    higher = [p for p in stocked if p.age >= age]
    pile = higher[0] if higher else stocked[0]

    card_id = pile.top
    snapshot = snapshot.with_pile(replace(pile, cards=pile.cards[:-1]))
    board = snapshot.player(player)
    snapshot = snapshot.with_player(player, replace(board, hand=board.hand + (card_id,)))
    logger.debug(f"Player {player} drew {card_id} (age {pile.age}, requested {age})")
    return emit(snapshot, EventType.DREW, events, source=source, player=player,
                card_id=card_id, requested_age=age, age=pile.age)


def meld(snapshot: Snapshot, player: int, card_id: int, events: list[GameEvent],
         source: str = "meld", cards: CardDatabase | None = None) -> Snapshot:
    """Move a card from hand to the top of its color stack."""
    card = _db(cards).get(card_id)
    board = _take(snapshot.player(player), card_id, Zone.HAND, player)
    board = _place(board, card_id, Zone.BOARD, card.color)
    snapshot = snapshot.with_player(player, board)
    return emit(snapshot, EventType.MELDED, events, source=source, player=player,
                card_id=card_id, color=card.color.value)


def score(snapshot: Snapshot, player: int, card_id: int, events: list[GameEvent],
          source: str = "score", cards: CardDatabase | None = None) -> Snapshot:
    """Move a card from hand to the score pile."""
    card = _db(cards).get(card_id)
    board = _take(snapshot.player(player), card_id, Zone.HAND, player)
    snapshot = snapshot.with_player(player, replace(board, score=board.score + (card_id,)))
    return emit(snapshot, EventType.SCORED, events, source=source, player=player,
                card_id=card_id, points=card.age)


def tuck(snapshot: Snapshot, player: int, card_id: int, events: list[GameEvent],
         color: Color | None = None, source: str = "tuck",
         cards: CardDatabase | None = None) -> Snapshot:
    """Move a card from hand to the bottom of a color stack, creating it if needed."""
    color = color or _db(cards).get(card_id).color
    board = _take(snapshot.player(player), card_id, Zone.HAND, player)
    stack = board.stack(color) or ColorStack(color=color)
    snapshot = snapshot.with_player(player, board.with_stack(stack.add_bottom(card_id)))
    return emit(snapshot, EventType.TUCKED, events, source=source, player=player,
                card_id=card_id, color=color.value)


def splay(snapshot: Snapshot, player: int, color: Color, direction: SplayDirection,
          events: list[GameEvent], source: str = "splay") -> Snapshot:
    """Set the splay direction of a stack holding at least two cards."""
    board = snapshot.player(player)
    stack = board.stack(color)
    if stack is None or len(stack) < 2:
        raise SplayError(
            f"Player {player} cannot splay {color.value}: "
            f"{len(stack) if stack else 0} card(s) in stack"
        )
    snapshot = snapshot.with_player(player, board.with_stack(stack.set_splay(direction)))
    return emit(snapshot, EventType.SPLAYED, events, source=source, player=player,
                color=color.value, direction=direction.value, previous=stack.splay.value)


def transfer(snapshot: Snapshot, from_player: int, to_player: int, card_id: int,
             from_zone: Zone, to_zone: Zone, events: list[GameEvent],
             source: str = "transfer", cards: CardDatabase | None = None) -> Snapshot:
    """
    Move a card between zones, possibly between players.

    Board cards are found in any stack; cards placed on a board go on top
    of the stack matching their color.
    """
    card = _db(cards).get(card_id)
    source_board = _take(snapshot.player(from_player), card_id, from_zone, from_player)
    snapshot = snapshot.with_player(from_player, source_board)
    target_board = _place(snapshot.player(to_player), card_id, to_zone, card.color)
    snapshot = snapshot.with_player(to_player, target_board)
    return emit(snapshot, EventType.TRANSFERRED, events, source=source, player=from_player,
                card_id=card_id, to_player=to_player,
                from_zone=from_zone.value, to_zone=to_zone.value)


def return_card(snapshot: Snapshot, player: int, card_id: int, age: int,
                events: list[GameEvent], source: str = "return") -> Snapshot:
    """Move a card from hand to the bottom of the `age` supply pile."""
    pile = snapshot.pile(age)
    board = _take(snapshot.player(player), card_id, Zone.HAND, player)
    snapshot = snapshot.with_player(player, board)
    snapshot = snapshot.with_pile(replace(pile, cards=(card_id,) + pile.cards))
    return emit(snapshot, EventType.RETURNED, events, source=source, player=player,
                card_id=card_id, age=age)


def reveal(snapshot: Snapshot, player: int, card_id: int, events: list[GameEvent],
           source: str = "reveal") -> Snapshot:
    """Show a card from hand. Only the log changes."""
    if card_id not in snapshot.player(player).hand:
        raise CardNotFoundError(card_id, player, Zone.HAND.value)
    return emit(snapshot, EventType.CARD_REVEALED, events, source=source, player=player,
                card_id=card_id)


def exchange(snapshot: Snapshot, player: int, hand_cards: tuple[int, ...] | list[int],
             score_cards: tuple[int, ...] | list[int], events: list[GameEvent],
             source: str = "exchange", cards: CardDatabase | None = None) -> Snapshot:
    """Swap the given hand cards with the given score cards."""
    for card_id in score_cards:
        snapshot = transfer(snapshot, player, player, card_id, Zone.SCORE, Zone.HAND,
                            events, source=source, cards=cards)
    for card_id in hand_cards:
        snapshot = transfer(snapshot, player, player, card_id, Zone.HAND, Zone.SCORE,
                            events, source=source, cards=cards)
    return snapshot


# ============================================================================
# Composites
# ============================================================================

def draw_and_meld(snapshot: Snapshot, player: int, age: int, events: list[GameEvent],
                  count: int = 1, source: str = "draw_and_meld",
                  cards: CardDatabase | None = None) -> Snapshot:
    for _ in range(count):
        snapshot = draw(snapshot, player, age, events, source=source, cards=cards)
        snapshot = meld(snapshot, player, last_drawn(snapshot, player), events,
                        source=source, cards=cards)
    return snapshot


def draw_and_score(snapshot: Snapshot, player: int, age: int, events: list[GameEvent],
                   count: int = 1, source: str = "draw_and_score",
                   cards: CardDatabase | None = None) -> Snapshot:
    for _ in range(count):
        snapshot = draw(snapshot, player, age, events, source=source, cards=cards)
        snapshot = score(snapshot, player, last_drawn(snapshot, player), events,
                         source=source, cards=cards)
    return snapshot


def draw_and_tuck(snapshot: Snapshot, player: int, age: int, events: list[GameEvent],
                  count: int = 1, source: str = "draw_and_tuck",
                  cards: CardDatabase | None = None) -> Snapshot:
    for _ in range(count):
        snapshot = draw(snapshot, player, age, events, source=source, cards=cards)
        snapshot = tuck(snapshot, player, last_drawn(snapshot, player), events,
                        source=source, cards=cards)
    return snapshot


def draw_and_reveal(snapshot: Snapshot, player: int, age: int, events: list[GameEvent],
                    count: int = 1, source: str = "draw_and_reveal",
                    cards: CardDatabase | None = None) -> Snapshot:
    for _ in range(count):
        snapshot = draw(snapshot, player, age, events, source=source, cards=cards)
        snapshot = reveal(snapshot, player, last_drawn(snapshot, player), events, source=source)
    return snapshot


def draw_and_splay(snapshot: Snapshot, player: int, age: int, direction: SplayDirection,
                   events: list[GameEvent], count: int = 1, source: str = "draw_and_splay",
                   cards: CardDatabase | None = None) -> Snapshot:
    """Draw, then splay the stack matching each drawn card's color."""
    db = _db(cards)
    for _ in range(count):
        snapshot = draw(snapshot, player, age, events, source=source, cards=db)
        color = db.get(last_drawn(snapshot, player)).color
        snapshot = splay(snapshot, player, color, direction, events, source=source)
    return snapshot


# ============================================================================
# Queries
# ============================================================================

def last_drawn(snapshot: Snapshot, player: int) -> int:
    """The card most recently added to the player's hand."""
    return snapshot.player(player).hand[-1]


def top_card(snapshot: Snapshot, player: int, color: Color) -> int | None:
    stack = snapshot.player(player).stack(color)
    return stack.top if stack else None


def top_cards(snapshot: Snapshot, player: int) -> tuple[int, ...]:
    """Top card of every stack, in color order."""
    return tuple(stack.top for stack in snapshot.player(player).stacks)


def highest_top_age(snapshot: Snapshot, player: int, cards: CardDatabase | None = None) -> int:
    """Age a plain draw action uses: the highest top card, or 1 on an empty board."""
    db = _db(cards)
    return max((db.get(c).age for c in top_cards(snapshot, player)), default=1)


def score_total(snapshot: Snapshot, player: int, cards: CardDatabase | None = None) -> int:
    """Sum of the ages of the cards in the player's score pile."""
    db = _db(cards)
    return sum(db.get(c).age for c in snapshot.player(player).score)
