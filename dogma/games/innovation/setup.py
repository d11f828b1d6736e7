"""
Innovation snapshot builders.

Full game setup (dealing, first melds, achievements) happens outside the
engine. These helpers build snapshots for demos, tests and replays:
- create_snapshot puts every card into its age pile
- arrange moves chosen cards from the supply to a player's zones

Both keep every card in exactly one place.
"""

from __future__ import annotations

import random
from dataclasses import replace
from typing import Iterable, Mapping

from ...engine_core.cards import MAX_AGE, CardDatabase, Color, get_card_database
from ...engine_core.state import ColorStack, PlayerBoard, Snapshot, SupplyPile, remove_one
from ...engine_core.zones import SplayDirection


def create_snapshot(
    num_players: int = 2,
    game_id: str = "game",
    random_seed: int | None = None,
    cards: CardDatabase | None = None,
) -> Snapshot:
    """
    Create a snapshot with empty boards and a full supply.

    Piles are in card id order (top = highest id) unless a seed is given,
    in which case each pile is shuffled deterministically.
    """
    if num_players < 2 or num_players > 4:
        raise ValueError("Innovation supports 2-4 players")
    db = cards if cards is not None else get_card_database()
    rng = random.Random(random_seed) if random_seed is not None else None

    supply = []
    for age in range(1, MAX_AGE + 1):
        pile = [card.card_id for card in db.by_age(age)]
        if rng is not None:
            rng.shuffle(pile)
        supply.append(SupplyPile(age=age, cards=tuple(pile)))

    return Snapshot(
        game_id=game_id,
        players=tuple(PlayerBoard() for _ in range(num_players)),
        supply=tuple(supply),
    )


def _take_from_supply(snapshot: Snapshot, card_id: int, db: CardDatabase) -> Snapshot:
    pile = snapshot.pile(db.get(card_id).age)
    if card_id not in pile.cards:
        raise ValueError(f"Card {card_id} is not in the age {pile.age} pile")
    return snapshot.with_pile(replace(pile, cards=remove_one(pile.cards, card_id)))


def arrange(
    snapshot: Snapshot,
    player: int,
    hand: Iterable[int] = (),
    board: Iterable[int] = (),
    score: Iterable[int] = (),
    splays: Mapping[Color, SplayDirection] | None = None,
    cards: CardDatabase | None = None,
) -> Snapshot:
    """
    Move cards from the supply to a player's hand, board and score pile.

    Board cards are placed in the given order, each on top of its color
    stack. No events are logged.
    """
    db = cards if cards is not None else get_card_database()
    target = snapshot.player(player)
    for card_id in hand:
        snapshot = _take_from_supply(snapshot, card_id, db)
        target = replace(target, hand=target.hand + (card_id,))
    for card_id in score:
        snapshot = _take_from_supply(snapshot, card_id, db)
        target = replace(target, score=target.score + (card_id,))
    for card_id in board:
        snapshot = _take_from_supply(snapshot, card_id, db)
        color = db.get(card_id).color
        stack = target.stack(color) or ColorStack(color=color)
        target = target.with_stack(stack.add_top(card_id))
    for color, direction in (splays or {}).items():
        stack = target.stack(color)
        if stack is None or len(stack) < 2:
            raise ValueError(f"Cannot splay {color.value} with fewer than two cards")
        target = target.with_stack(stack.set_splay(direction))
    return snapshot.with_player(player, target)
