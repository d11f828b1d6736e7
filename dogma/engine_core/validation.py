"""
Snapshot validation - Invariant checks for a game snapshot.

Validates that:
1. Every card is in exactly one place (supply, hand, board, score)
2. Event ids strictly increase and timestamps never go backwards
3. Phase agrees with the pending choice and suspended effect
4. Turn state is in range
5. Stacks are non-empty, splayed only with two or more cards
6. Stacks only hold cards of their color (warning)
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass

from .cards import CardDatabase, get_card_database
from .events import check_event_sequence
from .state import GamePhase, Snapshot
from .zones import SplayDirection


@dataclass
class ValidationResult:
    """Result of validation, with errors and warnings."""
    valid: bool
    errors: list[str]
    warnings: list[str]


def card_locations(snapshot: Snapshot) -> Counter[int]:
    """How many times each card id appears anywhere in the snapshot."""
    seen: Counter[int] = Counter()
    for pile in snapshot.supply:
        seen.update(pile.cards)
    for board in snapshot.players:
        seen.update(board.all_cards())
    return seen


def validate_snapshot(snapshot: Snapshot, cards: CardDatabase | None = None,
                      complete_deck: bool = True) -> ValidationResult:
    """
    Check a snapshot's invariants.

    With complete_deck, every card of the database must be present;
    otherwise only duplicates and unknown ids are reported.
    """
    db = cards if cards is not None else get_card_database()
    errors: list[str] = []
    warnings: list[str] = []

    # Conservation
    seen = card_locations(snapshot)
    for card_id, count in sorted(seen.items()):
        if card_id not in db:
            errors.append(f"Unknown card {card_id} in snapshot")
        elif count > 1:
            errors.append(f"Card {card_id} appears {count} times")
    if complete_deck:
        missing = [c.card_id for c in db if c.card_id not in seen]
        if missing:
            errors.append(f"Cards missing from snapshot: {missing}")

    errors.extend(check_event_sequence(snapshot.events))
    if snapshot.events and snapshot.next_event_id <= snapshot.events[-1].id:
        errors.append("next_event_id would reuse a logged id")

    # Phase consistency
    waiting = snapshot.phase == GamePhase.AWAITING_CHOICE
    if waiting != (snapshot.pending_choice is not None):
        errors.append(f"Phase {snapshot.phase.value} disagrees with pending choice")
    if (snapshot.pending_choice is None) != (snapshot.suspended is None):
        errors.append("Pending choice and suspended effect must be set together")
    if snapshot.pending_choice is not None and snapshot.suspended is not None:
        if snapshot.pending_choice.choice_id != snapshot.suspended.choice_id:
            errors.append("Suspended effect waits on a different choice id")

    # Turn
    if not 0 <= snapshot.current_player < snapshot.num_players:
        errors.append(f"Current player {snapshot.current_player} is not in the game")
    if not 0 <= snapshot.actions_remaining <= 2:
        errors.append(f"Invalid actions_remaining: {snapshot.actions_remaining}")

    # Boards
    for player, board in enumerate(snapshot.players):
        colors = [stack.color for stack in board.stacks]
        if len(set(colors)) != len(colors):
            errors.append(f"Player {player} has two stacks of one color")
        for stack in board.stacks:
            if stack.is_empty:
                errors.append(f"Player {player} has an empty {stack.color.value} stack")
            if len(stack) < 2 and stack.splay != SplayDirection.NONE:
                errors.append(
                    f"Player {player} {stack.color.value} stack splayed with {len(stack)} card(s)"
                )
            for card_id in stack.cards:
                if card_id in db and db.get(card_id).color != stack.color:
                    warnings.append(
                        f"Card {card_id} sits in player {player}'s {stack.color.value} stack"
                    )

    return ValidationResult(valid=len(errors) == 0, errors=errors, warnings=warnings)
