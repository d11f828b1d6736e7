"""
Action System - Turn actions, their legality, and turn advancement.

A turn is a fixed number of actions: one on the first turn of the game,
two on every turn after it. The actions are:
1. draw: a card of the player's highest top card age
2. meld: a card from hand onto its color stack
3. dogma: one of the player's top cards, run by the EffectResolver

Achievements are claimed outside the engine.

Design principles:
- Stateless: turn state lives on the snapshot
- Validates before applying; an illegal action comes back as a failed
  ActionResult with a reason and an error code
- An action is spent when it starts. A dogma that stops on a choice keeps
  the turn until `resume` (or `expire`) completes it; only then does the
  turn pass
- Drawing past the last age ends the game on score
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING

from .cards import MAX_AGE
from .choices import BaseAnswer, BaseChoice
from .effect_resolver import EffectResolver, ExecutionOutcome, ResolverState
from .errors import DogmaError, GameEnded
from .events import EventType, GameEvent, emit, events_since
from .primitives import draw, highest_top_age, meld, top_cards
from .state import Snapshot

if TYPE_CHECKING:
    from .registry import EffectRegistry

logger = logging.getLogger(__name__)

ACTIONS_PER_TURN = 2


class ActionType(str, Enum):
    """Types of turn actions."""
    DRAW = "draw"
    MELD = "meld"
    DOGMA = "dogma"


@dataclass(frozen=True)
class Action:
    """One turn action by one player."""
    action_type: ActionType
    player: int
    card_id: int | None = None

    @classmethod
    def draw(cls, player: int) -> Action:
        return cls(action_type=ActionType.DRAW, player=player)

    @classmethod
    def meld(cls, player: int, card_id: int) -> Action:
        return cls(action_type=ActionType.MELD, player=player, card_id=card_id)

    @classmethod
    def dogma(cls, player: int, card_id: int) -> Action:
        return cls(action_type=ActionType.DOGMA, player=player, card_id=card_id)


@dataclass(frozen=True)
class Legality:
    """Whether an action may be taken now, and why not."""
    legal: bool
    reason: str | None = None
    code: str | None = None

    @classmethod
    def ok(cls) -> Legality:
        return cls(legal=True)

    @classmethod
    def refuse(cls, reason: str, code: str) -> Legality:
        return cls(legal=False, reason=reason, code=code)


@dataclass(frozen=True)
class ActionResult:
    """
    Result of applying an action, or of answering the choice it stopped on.

    On success `snapshot` is the new snapshot and `events` everything this
    call logged. `pending_choice` is set while a dogma action waits for an
    answer; the action is then unfinished and the turn has not moved.
    """
    success: bool
    snapshot: Snapshot | None = None
    events: tuple[GameEvent, ...] = ()
    error: str | None = None
    error_code: str | None = None
    pending_choice: BaseChoice | None = None
    game_over: bool = False

    @property
    def winners(self) -> tuple[int, ...]:
        return self.snapshot.winners if self.snapshot is not None else ()

    @classmethod
    def failure(cls, error: str, error_code: str | None = None) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code)


# ============================================================================
# Legality
# ============================================================================

def _check_turn(snapshot: Snapshot, player: int) -> Legality:
    if snapshot.is_over:
        return Legality.refuse(f"Game {snapshot.game_id} is over", "GAME_OVER")
    if snapshot.pending_choice is not None:
        return Legality.refuse(
            f"Choice {snapshot.pending_choice.choice_id} must be answered first", "CHOICE_PENDING"
        )
    if not 0 <= player < snapshot.num_players:
        return Legality.refuse(f"No player {player} in game {snapshot.game_id}", "UNKNOWN_PLAYER")
    if player != snapshot.current_player:
        return Legality.refuse(f"Not player {player}'s turn", "WRONG_PLAYER")
    if snapshot.actions_remaining <= 0:
        return Legality.refuse("No actions remaining this turn", "NO_ACTIONS")
    return Legality.ok()


def check_action(snapshot: Snapshot, action: Action, registry: EffectRegistry) -> Legality:
    """Decide whether `action` may be applied to `snapshot`."""
    result = _check_turn(snapshot, action.player)
    if not result.legal:
        return result

    board = snapshot.player(action.player)
    if action.action_type == ActionType.MELD:
        if action.card_id not in board.hand:
            return Legality.refuse(f"Card {action.card_id} not in hand", "CARD_NOT_IN_HAND")
    elif action.action_type == ActionType.DOGMA:
        if action.card_id not in top_cards(snapshot, action.player):
            return Legality.refuse(f"Card {action.card_id} is not a top card", "NOT_TOP_CARD")
        if action.card_id not in registry:
            return Legality.refuse(f"Card {action.card_id} has no registered effect", "NO_EFFECTS")
    return Legality.ok()


def legal_actions(snapshot: Snapshot, player: int, registry: EffectRegistry) -> list[Action]:
    """
    Every action `player` may take now.

    Empty when it is not their turn, the game is over or a choice is
    pending. Otherwise a draw, one meld per hand card and one dogma per
    top card with a registered effect.
    """
    if not _check_turn(snapshot, player).legal:
        return []
    actions = [Action.draw(player)]
    actions.extend(Action.meld(player, card_id) for card_id in dict.fromkeys(snapshot.player(player).hand))
    actions.extend(
        Action.dogma(player, card_id) for card_id in top_cards(snapshot, player) if card_id in registry
    )
    return actions


# ============================================================================
# Turn advancement
# ============================================================================

def advance_turn(snapshot: Snapshot, events: list[GameEvent]) -> Snapshot:
    """
    Pass the turn once the current player has no actions left.

    The next player in seat order gets a full turn. Logs end_turn and
    start_turn.
    """
    if snapshot.actions_remaining > 0:
        return snapshot
    ending = snapshot.current_player
    snapshot = emit(snapshot, EventType.TURN_ENDED, events, source="turn",
                    player=ending, turn_number=snapshot.turn_number)
    snapshot = replace(
        snapshot,
        current_player=(ending + 1) % snapshot.num_players,
        turn_number=snapshot.turn_number + 1,
        actions_remaining=ACTIONS_PER_TURN,
    )
    logger.debug(f"Turn {snapshot.turn_number} starts for player {snapshot.current_player}")
    return emit(snapshot, EventType.TURN_STARTED, events, source="turn",
                player=snapshot.current_player, turn_number=snapshot.turn_number,
                actions_remaining=snapshot.actions_remaining)


def draw_age(snapshot: Snapshot, player: int, cards=None) -> int:
    """
    Age a draw action draws from.

    The player's highest top card age, or the next higher pile with cards
    left. Past the last age when every such pile is empty.
    """
    age = highest_top_age(snapshot, player, cards)
    for pile in sorted(snapshot.supply, key=lambda p: p.age):
        if pile.age >= age and pile.cards:
            return pile.age
    return MAX_AGE + 1


# ============================================================================
# Processor
# ============================================================================

class ActionProcessor:
    """
    Applies turn actions to snapshots.

    Usage:
        processor = ActionProcessor(resolver)
        result = processor.apply(snapshot, Action.dogma(0, card_id))
        while result.pending_choice is not None:
            result = processor.resume(result.snapshot, ask(result.pending_choice))
    """

    def __init__(self, resolver: EffectResolver):
        self.resolver = resolver
        self.cards = resolver.cards

    @property
    def registry(self) -> EffectRegistry:
        return self.resolver.registry

    def check(self, snapshot: Snapshot, action: Action) -> Legality:
        return check_action(snapshot, action, self.registry)

    def legal_actions(self, snapshot: Snapshot, player: int) -> list[Action]:
        return legal_actions(snapshot, player, self.registry)

    def apply(self, snapshot: Snapshot, action: Action) -> ActionResult:
        """Validate and apply one action."""
        legality = self.check(snapshot, action)
        if not legality.legal:
            logger.warning(f"Refused {action.action_type.value} by player {action.player}: {legality.reason}")
            return ActionResult.failure(legality.reason, error_code=legality.code)

        start = snapshot.next_event_id
        snapshot = replace(snapshot, actions_remaining=snapshot.actions_remaining - 1)
        logger.info(f"Player {action.player} takes a {action.action_type.value} action")
        try:
            if action.action_type == ActionType.DOGMA:
                outcome = self.resolver.activate(snapshot, action.card_id, action.player)
                return self._finish(outcome, start)
            events: list[GameEvent] = []
            if action.action_type == ActionType.DRAW:
                age = draw_age(snapshot, action.player, self.cards)
                snapshot = draw(snapshot, action.player, age, events, source="draw_action", cards=self.cards)
            else:
                snapshot = meld(snapshot, action.player, action.card_id, events,
                                source="meld_action", cards=self.cards)
        except GameEnded as ended:
            return self._ended(ended.snapshot, start)
        except DogmaError as e:
            logger.warning(f"{action.action_type.value} by player {action.player} failed: {e}")
            return ActionResult.failure(str(e), error_code=type(e).__name__)

        snapshot = advance_turn(snapshot, [])
        return ActionResult(success=True, snapshot=snapshot, events=events_since(snapshot, start - 1))

    def resume(self, snapshot: Snapshot, answer: BaseAnswer) -> ActionResult:
        """Answer the choice a dogma action stopped on."""
        start = snapshot.next_event_id
        try:
            outcome = self.resolver.resume(snapshot, answer)
        except DogmaError as e:
            logger.warning(f"Answer to {answer.choice_id} rejected: {e}")
            return ActionResult.failure(str(e), error_code=type(e).__name__)
        return self._finish(outcome, start)

    def expire(self, snapshot: Snapshot, now: float) -> ActionResult | None:
        """Answer an overdue choice with its default; None if it is still open."""
        start = snapshot.next_event_id
        outcome = self.resolver.expire(snapshot, now)
        if outcome is None:
            return None
        return self._finish(outcome, start)

    def _finish(self, outcome: ExecutionOutcome, start: int) -> ActionResult:
        snapshot = outcome.snapshot
        if outcome.game_over:
            return self._ended(snapshot, start)
        if outcome.state == ResolverState.AWAITING_CHOICE:
            return ActionResult(
                success=True,
                snapshot=snapshot,
                events=events_since(snapshot, start - 1),
                pending_choice=outcome.pending_choice,
            )
        snapshot = advance_turn(snapshot, [])
        return ActionResult(success=True, snapshot=snapshot, events=events_since(snapshot, start - 1))

    def _ended(self, snapshot: Snapshot, start: int) -> ActionResult:
        logger.info(f"Game {snapshot.game_id} over, winners: {list(snapshot.winners)}")
        return ActionResult(
            success=True,
            snapshot=snapshot,
            events=events_since(snapshot, start - 1),
            game_over=True,
        )
