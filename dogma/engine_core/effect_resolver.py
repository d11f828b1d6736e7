"""
Effect Resolver - Resumable execution of card effects.

A card effect is a plain function

    effect(context, state, answer=None) -> Complete | NeedChoice | Continue

where `state` is the effect's continuation: a JSON-able dict whose `step`
key says where to pick up. The function returns one of:
- Complete: the effect is done
- NeedChoice: a player must decide; `next_state` is where to resume
- Continue: run again immediately with `next_state`

The resolver holds no game state of its own. A suspended effect lives
entirely on the snapshot (`pending_choice` + `suspended`), so a snapshot
can be saved, loaded in another process and resumed there.

Resolver states: idle -> running -> awaiting_choice -> running -> ... -> complete
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Mapping, TYPE_CHECKING, Union

from ..config import get_settings
from .cards import Card, CardDatabase, Color, get_card_database
from .choices import (
    BaseAnswer,
    BaseChoice,
    SelectCardsChoice,
    SelectPileChoice,
    SelectPlayerChoice,
    YesNoChoice,
    default_answer,
    stamp,
    validate_answer,
)
from .errors import (
    ChoicePendingError,
    EffectLoopError,
    GameEnded,
    GameOverError,
    IllegalActivationError,
    NoPendingChoiceError,
)
from .events import EventType, GameEvent, emit, events_since
from .primitives import top_cards
from .state import GamePhase, Snapshot, SuspendedEffect
from .zones import Zone, ZoneRef

if TYPE_CHECKING:
    from .registry import EffectRegistry

logger = logging.getLogger(__name__)

_UNSET: Any = object()


class EffectKind(str, Enum):
    """Whether an effect is a demand on opponents."""
    DEMAND = "demand"
    NON_DEMAND = "non_demand"


class ResolverState(Enum):
    """State of the effect resolver for one snapshot."""
    IDLE = "idle"  # No effect running
    RUNNING = "running"  # Inside an effect function
    AWAITING_CHOICE = "awaiting_choice"  # Paused for player input
    COMPLETE = "complete"  # Effect finished


# ============================================================================
# Effect results
# ============================================================================

@dataclass(frozen=True)
class Complete:
    """The effect finished."""
    snapshot: Snapshot
    events: tuple[GameEvent, ...] = ()
    effect_type: EffectKind = EffectKind.NON_DEMAND
    memory: dict[str, Any] | None = None


@dataclass(frozen=True)
class NeedChoice:
    """The effect needs a player's decision before it can go on."""
    snapshot: Snapshot
    choice: BaseChoice
    next_state: dict[str, Any]
    events: tuple[GameEvent, ...] = ()
    memory: dict[str, Any] | None = None


@dataclass(frozen=True)
class Continue:
    """The effect wants to run again with a new continuation."""
    snapshot: Snapshot
    next_state: dict[str, Any]
    events: tuple[GameEvent, ...] = ()
    memory: dict[str, Any] | None = None


EffectResult = Union[Complete, NeedChoice, Continue]


# ============================================================================
# Context
# ============================================================================

@dataclass(frozen=True)
class EffectContext:
    """
    Everything an effect function may look at.

    `player` is who is executing right now: the activating player, a
    player sharing the effect, or the target of a demand. `memory` holds
    bookkeeping carried between players of one activation (for example,
    whether a demand transferred anything).
    """
    snapshot: Snapshot
    card: Card
    activating_player: int
    player: int
    cards: CardDatabase
    memory: Mapping[str, Any] = field(default_factory=dict)
    affected_players: tuple[int, ...] = ()
    sharing_players: tuple[int, ...] = ()

    @property
    def source(self) -> str:
        return self.card.title.lower().replace(" ", "_")

    @property
    def is_activator(self) -> bool:
        return self.player == self.activating_player

    @property
    def board(self):
        return self.snapshot.player(self.player)

    def card_of(self, card_id: int) -> Card:
        return self.cards.get(card_id)

    def select_cards(self, name: str, prompt: str, options, *, min_cards: int = 1,
                     max_cards: int = 1, optional: bool = False,
                     zone: Zone = Zone.HAND) -> SelectCardsChoice:
        """A choice among the executing player's cards."""
        return SelectCardsChoice(
            choice_id=name,
            player=self.player,
            prompt=prompt,
            source=self.source,
            optional=optional,
            zone=ZoneRef(player=self.player, zone=zone),
            options=tuple(options),
            min_cards=min_cards,
            max_cards=max_cards,
        )

    def yes_no(self, name: str, prompt: str, optional: bool = True) -> YesNoChoice:
        return YesNoChoice(
            choice_id=name,
            player=self.player,
            prompt=prompt,
            source=self.source,
            optional=optional,
        )

    def select_pile(self, name: str, prompt: str, colors, operation: str = "select",
                    optional: bool = False) -> SelectPileChoice:
        return SelectPileChoice(
            choice_id=name,
            player=self.player,
            prompt=prompt,
            source=self.source,
            optional=optional,
            available_colors=tuple(Color(c) for c in colors),
            operation=operation,
        )

    def select_player(self, name: str, prompt: str, players, operation: str = "select",
                      optional: bool = False) -> SelectPlayerChoice:
        return SelectPlayerChoice(
            choice_id=name,
            player=self.player,
            prompt=prompt,
            source=self.source,
            optional=optional,
            available_players=tuple(players),
            operation=operation,
        )


EffectFunction = Callable[[EffectContext, dict, Union[BaseAnswer, None]], EffectResult]


# ============================================================================
# Resolver
# ============================================================================

@dataclass(frozen=True)
class ExecutionOutcome:
    """What one activate/resume/expire call produced."""
    snapshot: Snapshot
    events: tuple[GameEvent, ...]
    state: ResolverState
    pending_choice: BaseChoice | None = None
    effect_type: EffectKind | None = None
    game_over: bool = False

    @property
    def is_complete(self) -> bool:
        return self.state == ResolverState.COMPLETE


class EffectResolver:
    """
    Runs card effects to completion or to their next choice.

    Usage:
        resolver = EffectResolver(registry)
        outcome = resolver.activate(snapshot, card_id, player)
        while outcome.state == ResolverState.AWAITING_CHOICE:
            answer = ask(outcome.pending_choice)
            outcome = resolver.resume(outcome.snapshot, answer)
    """

    def __init__(
        self,
        registry: EffectRegistry,
        cards: CardDatabase | None = None,
        max_steps: int | None = None,
        choice_timeout: float | None = _UNSET,
    ):
        settings = get_settings()
        self.registry = registry
        self.cards = cards if cards is not None else get_card_database()
        self.max_steps = max_steps if max_steps is not None else settings.max_steps
        self.choice_timeout = settings.choice_timeout if choice_timeout is _UNSET else choice_timeout

    @staticmethod
    def state_of(snapshot: Snapshot) -> ResolverState:
        if snapshot.pending_choice is not None:
            return ResolverState.AWAITING_CHOICE
        return ResolverState.IDLE

    def activate(self, snapshot: Snapshot, card_id: int, player: int) -> ExecutionOutcome:
        """
        Run a card's effect for `player` from the beginning.

        The card must be one of the player's top cards.
        """
        if snapshot.is_over:
            raise GameOverError(f"Game {snapshot.game_id} is over")
        if snapshot.pending_choice is not None:
            raise ChoicePendingError(
                f"Choice {snapshot.pending_choice.choice_id} must be answered first"
            )
        self.registry.get(card_id)
        if card_id not in top_cards(snapshot, player):
            raise IllegalActivationError(card_id, player)
        logger.info(f"Player {player} activates {self.cards.get(card_id).title}")
        return self._run(snapshot, card_id, player, {"step": "start"}, None, snapshot.next_event_id)

    def resume(self, snapshot: Snapshot, answer: BaseAnswer) -> ExecutionOutcome:
        """Continue a suspended effect with the answer to its pending choice."""
        return self._resume(snapshot, answer, snapshot.next_event_id)

    def expire(self, snapshot: Snapshot, now: float) -> ExecutionOutcome | None:
        """
        Answer the pending choice with its default once its deadline passed.

        Deadlines are `snapshot.clock + choice_timeout` at the moment the
        choice was requested, so `now` must be on the same clock as the
        snapshot. Callers that compare against `time.time()` must also
        stamp the snapshot with wall-clock time (`snapshot.at(time.time())`)
        before activating or resuming, as the CLI does.

        Returns None if the choice has no deadline or it is still open.
        """
        choice = snapshot.pending_choice
        if choice is None:
            raise NoPendingChoiceError("No choice is pending")
        if choice.deadline is None or now < choice.deadline:
            return None
        start = snapshot.next_event_id
        logger.warning(f"Choice {choice.choice_id} for player {choice.player} expired")
        snapshot = snapshot.at(max(now, snapshot.clock))
        snapshot = emit(snapshot, EventType.CHOICE_EXPIRED, [], source=choice.source,
                        player=choice.player, choice_id=choice.choice_id)
        return self._resume(snapshot, default_answer(choice), start)

    def _resume(self, snapshot: Snapshot, answer: BaseAnswer, start: int) -> ExecutionOutcome:
        if snapshot.is_over:
            raise GameOverError(f"Game {snapshot.game_id} is over")
        choice = snapshot.pending_choice
        suspended = snapshot.suspended
        if choice is None or suspended is None:
            raise NoPendingChoiceError("No choice is pending")

        accepted = validate_answer(choice, answer)
        snapshot = replace(snapshot, pending_choice=None, suspended=None, phase=GamePhase.PLAYING)
        snapshot = emit(snapshot, EventType.CHOICE_ANSWERED, [], source=choice.source,
                        player=choice.player, choice_id=choice.choice_id,
                        declined=accepted is None)
        logger.info(f"Resuming {suspended.card_id} after choice {choice.choice_id}")
        return self._run(snapshot, suspended.card_id, suspended.activating_player,
                         suspended.state, accepted, start)

    def _run(self, snapshot: Snapshot, card_id: int, player: int, state: dict[str, Any],
             answer: BaseAnswer | None, start: int) -> ExecutionOutcome:
        effect = self.registry.get(card_id)
        card = self.cards.get(card_id)
        steps = 0
        try:
            while True:
                context = EffectContext(
                    snapshot=snapshot,
                    card=card,
                    activating_player=player,
                    player=player,
                    cards=self.cards,
                )
                result = effect(context, state, answer)
                answer = None
                snapshot = result.snapshot

                if isinstance(result, Complete):
                    logger.info(f"{card.title} complete for player {player}")
                    return ExecutionOutcome(
                        snapshot=snapshot,
                        events=events_since(snapshot, start - 1),
                        state=ResolverState.COMPLETE,
                        effect_type=result.effect_type,
                    )
                if isinstance(result, NeedChoice):
                    snapshot = self._suspend(snapshot, card_id, player, result)
                    return ExecutionOutcome(
                        snapshot=snapshot,
                        events=events_since(snapshot, start - 1),
                        state=ResolverState.AWAITING_CHOICE,
                        pending_choice=snapshot.pending_choice,
                    )
                if isinstance(result, Continue):
                    steps += 1
                    if steps > self.max_steps:
                        raise EffectLoopError(
                            f"{card.title} exceeded {self.max_steps} continue steps"
                        )
                    state = result.next_state
                    continue
                raise TypeError(f"{card.title} returned {type(result).__name__}, expected an effect result")
        except GameEnded as ended:
            final = ended.snapshot
            return ExecutionOutcome(
                snapshot=final,
                events=events_since(final, start - 1),
                state=ResolverState.COMPLETE,
                game_over=True,
            )

    def _suspend(self, snapshot: Snapshot, card_id: int, player: int, result: NeedChoice) -> Snapshot:
        seq = snapshot.choice_seq + 1
        choice_id = f"{card_id}.{seq}.{result.choice.choice_id}"
        deadline = snapshot.clock + self.choice_timeout if self.choice_timeout else None
        choice = stamp(result.choice, choice_id, deadline)
        snapshot = replace(
            snapshot,
            phase=GamePhase.AWAITING_CHOICE,
            choice_seq=seq,
            pending_choice=choice,
            suspended=SuspendedEffect(
                card_id=card_id,
                activating_player=player,
                choice_id=choice_id,
                state=result.next_state,
            ),
        )
        logger.info(f"Waiting on player {choice.player} for {choice.kind} choice {choice_id}")
        return emit(snapshot, EventType.CHOICE_REQUESTED, [], source=choice.source,
                    player=choice.player, choice_id=choice_id, kind=choice.kind)
