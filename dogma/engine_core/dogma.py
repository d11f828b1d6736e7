"""
Dogma programs - Card effects built from levels.

A card's dogma is a list of levels run top to bottom. Each level is
either a demand or a non-demand effect, written for one executing player:

- Demand levels run once for every opponent with fewer of the card's
  dogma icon than the activator (recomputed when the level starts),
  with `context.player` set to that opponent.
- Non-demand levels run for every opponent sharing the dogma (at least
  as many icons, fixed at activation) and then for the activator.
- If a sharing opponent changed the game state, the activator draws a
  bonus card after the last level.

Level functions have the same shape as any effect function and may
suspend on choices; the program keeps their continuation under `inner`.
Values a level returns in `memory` are visible to every later execution
of the same activation through `context.memory`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from functools import wraps
from typing import Any, Callable

from .choices import BaseAnswer
from .effect_resolver import (
    Complete,
    Continue,
    EffectContext,
    EffectFunction,
    EffectKind,
    EffectResult,
    NeedChoice,
)
from .errors import UnknownStepError
from .events import EventType, GameEvent, changes_state, emit
from .icons import count_icons
from .primitives import draw, highest_top_age
from .state import Snapshot
from .symbols import demand_targets, sharing_players

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DogmaLevel:
    """One level of a dogma, run per executing player."""
    kind: EffectKind
    run: EffectFunction


def demand(fn: EffectFunction) -> DogmaLevel:
    return DogmaLevel(EffectKind.DEMAND, fn)


def non_demand(fn: EffectFunction) -> DogmaLevel:
    return DogmaLevel(EffectKind.NON_DEMAND, fn)


def simple(fn: Callable[[EffectContext, list[GameEvent]], Snapshot]) -> EffectFunction:
    """Wrap a level that never needs a choice: fn(context, events) -> snapshot."""
    @wraps(fn)
    def run(context: EffectContext, state: dict[str, Any], answer: BaseAnswer | None = None) -> EffectResult:
        if state.get("step") != "start":
            raise UnknownStepError(context.source, state.get("step"))
        events: list[GameEvent] = []
        snapshot = fn(context, events)
        return Complete(snapshot, tuple(events))
    return run


class DogmaProgram:
    """
    An effect function assembled from dogma levels.

    Continuation steps:
    - start: log the activation, fix the sharing players
    - level: pick who executes the current level
    - run: drive the current level for the first player in the queue
    - bonus: sharing bonus draw, then complete
    """

    def __init__(self, *levels: DogmaLevel):
        if not levels:
            raise ValueError("A dogma needs at least one level")
        self.levels = tuple(levels)

    @property
    def effect_type(self) -> EffectKind:
        if any(level.kind == EffectKind.DEMAND for level in self.levels):
            return EffectKind.DEMAND
        return EffectKind.NON_DEMAND

    def __call__(self, context: EffectContext, state: dict[str, Any],
                 answer: BaseAnswer | None = None) -> EffectResult:
        step = state.get("step")
        if step == "start":
            return self._start(context)
        if step == "level":
            return self._level(context, state)
        if step == "run":
            return self._run(context, state, answer)
        if step == "bonus":
            return self._bonus(context, state)
        raise UnknownStepError(context.source, step)

    def _start(self, context: EffectContext) -> EffectResult:
        events: list[GameEvent] = []
        icon = context.card.dogma_icon
        activator = context.activating_player
        sharing = sharing_players(context.snapshot, activator, icon, context.cards)
        snapshot = emit(
            context.snapshot, EventType.DOGMA_ACTIVATED, events,
            source=context.source, player=activator, card_id=context.card.card_id,
            icon=icon.value,
            icon_count=count_icons(context.snapshot, activator, icon, context.cards),
            sharing=sharing,
        )
        return Continue(snapshot, {
            "step": "level",
            "level": 0,
            "sharing": sharing,
            "queue": [],
            "inner": None,
            "memory": {},
            "run_changed": False,
            "shared_changed": False,
        }, tuple(events))

    def _level(self, context: EffectContext, state: dict[str, Any]) -> EffectResult:
        index = state["level"]
        if index >= len(self.levels):
            return Continue(context.snapshot, {**state, "step": "bonus"})

        level = self.levels[index]
        events: list[GameEvent] = []
        snapshot = context.snapshot
        activator = context.activating_player
        if level.kind == EffectKind.DEMAND:
            queue = demand_targets(snapshot, activator, context.card.dogma_icon, context.cards)
            if queue:
                snapshot = emit(snapshot, EventType.DEMAND_ISSUED, events, source=context.source,
                                player=activator, card_id=context.card.card_id,
                                level=index + 1, targets=queue)
        else:
            queue = state["sharing"] + [activator]
            if state["sharing"]:
                snapshot = emit(snapshot, EventType.SHARED_EFFECT, events, source=context.source,
                                player=activator, card_id=context.card.card_id,
                                level=index + 1, sharing=state["sharing"])

        if not queue:
            logger.debug(f"{context.card.title} level {index + 1}: nobody affected")
            return Continue(snapshot, {**state, "level": index + 1}, tuple(events))
        return Continue(snapshot, {
            **state,
            "step": "run",
            "queue": queue,
            "inner": {"step": "start"},
            "run_changed": False,
        }, tuple(events))

    def _run(self, context: EffectContext, state: dict[str, Any],
             answer: BaseAnswer | None) -> EffectResult:
        index = state["level"]
        level = self.levels[index]
        queue = state["queue"]
        player = queue[0]
        level_context = replace(
            context,
            player=player,
            memory=dict(state["memory"]),
            affected_players=tuple(queue),
            sharing_players=tuple(state["sharing"]),
        )
        result = level.run(level_context, state["inner"], answer)

        memory = {**state["memory"], **(result.memory or {})}
        run_changed = state["run_changed"] or changes_state(result.events)
        if isinstance(result, NeedChoice):
            return NeedChoice(result.snapshot, result.choice, {
                **state, "inner": result.next_state, "memory": memory, "run_changed": run_changed,
            }, result.events)
        if isinstance(result, Continue):
            return Continue(result.snapshot, {
                **state, "inner": result.next_state, "memory": memory, "run_changed": run_changed,
            }, result.events)

        shared_changed = state["shared_changed"] or (
            level.kind == EffectKind.NON_DEMAND and player in state["sharing"] and run_changed
        )
        if len(queue) > 1:
            next_state = {
                **state,
                "queue": queue[1:],
                "inner": {"step": "start"},
                "memory": memory,
                "run_changed": False,
                "shared_changed": shared_changed,
            }
        else:
            next_state = {
                **state,
                "step": "level",
                "level": index + 1,
                "queue": [],
                "inner": None,
                "memory": memory,
                "run_changed": False,
                "shared_changed": shared_changed,
            }
        return Continue(result.snapshot, next_state, result.events)

    def _bonus(self, context: EffectContext, state: dict[str, Any]) -> EffectResult:
        events: list[GameEvent] = []
        snapshot = context.snapshot
        if state["shared_changed"]:
            activator = context.activating_player
            snapshot = emit(snapshot, EventType.DRAW_BONUS, events, source=context.source,
                            player=activator, card_id=context.card.card_id)
            age = highest_top_age(snapshot, activator, context.cards)
            snapshot = draw(snapshot, activator, age, events, source=context.source,
                            cards=context.cards)
        return Complete(snapshot, tuple(events), effect_type=self.effect_type)
