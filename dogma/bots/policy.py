"""
Choice Policy - Automatic answers to pending choices.

A ChoicePolicy looks at a snapshot and its pending choice and returns an
answer. Policies stand in for players in demos, tests and replays:
- FirstLegalPolicy: deterministic, first legal option(s)
- RandomPolicy: seeded random legal answer
- ScriptedPolicy: replays a fixed list of answers

`play_out` drives an activation to completion, asking the policy of
whichever player each choice belongs to. `play_action` does the same for
a turn action.
"""

from __future__ import annotations

import logging
import random
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Iterable, Mapping, TYPE_CHECKING

from ..engine_core.choices import (
    BaseAnswer,
    BaseChoice,
    OrderCardsAnswer,
    OrderCardsChoice,
    SelectCardsAnswer,
    SelectCardsChoice,
    SelectPileAnswer,
    SelectPileChoice,
    SelectPlayerAnswer,
    SelectPlayerChoice,
    YesNoAnswer,
    YesNoChoice,
    default_answer,
)
from ..engine_core.actions import ActionResult
from ..engine_core.effect_resolver import ExecutionOutcome, ResolverState

if TYPE_CHECKING:
    from ..engine_core.actions import Action, ActionProcessor
    from ..engine_core.effect_resolver import EffectResolver
    from ..engine_core.state import Snapshot

logger = logging.getLogger(__name__)


class ChoicePolicy(ABC):
    """Abstract base class for choice policies."""

    @abstractmethod
    def answer(self, snapshot: Snapshot, choice: BaseChoice) -> BaseAnswer:
        """
        Answer a pending choice.

        Args:
            snapshot: Snapshot suspended on the choice
            choice: The choice that needs to be made

        Returns:
            An answer addressed to the choice's id and player
        """
        pass

    def get_name(self) -> str:
        """Get the policy's name/identifier."""
        return self.__class__.__name__


class FirstLegalPolicy(ChoicePolicy):
    """
    Always takes the first legal option(s), never declines.

    Used for deterministic testing and demos.
    """

    def answer(self, snapshot: Snapshot, choice: BaseChoice) -> BaseAnswer:
        if choice.optional and isinstance(choice, SelectCardsChoice):
            picked = choice.options[:max(choice.min_cards, 1)]
            return SelectCardsAnswer(choice_id=choice.choice_id, player=choice.player, cards=picked)
        if choice.optional and isinstance(choice, YesNoChoice):
            return YesNoAnswer(choice_id=choice.choice_id, player=choice.player, answer=True)
        return default_answer(replace(choice, optional=False))


class RandomPolicy(ChoicePolicy):
    """
    Random legal answers from a seeded generator.

    Used for property testing and baseline comparison.
    """

    def __init__(self, seed: int | None = None):
        self.rng = random.Random(seed)

    def answer(self, snapshot: Snapshot, choice: BaseChoice) -> BaseAnswer:
        base = {"choice_id": choice.choice_id, "player": choice.player}
        if isinstance(choice, SelectCardsChoice):
            high = min(choice.max_cards, len(choice.options))
            count = self.rng.randint(min(choice.min_cards, high), high)
            return SelectCardsAnswer(**base, cards=tuple(self.rng.sample(list(choice.options), count)))
        if isinstance(choice, SelectPileChoice):
            return SelectPileAnswer(**base, color=self.rng.choice(choice.available_colors))
        if isinstance(choice, SelectPlayerChoice):
            return SelectPlayerAnswer(**base, selected_player=self.rng.choice(choice.available_players))
        if isinstance(choice, OrderCardsChoice):
            ordered = list(choice.cards)
            self.rng.shuffle(ordered)
            return OrderCardsAnswer(**base, ordered=tuple(ordered))
        return YesNoAnswer(**base, answer=self.rng.random() < 0.5)


class ScriptedPolicy(ChoicePolicy):
    """
    Replays prepared answers in order.

    Each scripted answer is re-addressed to the choice being answered, so
    scripts do not need to know executor-assigned choice ids.
    """

    def __init__(self, answers: Iterable[BaseAnswer]):
        self.answers = list(answers)

    def answer(self, snapshot: Snapshot, choice: BaseChoice) -> BaseAnswer:
        if not self.answers:
            raise ValueError(f"No scripted answer left for choice {choice.choice_id}")
        return replace(self.answers.pop(0), choice_id=choice.choice_id, player=choice.player)


def play_out(
    resolver: EffectResolver,
    snapshot: Snapshot,
    card_id: int,
    player: int,
    policies: ChoicePolicy | Mapping[int, ChoicePolicy],
) -> ExecutionOutcome:
    """
    Activate a card and answer every choice until the effect completes.

    `policies` is one policy for everybody or a policy per player.
    Returns the final outcome with all events of the activation.
    """
    outcome = resolver.activate(snapshot, card_id, player)
    events = list(outcome.events)
    while outcome.state == ResolverState.AWAITING_CHOICE:
        choice = outcome.pending_choice
        policy = policies if isinstance(policies, ChoicePolicy) else policies[choice.player]
        answer = policy.answer(outcome.snapshot, choice)
        logger.debug(f"{policy.get_name()} answers {choice.choice_id}")
        outcome = resolver.resume(outcome.snapshot, answer)
        events.extend(outcome.events)
    return ExecutionOutcome(
        snapshot=outcome.snapshot,
        events=tuple(events),
        state=outcome.state,
        effect_type=outcome.effect_type,
        game_over=outcome.game_over,
    )


def play_action(
    processor: ActionProcessor,
    snapshot: Snapshot,
    action: Action,
    policies: ChoicePolicy | Mapping[int, ChoicePolicy],
) -> ActionResult:
    """
    Apply a turn action and answer every choice it stops on.

    Returns the last result with all events of the action, or the first
    failure.
    """
    result = processor.apply(snapshot, action)
    events = list(result.events)
    while result.success and result.pending_choice is not None:
        choice = result.pending_choice
        policy = policies if isinstance(policies, ChoicePolicy) else policies[choice.player]
        result = processor.resume(result.snapshot, policy.answer(result.snapshot, choice))
        events.extend(result.events)
    if not result.success:
        return result
    return replace(result, events=tuple(events))
