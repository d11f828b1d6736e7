"""
Choice protocol - Decisions an effect needs from a player.

An effect that cannot continue without input returns a choice. The
executor stamps it with a unique id and deadline, stores it on the
snapshot next to the suspended continuation, and halts. The answer comes
back through `EffectResolver.resume`, which validates it here.

Choice kinds:
- select_cards: pick between min_cards and max_cards of the offered cards
- select_pile: pick one of the offered colors
- yes_no: accept or decline
- select_player: pick one of the offered players
- order_cards: put the offered cards in an order

Validation rules:
- An answer for another choice id or from another player is always fatal
- A malformed answer to a mandatory choice is fatal
- A malformed answer to an optional choice counts as a decline
- Declines reach the effect as None
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Annotated, Literal, Union

from pydantic import Field

from .cards import Color
from .errors import ChoiceMismatchError, InvalidAnswerError
from .zones import ZoneRef

logger = logging.getLogger(__name__)


# ============================================================================
# Choices
# ============================================================================

@dataclass(frozen=True, kw_only=True)
class BaseChoice:
    """Fields common to every choice."""
    choice_id: str
    player: int
    prompt: str
    source: str
    optional: bool = False
    deadline: float | None = None


@dataclass(frozen=True, kw_only=True)
class SelectCardsChoice(BaseChoice):
    kind: Literal["select_cards"] = "select_cards"
    zone: ZoneRef
    options: tuple[int, ...]
    min_cards: int = 1
    max_cards: int = 1


@dataclass(frozen=True, kw_only=True)
class SelectPileChoice(BaseChoice):
    kind: Literal["select_pile"] = "select_pile"
    available_colors: tuple[Color, ...]
    operation: str = "select"


@dataclass(frozen=True, kw_only=True)
class YesNoChoice(BaseChoice):
    kind: Literal["yes_no"] = "yes_no"
    yes_text: str = "Yes"
    no_text: str = "No"


@dataclass(frozen=True, kw_only=True)
class SelectPlayerChoice(BaseChoice):
    kind: Literal["select_player"] = "select_player"
    available_players: tuple[int, ...]
    operation: str = "select"


@dataclass(frozen=True, kw_only=True)
class OrderCardsChoice(BaseChoice):
    kind: Literal["order_cards"] = "order_cards"
    cards: tuple[int, ...]
    instruction: str = ""


Choice = Annotated[
    Union[SelectCardsChoice, SelectPileChoice, YesNoChoice, SelectPlayerChoice, OrderCardsChoice],
    Field(discriminator="kind"),
]


# ============================================================================
# Answers
# ============================================================================

@dataclass(frozen=True, kw_only=True)
class BaseAnswer:
    choice_id: str
    player: int


@dataclass(frozen=True, kw_only=True)
class SelectCardsAnswer(BaseAnswer):
    kind: Literal["select_cards"] = "select_cards"
    cards: tuple[int, ...] = ()


@dataclass(frozen=True, kw_only=True)
class SelectPileAnswer(BaseAnswer):
    kind: Literal["select_pile"] = "select_pile"
    color: Color | None = None


@dataclass(frozen=True, kw_only=True)
class YesNoAnswer(BaseAnswer):
    kind: Literal["yes_no"] = "yes_no"
    answer: bool = False


@dataclass(frozen=True, kw_only=True)
class SelectPlayerAnswer(BaseAnswer):
    kind: Literal["select_player"] = "select_player"
    selected_player: int | None = None


@dataclass(frozen=True, kw_only=True)
class OrderCardsAnswer(BaseAnswer):
    kind: Literal["order_cards"] = "order_cards"
    ordered: tuple[int, ...] = ()


ChoiceAnswer = Annotated[
    Union[SelectCardsAnswer, SelectPileAnswer, YesNoAnswer, SelectPlayerAnswer, OrderCardsAnswer],
    Field(discriminator="kind"),
]

ANSWER_TYPES = {
    "select_cards": SelectCardsAnswer,
    "select_pile": SelectPileAnswer,
    "yes_no": YesNoAnswer,
    "select_player": SelectPlayerAnswer,
    "order_cards": OrderCardsAnswer,
}


# ============================================================================
# Validation
# ============================================================================

def _constraint_problem(choice: BaseChoice, answer: BaseAnswer) -> str | None:
    """Describe why the answer breaks the choice's constraints, or None."""
    if answer.kind != choice.kind:
        return f"expected a {choice.kind} answer, got {answer.kind}"

    if isinstance(choice, SelectCardsChoice):
        picked = answer.cards
        if len(set(picked)) != len(picked):
            return "duplicate cards selected"
        unknown = [c for c in picked if c not in choice.options]
        if unknown:
            return f"cards {unknown} were not offered"
        if not choice.min_cards <= len(picked) <= choice.max_cards:
            return f"selected {len(picked)} cards, need {choice.min_cards}-{choice.max_cards}"
    elif isinstance(choice, SelectPileChoice):
        if answer.color not in choice.available_colors:
            return f"color {answer.color} was not offered"
    elif isinstance(choice, SelectPlayerChoice):
        if answer.selected_player not in choice.available_players:
            return f"player {answer.selected_player} was not offered"
    elif isinstance(choice, OrderCardsChoice):
        if sorted(answer.ordered) != sorted(choice.cards):
            return "ordering is not a permutation of the offered cards"
    return None


def is_decline(answer: BaseAnswer) -> bool:
    """True if the answer is the decline form of its kind."""
    if isinstance(answer, SelectCardsAnswer):
        return not answer.cards
    if isinstance(answer, SelectPileAnswer):
        return answer.color is None
    if isinstance(answer, YesNoAnswer):
        return not answer.answer
    if isinstance(answer, SelectPlayerAnswer):
        return answer.selected_player is None
    return False


def validate_answer(choice: BaseChoice, answer: BaseAnswer) -> BaseAnswer | None:
    """
    Check an answer against the pending choice.

    Returns the answer to hand to the effect, or None for a decline.
    Raises ChoiceMismatchError or InvalidAnswerError on fatal problems.
    """
    if answer.choice_id != choice.choice_id:
        raise ChoiceMismatchError(
            f"Answer is for choice {answer.choice_id!r}, pending is {choice.choice_id!r}"
        )
    if answer.player != choice.player:
        raise ChoiceMismatchError(
            f"Choice {choice.choice_id!r} belongs to player {choice.player}, "
            f"answered by player {answer.player}"
        )

    if choice.optional and answer.kind == choice.kind and is_decline(answer):
        return None

    problem = _constraint_problem(choice, answer)
    if problem is None:
        return answer
    if choice.optional:
        logger.warning(f"Treating answer to optional choice {choice.choice_id} as decline: {problem}")
        return None
    raise InvalidAnswerError(f"Choice {choice.choice_id}: {problem}")


def default_answer(choice: BaseChoice) -> BaseAnswer:
    """
    The answer used when a choice times out.

    Optional choices decline; mandatory ones take the first legal option(s).
    """
    answer_type = ANSWER_TYPES[choice.kind]
    base = {"choice_id": choice.choice_id, "player": choice.player}
    if choice.optional:
        return answer_type(**base)

    if isinstance(choice, SelectCardsChoice):
        return SelectCardsAnswer(**base, cards=choice.options[:choice.min_cards])
    if isinstance(choice, SelectPileChoice):
        return SelectPileAnswer(**base, color=choice.available_colors[0])
    if isinstance(choice, YesNoChoice):
        return YesNoAnswer(**base, answer=True)
    if isinstance(choice, SelectPlayerChoice):
        return SelectPlayerAnswer(**base, selected_player=choice.available_players[0])
    return OrderCardsAnswer(**base, ordered=choice.cards)


def stamp(choice: BaseChoice, choice_id: str, deadline: float | None) -> BaseChoice:
    """Return the choice with its executor-assigned id and deadline."""
    return replace(choice, choice_id=choice_id, deadline=deadline)


def selected_cards(answer: BaseAnswer | None) -> tuple[int, ...]:
    """Cards picked in a select_cards answer; empty for a decline."""
    if isinstance(answer, SelectCardsAnswer):
        return answer.cards
    return ()


def said_yes(answer: BaseAnswer | None) -> bool:
    return isinstance(answer, YesNoAnswer) and answer.answer
