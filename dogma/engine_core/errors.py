"""
Engine errors.

Every failure the engine can raise derives from DogmaError, except for
GameEnded, which is a control signal raised when a draw ends the game.
Nothing in the engine retries: a primitive failure aborts the enclosing
effect and the caller keeps the snapshot it started from.
"""

from __future__ import annotations

from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from .state import Snapshot


class DogmaError(Exception):
    """Base class for engine errors."""


class UnknownCardError(DogmaError):
    """Card id is not present in the card database."""

    def __init__(self, card_id: Any):
        self.card_id = card_id
        super().__init__(f"Unknown card: {card_id!r}")


class CardNotFoundError(DogmaError):
    """Card is not in the zone an operation expected it in."""

    def __init__(self, card_id: int, player: int, zone: str):
        self.card_id = card_id
        self.player = player
        self.zone = zone
        super().__init__(f"Card {card_id} not in player {player}'s {zone}")


class ZoneError(DogmaError):
    """Referenced zone or pile does not exist."""


class SupplyExhaustedError(DogmaError):
    """Every supply pile is empty."""


class SplayError(DogmaError):
    """Splay precondition violated."""


class UnknownStepError(DogmaError):
    """Effect function received a continuation step it does not know."""

    def __init__(self, source: str, step: Any):
        self.source = source
        self.step = step
        super().__init__(f"{source}: unknown step {step!r}")


class IllegalActivationError(DogmaError):
    """Card is not one of the activating player's top cards."""

    def __init__(self, card_id: int, player: int):
        self.card_id = card_id
        self.player = player
        super().__init__(f"Card {card_id} is not a top card of player {player}")


class EffectLoopError(DogmaError):
    """Effect kept asking to continue past the configured step limit."""


class ChoiceError(DogmaError):
    """Base class for choice protocol errors."""


class NoPendingChoiceError(ChoiceError):
    """An answer arrived while nothing was pending."""


class ChoicePendingError(ChoiceError):
    """An activation was attempted while a choice is outstanding."""


class ChoiceMismatchError(ChoiceError):
    """Answer does not belong to the pending choice."""


class InvalidAnswerError(ChoiceError):
    """Answer violates the constraints of a mandatory choice."""


class GameOverError(DogmaError):
    """The game has already ended."""


class RegistryError(DogmaError):
    """Effect registry failed validation."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(
            f"Effect registry invalid: {len(errors)} error(s)\n" +
            "\n".join(f"  - {e}" for e in errors)
        )


class GameEnded(Exception):
    """Raised when a draw above the highest age ends the game.

    Carries the final snapshot (phase game_over, game_end event logged).
    """

    def __init__(self, snapshot: Snapshot):
        self.snapshot = snapshot
        super().__init__(f"Game {snapshot.game_id} ended")
