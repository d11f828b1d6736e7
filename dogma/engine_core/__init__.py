"""
Engine Core - Deterministic state operations and resumable effect execution.

The engine is the runtime that:
1. Holds game state in immutable snapshots
2. Moves cards only through primitive operations
3. Counts visible icons and decides demand and sharing targets
4. Runs card effects, suspending them on player choices
5. Applies turn actions (draw, meld, dogma) and passes the turn
6. Logs every change as an event
"""

from .actions import Action, ActionProcessor, ActionResult, ActionType, Legality, legal_actions
from .cards import Card, CardDatabase, Color, Icon, IconSlot, get_card_database
from .choices import BaseAnswer, BaseChoice, validate_answer, default_answer
from .dogma import DogmaLevel, DogmaProgram, demand, non_demand, simple
from .effect_resolver import (
    Complete,
    Continue,
    EffectContext,
    EffectKind,
    EffectResolver,
    ExecutionOutcome,
    NeedChoice,
    ResolverState,
)
from .events import EventType, GameEvent
from .registry import EffectRegistry
from .state import ColorStack, GamePhase, PlayerBoard, Snapshot, SupplyPile, SuspendedEffect
from .zones import SplayDirection, Zone, ZoneRef

__all__ = [
    "Action",
    "ActionProcessor",
    "ActionResult",
    "ActionType",
    "Legality",
    "legal_actions",
    "Card",
    "CardDatabase",
    "Color",
    "Icon",
    "IconSlot",
    "get_card_database",
    "BaseAnswer",
    "BaseChoice",
    "validate_answer",
    "default_answer",
    "DogmaLevel",
    "DogmaProgram",
    "demand",
    "non_demand",
    "simple",
    "Complete",
    "Continue",
    "EffectContext",
    "EffectKind",
    "EffectResolver",
    "ExecutionOutcome",
    "NeedChoice",
    "ResolverState",
    "EventType",
    "GameEvent",
    "EffectRegistry",
    "ColorStack",
    "GamePhase",
    "PlayerBoard",
    "Snapshot",
    "SupplyPile",
    "SuspendedEffect",
    "SplayDirection",
    "Zone",
    "ZoneRef",
]
