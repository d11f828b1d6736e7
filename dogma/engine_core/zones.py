"""
Zone names and splay directions shared by state, primitives and choices.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Zone(str, Enum):
    """Per-player card locations."""
    HAND = "hand"
    BOARD = "board"
    SCORE = "score"


class SplayDirection(str, Enum):
    """Splay directions for color stacks."""
    NONE = "none"
    LEFT = "left"
    RIGHT = "right"
    UP = "up"


@dataclass(frozen=True)
class ZoneRef:
    """A zone belonging to a particular player."""
    player: int
    zone: Zone
