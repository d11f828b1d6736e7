"""
Snapshot serialization.

Snapshots and choice answers are plain dataclasses; pydantic type
adapters turn them into JSON and back. A snapshot suspended on a choice
can be dumped, loaded elsewhere and resumed with the same result.
"""

from __future__ import annotations

from typing import Any

from pydantic import TypeAdapter

from .choices import BaseAnswer, Choice, ChoiceAnswer
from .events import GameEvent
from .state import Snapshot

_snapshot_adapter = TypeAdapter(Snapshot)
_answer_adapter = TypeAdapter(ChoiceAnswer)
_choice_adapter = TypeAdapter(Choice)
_event_adapter = TypeAdapter(GameEvent)


def dump_snapshot(snapshot: Snapshot) -> dict[str, Any]:
    return _snapshot_adapter.dump_python(snapshot, mode="json")


def load_snapshot(data: dict[str, Any]) -> Snapshot:
    return _snapshot_adapter.validate_python(data)


def dumps(snapshot: Snapshot, indent: int | None = None) -> str:
    return _snapshot_adapter.dump_json(snapshot, indent=indent).decode("utf-8")


def loads(text: str | bytes) -> Snapshot:
    return _snapshot_adapter.validate_json(text)


def dump_answer(answer: BaseAnswer) -> dict[str, Any]:
    return _answer_adapter.dump_python(answer, mode="json")


def load_answer(data: dict[str, Any] | str | bytes) -> BaseAnswer:
    """Parse an answer from a dict or JSON text; `kind` selects the type."""
    if isinstance(data, (str, bytes)):
        return _answer_adapter.validate_json(data)
    return _answer_adapter.validate_python(data)


def dump_choice(choice) -> dict[str, Any]:
    return _choice_adapter.dump_python(choice, mode="json")


def dump_event(event: GameEvent) -> dict[str, Any]:
    return _event_adapter.dump_python(event, mode="json")
