"""
Game events - The append-only audit log.

Every state change appends one or more events to the snapshot. Events are
never removed or rewritten, and their ids strictly increase within a game.
Consumers (achievement checkers, replay tools, UIs) read the log and may
emit their own events through `emit`.

Payload values are restricted to JSON primitives (str, int, float, bool,
None and lists of them) so snapshots survive a JSON round trip unchanged.
Payloads are read-only: mappings become MappingProxyType and lists become
tuples when the event is built, and are turned back into dicts and lists
when the event is serialized.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Annotated, Any, Iterable, Mapping, TYPE_CHECKING

from pydantic import PlainSerializer

if TYPE_CHECKING:
    from .state import Snapshot


class EventType(str, Enum):
    """Kinds of logged events."""
    DREW = "drew"
    MELDED = "melded"
    SCORED = "scored"
    TUCKED = "tucked"
    SPLAYED = "splayed"
    TRANSFERRED = "transferred"
    RETURNED = "returned"
    CARD_REVEALED = "card_revealed"
    DOGMA_ACTIVATED = "dogma_activated"
    DEMAND_ISSUED = "demand_issued"
    SHARED_EFFECT = "shared_effect"
    DRAW_BONUS = "draw_bonus"
    CHOICE_REQUESTED = "choice_requested"
    CHOICE_ANSWERED = "choice_answered"
    CHOICE_EXPIRED = "choice_expired"
    GAME_END = "game_end"
    TURN_ENDED = "end_turn"
    TURN_STARTED = "start_turn"
    ACHIEVEMENT_CLAIMED = "achievement_claimed"


# Events that move or alter cards, as opposed to bookkeeping
STATE_CHANGING = frozenset({
    EventType.DREW,
    EventType.MELDED,
    EventType.SCORED,
    EventType.TUCKED,
    EventType.SPLAYED,
    EventType.TRANSFERRED,
    EventType.RETURNED,
})


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_thaw(v) for v in value]
    return value


EventData = Annotated[Mapping[str, Any], PlainSerializer(_thaw)]


@dataclass(frozen=True)
class GameEvent:
    """One entry in the event log."""
    id: int
    timestamp: float
    type: EventType
    source: str
    player: int | None = None
    card_id: int | None = None
    data: EventData = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "data", _freeze(self.data))


def emit(
    snapshot: Snapshot,
    event_type: EventType,
    events: list[GameEvent],
    *,
    source: str,
    player: int | None = None,
    card_id: int | None = None,
    **data: Any,
) -> Snapshot:
    """
    Append an event to the snapshot's log and to the caller's sink.

    The event is stamped with the next id and the snapshot's clock.
    Returns the new snapshot.
    """
    event = GameEvent(
        id=snapshot.next_event_id,
        timestamp=snapshot.clock,
        type=event_type,
        source=source,
        player=player,
        card_id=card_id,
        data=data,
    )
    events.append(event)
    return replace(
        snapshot,
        events=snapshot.events + (event,),
        next_event_id=snapshot.next_event_id + 1,
    )


def events_since(snapshot: Snapshot, event_id: int) -> tuple[GameEvent, ...]:
    """Events with id greater than `event_id`, oldest first."""
    return tuple(e for e in snapshot.events if e.id > event_id)


def events_of_type(events: Iterable[GameEvent], *types: EventType) -> list[GameEvent]:
    wanted = set(types)
    return [e for e in events if e.type in wanted]


def changes_state(events: Iterable[GameEvent]) -> bool:
    """True if any of the events moved or altered a card."""
    return any(e.type in STATE_CHANGING for e in events)


def check_event_sequence(events: Iterable[GameEvent]) -> list[str]:
    """Return problems with an event sequence (empty if ids strictly increase)."""
    problems = []
    last_id = 0
    last_time = float("-inf")
    for event in events:
        if event.id <= last_id:
            problems.append(f"Event id {event.id} does not follow {last_id}")
        if event.timestamp < last_time:
            problems.append(f"Event {event.id} timestamp goes backwards")
        last_id = max(last_id, event.id)
        last_time = max(last_time, event.timestamp)
    return problems
