"""
Icon visibility and counting.

Icons are the core mechanic of Innovation:
- Each card has 4 icon slots (top, left, middle, right), any may be empty
- Icon counts decide who shares a dogma and who a demand hits
- A stack's splay direction decides which slots are visible

Visible slots for a stack:
- fewer than 2 cards, or not splayed: top only
- splayed left: top, left
- splayed right: top, left, middle
- splayed up: all four

The same slot set applies to every card in the stack.
"""

from __future__ import annotations

from collections import Counter

from .cards import Card, CardDatabase, Icon, IconSlot, get_card_database
from .state import ColorStack, Snapshot
from .zones import SplayDirection


VISIBLE_SLOTS: dict[SplayDirection, tuple[IconSlot, ...]] = {
    SplayDirection.NONE: (IconSlot.TOP,),
    SplayDirection.LEFT: (IconSlot.TOP, IconSlot.LEFT),
    SplayDirection.RIGHT: (IconSlot.TOP, IconSlot.LEFT, IconSlot.MIDDLE),
    SplayDirection.UP: (IconSlot.TOP, IconSlot.LEFT, IconSlot.MIDDLE, IconSlot.RIGHT),
}


def visible_slots(stack: ColorStack) -> tuple[IconSlot, ...]:
    """Slots that count for every card in the stack."""
    if len(stack) < 2:
        return VISIBLE_SLOTS[SplayDirection.NONE]
    return VISIBLE_SLOTS[stack.splay]


def stack_icons(stack: ColorStack, cards: CardDatabase | None = None) -> Counter[Icon]:
    """Count every visible non-empty icon in one stack."""
    db = cards if cards is not None else get_card_database()
    slots = visible_slots(stack)
    counts: Counter[Icon] = Counter()
    for card_id in stack.cards:
        card = db.get(card_id)
        for slot in slots:
            icon = card.icon_at(slot)
            if icon != Icon.EMPTY:
                counts[icon] += 1
    return counts


def icon_counts(snapshot: Snapshot, player: int, cards: CardDatabase | None = None) -> Counter[Icon]:
    """All visible icons on a player's board."""
    total: Counter[Icon] = Counter()
    for stack in snapshot.player(player).stacks:
        total.update(stack_icons(stack, cards))
    return total


def count_icons(snapshot: Snapshot, player: int, icon: Icon, cards: CardDatabase | None = None) -> int:
    """Number of visible `icon` on the player's board."""
    if icon == Icon.EMPTY:
        return 0
    return icon_counts(snapshot, player, cards)[icon]


def has_icon(snapshot: Snapshot, player: int, icon: Icon, cards: CardDatabase | None = None) -> bool:
    return count_icons(snapshot, player, icon, cards) > 0


def card_has_icon(card: Card, icon: Icon) -> bool:
    """True if any slot of the card shows `icon`, regardless of visibility."""
    return icon in card.icons
