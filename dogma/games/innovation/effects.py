"""
Innovation age 1 dogma effects.

Each card is a DogmaProgram: a list of demand / non-demand levels. Level
functions are written for the executing player (`ctx.player`); demands
hand cards to `ctx.activating_player`.

Levels that need a decision return NeedChoice with the step to resume
at; the answer arrives on the next call (None when declined).
"""

from __future__ import annotations

from typing import Any

from ...engine_core.cards import Color, Icon
from ...engine_core.choices import BaseAnswer, said_yes, selected_cards
from ...engine_core.dogma import DogmaProgram, demand, non_demand, simple
from ...engine_core.effect_resolver import Complete, Continue, EffectContext, EffectResult, NeedChoice
from ...engine_core.errors import UnknownStepError
from ...engine_core.events import GameEvent
from ...engine_core.icons import card_has_icon, count_icons
from ...engine_core.primitives import (
    draw,
    draw_and_meld,
    draw_and_reveal,
    draw_and_score,
    last_drawn,
    meld,
    return_card,
    score,
    splay,
    top_cards,
    transfer,
    tuck,
)
from ...engine_core.state import Snapshot
from ...engine_core.zones import SplayDirection, Zone


def _ages(ctx: EffectContext, card_ids) -> dict[int, int]:
    return {c: ctx.card_of(c).age for c in card_ids}


def _highest(ctx: EffectContext, card_ids) -> list[int]:
    ages = _ages(ctx, card_ids)
    if not ages:
        return []
    top = max(ages.values())
    return [c for c, age in ages.items() if age == top]


def _lowest(ctx: EffectContext, card_ids) -> list[int]:
    ages = _ages(ctx, card_ids)
    if not ages:
        return []
    bottom = min(ages.values())
    return [c for c, age in ages.items() if age == bottom]


def _with_icon(ctx: EffectContext, card_ids, icon: Icon) -> list[int]:
    return [c for c in card_ids if card_has_icon(ctx.card_of(c), icon)]


# ============================================================================
# Agriculture
# ============================================================================

def _agriculture(ctx: EffectContext, state: dict[str, Any], answer: BaseAnswer | None = None) -> EffectResult:
    """You may return a card from your hand. If you do, draw and score a card
    of value one higher than the card you returned."""
    step = state.get("step")
    if step == "start":
        hand = ctx.board.hand
        if not hand:
            return Complete(ctx.snapshot)
        choice = ctx.select_cards("return", "You may return a card from your hand",
                                  hand, min_cards=0, max_cards=1, optional=True)
        return NeedChoice(ctx.snapshot, choice, {"step": "return"})
    if step == "return":
        picked = selected_cards(answer)
        if not picked:
            return Complete(ctx.snapshot)
        events: list[GameEvent] = []
        card = ctx.card_of(picked[0])
        snapshot = return_card(ctx.snapshot, ctx.player, card.card_id, card.age, events, source=ctx.source)
        snapshot = draw_and_score(snapshot, ctx.player, card.age + 1, events,
                                  source=ctx.source, cards=ctx.cards)
        return Complete(snapshot, tuple(events))
    raise UnknownStepError(ctx.source, step)


AGRICULTURE = DogmaProgram(non_demand(_agriculture))


# ============================================================================
# Archery
# ============================================================================

def _archery(ctx: EffectContext, state: dict[str, Any], answer: BaseAnswer | None = None) -> EffectResult:
    """I demand you draw a 1, then transfer the highest card in your hand to my hand!"""
    step = state.get("step")
    events: list[GameEvent] = []
    if step == "start":
        snapshot = draw(ctx.snapshot, ctx.player, 1, events, source=ctx.source, cards=ctx.cards)
        highest = _highest(ctx, snapshot.player(ctx.player).hand)
        if len(highest) > 1:
            choice = ctx.select_cards("transfer", "Transfer the highest card in your hand", highest)
            return NeedChoice(snapshot, choice, {"step": "transfer"}, tuple(events))
        card_id = highest[0]
    elif step == "transfer":
        snapshot = ctx.snapshot
        card_id = selected_cards(answer)[0]
    else:
        raise UnknownStepError(ctx.source, step)
    snapshot = transfer(snapshot, ctx.player, ctx.activating_player, card_id, Zone.HAND, Zone.HAND,
                        events, source=ctx.source, cards=ctx.cards)
    return Complete(snapshot, tuple(events))


ARCHERY = DogmaProgram(demand(_archery))


# ============================================================================
# City States
# ============================================================================

def _city_states(ctx: EffectContext, state: dict[str, Any], answer: BaseAnswer | None = None) -> EffectResult:
    """I demand you transfer a top card with a castle from your board to my
    board if you have at least four castles on your board! If you do, draw a 1!"""
    step = state.get("step")
    if step == "start":
        if count_icons(ctx.snapshot, ctx.player, Icon.CASTLE, ctx.cards) < 4:
            return Complete(ctx.snapshot)
        options = _with_icon(ctx, top_cards(ctx.snapshot, ctx.player), Icon.CASTLE)
        if not options:
            return Complete(ctx.snapshot)
        if len(options) > 1:
            choice = ctx.select_cards("transfer", "Transfer a top card with a castle",
                                      options, zone=Zone.BOARD)
            return NeedChoice(ctx.snapshot, choice, {"step": "transfer"})
        card_id = options[0]
    elif step == "transfer":
        card_id = selected_cards(answer)[0]
    else:
        raise UnknownStepError(ctx.source, step)
    events: list[GameEvent] = []
    snapshot = transfer(ctx.snapshot, ctx.player, ctx.activating_player, card_id, Zone.BOARD, Zone.BOARD,
                        events, source=ctx.source, cards=ctx.cards)
    snapshot = draw(snapshot, ctx.player, 1, events, source=ctx.source, cards=ctx.cards)
    return Complete(snapshot, tuple(events))


CITY_STATES = DogmaProgram(demand(_city_states))


# ============================================================================
# Clothing
# ============================================================================

def _clothing_meld(ctx: EffectContext, state: dict[str, Any], answer: BaseAnswer | None = None) -> EffectResult:
    """Meld a card from your hand of different color from any card on your board."""
    step = state.get("step")
    if step == "start":
        colors = ctx.board.colors
        options = [c for c in ctx.board.hand if ctx.card_of(c).color not in colors]
        if not options:
            return Complete(ctx.snapshot)
        choice = ctx.select_cards("meld", "Meld a card of a color not on your board", options)
        return NeedChoice(ctx.snapshot, choice, {"step": "meld"})
    if step == "meld":
        events: list[GameEvent] = []
        snapshot = meld(ctx.snapshot, ctx.player, selected_cards(answer)[0], events,
                        source=ctx.source, cards=ctx.cards)
        return Complete(snapshot, tuple(events))
    raise UnknownStepError(ctx.source, step)


@simple
def _clothing_score(ctx: EffectContext, events: list[GameEvent]) -> Snapshot:
    """Draw and score a 1 for each color present on your board not present
    on any other player's board."""
    others = {color
              for p, board in enumerate(ctx.snapshot.players) if p != ctx.player
              for color in board.colors}
    unique = [color for color in ctx.board.colors if color not in others]
    if not unique:
        return ctx.snapshot
    return draw_and_score(ctx.snapshot, ctx.player, 1, events, count=len(unique),
                          source=ctx.source, cards=ctx.cards)


CLOTHING = DogmaProgram(non_demand(_clothing_meld), non_demand(_clothing_score))


# ============================================================================
# Code of Laws
# ============================================================================

def _code_of_laws(ctx: EffectContext, state: dict[str, Any], answer: BaseAnswer | None = None) -> EffectResult:
    """You may tuck a card from your hand of the same color as any card on
    your board. If you do, you may splay that color of your cards left."""
    step = state.get("step")
    if step == "start":
        colors = ctx.board.colors
        options = [c for c in ctx.board.hand if ctx.card_of(c).color in colors]
        if not options:
            return Complete(ctx.snapshot)
        choice = ctx.select_cards("tuck", "You may tuck a card matching a color on your board",
                                  options, min_cards=0, max_cards=1, optional=True)
        return NeedChoice(ctx.snapshot, choice, {"step": "tuck"})
    if step == "tuck":
        picked = selected_cards(answer)
        if not picked:
            return Complete(ctx.snapshot)
        events: list[GameEvent] = []
        color = ctx.card_of(picked[0]).color
        snapshot = tuck(ctx.snapshot, ctx.player, picked[0], events, source=ctx.source, cards=ctx.cards)
        choice = ctx.yes_no("splay", f"Splay your {color.value} cards left?")
        return NeedChoice(snapshot, choice, {"step": "splay", "color": color.value}, tuple(events))
    if step == "splay":
        if not said_yes(answer):
            return Complete(ctx.snapshot)
        events = []
        color = Color(state["color"])
        snapshot = splay(ctx.snapshot, ctx.player, color, SplayDirection.LEFT, events, source=ctx.source)
        return Complete(snapshot, tuple(events))
    raise UnknownStepError(ctx.source, step)


CODE_OF_LAWS = DogmaProgram(non_demand(_code_of_laws))


# ============================================================================
# Domestication
# ============================================================================

def _domestication(ctx: EffectContext, state: dict[str, Any], answer: BaseAnswer | None = None) -> EffectResult:
    """Meld the lowest card in your hand. Draw a 1."""
    step = state.get("step")
    events: list[GameEvent] = []
    snapshot = ctx.snapshot
    if step == "start":
        lowest = _lowest(ctx, ctx.board.hand)
        if len(lowest) > 1:
            choice = ctx.select_cards("meld", "Meld the lowest card in your hand", lowest)
            return NeedChoice(snapshot, choice, {"step": "meld"})
        if lowest:
            snapshot = meld(snapshot, ctx.player, lowest[0], events, source=ctx.source, cards=ctx.cards)
    elif step == "meld":
        snapshot = meld(snapshot, ctx.player, selected_cards(answer)[0], events,
                        source=ctx.source, cards=ctx.cards)
    else:
        raise UnknownStepError(ctx.source, step)
    snapshot = draw(snapshot, ctx.player, 1, events, source=ctx.source, cards=ctx.cards)
    return Complete(snapshot, tuple(events))


DOMESTICATION = DogmaProgram(non_demand(_domestication))


# ============================================================================
# Masonry
# ============================================================================

def _masonry(ctx: EffectContext, state: dict[str, Any], answer: BaseAnswer | None = None) -> EffectResult:
    """You may meld any number of cards from your hand, each with a castle.

    Monument qualification is left to the achievement checker, which sees
    the melded events.
    """
    step = state.get("step")
    if step == "start":
        options = _with_icon(ctx, ctx.board.hand, Icon.CASTLE)
        if not options:
            return Complete(ctx.snapshot)
        choice = ctx.select_cards("meld", "You may meld any cards with a castle", options,
                                  min_cards=0, max_cards=len(options), optional=True)
        return NeedChoice(ctx.snapshot, choice, {"step": "meld"})
    if step == "meld":
        events: list[GameEvent] = []
        snapshot = ctx.snapshot
        for card_id in selected_cards(answer):
            snapshot = meld(snapshot, ctx.player, card_id, events, source=ctx.source, cards=ctx.cards)
        return Complete(snapshot, tuple(events))
    raise UnknownStepError(ctx.source, step)


MASONRY = DogmaProgram(non_demand(_masonry))


# ============================================================================
# Metalworking
# ============================================================================

def _metalworking(ctx: EffectContext, state: dict[str, Any], answer: BaseAnswer | None = None) -> EffectResult:
    """Draw and reveal a 1. If it has a castle, score it and repeat this
    dogma effect. Otherwise, keep it."""
    step = state.get("step")
    if step != "start":
        raise UnknownStepError(ctx.source, step)
    events: list[GameEvent] = []
    snapshot = draw_and_reveal(ctx.snapshot, ctx.player, 1, events, source=ctx.source, cards=ctx.cards)
    card_id = last_drawn(snapshot, ctx.player)
    if not card_has_icon(ctx.card_of(card_id), Icon.CASTLE):
        return Complete(snapshot, tuple(events))
    snapshot = score(snapshot, ctx.player, card_id, events, source=ctx.source, cards=ctx.cards)
    return Continue(snapshot, {"step": "start"}, tuple(events))


METALWORKING = DogmaProgram(non_demand(_metalworking))


# ============================================================================
# Mysticism
# ============================================================================

@simple
def _mysticism(ctx: EffectContext, events: list[GameEvent]) -> Snapshot:
    """Draw a 1. If it is the same color as any card on your board, meld it and draw a 1."""
    colors = ctx.board.colors
    snapshot = draw(ctx.snapshot, ctx.player, 1, events, source=ctx.source, cards=ctx.cards)
    card_id = last_drawn(snapshot, ctx.player)
    if ctx.card_of(card_id).color not in colors:
        return snapshot
    snapshot = meld(snapshot, ctx.player, card_id, events, source=ctx.source, cards=ctx.cards)
    return draw(snapshot, ctx.player, 1, events, source=ctx.source, cards=ctx.cards)


MYSTICISM = DogmaProgram(non_demand(_mysticism))


# ============================================================================
# Oars
# ============================================================================

def _oars_demand(ctx: EffectContext, state: dict[str, Any], answer: BaseAnswer | None = None) -> EffectResult:
    """I demand you transfer a card with a crown from your hand to my score
    pile! If you do, draw a 1!"""
    step = state.get("step")
    if step == "start":
        options = _with_icon(ctx, ctx.board.hand, Icon.CROWN)
        if not options:
            return Complete(ctx.snapshot)
        if len(options) > 1:
            choice = ctx.select_cards("transfer", "Transfer a card with a crown", options)
            return NeedChoice(ctx.snapshot, choice, {"step": "transfer"})
        card_id = options[0]
    elif step == "transfer":
        card_id = selected_cards(answer)[0]
    else:
        raise UnknownStepError(ctx.source, step)
    events: list[GameEvent] = []
    snapshot = transfer(ctx.snapshot, ctx.player, ctx.activating_player, card_id, Zone.HAND, Zone.SCORE,
                        events, source=ctx.source, cards=ctx.cards)
    snapshot = draw(snapshot, ctx.player, 1, events, source=ctx.source, cards=ctx.cards)
    return Complete(snapshot, tuple(events), memory={"transferred": True})


@simple
def _oars_draw(ctx: EffectContext, events: list[GameEvent]) -> Snapshot:
    """If no cards were transferred due to this demand, draw a 1."""
    if ctx.memory.get("transferred"):
        return ctx.snapshot
    return draw(ctx.snapshot, ctx.player, 1, events, source=ctx.source, cards=ctx.cards)


OARS = DogmaProgram(demand(_oars_demand), non_demand(_oars_draw))


# ============================================================================
# Pottery
# ============================================================================

def _pottery_return(ctx: EffectContext, state: dict[str, Any], answer: BaseAnswer | None = None) -> EffectResult:
    """You may return up to three cards from your hand. If you returned any
    cards, draw and score a card of value equal to the number you returned."""
    step = state.get("step")
    if step == "start":
        hand = ctx.board.hand
        if not hand:
            return Complete(ctx.snapshot)
        choice = ctx.select_cards("return", "You may return up to three cards", hand,
                                  min_cards=0, max_cards=min(3, len(hand)), optional=True)
        return NeedChoice(ctx.snapshot, choice, {"step": "return"})
    if step == "return":
        picked = selected_cards(answer)
        if not picked:
            return Complete(ctx.snapshot)
        events: list[GameEvent] = []
        snapshot = ctx.snapshot
        for card_id in picked:
            snapshot = return_card(snapshot, ctx.player, card_id, ctx.card_of(card_id).age,
                                   events, source=ctx.source)
        snapshot = draw_and_score(snapshot, ctx.player, len(picked), events,
                                  source=ctx.source, cards=ctx.cards)
        return Complete(snapshot, tuple(events))
    raise UnknownStepError(ctx.source, step)


@simple
def _draw_a_one(ctx: EffectContext, events: list[GameEvent]) -> Snapshot:
    """Draw a 1."""
    return draw(ctx.snapshot, ctx.player, 1, events, source=ctx.source, cards=ctx.cards)


POTTERY = DogmaProgram(non_demand(_pottery_return), non_demand(_draw_a_one))


# ============================================================================
# Sailing, The Wheel, Writing
# ============================================================================

@simple
def _sailing(ctx: EffectContext, events: list[GameEvent]) -> Snapshot:
    """Draw and meld a 1."""
    return draw_and_meld(ctx.snapshot, ctx.player, 1, events, source=ctx.source, cards=ctx.cards)


@simple
def _the_wheel(ctx: EffectContext, events: list[GameEvent]) -> Snapshot:
    """Draw two 1."""
    snapshot = draw(ctx.snapshot, ctx.player, 1, events, source=ctx.source, cards=ctx.cards)
    return draw(snapshot, ctx.player, 1, events, source=ctx.source, cards=ctx.cards)


@simple
def _writing(ctx: EffectContext, events: list[GameEvent]) -> Snapshot:
    """Draw a 2."""
    return draw(ctx.snapshot, ctx.player, 2, events, source=ctx.source, cards=ctx.cards)


SAILING = DogmaProgram(non_demand(_sailing))
THE_WHEEL = DogmaProgram(non_demand(_the_wheel))
WRITING = DogmaProgram(non_demand(_writing))


# ============================================================================
# Tools
# ============================================================================

def _tools_return_three(ctx: EffectContext, state: dict[str, Any], answer: BaseAnswer | None = None) -> EffectResult:
    """You may return three cards from your hand. If you do, draw and meld a 3."""
    step = state.get("step")
    if step == "start":
        if len(ctx.board.hand) < 3:
            return Complete(ctx.snapshot)
        choice = ctx.yes_no("confirm", "Return three cards from your hand to draw and meld a 3?")
        return NeedChoice(ctx.snapshot, choice, {"step": "confirm"})
    if step == "confirm":
        if not said_yes(answer):
            return Complete(ctx.snapshot)
        choice = ctx.select_cards("return", "Return three cards", ctx.board.hand,
                                  min_cards=3, max_cards=3)
        return NeedChoice(ctx.snapshot, choice, {"step": "return"})
    if step == "return":
        events: list[GameEvent] = []
        snapshot = ctx.snapshot
        for card_id in selected_cards(answer):
            snapshot = return_card(snapshot, ctx.player, card_id, ctx.card_of(card_id).age,
                                   events, source=ctx.source)
        snapshot = draw_and_meld(snapshot, ctx.player, 3, events, source=ctx.source, cards=ctx.cards)
        return Complete(snapshot, tuple(events))
    raise UnknownStepError(ctx.source, step)


def _tools_return_a_three(ctx: EffectContext, state: dict[str, Any], answer: BaseAnswer | None = None) -> EffectResult:
    """You may return a 3 from your hand. If you do, draw three 1."""
    step = state.get("step")
    if step == "start":
        options = [c for c in ctx.board.hand if ctx.card_of(c).age == 3]
        if not options:
            return Complete(ctx.snapshot)
        choice = ctx.select_cards("return", "You may return a 3 from your hand", options,
                                  min_cards=0, max_cards=1, optional=True)
        return NeedChoice(ctx.snapshot, choice, {"step": "return"})
    if step == "return":
        picked = selected_cards(answer)
        if not picked:
            return Complete(ctx.snapshot)
        events: list[GameEvent] = []
        snapshot = return_card(ctx.snapshot, ctx.player, picked[0], 3, events, source=ctx.source)
        for _ in range(3):
            snapshot = draw(snapshot, ctx.player, 1, events, source=ctx.source, cards=ctx.cards)
        return Complete(snapshot, tuple(events))
    raise UnknownStepError(ctx.source, step)


TOOLS = DogmaProgram(non_demand(_tools_return_three), non_demand(_tools_return_a_three))


AGE_1_EFFECTS = {
    "Agriculture": AGRICULTURE,
    "Archery": ARCHERY,
    "City States": CITY_STATES,
    "Clothing": CLOTHING,
    "Code of Laws": CODE_OF_LAWS,
    "Domestication": DOMESTICATION,
    "Masonry": MASONRY,
    "Metalworking": METALWORKING,
    "Mysticism": MYSTICISM,
    "Oars": OARS,
    "Pottery": POTTERY,
    "Sailing": SAILING,
    "The Wheel": THE_WHEEL,
    "Tools": TOOLS,
    "Writing": WRITING,
}
