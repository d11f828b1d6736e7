"""
Tests for primitive operations.

Tests:
- Card movement between supply, hand, board and score
- Draw fallback across ages and game end
- Splay precondition and splay reset
- Immutability of the input snapshot
- Composite draw-and-X operations
"""

from dataclasses import replace

import pytest

from ..engine_core.cards import Color
from ..engine_core.errors import CardNotFoundError, GameEnded, SplayError, SupplyExhaustedError, ZoneError
from ..engine_core.events import EventType
from ..engine_core.primitives import (
    draw,
    draw_and_meld,
    draw_and_score,
    draw_and_splay,
    draw_and_tuck,
    exchange,
    highest_top_age,
    meld,
    return_card,
    reveal,
    score,
    score_total,
    splay,
    top_cards,
    transfer,
    tuck,
)
from ..engine_core.state import ColorStack, GamePhase, SupplyPile
from ..engine_core.zones import SplayDirection, Zone
from ..games.innovation import arrange
from .conftest import (
    AGRICULTURE,
    ARCHERY,
    CALENDAR,
    DOMESTICATION,
    MASONRY,
    METALWORKING,
    OARS,
    TOOLS,
    WRITING,
)


def with_supply(snapshot, piles):
    """Replace the supply with the given {age: cards} piles (others empty)."""
    supply = tuple(SupplyPile(age=age, cards=tuple(piles.get(age, ()))) for age in range(1, 11))
    return replace(snapshot, supply=supply)


class TestDraw:
    """Tests for draw."""

    def test_draw_takes_top_of_pile(self, two_player):
        events = []
        after = draw(two_player, 0, 1, events)

        assert after.player(0).hand == (WRITING,)
        assert after.pile(1).cards == tuple(range(1, 15))
        assert len(events) == 1
        assert events[0].type == EventType.DREW
        assert events[0].card_id == WRITING
        assert events[0].data == {"requested_age": 1, "age": 1}

    def test_draw_appends_to_log(self, two_player):
        events = []
        after = draw(two_player, 0, 1, events)

        assert after.events == tuple(events)
        assert after.next_event_id == 2
        assert after.events[0].id == 1

    def test_draw_does_not_modify_input(self, two_player):
        draw(two_player, 0, 1, [])

        assert two_player.player(0).hand == ()
        assert len(two_player.pile(1)) == 15
        assert two_player.events == ()

    def test_empty_pile_draws_lowest_higher_age(self, two_player):
        """Age 5 empty, ages 6 and 7 stocked: the age 6 card is drawn."""
        snapshot = with_supply(two_player, {6: (56,), 7: (66,)})
        events = []
        after = draw(snapshot, 0, 5, events)

        assert after.player(0).hand == (56,)
        assert events[0].data == {"requested_age": 5, "age": 6}
        assert after.pile(7).cards == (66,)

    def test_falls_back_to_lower_age(self, two_player):
        snapshot = with_supply(two_player, {1: (AGRICULTURE,)})
        after = draw(snapshot, 0, 3, [])

        assert after.player(0).hand == (AGRICULTURE,)

    def test_all_piles_empty_raises(self, two_player):
        snapshot = with_supply(two_player, {})

        with pytest.raises(SupplyExhaustedError):
            draw(snapshot, 0, 1, [])

    def test_draw_above_age_ten_ends_game(self, two_player):
        snapshot = arrange(two_player, 0, score=[CALENDAR])
        snapshot = arrange(snapshot, 1, score=[AGRICULTURE])
        events = []

        with pytest.raises(GameEnded) as exc_info:
            draw(snapshot, 1, 11, events)

        final = exc_info.value.snapshot
        assert final.phase == GamePhase.GAME_OVER
        assert final.winners == (0,)
        assert events[-1].type == EventType.GAME_END
        assert events[-1].data["scores"] == (2, 1)

    def test_game_end_tie_shares_win(self, two_player):
        with pytest.raises(GameEnded) as exc_info:
            draw(two_player, 0, 11, [])

        assert exc_info.value.snapshot.winners == (0, 1)

    def test_unknown_player_raises(self, two_player):
        with pytest.raises(ZoneError):
            draw(two_player, 5, 1, [])


class TestMeldScoreTuck:
    """Tests for hand to board and score moves."""

    def test_meld_creates_stack(self, two_player):
        snapshot = arrange(two_player, 0, hand=[AGRICULTURE])
        events = []
        after = meld(snapshot, 0, AGRICULTURE, events)

        assert after.player(0).hand == ()
        assert after.player(0).stack(Color.YELLOW).cards == (AGRICULTURE,)
        assert events[0].type == EventType.MELDED
        assert events[0].data == {"color": "yellow"}

    def test_meld_goes_on_top(self, two_player):
        snapshot = arrange(two_player, 0, hand=[MASONRY], board=[DOMESTICATION])
        after = meld(snapshot, 0, MASONRY, [])

        stack = after.player(0).stack(Color.YELLOW)
        assert stack.cards == (DOMESTICATION, MASONRY)
        assert stack.top == MASONRY

    def test_meld_card_not_in_hand_fails(self, two_player):
        with pytest.raises(CardNotFoundError):
            meld(two_player, 0, AGRICULTURE, [])

    def test_score_moves_to_score_pile(self, two_player):
        snapshot = arrange(two_player, 0, hand=[CALENDAR])
        events = []
        after = score(snapshot, 0, CALENDAR, events)

        assert after.player(0).score == (CALENDAR,)
        assert events[0].data == {"points": 2}
        assert score_total(after, 0) == 2

    def test_tuck_onto_missing_color_creates_stack(self, two_player):
        snapshot = arrange(two_player, 0, hand=[AGRICULTURE])
        after = tuck(snapshot, 0, AGRICULTURE, [])

        stack = after.player(0).stack(Color.YELLOW)
        assert stack == ColorStack(color=Color.YELLOW, cards=(AGRICULTURE,))

    def test_tuck_goes_to_bottom(self, two_player):
        snapshot = arrange(two_player, 0, hand=[MASONRY], board=[DOMESTICATION])
        events = []
        after = tuck(snapshot, 0, MASONRY, events)

        assert after.player(0).stack(Color.YELLOW).cards == (MASONRY, DOMESTICATION)
        assert events[0].type == EventType.TUCKED

    def test_tuck_into_named_color(self, two_player):
        snapshot = arrange(two_player, 0, hand=[AGRICULTURE])
        after = tuck(snapshot, 0, AGRICULTURE, [], color=Color.RED)

        assert after.player(0).stack(Color.RED).cards == (AGRICULTURE,)


class TestSplay:
    """Tests for splay."""

    def test_splay_single_card_fails(self, two_player):
        snapshot = arrange(two_player, 0, board=[DOMESTICATION])

        with pytest.raises(SplayError):
            splay(snapshot, 0, Color.YELLOW, SplayDirection.LEFT, [])

    def test_splay_missing_stack_fails(self, two_player):
        with pytest.raises(SplayError):
            splay(two_player, 0, Color.BLUE, SplayDirection.UP, [])

    def test_splay_two_cards(self, two_player):
        snapshot = arrange(two_player, 0, board=[DOMESTICATION, MASONRY])
        events = []
        after = splay(snapshot, 0, Color.YELLOW, SplayDirection.RIGHT, events)

        assert after.player(0).stack(Color.YELLOW).splay == SplayDirection.RIGHT
        assert events[0].data == {"color": "yellow", "direction": "right", "previous": "none"}


class TestTransfer:
    """Tests for transfer between zones and players."""

    def test_board_to_board_uses_card_color(self, two_player):
        snapshot = arrange(two_player, 0, board=[OARS])
        events = []
        after = transfer(snapshot, 0, 1, OARS, Zone.BOARD, Zone.BOARD, events)

        assert after.player(0).stack(Color.RED) is None
        assert after.player(1).stack(Color.RED).cards == (OARS,)
        assert events[0].data == {"to_player": 1, "from_zone": "board", "to_zone": "board"}

    def test_hand_to_score(self, two_player):
        snapshot = arrange(two_player, 1, hand=[WRITING])
        after = transfer(snapshot, 1, 0, WRITING, Zone.HAND, Zone.SCORE, [])

        assert after.player(1).hand == ()
        assert after.player(0).score == (WRITING,)

    def test_wrong_source_zone_fails(self, two_player):
        snapshot = arrange(two_player, 0, hand=[WRITING])

        with pytest.raises(CardNotFoundError):
            transfer(snapshot, 0, 1, WRITING, Zone.SCORE, Zone.HAND, [])

    def test_removal_below_two_cards_resets_splay(self, two_player):
        snapshot = arrange(two_player, 0, board=[ARCHERY, METALWORKING],
                           splays={Color.RED: SplayDirection.RIGHT})
        after = transfer(snapshot, 0, 1, METALWORKING, Zone.BOARD, Zone.HAND, [])

        stack = after.player(0).stack(Color.RED)
        assert stack.cards == (ARCHERY,)
        assert stack.splay == SplayDirection.NONE


class TestReturnRevealExchange:
    """Tests for return, reveal and exchange."""

    def test_return_goes_to_bottom_of_pile(self, two_player):
        snapshot = arrange(two_player, 0, hand=[WRITING])
        events = []
        after = return_card(snapshot, 0, WRITING, 1, events)

        assert after.pile(1).cards[0] == WRITING
        assert after.pile(1).top == TOOLS
        assert events[0].type == EventType.RETURNED

    def test_return_to_missing_pile_fails(self, two_player):
        snapshot = arrange(two_player, 0, hand=[WRITING])

        with pytest.raises(ZoneError):
            return_card(snapshot, 0, WRITING, 12, [])

    def test_reveal_only_logs(self, two_player):
        snapshot = arrange(two_player, 0, hand=[WRITING])
        events = []
        after = reveal(snapshot, 0, WRITING, events)

        assert after.players == snapshot.players
        assert events[0].type == EventType.CARD_REVEALED

    def test_reveal_requires_card_in_hand(self, two_player):
        with pytest.raises(CardNotFoundError):
            reveal(two_player, 0, WRITING, [])

    def test_exchange_swaps_hand_and_score(self, two_player):
        snapshot = arrange(two_player, 0, hand=[WRITING], score=[CALENDAR])
        after = exchange(snapshot, 0, [WRITING], [CALENDAR], [])

        assert after.player(0).hand == (CALENDAR,)
        assert after.player(0).score == (WRITING,)


class TestComposites:
    """Tests for draw-and-X composites."""

    def test_draw_and_meld_twice(self, two_player):
        events = []
        after = draw_and_meld(two_player, 0, 1, events, count=2)

        assert after.player(0).stack(Color.BLUE).cards == (WRITING, TOOLS)
        assert [e.type for e in events] == [
            EventType.DREW, EventType.MELDED, EventType.DREW, EventType.MELDED,
        ]

    def test_draw_and_tuck_twice(self, two_player):
        after = draw_and_tuck(two_player, 0, 1, [], count=2)

        assert after.player(0).stack(Color.BLUE).cards == (TOOLS, WRITING)

    def test_draw_and_score(self, two_player):
        after = draw_and_score(two_player, 0, 2, [])

        assert after.player(0).score == (25,)

    def test_draw_and_splay_failure_propagates(self, two_player):
        with pytest.raises(SplayError):
            draw_and_splay(two_player, 0, 1, SplayDirection.LEFT, [])


class TestQueries:
    """Tests for board queries."""

    def test_highest_top_age_empty_board(self, two_player):
        assert highest_top_age(two_player, 0) == 1

    def test_highest_top_age(self, two_player):
        snapshot = arrange(two_player, 0, board=[AGRICULTURE, CALENDAR])

        assert highest_top_age(snapshot, 0) == 2
        assert top_cards(snapshot, 0) == (AGRICULTURE, CALENDAR)
