"""
Tests for turn actions (draw, meld, dogma).

Tests:
- Action application
- Turn advancement
- Legality and legal action enumeration
- Dogma actions that stop on choices
- Score victory
"""

from dataclasses import replace

import pytest

from ..bots import FirstLegalPolicy, play_action
from ..engine_core.actions import Action, ActionProcessor, ActionType, legal_actions
from ..engine_core.cards import Color
from ..engine_core.choices import SelectCardsAnswer
from ..engine_core.events import EventType
from ..engine_core.state import GamePhase
from ..games.innovation import arrange
from .conftest import (
    AGRICULTURE,
    CALENDAR,
    CODE_OF_LAWS,
    CONSTRUCTION,
    MYSTICISM,
    SAILING,
    TOOLS,
    WRITING,
)


@pytest.fixture
def processor(resolver):
    return ActionProcessor(resolver)


def types(result):
    return [e.type for e in result.events]


class TestDrawAction:
    """Tests for draw action."""

    def test_draw_uses_highest_top_card_age(self, processor, two_player):
        """Drawing takes a card of the highest top card's age."""
        snapshot = arrange(two_player, 0, board=[CALENDAR])

        result = processor.apply(snapshot, Action.draw(0))

        assert result.success
        assert result.snapshot.player(0).hand == (25,)
        assert result.events[0].type == EventType.DREW
        assert result.events[0].source == "draw_action"
        assert result.events[0].data["age"] == 2

    def test_first_turn_has_one_action(self, processor, two_player):
        """The first player's only action passes the turn."""
        result = processor.apply(two_player, Action.draw(0))
        final = result.snapshot

        assert types(result) == [EventType.DREW, EventType.TURN_ENDED, EventType.TURN_STARTED]
        assert final.current_player == 1
        assert final.turn_number == 2
        assert final.actions_remaining == 2

    def test_first_action_of_full_turn_keeps_turn(self, processor, two_player):
        """The first of two actions leaves the turn with the same player."""
        snapshot = replace(two_player, actions_remaining=2)

        result = processor.apply(snapshot, Action.draw(0))

        assert types(result) == [EventType.DREW]
        assert result.snapshot.current_player == 0
        assert result.snapshot.actions_remaining == 1

    def test_last_player_passes_to_first(self, processor, three_player):
        snapshot = replace(three_player, current_player=2, actions_remaining=1)

        result = processor.apply(snapshot, Action.draw(2))

        assert result.snapshot.current_player == 0

    def test_draw_wrong_player_fails(self, processor, two_player):
        """Drawing for wrong player fails."""
        result = processor.apply(two_player, Action.draw(1))

        assert not result.success
        assert result.error_code == "WRONG_PLAYER"
        assert "turn" in result.error.lower()

    def test_draw_past_last_age_ends_game_on_score(self, processor, two_player):
        """With no age 10 cards left, drawing a 10 ends the game."""
        snapshot = arrange(two_player, 0, board=[105])
        snapshot = arrange(snapshot, 1, score=range(96, 105))

        result = processor.apply(snapshot, Action.draw(0))

        assert result.success
        assert result.game_over
        assert result.winners == (1,)
        assert result.snapshot.phase == GamePhase.GAME_OVER
        assert types(result) == [EventType.GAME_END]

    def test_no_actions_when_game_over(self, processor, two_player):
        """Can't take actions when game is over."""
        snapshot = replace(two_player, phase=GamePhase.GAME_OVER)

        result = processor.apply(snapshot, Action.draw(0))

        assert not result.success
        assert result.error_code == "GAME_OVER"
        assert "over" in result.error.lower()


class TestMeldAction:
    """Tests for meld action."""

    def test_meld_from_hand(self, processor, two_player):
        """Melding moves card from hand to board."""
        snapshot = arrange(two_player, 0, hand=[WRITING, SAILING])

        result = processor.apply(snapshot, Action.meld(0, WRITING))
        player = result.snapshot.player(0)

        assert result.success
        assert player.hand == (SAILING,)
        assert player.stack(Color.BLUE).top == WRITING
        assert result.events[0].source == "meld_action"

    def test_meld_card_not_in_hand_fails(self, processor, two_player):
        """Melding a card not in hand fails."""
        result = processor.apply(two_player, Action.meld(0, WRITING))

        assert not result.success
        assert result.error_code == "CARD_NOT_IN_HAND"
        assert "not in hand" in result.error.lower()


class TestDogmaAction:
    """Tests for dogma action."""

    def test_dogma_runs_effect(self, processor, two_player):
        """The dogma action resolves the card's effect, sharing included."""
        snapshot = replace(arrange(two_player, 0, board=[WRITING]), actions_remaining=2)

        result = processor.apply(snapshot, Action.dogma(0, WRITING))
        final = result.snapshot

        assert result.success
        assert result.events[0].type == EventType.DOGMA_ACTIVATED
        assert final.player(1).hand == (25,)
        assert final.player(0).hand == (24, TOOLS)
        assert final.actions_remaining == 1

    def test_dogma_card_not_on_board_fails(self, processor, three_player):
        result = processor.apply(three_player, Action.dogma(0, WRITING))

        assert not result.success
        assert result.error_code == "NOT_TOP_CARD"

    def test_dogma_without_effect_fails(self, processor, two_player):
        snapshot = arrange(two_player, 0, board=[CALENDAR])

        result = processor.apply(snapshot, Action.dogma(0, CALENDAR))

        assert not result.success
        assert result.error_code == "NO_EFFECTS"

    def test_choice_holds_turn_until_answered(self, processor, two_player):
        snapshot = arrange(two_player, 0, hand=[MYSTICISM, AGRICULTURE], board=[CODE_OF_LAWS])

        started = processor.apply(snapshot, Action.dogma(0, CODE_OF_LAWS))

        assert started.success
        assert started.pending_choice.choice_id == "5.1.tuck"
        assert started.snapshot.current_player == 0
        assert started.snapshot.actions_remaining == 0

        done = processor.resume(started.snapshot, SelectCardsAnswer(choice_id="5.1.tuck", player=0))

        assert done.success
        assert done.pending_choice is None
        assert done.snapshot.current_player == 1
        assert types(done)[-2:] == [EventType.TURN_ENDED, EventType.TURN_STARTED]

    def test_actions_refused_while_choice_pending(self, processor, two_player):
        snapshot = arrange(two_player, 0, hand=[MYSTICISM], board=[CODE_OF_LAWS])
        started = processor.apply(snapshot, Action.dogma(0, CODE_OF_LAWS))

        for action in (Action.draw(0), Action.meld(0, MYSTICISM), Action.draw(1)):
            result = processor.apply(started.snapshot, action)
            assert not result.success
            assert result.error_code == "CHOICE_PENDING"

    def test_rejected_answer_is_failure(self, processor, two_player):
        snapshot = arrange(two_player, 0, hand=[MYSTICISM], board=[CODE_OF_LAWS])
        started = processor.apply(snapshot, Action.dogma(0, CODE_OF_LAWS))

        result = processor.resume(started.snapshot, SelectCardsAnswer(choice_id="nope", player=0))

        assert not result.success
        assert result.error_code == "ChoiceMismatchError"
        assert started.snapshot.pending_choice is not None


class TestLegalActions:
    """Tests for legal action enumeration."""

    def test_draw_melds_and_dogmas(self, registry, two_player):
        snapshot = arrange(two_player, 0, hand=[SAILING, CALENDAR], board=[WRITING, CONSTRUCTION])

        actions = legal_actions(snapshot, 0, registry)

        # Construction has no age 1 effect.
        assert actions == [
            Action.draw(0),
            Action.meld(0, SAILING),
            Action.meld(0, CALENDAR),
            Action.dogma(0, WRITING),
        ]

    def test_nothing_for_waiting_player(self, registry, two_player):
        assert legal_actions(two_player, 1, registry) == []

    def test_nothing_while_choice_pending(self, processor, two_player):
        snapshot = arrange(two_player, 0, hand=[MYSTICISM], board=[CODE_OF_LAWS])
        started = processor.apply(snapshot, Action.dogma(0, CODE_OF_LAWS))

        assert processor.legal_actions(started.snapshot, 0) == []

    def test_every_listed_action_applies(self, processor, two_player):
        snapshot = arrange(two_player, 0, hand=[SAILING, MYSTICISM], board=[CODE_OF_LAWS, WRITING])

        for action in processor.legal_actions(snapshot, 0):
            result = play_action(processor, snapshot, action, FirstLegalPolicy())
            assert result.success, action
            assert result.snapshot.current_player == 1
            assert processor.check(snapshot, action).legal


class TestPlayAction:

    def test_collects_events_across_choices(self, processor, two_player):
        snapshot = arrange(two_player, 0, hand=[MYSTICISM, AGRICULTURE], board=[CODE_OF_LAWS])

        result = play_action(processor, snapshot, Action.dogma(0, CODE_OF_LAWS), FirstLegalPolicy())

        assert result.success
        assert result.events[0].type == EventType.DOGMA_ACTIVATED
        assert result.events[-1].type == EventType.TURN_STARTED
        assert result.snapshot.pending_choice is None

    def test_illegal_action_returned_as_is(self, processor, two_player):
        result = play_action(processor, two_player, Action(ActionType.MELD, 0, WRITING), FirstLegalPolicy())

        assert not result.success
        assert result.error_code == "CARD_NOT_IN_HAND"
