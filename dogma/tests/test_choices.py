"""
Tests for the choice protocol.

Tests:
- Id and player mismatches are fatal
- Malformed answers: fatal when mandatory, decline when optional
- Default answers used on timeout
"""

import pytest

from ..engine_core.cards import Color
from ..engine_core.choices import (
    OrderCardsAnswer,
    OrderCardsChoice,
    SelectCardsAnswer,
    SelectCardsChoice,
    SelectPileAnswer,
    SelectPileChoice,
    SelectPlayerAnswer,
    SelectPlayerChoice,
    YesNoAnswer,
    YesNoChoice,
    default_answer,
    validate_answer,
)
from ..engine_core.errors import ChoiceMismatchError, InvalidAnswerError
from ..engine_core.zones import Zone, ZoneRef


def select_cards(optional=False, min_cards=1, max_cards=1):
    return SelectCardsChoice(
        choice_id="c1", player=0, prompt="Pick", source="test",
        optional=optional, zone=ZoneRef(player=0, zone=Zone.HAND),
        options=(1, 2, 3), min_cards=min_cards, max_cards=max_cards,
    )


class TestMismatch:
    """Answers addressed to the wrong choice or player."""

    def test_wrong_choice_id(self):
        with pytest.raises(ChoiceMismatchError):
            validate_answer(select_cards(), SelectCardsAnswer(choice_id="c2", player=0, cards=(1,)))

    def test_wrong_player(self):
        with pytest.raises(ChoiceMismatchError):
            validate_answer(select_cards(), SelectCardsAnswer(choice_id="c1", player=1, cards=(1,)))

    def test_wrong_player_fatal_even_if_optional(self):
        with pytest.raises(ChoiceMismatchError):
            validate_answer(select_cards(optional=True),
                            SelectCardsAnswer(choice_id="c1", player=1, cards=()))


class TestSelectCards:
    """Constraint checks for select_cards."""

    def test_valid_answer_passes_through(self):
        answer = SelectCardsAnswer(choice_id="c1", player=0, cards=(2,))

        assert validate_answer(select_cards(), answer) is answer

    @pytest.mark.parametrize("picked", [(4,), (1, 2), (), (1, 1)])
    def test_mandatory_violation_is_fatal(self, picked):
        with pytest.raises(InvalidAnswerError):
            validate_answer(select_cards(), SelectCardsAnswer(choice_id="c1", player=0, cards=picked))

    def test_optional_violation_is_decline(self):
        answer = SelectCardsAnswer(choice_id="c1", player=0, cards=(9,))

        assert validate_answer(select_cards(optional=True, min_cards=0), answer) is None

    def test_optional_empty_is_decline(self):
        answer = SelectCardsAnswer(choice_id="c1", player=0, cards=())

        assert validate_answer(select_cards(optional=True, min_cards=0), answer) is None

    def test_wrong_kind_on_mandatory_is_fatal(self):
        with pytest.raises(InvalidAnswerError):
            validate_answer(select_cards(), YesNoAnswer(choice_id="c1", player=0, answer=True))

    def test_wrong_kind_on_optional_is_decline(self):
        answer = YesNoAnswer(choice_id="c1", player=0, answer=True)

        assert validate_answer(select_cards(optional=True), answer) is None


class TestOtherKinds:
    """Constraint checks for the remaining choice kinds."""

    def test_yes_no_no_on_optional_is_decline(self):
        choice = YesNoChoice(choice_id="c1", player=0, prompt="?", source="test", optional=True)

        assert validate_answer(choice, YesNoAnswer(choice_id="c1", player=0, answer=False)) is None

    def test_yes_no_yes(self):
        choice = YesNoChoice(choice_id="c1", player=0, prompt="?", source="test", optional=True)
        answer = YesNoAnswer(choice_id="c1", player=0, answer=True)

        assert validate_answer(choice, answer) is answer

    def test_pile_not_offered(self):
        choice = SelectPileChoice(choice_id="c1", player=0, prompt="?", source="test",
                                  available_colors=(Color.RED, Color.BLUE))

        with pytest.raises(InvalidAnswerError):
            validate_answer(choice, SelectPileAnswer(choice_id="c1", player=0, color=Color.GREEN))

    def test_player_not_offered(self):
        choice = SelectPlayerChoice(choice_id="c1", player=0, prompt="?", source="test",
                                    available_players=(1,))

        with pytest.raises(InvalidAnswerError):
            validate_answer(choice, SelectPlayerAnswer(choice_id="c1", player=0, selected_player=2))

    def test_order_must_be_permutation(self):
        choice = OrderCardsChoice(choice_id="c1", player=0, prompt="?", source="test", cards=(1, 2, 3))

        with pytest.raises(InvalidAnswerError):
            validate_answer(choice, OrderCardsAnswer(choice_id="c1", player=0, ordered=(1, 2)))
        ok = OrderCardsAnswer(choice_id="c1", player=0, ordered=(3, 1, 2))
        assert validate_answer(choice, ok) is ok


class TestDefaultAnswer:
    """Answers synthesized when a choice times out."""

    def test_optional_declines(self):
        answer = default_answer(select_cards(optional=True, min_cards=0))

        assert answer == SelectCardsAnswer(choice_id="c1", player=0, cards=())

    def test_mandatory_takes_first_options(self):
        answer = default_answer(select_cards(min_cards=2, max_cards=2))

        assert answer.cards == (1, 2)
        assert validate_answer(select_cards(min_cards=2, max_cards=2), answer) is answer

    def test_mandatory_pile(self):
        choice = SelectPileChoice(choice_id="c1", player=0, prompt="?", source="test",
                                  available_colors=(Color.PURPLE,))

        assert default_answer(choice).color == Color.PURPLE
