from __future__ import annotations

import pytest

from cluele.services.game_session import (
    STATUS_CYCLED,
    STATUS_DUPLICATE,
    STATUS_GAME_OVER,
    STATUS_INCORRECT,
    STATUS_INVALID,
    STATUS_LOST,
    STATUS_NO_MORE_CLUES,
    STATUS_NOT_READY,
    STATUS_SKIPPED,
    STATUS_WON,
    SessionState,
    initial_state,
    name_hint,
    share_message,
    skip_clue,
    submit_guess,
)

from conftest import NAMES

KNOWN = [item["name"] for item in NAMES]


def guess(state, raw, answer="France", clue_count=10, infinite=False):
    return submit_guess(state, raw, answer_name=answer, known_names=KNOWN, clue_count=clue_count, infinite=infinite)


def test_correct_guess_is_case_insensitive_and_counted():
    outcome = guess(initial_state(), "  france ")

    assert outcome.status == STATUS_WON
    assert outcome.accepted
    assert outcome.state.game_over is True
    assert outcome.state.outcome == "win"
    assert outcome.state.guesses_used == 1
    assert outcome.message == "Correct! The country is France!"
    assert outcome.state.guesses_info == "You got it in 1 guess!"


def test_win_after_misses_reports_count():
    state = guess(initial_state(), "Spain").state
    state = guess(state, "Italy").state
    outcome = guess(state, "France")

    assert outcome.state.guesses_used == 3
    assert outcome.state.previous_guesses == ("Spain", "Italy", "France")
    assert outcome.state.guesses_info == "You got it in 3 guesses!"


def test_wrong_guess_advances_clue():
    outcome = guess(initial_state(), "Spain")

    assert outcome.status == STATUS_INCORRECT
    assert outcome.state.hint_index == 1
    assert outcome.message == "Incorrect, you have 9 clues remaining."


@pytest.mark.parametrize("raw", ["", "   ", "Atlantis", "Fran"])
def test_unknown_name_is_not_counted(raw):
    outcome = guess(initial_state(), raw)

    assert outcome.status == STATUS_INVALID
    assert not outcome.accepted
    assert outcome.state.guesses_used == 0
    assert outcome.state.hint_index == 0
    assert outcome.message == "Please enter a valid guess"


def test_duplicate_guess_is_not_counted():
    state = guess(initial_state(), "Spain").state
    outcome = guess(state, "SPAIN")

    assert outcome.status == STATUS_DUPLICATE
    assert outcome.state.guesses_used == 1
    assert outcome.state.hint_index == 1
    assert outcome.message == "This country has already been guessed."


def test_ten_wrong_guesses_lose():
    wrong = [name for name in KNOWN if name != "France"][:10]
    state = initial_state()
    for index, name in enumerate(wrong):
        outcome = guess(state, name)
        state = outcome.state
        if index < 9:
            assert outcome.status == STATUS_INCORRECT

    assert outcome.status == STATUS_LOST
    assert state.game_over is True
    assert state.outcome == "loss"
    assert state.guesses_used == 10
    assert outcome.message == "Out of guesses! The country was France."
    assert state.guesses_info == "You used all 10 guesses."


def test_last_clue_message_is_singular():
    state = SessionState(hint_index=8)
    assert guess(state, "Spain").message == "Incorrect, you have 1 clue remaining."


def test_guess_after_game_over_is_refused():
    won = guess(initial_state(), "France").state
    outcome = guess(won, "Spain")

    assert outcome.status == STATUS_GAME_OVER
    assert outcome.state is won


def test_guess_before_answer_is_known():
    outcome = guess(initial_state(), "France", answer="")
    assert outcome.status == STATUS_NOT_READY
    assert outcome.state == initial_state()


def test_no_clues_loses_on_first_wrong_guess():
    outcome = guess(initial_state(), "Spain", clue_count=0)
    assert outcome.status == STATUS_LOST


def test_infinite_mode_cycles_instead_of_losing():
    state = SessionState(hint_index=2, guesses_used=2, previous_guesses=("Spain", "Italy"))
    outcome = guess(state, "Japan", clue_count=3, infinite=True)

    assert outcome.status == STATUS_CYCLED
    assert outcome.accepted
    assert outcome.state.hint_index == 0
    assert outcome.state.game_over is False
    assert outcome.state.guesses_used == 3


def test_skip_clue():
    outcome = skip_clue(initial_state(), clue_count=10)
    assert outcome.status == STATUS_SKIPPED
    assert outcome.state.hint_index == 1
    assert outcome.state.guesses_used == 0
    assert outcome.message == "Skipped to clue 2."

    last = skip_clue(SessionState(hint_index=9), clue_count=10)
    assert last.status == STATUS_NO_MORE_CLUES
    assert last.state.hint_index == 9


@pytest.mark.parametrize(
    "used, enabled, expected",
    [
        (0, True, "______"),
        (7, True, "______"),
        (8, True, "F_____"),
        (9, True, "F_____"),
        (9, False, ""),
    ],
)
def test_name_hint(used, enabled, expected):
    assert name_hint("France", used, enabled) == expected


def test_share_message():
    url = "https://cluele.test/"

    assert share_message(initial_state(), url) is None
    assert share_message(SessionState(outcome="loss", game_over=True), url) == (
        "This country is impossible to guess! https://cluele.test/"
    )
    assert share_message(SessionState(outcome="win", game_over=True, guesses_used=4), url) == (
        "I bet you can't guess this country in less guesses than me! (4 guesses) https://cluele.test/"
    )
