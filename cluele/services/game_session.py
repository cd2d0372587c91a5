"""
Service: game_session.py
Rôle:
- Machine à états d'une partie du jour : Playing → Won | Lost.
- Transitions pures : chaque fonction reçoit un `SessionState` et renvoie
  un nouvel état (jamais de mutation en place).

Transitions:
- submit_guess(state, raw, ...) → GuessOutcome (statut + message + nouvel état)
- skip_clue(state, clue_count)  → GuessOutcome (outil de test)

Projections:
- name_hint(display_name, guesses_used, enabled)
- share_message(state, url)
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, Literal, Optional, Tuple

Outcome = Literal["win", "loss"]

NAME_HINT_REVEAL_AFTER = 8
NAME_HINT_PLACEHOLDER = "_"

# Statuts renvoyés au front
STATUS_INVALID = "invalid"
STATUS_DUPLICATE = "duplicate"
STATUS_INCORRECT = "incorrect"
STATUS_CYCLED = "cycled"
STATUS_WON = "won"
STATUS_LOST = "lost"
STATUS_GAME_OVER = "game_over"
STATUS_NOT_READY = "not_ready"
STATUS_SKIPPED = "skipped"
STATUS_NO_MORE_CLUES = "no_more_clues"


def _plural(count: int, word: str, suffix: str = "s") -> str:
    return f"{count} {word}{'' if count == 1 else suffix}"


@dataclass(frozen=True)
class SessionState:
    hint_index: int = 0
    guesses_used: int = 0
    previous_guesses: Tuple[str, ...] = field(default_factory=tuple)
    game_over: bool = False
    outcome: Optional[Outcome] = None
    result_message: str = ""
    guesses_info: str = ""

    def has_guessed(self, guess: str) -> bool:
        wanted = guess.lower()
        return any(g.lower() == wanted for g in self.previous_guesses)


@dataclass(frozen=True)
class GuessOutcome:
    state: SessionState
    status: str
    message: str

    @property
    def accepted(self) -> bool:
        """True si la proposition a été comptée comme un essai."""
        return self.status in (STATUS_INCORRECT, STATUS_CYCLED, STATUS_WON, STATUS_LOST)


def initial_state() -> SessionState:
    return SessionState()


def is_known_name(raw: str, known_names: Iterable[str]) -> bool:
    wanted = (raw or "").strip().lower()
    if not wanted:
        return False
    return any(name.lower() == wanted for name in known_names)


def submit_guess(
    state: SessionState,
    raw: str,
    *,
    answer_name: str,
    known_names: Iterable[str],
    clue_count: int,
    infinite: bool = False,
) -> GuessOutcome:
    """
    Applique une proposition.
    - nom inconnu / doublon : état inchangé (pas compté),
    - bonne réponse (insensible à la casse) : Won,
    - sinon indice suivant, retour au premier indice en mode infini, ou Lost.
    """
    if state.game_over:
        return GuessOutcome(state, STATUS_GAME_OVER, state.result_message)
    if not answer_name:
        return GuessOutcome(state, STATUS_NOT_READY, "The game is still loading.")

    guess = (raw or "").strip()
    if not is_known_name(guess, known_names):
        message = "Please enter a valid guess"
        return GuessOutcome(replace(state, result_message=message), STATUS_INVALID, message)
    if state.has_guessed(guess):
        message = "This country has already been guessed."
        return GuessOutcome(replace(state, result_message=message), STATUS_DUPLICATE, message)

    played = replace(
        state,
        previous_guesses=state.previous_guesses + (guess,),
        guesses_used=state.guesses_used + 1,
    )

    if guess.lower() == answer_name.lower():
        used = played.guesses_used
        message = f"Correct! The country is {answer_name}!"
        won = replace(
            played,
            game_over=True,
            outcome="win",
            result_message=message,
            guesses_info=f"You got it in {_plural(used, 'guess', 'es')}!",
        )
        return GuessOutcome(won, STATUS_WON, message)

    next_hint = state.hint_index + 1
    if next_hint < clue_count:
        message = f"Incorrect, you have {_plural(clue_count - next_hint, 'clue')} remaining."
        return GuessOutcome(
            replace(played, hint_index=next_hint, result_message=message),
            STATUS_INCORRECT,
            message,
        )
    if infinite and clue_count:
        message = "Incorrect, cycling back to the first clue."
        return GuessOutcome(replace(played, hint_index=0, result_message=message), STATUS_CYCLED, message)

    message = f"Out of guesses! The country was {answer_name}."
    lost = replace(
        played,
        game_over=True,
        outcome="loss",
        result_message=message,
        guesses_info=f"You used all {played.guesses_used} guesses.",
    )
    return GuessOutcome(lost, STATUS_LOST, message)


def skip_clue(state: SessionState, clue_count: int) -> GuessOutcome:
    """Passe à l'indice suivant sans consommer d'essai (no-op en fin de liste)."""
    if state.game_over:
        return GuessOutcome(state, STATUS_GAME_OVER, state.result_message)
    next_hint = state.hint_index + 1
    if next_hint < clue_count:
        message = f"Skipped to clue {next_hint + 1}."
        return GuessOutcome(replace(state, hint_index=next_hint, result_message=message), STATUS_SKIPPED, message)
    message = "No more clues to skip to."
    return GuessOutcome(replace(state, result_message=message), STATUS_NO_MORE_CLUES, message)


def name_hint(display_name: str, guesses_used: int, enabled: bool) -> str:
    """Nom masqué ; première lettre révélée à partir de 8 essais."""
    if not enabled or not display_name:
        return ""
    if guesses_used >= NAME_HINT_REVEAL_AFTER:
        return display_name[0] + NAME_HINT_PLACEHOLDER * (len(display_name) - 1)
    return NAME_HINT_PLACEHOLDER * len(display_name)


def share_message(state: SessionState, url: str) -> Optional[str]:
    if state.outcome == "win":
        used = state.guesses_used
        return (
            "I bet you can't guess this country in less guesses than me! "
            f"({_plural(used, 'guess', 'es')}) {url}"
        )
    if state.outcome == "loss":
        return f"This country is impossible to guess! {url}"
    return None
