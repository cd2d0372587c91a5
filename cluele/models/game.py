"""
Models / game.py
Rôle:
- Payloads et vues typés échangés avec le front (Pydantic).

Champs principaux de `GameView`:
- image_src / blur_flag : drapeau (ou point d'interrogation) et flou du flag hint.
- clue_label / clue_text / clue_image_url : indice courant.
- name_hint : nom masqué (première lettre après 8 essais).
- result_message / guesses_info / share_message : textes de fin de partie.
- countdown : temps restant avant le prochain pays.
"""
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class GuessPayload(BaseModel):
    """Proposition du joueur (nom de pays, casse indifférente)."""
    guess: str = Field(default="", max_length=120)


class TogglesPayload(BaseModel):
    """Réglages de difficulté ; None = inchangé."""
    name_hint: Optional[bool] = None
    flag_hint: Optional[bool] = None
    infinite_clues: Optional[bool] = None


class PreferencesPayload(BaseModel):
    dark_mode: bool = False


class GameView(BaseModel):
    """Snapshot public du jeu du jour."""
    ready: bool = False
    test_mode: bool = False
    image_src: str
    blur_flag: bool = False
    clue_label: str
    clue_text: str = ""
    clue_image_url: Optional[str] = None
    clue_number: int = 1
    total_clues: int = 0
    shown_clues: List[Dict[str, Optional[str]]] = Field(default_factory=list)
    show_all_clues_available: bool = False
    name_hint: str = ""
    guesses_used: int = 0
    previous_guesses: List[str] = Field(default_factory=list)
    game_over: bool = False
    outcome: Optional[str] = None
    result_message: str = ""
    guesses_info: str = ""
    share_message: Optional[str] = None
    countdown: str = ""
    toggles: Dict[str, bool] = Field(default_factory=dict)


class GuessResponse(BaseModel):
    ok: bool
    status: str
    message: str
    game: GameView
