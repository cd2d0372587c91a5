"""
Module routes/game.py
Rôle:
- Endpoints publics du jeu du jour : état, proposition, validation, indices, réglages.

Intégrations:
- DailyGame (via `get_daily_game`, surchargeable dans les tests).
- WS: diffusion `celebrate` (confetti) sur victoire, `game_over` en fin de partie.
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from cluele.models.game import GameView, GuessPayload, GuessResponse, TogglesPayload
from cluele.services.daily_game import CONFETTI, DailyGame, DebugToolsDisabledError, get_daily_game
from cluele.services.game_session import STATUS_LOST, STATUS_WON
from cluele.services.ws_manager import WS

router = APIRouter(prefix="/game", tags=["game"])


@router.get("/state", response_model=GameView)
async def game_state(game: DailyGame = Depends(get_daily_game)):
    """Snapshot complet pour l'affichage (indice courant, drapeau, messages, compte à rebours)."""
    return game.view()


@router.post("/guess", response_model=GuessResponse)
async def game_guess(payload: GuessPayload, game: DailyGame = Depends(get_daily_game)):
    """
    Soumet une proposition.
    - nom inconnu / doublon : `ok=False`, état inchangé,
    - victoire : événement WS `celebrate` + `game_over`,
    - défaite : événement WS `game_over`.
    """
    outcome = game.submit_guess(payload.guess)
    view = game.view()
    if outcome.status == STATUS_WON:
        await WS.broadcast_type("celebrate", CONFETTI)
    if outcome.status in (STATUS_WON, STATUS_LOST):
        await WS.broadcast_type("game_over", view)
    return {"ok": outcome.accepted, "status": outcome.status, "message": outcome.message, "game": view}


@router.get("/validate")
async def game_validate(
    name: str = Query(..., description="Nom saisi par le joueur"),
    game: DailyGame = Depends(get_daily_game),
):
    """Prédicat de validation : le nom correspond-il à un pays connu ?"""
    return {"name": name, "valid": game.is_known_country(name)}


@router.get("/countries")
async def game_countries(
    prefix: Optional[str] = Query(default=None, description="Filtre d'autocomplétion (2 caractères min.)"),
    game: DailyGame = Depends(get_daily_game),
):
    """
    Liste des noms de pays.
    - sans `prefix` : catalogue complet,
    - avec `prefix` : suggestions (vide sous 2 caractères).
    """
    if prefix is None:
        return {"countries": game.country_names}
    return {"countries": game.suggest_names(prefix)}


@router.get("/clues")
async def game_clues(game: DailyGame = Depends(get_daily_game)):
    """Indices déjà affichés (vue "show all")."""
    view = game.view()
    return {"clues": view["shown_clues"], "available": view["show_all_clues_available"]}


@router.put("/settings")
async def game_settings(payload: TogglesPayload, game: DailyGame = Depends(get_daily_game)):
    """Active / désactive name hint, flag hint, infinite clues (ce dernier en mode test)."""
    try:
        game.update_toggles(
            name_hint=payload.name_hint,
            flag_hint=payload.flag_hint,
            infinite_clues=payload.infinite_clues,
        )
    except DebugToolsDisabledError as exc:
        raise HTTPException(status_code=403, detail=str(exc))
    return {"ok": True, "game": game.view()}
