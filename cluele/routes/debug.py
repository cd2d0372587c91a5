"""
Routes de debug (mode test uniquement).
- skip_clue : indice suivant sans consommer d'essai.
- skip_day  : rollover immédiat (jour virtuel suivant, nouveau pays, partie remise à zéro),
  diffusé aux clients WS comme un rollover du compte à rebours.

Hors mode test, chaque route répond 403.
"""
import anyio
from fastapi import APIRouter, Depends, HTTPException

from cluele.services.daily_game import DailyGame, DebugToolsDisabledError, get_daily_game
from cluele.services.ws_manager import WS

router = APIRouter(prefix="/debug", tags=["debug"])


@router.post("/skip_clue")
async def debug_skip_clue(game: DailyGame = Depends(get_daily_game)):
    try:
        outcome = game.skip_clue()
    except DebugToolsDisabledError as exc:
        raise HTTPException(status_code=403, detail=str(exc))
    return {"ok": True, "status": outcome.status, "message": outcome.message, "game": game.view()}


@router.post("/skip_day")
async def debug_skip_day(game: DailyGame = Depends(get_daily_game)):
    """Rollover immédiat ; le rollover refait des appels HTTP bloquants (thread anyio)."""
    try:
        await anyio.to_thread.run_sync(game.skip_day)
    except DebugToolsDisabledError as exc:
        raise HTTPException(status_code=403, detail=str(exc))
    view = game.view()
    await WS.broadcast_type("rollover", view)
    return {"ok": True, "game": view}


@router.get("/ws_stats")
async def debug_ws_stats():
    return {"ok": True, "ws": WS.stats()}
