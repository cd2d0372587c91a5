"""
Module routes/health.py
Rôle:
- Endpoint de santé : service OK + état des données du jour.

Intégrations:
- settings: nom d'app.
- DailyGame: sources manquantes, indices prêts, timer actif.
"""
from fastapi import APIRouter, Depends

from cluele.config.settings import settings
from cluele.services.daily_game import DailyGame, get_daily_game

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health(game: DailyGame = Depends(get_daily_game)):
    """OK minimal + diagnostic des données (sans exposer la réponse du jour)."""
    return {
        "ok": True,
        "service": settings.APP_NAME,
        "test_mode": game.test_mode,
        "clues_ready": game.ready,
        "missing_datasets": game.data.missing(),
        "ticker_running": game.ticker_running,
    }
