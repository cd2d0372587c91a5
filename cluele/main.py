"""
Application FastAPI : point d'entrée
====================================

Rôle
----
- Instancie l'app FastAPI, configure le CORS pour le front,
- Monte tous les routeurs (REST + WebSocket),
- Au démarrage : lance le compte à rebours puis le chargement des catalogues JSON (en fond),
- À l'arrêt : annule le chargement, le compte à rebours et ferme les sockets.

Notes
-----
- Les importations des routeurs sont explicites pour éviter les surprises d'auto-discovery.
- Les routes `/debug/*` sont toujours montées mais répondent 403 hors `TEST_MODE`.
- ⚠️ Le middleware CORS doit être ajouté AVANT les include_router.
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cluele.config.settings import settings
from cluele.routes.debug import router as debug_router
from cluele.routes.game import router as game_router
from cluele.routes.health import router as health_router
from cluele.routes.preferences import router as preferences_router
from cluele.routes.websocket import router as ws_router
from cluele.services.daily_game import get_daily_game
from cluele.services.ws_manager import WS

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# --- App FastAPI principale  ---
app = FastAPI(title=settings.APP_NAME)

# ===========================
# CORS (dev: permissif)
# ===========================
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,  # ← whitelist des frontends autorisés
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ===========================
# Montage des routers
# ===========================
app.include_router(game_router)
app.include_router(debug_router)
app.include_router(health_router)
app.include_router(preferences_router)
app.include_router(ws_router)  # WebSocket endpoint (/ws)


# --- Racine utile pour "ping" simple (sans /health) ---
@app.get("/")
async def root():
    """Ping basique : permet de vérifier que l'app tourne (sans dépendance réseau)."""
    return {"ok": True, "service": "cluele-backend"}


# --- Hooks de cycle de vie ---
@app.on_event("startup")
async def start_daily_game():
    """
    Au démarrage:
    - lance le compte à rebours (rollover à minuit, ou court en mode test),
    - lance le chargement des sources JSON en tâche de fond (les indices se
      construisent dès que tout est arrivé ; les routes répondent entre-temps).
    """
    game = get_daily_game()
    logger.info("Starting daily game", extra={"test_mode": game.test_mode, "epoch": str(settings.EPOCH_DATE)})
    await game.start_ticker()
    await game.start_loading()


@app.on_event("shutdown")
async def stop_daily_game():
    game = get_daily_game()
    await game.abort_loading()
    await game.abort_ticker()
    await WS.close_all()
