"""
Configuration de l'application (Settings)
=========================================

Rôle
----
- Centraliser les paramètres du jeu (nom, host/port, sources JSON, mode test…).
- Les valeurs par défaut conviennent pour un environnement de dev local.
- Les variables peuvent être surchargées via un fichier `.env` ou l'environnement.

Intégrations
------------
- `pydantic-settings` charge automatiquement les variables d'env et `.env`.
- Les services/routers importent `from cluele.config.settings import settings`.

Bonnes pratiques
----------------
- `TEST_MODE` active la date virtuelle, le compte à rebours court et les
  routes `/debug/*`. Ne jamais l'activer en production.
- `DATA_DIR` calcule un chemin relatif au repo : `<repo>/cluele/data`.

Exemples de `.env`
------------------
APP_NAME="Cluele (Staging)"
PORT=8080
TEST_MODE=true
TEST_COUNTDOWN_SECONDS=30
FETCH_RETRIES=2
DATA_DIR="/var/opt/cluele/data"
"""
from datetime import date
from typing import List, Tuple
import os

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Nom du service (apparaît dans /health)
    APP_NAME: str = "Cluele Backend"
    # Bind réseau (FastAPI / Uvicorn)
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    # Front(s) autorisés par le CORS
    ALLOWED_ORIGINS: List[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]

    # Sources JSON statiques (CDN tiers)
    DATA_BASE_URL: str = "https://cdn-assets.teuteuf.fr/data/common"
    GEOGRID_BASE_URL: str = "https://cdn-assets.teuteuf.fr/data/geogrid/countries"
    FLAG_URL_TEMPLATE: str = "https://cdn-assets.teuteuf.fr/data/common/flags/{code}.svg"
    QUESTION_MARK_IMG: str = (
        "https://cdn.pixabay.com/photo/2015/12/23/23/15/question-mark-1106309_1280.png"
    )
    SHARE_URL: str = "https://gamewithnoname.vercel.app/"

    # HTTP: (connect, read) en secondes ; 0 retry = un seul essai
    FETCH_TIMEOUT: Tuple[float, float] = (5.0, 20.0)
    FETCH_RETRIES: int = 0

    # Ancre du pays du jour (index 0 à cette date)
    EPOCH_DATE: date = date(2025, 7, 23)

    # Mode test : date virtuelle avancée à chaque rollover + outils /debug
    TEST_MODE: bool = False
    TEST_COUNTDOWN_SECONDS: int = 30

    # Répertoire des fichiers persistés (préférences)
    # Par défaut: <repo>/cluele/data
    DATA_DIR: str = os.path.join(os.path.dirname(os.path.dirname(__file__)), "data")

    # Paramétrage pydantic-settings :
    # - lit le fichier .env (UTF-8) si présent
    # - ignore les clés supplémentaires pour éviter les erreurs
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


# Instance unique importable partout : `settings`
settings = Settings()
