"""
Utilitaires IO JSON (rapides) basés sur orjson.
- read_json(Path)  → Any | None (None si fichier manquant ou illisible)
- write_json(Path, data) → écrit en binaire (création des dossiers si besoin)

Attention:
- orjson renvoie/attend des bytes; on lit/écrit en mode binaire.
- write_json indente (le fichier de préférences est édité à la main en dev).
"""
import logging
from pathlib import Path
from typing import Any

import orjson as json

logger = logging.getLogger(__name__)


def read_json(path: Path) -> Any:
    """Lit un fichier JSON (ou None s'il n'existe pas / est corrompu)."""
    if not path.exists():
        return None
    with path.open("rb") as f:
        raw = f.read()
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Invalid JSON file ignored", extra={"path": str(path)})
        return None


def write_json(path: Path, data: Any) -> None:
    """Écrit un fichier JSON de manière sûre (dossier parent créé si absent)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("wb") as f:
        f.write(json.dumps(data, option=json.OPT_INDENT_2))
