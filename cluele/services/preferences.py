"""
Service: preferences.py
Rôle:
- Conserver l'unique préférence persistée du jeu : le mode sombre.

Stockage:
- `<DATA_DIR>/preferences.json` → `{"dark_mode": bool}`
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from threading import RLock
from typing import Any, Dict

from cluele.config.settings import settings
from .io_utils import read_json, write_json

PREFERENCES_FILENAME = "preferences.json"


def _default_preferences() -> Dict[str, Any]:
    return {"dark_mode": False}


@dataclass
class PreferencesStore:
    path: Path
    _lock: RLock = field(default_factory=RLock, init=False, repr=False)

    def load(self) -> Dict[str, Any]:
        with self._lock:
            stored = read_json(self.path)
            prefs = _default_preferences()
            if isinstance(stored, dict):
                prefs["dark_mode"] = bool(stored.get("dark_mode", False))
            return prefs

    def set_dark_mode(self, enabled: bool) -> Dict[str, Any]:
        with self._lock:
            prefs = self.load()
            prefs["dark_mode"] = bool(enabled)
            write_json(self.path, prefs)
            return prefs


_instance: PreferencesStore | None = None


def get_preferences_store() -> PreferencesStore:
    """Instance unique (lazy) pointant sur `DATA_DIR/preferences.json`."""
    global _instance
    if _instance is None:
        _instance = PreferencesStore(Path(settings.DATA_DIR) / PREFERENCES_FILENAME)
    return _instance
