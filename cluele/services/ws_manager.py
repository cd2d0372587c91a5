# cluele/services/ws_manager.py
"""
Service: ws_manager.py
- Registre des sockets connectées (un seul canal public : le jeu du jour).
- Snapshots immuables pour éviter "set changed size during iteration".
- Envois typés `{type, payload}` : countdown, rollover, celebrate, game_over.
- Admin: stats(), close_all().
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from threading import RLock
from typing import Any, Set

from starlette.websockets import WebSocket

logger = logging.getLogger(__name__)


@dataclass
class WSManager:
    _lock: RLock = field(default_factory=RLock, init=False, repr=False)
    clients: Set[WebSocket] = field(default_factory=set)

    async def connect(self, ws: WebSocket) -> None:
        """Accepte la connexion WS et l'enregistre."""
        await ws.accept()
        with self._lock:
            self.clients.add(ws)

    def _unlink(self, ws: WebSocket) -> None:
        with self._lock:
            self.clients.discard(ws)

    async def disconnect(self, ws: WebSocket) -> None:
        """Ferme proprement la connexion et nettoie le registre."""
        self._unlink(ws)
        try:
            await ws.close()
        except Exception:
            # socket déjà fermée côté client
            pass

    async def _send_json_one(self, ws: WebSocket, payload: Any) -> bool:
        """Envoie à un WS; renvoie True si succès, sinon False (et retire le WS mort)."""
        try:
            data = json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
            await ws.send_text(data)
            return True
        except Exception:
            logger.debug("Dropping dead websocket", exc_info=True)
            self._unlink(ws)
            return False

    async def send_json(self, ws: WebSocket, payload: Any) -> bool:
        return await self._send_json_one(ws, payload)

    def _snapshot(self) -> list[WebSocket]:
        with self._lock:
            return list(self.clients)

    async def broadcast(self, payload: Any) -> int:
        success = 0
        for ws in self._snapshot():
            if await self._send_json_one(ws, payload):
                success += 1
        return success

    async def broadcast_type(self, event_type: str, payload: Any) -> int:
        return await self.broadcast({"type": event_type, "payload": payload})

    def stats(self) -> dict:
        with self._lock:
            return {"connected_total": len(self.clients)}

    async def close_all(self) -> dict:
        """Ferme TOUTES les sockets."""
        for ws in self._snapshot():
            await self.disconnect(ws)
        return self.stats()


WS = WSManager()
