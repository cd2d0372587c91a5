# cluele/routes/websocket.py
"""
WebSocket endpoint.

- /ws : flux public du jeu du jour.
  - à la connexion : `{"type": "state", "payload": <GameView>}`
  - ensuite (diffusés par le service) : countdown, rollover, celebrate, game_over
  - `{"type": "ping"}` → `{"type": "pong"}`, autres messages → ACK générique.
"""
from __future__ import annotations

import json

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from cluele.services.daily_game import DailyGame, get_daily_game
from cluele.services.ws_manager import WS

router = APIRouter()


@router.websocket("/ws")
async def websocket_endpoint(ws: WebSocket, game: DailyGame = Depends(get_daily_game)):
    await WS.connect(ws)
    try:
        await WS.send_json(ws, {"type": "state", "payload": game.view()})
        while True:
            raw = await ws.receive_text()
            try:
                msg = json.loads(raw)
            except json.JSONDecodeError:
                # Message non JSON -> ignore
                continue
            if not isinstance(msg, dict):
                continue

            mtype = msg.get("type")
            if mtype == "ping":
                await WS.send_json(ws, {"type": "pong"})
            elif mtype == "state":
                await WS.send_json(ws, {"type": "state", "payload": game.view()})
            else:
                await WS.send_json(ws, {"type": "ack", "received": msg})
    except WebSocketDisconnect:
        pass
    finally:
        await WS.disconnect(ws)
