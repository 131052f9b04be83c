"""WebSocket handlers for real-time play and spectating."""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from flood_it.errors import FloodItError
from flood_it.server.game_manager import GameInstance, GameManager

logger = logging.getLogger(__name__)

ws_router = APIRouter()


def _get_manager(ws: WebSocket) -> GameManager:
    return ws.app.state.game_manager


def _as_int(value) -> int | None:
    """Return ``value`` if it is a JSON integer (booleans excluded)."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


async def _dispatch(manager: GameManager, game: GameInstance, msg: dict) -> None:
    """Forward one decoded input message to the session."""
    x, y = _as_int(msg.get("x")), _as_int(msg.get("y"))
    color = _as_int(msg.get("color"))
    key = msg.get("key")
    if x is not None and y is not None:
        await manager.select(game.game_id, x=x, y=y)
    elif color is not None:
        await manager.select(game.game_id, color=color)
    elif isinstance(key, str):
        await manager.press_key(game.game_id, key)


async def _open(websocket: WebSocket, game_id: str) -> GameInstance | None:
    """Accept the socket and send the current state, or reject it."""
    manager = _get_manager(websocket)
    game = manager.get_game(game_id)
    if game is None or game.closed:
        await websocket.close(code=4004, reason="Game not found.")
        return None

    await websocket.accept()
    game.sockets.append(websocket)
    # Send initial state snapshot so the client gets immediate feedback.
    state = await manager.get_state(game_id)
    await websocket.send_text(json.dumps(state, separators=(",", ":")))
    return game


@ws_router.websocket("/games/{game_id}/play")
async def play(websocket: WebSocket, game_id: str) -> None:
    """Player WebSocket: send clicks and keys, receive state each tick."""
    game = await _open(websocket, game_id)
    if game is None:
        return
    manager = _get_manager(websocket)
    logger.info("Player connected to game %s.", game_id)

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                msg = json.loads(raw)
            except json.JSONDecodeError:
                continue
            if not isinstance(msg, dict):
                continue
            try:
                await _dispatch(manager, game, msg)
            except (FloodItError, ValueError) as exc:
                logger.debug("Ignored input for game %s: %s", game_id, exc)
            except KeyError:
                break
    except WebSocketDisconnect:
        logger.info("Player disconnected from game %s.", game_id)
    finally:
        if websocket in game.sockets:
            game.sockets.remove(websocket)


@ws_router.websocket("/games/{game_id}/spectate")
async def spectate(websocket: WebSocket, game_id: str) -> None:
    """Spectator WebSocket: receive-only state stream."""
    game = await _open(websocket, game_id)
    if game is None:
        return
    logger.info("Spectator connected to game %s.", game_id)

    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info("Spectator disconnected from game %s.", game_id)
    finally:
        if websocket in game.sockets:
            game.sockets.remove(websocket)
