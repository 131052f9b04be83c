"""REST API route handlers for game lifecycle and player input."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from flood_it.errors import InvalidStateTransition, OutOfBoundsError
from flood_it.server.models import (
    CreateGameRequest,
    GameSummary,
    LeaderboardEntry,
    ResetRequest,
    SelectRequest,
)

router = APIRouter(tags=["games"])


def _get_manager(request: Request):
    return request.app.state.game_manager


@router.post("/games", status_code=201)
async def create_game(body: CreateGameRequest, request: Request) -> GameSummary:
    """Create a new game and start its tick loop."""
    manager = _get_manager(request)
    try:
        game = manager.create_game(
            num_colors=body.num_colors,
            size=body.size,
            seed=body.seed,
            tick_rate_ms=body.tick_rate_ms,
            ticks_per_step=body.ticks_per_step,
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return game.summary()


@router.get("/games")
async def list_games(request: Request) -> list[GameSummary]:
    """List open games."""
    return _get_manager(request).list_games()


@router.get("/games/{game_id}")
async def get_game(game_id: str, request: Request) -> dict:
    """Get game metadata and the current board snapshot."""
    manager = _get_manager(request)
    try:
        return await manager.describe(game_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Game not found.") from exc


@router.post("/games/{game_id}/select")
async def select(game_id: str, body: SelectRequest, request: Request) -> dict:
    """Flood with a clicked cell's color or an explicit palette color."""
    manager = _get_manager(request)
    try:
        return await manager.select(
            game_id, x=body.x, y=body.y, color=body.color,
        )
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except InvalidStateTransition as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except (OutOfBoundsError, ValueError) as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.post("/games/{game_id}/reset")
async def reset(game_id: str, body: ResetRequest, request: Request) -> dict:
    """Start a new board, keeping the best time."""
    manager = _get_manager(request)
    try:
        return await manager.reset(game_id, body.num_colors)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.delete("/games/{game_id}", status_code=204)
async def close_game(game_id: str, request: Request) -> None:
    """Stop and remove a game."""
    try:
        await _get_manager(request).close_game(game_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.get("/leaderboard")
async def leaderboard(request: Request) -> list[LeaderboardEntry]:
    """Best win times across all games, fastest first."""
    return _get_manager(request).leaderboard()
