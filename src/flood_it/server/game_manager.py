"""In-memory game registry, input dispatch, and async tick loops."""

from __future__ import annotations

import asyncio
import json
import logging
import time
import uuid
from dataclasses import dataclass, field

from starlette.websockets import WebSocket, WebSocketState

from flood_it.config import SessionConfig
from flood_it.server.models import GameStatus, GameSummary, LeaderboardEntry
from flood_it.session import GameSession

logger = logging.getLogger(__name__)

_MAX_GAMES = 200


@dataclass
class GameInstance:
    """A hosted session plus its connections and scheduler task."""

    game_id: str
    session: GameSession
    tick_rate_ms: int
    ticks_per_step: int = 1
    closed: bool = False
    sockets: list[WebSocket] = field(default_factory=list)
    created_at: float = field(default_factory=time.monotonic)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    dirty: bool = True
    _task: asyncio.Task | None = field(default=None, repr=False)

    @property
    def status(self) -> GameStatus:
        if self.closed:
            return GameStatus.CLOSED
        if self.session.won_game:
            return GameStatus.WON
        if self.session.lost_game:
            return GameStatus.LOST
        return GameStatus.PLAYING

    def summary(self) -> GameSummary:
        s = self.session
        return GameSummary(
            game_id=self.game_id,
            status=self.status,
            size=s.size,
            num_colors=s.num_colors,
            moves_made=s.moves_made,
            move_limit=s.move_limit,
            best_time=s.best_time,
            tick_rate_ms=self.tick_rate_ms,
        )


class GameManager:
    """Central registry managing all hosted sessions.

    Each game runs its own tick loop task. Every call into a session,
    from the loop or from player input, holds that game's lock.
    """

    def __init__(self, max_games: int = _MAX_GAMES) -> None:
        if max_games < 1:
            raise ValueError("max_games must be at least 1.")
        self._games: dict[str, GameInstance] = {}
        self._max_games = max_games

    def create_game(
        self,
        num_colors: int = 3,
        size: int = 12,
        seed: int | None = None,
        tick_rate_ms: int = 20,
        ticks_per_step: int = 1,
        start: bool = True,
    ) -> GameInstance:
        """Create a session and, unless ``start`` is false, its tick loop."""
        if len(self._games) >= self._max_games:
            raise ValueError("Too many games are running. Try again later.")
        config = SessionConfig(size=size, num_colors=num_colors, seed=seed)
        game_id = uuid.uuid4().hex[:12]
        game = GameInstance(
            game_id=game_id,
            session=GameSession(config=config),
            tick_rate_ms=tick_rate_ms,
            ticks_per_step=ticks_per_step,
        )
        self._games[game_id] = game
        if start:
            game._task = asyncio.create_task(self._tick_loop(game))
        logger.info(
            "Game %s created (size=%d, colors=%d).", game_id, size, num_colors,
        )
        return game

    def get_game(self, game_id: str) -> GameInstance | None:
        return self._games.get(game_id)

    def _require(self, game_id: str) -> GameInstance:
        game = self._games.get(game_id)
        if game is None or game.closed:
            raise KeyError(f"Game {game_id} not found.")
        return game

    def list_games(self) -> list[GameSummary]:
        return [g.summary() for g in self._games.values() if not g.closed]

    def leaderboard(self) -> list[LeaderboardEntry]:
        """Best win times across all games, fastest first."""
        entries = [
            LeaderboardEntry(game_id=g.game_id, best_time=g.session.best_time)
            for g in self._games.values()
            if g.session.best_time is not None
        ]
        entries.sort(key=lambda e: (e.best_time, e.game_id))
        return entries

    async def select(
        self,
        game_id: str,
        *,
        x: int | None = None,
        y: int | None = None,
        color: int | None = None,
    ) -> dict:
        """Apply a click or a color choice and return the new state."""
        game = self._require(game_id)
        async with game.lock:
            if color is not None:
                game.session.select_color(color)
            else:
                game.session.select_cell(x, y)
            game.dirty = True
            return game.session.get_state()

    async def press_key(self, game_id: str, key: str) -> dict:
        game = self._require(game_id)
        async with game.lock:
            if game.session.on_key(key):
                game.dirty = True
            return game.session.get_state()

    async def reset(self, game_id: str, num_colors: int | None = None) -> dict:
        game = self._require(game_id)
        async with game.lock:
            game.session.reset(num_colors)
            game.dirty = True
            return game.session.get_state()

    async def get_state(self, game_id: str) -> dict:
        game = self._require(game_id)
        async with game.lock:
            return game.session.get_state()

    async def describe(self, game_id: str) -> dict:
        """Return the game summary with its current state attached."""
        game = self._require(game_id)
        async with game.lock:
            result = game.summary().model_dump(mode="json")
            result["state"] = game.session.get_state()
            return result

    async def advance(self, game: GameInstance) -> dict | None:
        """Run one scheduler step and return the state if it changed."""
        async with game.lock:
            session = game.session
            changed = game.dirty or session.flooding or not session.game_over
            for _ in range(game.ticks_per_step):
                session.tick()
            game.dirty = False
            return session.get_state() if changed else None

    async def _tick_loop(self, game: GameInstance) -> None:
        """Tick the session at its configured rate, broadcasting changes."""
        tick_interval = game.tick_rate_ms / 1000.0
        try:
            while not game.closed:
                await asyncio.sleep(tick_interval)
                state = await self.advance(game)
                if state is not None:
                    await self._broadcast(game, state)
        except asyncio.CancelledError:
            logger.info("Tick loop cancelled for game %s.", game.game_id)
        except Exception:
            logger.exception("Tick loop error in game %s.", game.game_id)
            game.closed = True
            self._games.pop(game.game_id, None)
        finally:
            if game.closed:
                await self._close_connections(game)

    async def _broadcast(self, game: GameInstance, state: dict) -> None:
        """Send game state to every connected socket."""
        payload = json.dumps(state, separators=(",", ":"))
        dead: list[WebSocket] = []
        # Iterate over a snapshot so disconnect handlers can mutate the list.
        for ws in list(game.sockets):
            try:
                if ws.client_state == WebSocketState.CONNECTED:
                    await ws.send_text(payload)
            except Exception:
                dead.append(ws)
        for ws in dead:
            if ws in game.sockets:
                game.sockets.remove(ws)

    async def _close_connections(self, game: GameInstance) -> None:
        for ws in list(game.sockets):
            try:
                if ws.client_state == WebSocketState.CONNECTED:
                    await ws.close(code=1000, reason="Game closed.")
            except Exception:
                logger.warning("Failed closing socket in game %s.", game.game_id)
        game.sockets.clear()

    async def close_game(self, game_id: str) -> None:
        """Stop a game's tick loop and drop it from the registry."""
        game = self._games.pop(game_id, None)
        if game is None:
            raise KeyError(f"Game {game_id} not found.")
        game.closed = True
        if game._task and not game._task.done():
            game._task.cancel()
            await asyncio.gather(game._task, return_exceptions=True)
        await self._close_connections(game)
        logger.info("Game %s closed.", game_id)

    async def cleanup(self) -> None:
        """Cancel all running tick loops."""
        for game in self._games.values():
            game.closed = True
            if game._task and not game._task.done():
                game._task.cancel()
        tasks = [
            g._task for g in self._games.values()
            if g._task and not g._task.done()
        ]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("GameManager cleanup complete.")
