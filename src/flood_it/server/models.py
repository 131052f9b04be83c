"""Pydantic models for API request/response schemas."""

from __future__ import annotations

import enum

from pydantic import BaseModel, Field, model_validator


class GameStatus(str, enum.Enum):
    """Lifecycle states for a hosted game."""

    PLAYING = "playing"
    WON = "won"
    LOST = "lost"
    CLOSED = "closed"


class CreateGameRequest(BaseModel):
    """Request body for POST /games."""

    num_colors: int = Field(default=3, ge=1, le=6)
    size: int = Field(default=12, gt=4, lt=50)
    seed: int | None = None
    tick_rate_ms: int = Field(default=20, ge=1, le=2000)
    ticks_per_step: int = Field(default=1, ge=1, le=1000)


class SelectRequest(BaseModel):
    """Request body for POST /games/{game_id}/select.

    Either a clicked cell (``x`` and ``y``) or a palette ``color``.
    """

    x: int | None = None
    y: int | None = None
    color: int | None = None

    @model_validator(mode="after")
    def check_target(self) -> SelectRequest:
        has_cell = self.x is not None and self.y is not None
        if has_cell == (self.color is not None):
            raise ValueError("Provide either both x and y, or color.")
        return self


class ResetRequest(BaseModel):
    """Request body for POST /games/{game_id}/reset."""

    num_colors: int | None = Field(default=None, ge=1, le=6)


class GameSummary(BaseModel):
    """Compact game info for list endpoints."""

    game_id: str
    status: GameStatus
    size: int
    num_colors: int
    moves_made: int
    move_limit: int
    best_time: int | None
    tick_rate_ms: int


class LeaderboardEntry(BaseModel):
    """Best recorded win time for one game."""

    game_id: str
    best_time: int

