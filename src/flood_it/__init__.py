"""Flood It: tick-driven flood-fill puzzle engine."""

from flood_it.config import SessionConfig, move_limit
from flood_it.errors import FloodItError, InvalidStateTransition, OutOfBoundsError
from flood_it.flood import EngineState, FloodEngine, StepResult
from flood_it.grid import NO_CELL, Cell, Color, Grid
from flood_it.session import GameSession

__all__ = [
    "NO_CELL",
    "Cell",
    "Color",
    "EngineState",
    "FloodEngine",
    "FloodItError",
    "GameSession",
    "Grid",
    "InvalidStateTransition",
    "OutOfBoundsError",
    "SessionConfig",
    "StepResult",
    "move_limit",
]
