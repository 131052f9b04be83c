"""Exception types raised by the flood-it core."""

from __future__ import annotations


class FloodItError(Exception):
    """Base class for all flood-it errors."""


class OutOfBoundsError(FloodItError, IndexError):
    """A coordinate lies outside the grid."""

    def __init__(self, x: int, y: int, size: int) -> None:
        super().__init__(f"Cell ({x}, {y}) is outside a {size}×{size} grid.")
        self.x = x
        self.y = y
        self.size = size


class InvalidStateTransition(FloodItError, RuntimeError):
    """A caller violated the flood engine or session lifecycle."""
