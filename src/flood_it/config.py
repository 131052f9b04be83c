"""Game configuration and the move-limit formula."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path

from flood_it.grid import MAX_SIZE, MIN_SIZE, Color

logger = logging.getLogger(__name__)


def move_limit(size: int, num_colors: int) -> int:
    """Return the number of moves allowed for a board.

    Scales with both the board edge length and the palette size.
    """
    return (50 * size * num_colors) // 168 + 3


@dataclass(frozen=True)
class SessionConfig:
    """Settings for a single game session.

    ``ticks_per_second`` converts elapsed ticks into the whole seconds
    used for the best-time record.
    """

    size: int = 12
    num_colors: int = 3
    seed: int | None = None
    ticks_per_second: int = 1000

    def __post_init__(self) -> None:
        if not MIN_SIZE < self.size < MAX_SIZE:
            raise ValueError(
                f"size must be between {MIN_SIZE + 1} and {MAX_SIZE - 1}."
            )
        if not 1 <= self.num_colors <= len(Color):
            raise ValueError(f"num_colors must be between 1 and {len(Color)}.")
        if self.ticks_per_second < 1:
            raise ValueError("ticks_per_second must be at least 1.")

    @property
    def move_limit(self) -> int:
        return move_limit(self.size, self.num_colors)

    @property
    def cell_count(self) -> int:
        return self.size * self.size

    def to_dict(self) -> dict:
        return asdict(self)

    def save(self, path: str | Path) -> None:
        """Write config to a JSON file."""
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(self.to_dict(), indent=2))
        logger.info("Config saved to %s", p)

    @classmethod
    def load(cls, path: str | Path) -> SessionConfig:
        """Load config from a JSON file."""
        raw = json.loads(Path(path).read_text())
        return cls(**raw)
