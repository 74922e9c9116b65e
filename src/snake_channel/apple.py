"""Apple spawning logic."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from collections.abc import Iterable

    from snake_channel.grid import Grid
    from snake_channel.snake import Snake

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 1024


class AppleSpawner:
    """Places apples on cells no snake segment occupies.

    Cells are drawn uniformly with rejection sampling. The number of draws
    per call is capped; when the cap is reached, or the grid has no free
    cell at all, nothing is placed and the caller skips spawning this tick.
    """

    def __init__(
        self,
        rng: np.random.Generator | None = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1.")
        self.rng = rng if rng is not None else np.random.default_rng()
        self.max_attempts = max_attempts

    def spawn(
        self, grid: Grid, snakes: Iterable[Snake],
    ) -> tuple[int, int] | None:
        """Pick a free cell, or return ``None`` if none was found."""
        occupied = grid.occupancy(snakes)
        if occupied.all():
            logger.warning("No free cells available for apple spawning.")
            return None

        for _ in range(self.max_attempts):
            x = int(self.rng.integers(grid.cells_per_row))
            y = int(self.rng.integers(grid.cells_per_col))
            if not occupied[y, x]:
                return x, y

        logger.warning(
            "Apple spawn skipped after %d attempts.", self.max_attempts,
        )
        return None
