"""Toroidal grid geometry mapped onto a fixed-size canvas."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from collections.abc import Iterable

    from snake_channel.snake import Direction, Snake

CANVAS_WIDTH = 512
CANVAS_HEIGHT = 512
DEFAULT_GRID_SIZE = 16


class Grid:
    """Cell coordinate space derived from the canvas and a cell edge length.

    Coordinates are ``(x, y)`` pairs: ``x`` is the column, ``y`` the row.
    Every axis wraps around, so the space has no walls.
    """

    def __init__(
        self,
        grid_size: int = DEFAULT_GRID_SIZE,
        canvas_width: int = CANVAS_WIDTH,
        canvas_height: int = CANVAS_HEIGHT,
    ) -> None:
        if grid_size <= 0:
            raise ValueError("grid_size must be positive.")
        self.grid_size = grid_size
        self.cells_per_row = canvas_width // grid_size
        self.cells_per_col = canvas_height // grid_size

    def in_bounds(self, x: int, y: int) -> bool:
        """Check whether a coordinate lies within the grid."""
        return 0 <= x < self.cells_per_row and 0 <= y < self.cells_per_col

    def wrap(self, x: int, y: int) -> tuple[int, int]:
        """Wrap coordinates around the grid edges."""
        return x % self.cells_per_row, y % self.cells_per_col

    def neighbor(
        self, cell: tuple[int, int], direction: Direction,
    ) -> tuple[int, int]:
        """Return the cell one step from *cell* in *direction*, wrapped."""
        dx, dy = direction.value
        return self.wrap(cell[0] + dx, cell[1] + dy)

    def occupancy(self, snakes: Iterable[Snake]) -> np.ndarray:
        """Boolean mask indexed ``[y, x]``; True where any snake segment lies."""
        mask = np.zeros((self.cells_per_col, self.cells_per_row), dtype=bool)
        for snake in snakes:
            for x, y in snake.positions:
                if self.in_bounds(x, y):
                    mask[y, x] = True
        return mask
