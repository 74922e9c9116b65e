"""Snake representation and movement logic."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from snake_channel.grid import Grid


class Direction(enum.Enum):
    """Cardinal movement directions with (x_delta, y_delta) values."""

    UP = (0, -1)
    DOWN = (0, 1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)

    @property
    def opposite(self) -> Direction:
        return _OPPOSITES[self]


# Pairs that would cause an instant 180° reversal.
_OPPOSITES: dict[Direction, Direction] = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}


@dataclass
class Snake:
    """One player's body as an ordered list of ``(x, y)`` cells.

    The head is ``positions[0]``; the tail is ``positions[-1]``.
    """

    positions: list[tuple[int, int]]
    direction: Direction = Direction.RIGHT
    snake_id: int = 0

    def __post_init__(self) -> None:
        if not self.positions:
            raise ValueError("Snake must occupy at least 1 cell.")

    @classmethod
    def spawn(
        cls,
        snake_id: int,
        start: tuple[int, int],
        length: int = 5,
        direction: Direction = Direction.RIGHT,
    ) -> Snake:
        """Create a snake whose *length* segments are all stacked on *start*."""
        if length < 1:
            raise ValueError("Snake length must be at least 1.")
        return cls([start] * length, direction, snake_id)

    @property
    def head(self) -> tuple[int, int]:
        """Return the head coordinate."""
        return self.positions[0]

    def set_direction(self, new_direction: Direction) -> bool:
        """Change direction, ignoring 180° reversals.

        Returns True if the direction was accepted.
        """
        if new_direction is self.direction.opposite:
            return False
        self.direction = new_direction
        return True

    def advance(self, grid: Grid) -> None:
        """Move one cell forward; length is unchanged."""
        self.positions.insert(0, grid.neighbor(self.head, self.direction))
        self.positions.pop()

    def grow(self) -> None:
        """Add one segment by duplicating the current tail."""
        self.positions.append(self.positions[-1])

    def self_collision(self) -> bool:
        """Check whether the head overlaps any other body segment."""
        return self.head in self.positions[1:]

    def to_dict(self) -> dict:
        """Serialize snake state to a dictionary."""
        return {
            "snake_id": self.snake_id,
            "direction": self.direction.name.lower(),
            "positions": [list(p) for p in self.positions],
        }
