"""Authoritative world state broadcast to every client each tick."""

from __future__ import annotations

from dataclasses import dataclass, field

from snake_channel.grid import DEFAULT_GRID_SIZE
from snake_channel.snake import Snake


@dataclass
class SnakeSession:
    """Grid size, live snakes and uneaten apples.

    Snakes are kept in join order and are unique by ``snake_id``; apple
    cells are unique.
    """

    grid_size: int = DEFAULT_GRID_SIZE
    snakes: list[Snake] = field(default_factory=list)
    apples: list[tuple[int, int]] = field(default_factory=list)

    def get_snake(self, snake_id: int) -> Snake | None:
        for snake in self.snakes:
            if snake.snake_id == snake_id:
                return snake
        return None

    def add_snake(self, snake: Snake) -> None:
        if self.get_snake(snake.snake_id) is not None:
            raise ValueError(f"snake_id {snake.snake_id} is already live.")
        self.snakes.append(snake)

    def remove_snake(self, snake_id: int) -> bool:
        """Remove a snake by id. Returns True if one was removed."""
        before = len(self.snakes)
        self.snakes = [s for s in self.snakes if s.snake_id != snake_id]
        return len(self.snakes) != before

    def add_apple(self, cell: tuple[int, int]) -> None:
        if cell not in self.apples:
            self.apples.append(cell)

    def reset(self, grid_size: int = DEFAULT_GRID_SIZE) -> None:
        """Discard all snakes and apples and restore the grid size."""
        self.grid_size = grid_size
        self.snakes = []
        self.apples = []

    def snapshot(self) -> SnakeSession:
        """Return a copy that later ticks cannot mutate."""
        return SnakeSession(
            grid_size=self.grid_size,
            snakes=[
                Snake(list(s.positions), s.direction, s.snake_id)
                for s in self.snakes
            ],
            apples=list(self.apples),
        )

    def to_dict(self) -> dict:
        """Serialize session state to a dictionary."""
        return {
            "grid_size": self.grid_size,
            "snakes": [s.to_dict() for s in self.snakes],
            "apples": [list(a) for a in self.apples],
        }
