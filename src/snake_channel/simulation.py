"""Per-tick movement and collision resolution."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from snake_channel.grid import Grid
    from snake_channel.snake import Snake


def move_snakes(snakes: list[Snake], grid: Grid) -> None:
    """Advance every snake one cell in its facing direction."""
    for snake in snakes:
        snake.advance(grid)


def resolve_overlaps(
    snakes: list[Snake], apples: list[tuple[int, int]],
) -> list[int]:
    """Apply apple consumption and detect self-collisions.

    Must run after :func:`move_snakes`. A snake whose head sits on an apple
    eats it and grows by one segment. Returns the ids of snakes whose head
    overlaps their own body; eating in the same tick does not save them.
    Heads are only checked against their own body, so snakes from
    different players may share cells.
    """
    dead: list[int] = []
    for snake in snakes:
        head = snake.head
        if head in apples:
            apples.remove(head)
            snake.grow()
        if snake.self_collision():
            dead.append(snake.snake_id)
    return dead
