"""Session engine: applies transport events to the world state."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from snake_channel.apple import AppleSpawner
from snake_channel.config import ServerConfig
from snake_channel.grid import Grid
from snake_channel.protocol import (
    ChangeDirection,
    ChannelMessage,
    JoinGame,
    PlayerDied,
    PlayerJoined,
    PlayerMessage,
    ProtocolError,
    ResetGame,
    StateUpdate,
    decode_player_message,
)
from snake_channel.registry import PlayerRegistry
from snake_channel.session import SnakeSession
from snake_channel.simulation import move_snakes, resolve_overlaps
from snake_channel.snake import Direction, Snake

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Delivery:
    """An outbound message; ``recipient`` of ``None`` means broadcast."""

    recipient: str | None
    message: ChannelMessage


class SessionEngine:
    """Owns the session, registry and spawner of a single game.

    Every handler mutates state synchronously and returns the messages to
    deliver. Only the session loop calls the handlers, so the state has a
    single writer.
    """

    def __init__(
        self,
        config: ServerConfig | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        cfg = config or ServerConfig()
        self.config = cfg
        self.session = SnakeSession(grid_size=cfg.grid_size)
        self.registry = PlayerRegistry()
        self.spawner = AppleSpawner(
            rng=rng if rng is not None else np.random.default_rng(cfg.seed),
            max_attempts=cfg.max_spawn_attempts,
        )
        self.tick_count = 0

    @property
    def grid(self) -> Grid:
        return Grid(
            self.session.grid_size,
            self.config.canvas_width,
            self.config.canvas_height,
        )

    # --- transport events ---------------------------------------------------

    def connect(self, user_id: str) -> list[Delivery]:
        self.registry.connect(user_id)
        logger.info("User %s connected.", user_id)
        return []

    def disconnect(self, user_id: str) -> list[Delivery]:
        snake_id = self.registry.disconnect(user_id)
        if snake_id is not None:
            self.session.remove_snake(snake_id)
        logger.info("User %s disconnected.", user_id)
        return []

    def handle_data(self, user_id: str, payload: bytes) -> list[Delivery]:
        """Decode an intent and dispatch it; malformed payloads are dropped."""
        try:
            message = decode_player_message(payload)
        except ProtocolError as exc:
            logger.debug("Dropped malformed payload from %s: %s", user_id, exc)
            return []
        return self.handle_message(user_id, message)

    def handle_message(
        self, user_id: str, message: PlayerMessage,
    ) -> list[Delivery]:
        if isinstance(message, JoinGame):
            return self.join(user_id)
        if isinstance(message, ChangeDirection):
            return self.change_direction(user_id, message.direction)
        if isinstance(message, ResetGame):
            return self.reset(user_id)
        raise TypeError(f"Unsupported player message: {message!r}")

    # --- player intents -----------------------------------------------------

    def join(self, user_id: str) -> list[Delivery]:
        """Create a snake for *user_id* unless they already own one."""
        if user_id in self.registry:
            logger.debug("Ignoring duplicate join from %s.", user_id)
            return []
        snake_id = self.registry.allocate_snake_id()
        if snake_id is None:
            logger.warning(
                "Snake identifiers exhausted; refusing join from %s.", user_id,
            )
            return []

        snake = Snake.spawn(
            snake_id,
            self.config.start_cell,
            length=self.config.initial_snake_length,
            direction=Direction.RIGHT,
        )
        self.session.add_snake(snake)
        self.registry.register(user_id, snake_id)
        logger.info("User %s joined as snake %d.", user_id, snake_id)
        return [Delivery(user_id, PlayerJoined())]

    def change_direction(
        self, user_id: str, direction: Direction,
    ) -> list[Delivery]:
        snake_id = self.registry.snake_for(user_id)
        if snake_id is None:
            logger.debug("Ignoring direction from unregistered user %s.", user_id)
            return []
        snake = self.session.get_snake(snake_id)
        if snake is not None:
            snake.set_direction(direction)
        return []

    def reset(self, user_id: str | None = None) -> list[Delivery]:
        """Clear snakes, apples and ownership. The id counter keeps counting."""
        self.session.reset(self.config.grid_size)
        self.registry.clear()
        logger.info("Session reset by %s.", user_id)
        return []

    # --- simulation ---------------------------------------------------------

    def tick(self) -> list[Delivery]:
        """Advance the world by one step and broadcast the result."""
        session = self.session
        grid = self.grid
        deliveries: list[Delivery] = []

        if not session.apples:
            apple = self.spawner.spawn(grid, session.snakes)
            if apple is not None:
                session.add_apple(apple)

        move_snakes(session.snakes, grid)
        for snake_id in resolve_overlaps(session.snakes, session.apples):
            deliveries.extend(self._kill_snake(snake_id))

        self.tick_count += 1
        deliveries.append(Delivery(None, StateUpdate(session.snapshot())))
        return deliveries

    def _kill_snake(self, snake_id: int) -> list[Delivery]:
        """Remove a dead snake and notify its owner, if it still has one."""
        self.session.remove_snake(snake_id)
        user_id = self.registry.release_snake(snake_id)
        logger.info(
            "Snake %d (user %s) died at tick %d.",
            snake_id, user_id, self.tick_count + 1,
        )
        if user_id is None:
            return []
        return [Delivery(user_id, PlayerDied())]
