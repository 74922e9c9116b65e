"""Snake Channel — authoritative multiplayer snake session server."""

from snake_channel.channel import QueueChannel
from snake_channel.config import ServerConfig
from snake_channel.engine import Delivery, SessionEngine
from snake_channel.grid import Grid
from snake_channel.loop import LoopState, SessionLoop
from snake_channel.registry import PlayerRegistry
from snake_channel.session import SnakeSession
from snake_channel.snake import Direction, Snake

__all__ = [
    "Delivery",
    "Direction",
    "Grid",
    "LoopState",
    "PlayerRegistry",
    "QueueChannel",
    "ServerConfig",
    "SessionEngine",
    "SessionLoop",
    "Snake",
    "SnakeSession",
]
