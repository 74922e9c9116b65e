"""Server configuration."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path

from snake_channel.apple import DEFAULT_MAX_ATTEMPTS
from snake_channel.grid import CANVAS_HEIGHT, CANVAS_WIDTH, DEFAULT_GRID_SIZE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServerConfig:
    """Settings for one game session and the process hosting it.

    ``tick_interval_ms`` is both the receive timeout of the session loop
    and the simulation tick period.
    """

    # Geometry
    canvas_width: int = CANVAS_WIDTH
    canvas_height: int = CANVAS_HEIGHT
    grid_size: int = DEFAULT_GRID_SIZE

    # Simulation
    tick_interval_ms: int = 64
    initial_snake_length: int = 5
    start_cell: tuple[int, int] = (5, 5)
    max_spawn_attempts: int = DEFAULT_MAX_ATTEMPTS
    seed: int | None = None

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    def __post_init__(self) -> None:
        if self.grid_size <= 0:
            raise ValueError("grid_size must be positive.")
        if self.grid_size > 0xFFFF:
            raise ValueError("grid_size must fit in 16 bits.")
        if self.canvas_width % self.grid_size or self.canvas_height % self.grid_size:
            raise ValueError("grid_size must divide canvas_width and canvas_height.")
        if self.tick_interval_ms < 1:
            raise ValueError("tick_interval_ms must be at least 1.")
        if self.initial_snake_length < 1:
            raise ValueError("initial_snake_length must be at least 1.")
        if self.max_spawn_attempts < 1:
            raise ValueError("max_spawn_attempts must be at least 1.")

        x, y = self.start_cell
        cols = self.canvas_width // self.grid_size
        rows = self.canvas_height // self.grid_size
        if not (0 <= x < cols and 0 <= y < rows):
            raise ValueError(
                f"start_cell {self.start_cell} lies outside the {cols}x{rows} grid."
            )

    @property
    def tick_interval(self) -> float:
        """Tick period in seconds."""
        return self.tick_interval_ms / 1000.0

    def to_dict(self) -> dict:
        """Serialize to a plain dict (tuples become lists)."""
        d = asdict(self)
        d["start_cell"] = list(self.start_cell)
        return d

    def save(self, path: str | Path) -> None:
        """Write config to a JSON file."""
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(self.to_dict(), indent=2))
        logger.info("Config saved to %s", p)

    @classmethod
    def load(cls, path: str | Path) -> ServerConfig:
        """Load config from a JSON file."""
        raw = json.loads(Path(path).read_text())
        if "start_cell" in raw:
            raw["start_cell"] = tuple(raw["start_cell"])
        return cls(**raw)
