"""Pydantic models for the read-only REST views."""

from __future__ import annotations

from pydantic import BaseModel

from snake_channel.loop import LoopState


class SnakeView(BaseModel):
    """One live snake."""

    snake_id: int
    direction: str
    positions: list[tuple[int, int]]


class SessionView(BaseModel):
    """Response for GET /session."""

    grid_size: int
    cells_per_row: int
    cells_per_col: int
    tick: int
    loop_state: LoopState
    snakes: list[SnakeView]
    apples: list[tuple[int, int]]


class PlayersView(BaseModel):
    """Response for GET /players."""

    connected: list[str]
    leader: str | None
    snakes: dict[str, int]
