"""REST views over the running session."""

from __future__ import annotations

from fastapi import APIRouter, Request

from snake_channel.engine import SessionEngine
from snake_channel.server.models import PlayersView, SessionView

router = APIRouter(tags=["session"])


def _get_engine(request: Request) -> SessionEngine:
    return request.app.state.engine


@router.get("/session")
async def get_session(request: Request) -> SessionView:
    """Current world state, as last advanced by the session loop."""
    engine = _get_engine(request)
    grid = engine.grid
    return SessionView(
        **engine.session.to_dict(),
        cells_per_row=grid.cells_per_row,
        cells_per_col=grid.cells_per_col,
        tick=engine.tick_count,
        loop_state=request.app.state.session_loop.state,
    )


@router.get("/players")
async def get_players(request: Request) -> PlayersView:
    """Connected users, the session leader and snake ownership."""
    registry = _get_engine(request).registry
    return PlayersView(
        connected=sorted(registry.connected),
        leader=registry.leader,
        snakes=registry.entries,
    )
