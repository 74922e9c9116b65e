"""FastAPI application factory."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from snake_channel.channel import QueueChannel
from snake_channel.config import ServerConfig
from snake_channel.engine import SessionEngine
from snake_channel.loop import SessionLoop
from snake_channel.server.routes import router
from snake_channel.server.websocket import ws_router

logger = logging.getLogger(__name__)


def create_app(config: ServerConfig | None = None) -> FastAPI:
    """Build the application; the session loop runs for its lifespan."""
    cfg = config or ServerConfig()

    @asynccontextmanager
    async def _lifespan(app: FastAPI):
        channel = QueueChannel()
        engine = SessionEngine(cfg)
        session_loop = SessionLoop(channel, engine)
        app.state.channel = channel
        app.state.engine = engine
        app.state.session_loop = session_loop
        task = asyncio.create_task(session_loop.run())
        # Nothing reads the channel once the loop is gone.
        task.add_done_callback(lambda _task: channel.close())
        yield
        channel.close()
        await asyncio.gather(task, return_exceptions=True)
        logger.info("Session shut down.")

    app = FastAPI(
        title="Snake Channel", version="0.1.0", lifespan=_lifespan,
    )
    app.state.config = cfg
    app.include_router(router)
    app.include_router(ws_router)
    return app
