"""WebSocket transport: binds sockets to the session channel."""

from __future__ import annotations

import asyncio
import logging
import uuid

from fastapi import APIRouter, WebSocket

from snake_channel.channel import ChannelClosed, QueueChannel

logger = logging.getLogger(__name__)

ws_router = APIRouter()


def _get_channel(ws: WebSocket) -> QueueChannel:
    return ws.app.state.channel


async def _pump(websocket: WebSocket, outbox: asyncio.Queue[bytes]) -> None:
    """Forward queued frames to the socket until it breaks."""
    while True:
        payload = await outbox.get()
        try:
            await websocket.send_bytes(payload)
        except Exception:
            logger.warning("Send failed; stopping outbound pump.")
            return


@ws_router.websocket("/channel")
async def channel_socket(websocket: WebSocket, user_id: str = "") -> None:
    """Binary frames in are player intents; frames out are channel messages."""
    channel = _get_channel(websocket)
    user_id = user_id or uuid.uuid4().hex
    try:
        outbox = channel.attach(user_id)
    except ChannelClosed:
        await websocket.close(code=1001, reason="Session has ended.")
        return
    except ValueError:
        await websocket.close(code=4009, reason="User already connected.")
        return

    sender: asyncio.Task | None = None
    try:
        await websocket.accept()
        logger.info("User %s opened a channel socket.", user_id)
        sender = asyncio.create_task(_pump(websocket, outbox))
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            payload = message.get("bytes")
            if payload is None:
                # Text frames are never valid intents.
                continue
            channel.deliver(user_id, payload)
    finally:
        # Detach before awaiting; the handler may be cancelled at the await.
        channel.detach(user_id)
        logger.info("User %s closed its channel socket.", user_id)
        if sender is not None:
            sender.cancel()
            await asyncio.gather(sender, return_exceptions=True)
