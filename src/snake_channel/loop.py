"""The session event loop: the sole writer of the game state."""

from __future__ import annotations

import enum
import logging

from snake_channel.channel import (
    Channel,
    ChannelError,
    ChannelTimeout,
    Connect,
    Data,
    Disconnect,
)
from snake_channel.engine import Delivery, SessionEngine
from snake_channel.protocol import encode_channel_message

logger = logging.getLogger(__name__)


class LoopState(str, enum.Enum):
    """Where the loop currently is."""

    IDLE = "idle"
    CONNECT = "connect"
    DISCONNECT = "disconnect"
    DATA = "data"
    TICK = "tick"
    TERMINATED = "terminated"


class SessionLoop:
    """Merges transport events with the simulation clock.

    The loop waits up to one tick interval for an event. An event is
    handled immediately; a timeout runs one simulation tick. Any other
    channel error ends the loop for good.
    """

    def __init__(
        self,
        channel: Channel,
        engine: SessionEngine,
        tick_interval: float | None = None,
    ) -> None:
        self.channel = channel
        self.engine = engine
        self.tick_interval = (
            tick_interval if tick_interval is not None
            else engine.config.tick_interval
        )
        if self.tick_interval <= 0:
            raise ValueError("tick_interval must be positive.")
        self.state = LoopState.IDLE

    async def run(self) -> None:
        """Process events until the channel fails."""
        logger.info(
            "Session loop started (tick %.3fs).", self.tick_interval,
        )
        try:
            while self.state != LoopState.TERMINATED:
                await self.step()
        except Exception:
            logger.exception("Session loop crashed.")
            self.state = LoopState.TERMINATED
            raise
        logger.info("Session loop stopped after %d ticks.", self.engine.tick_count)

    async def step(self) -> None:
        """Wait for one event (or timeout) and handle it."""
        self.state = LoopState.IDLE
        try:
            event = await self.channel.recv(self.tick_interval)
        except ChannelTimeout:
            self.state = LoopState.TICK
            self._dispatch(self.engine.tick())
            self.state = LoopState.IDLE
            return
        except ChannelError as exc:
            logger.error("Channel failure, terminating session: %r", exc)
            self.state = LoopState.TERMINATED
            return

        if isinstance(event, Connect):
            self.state = LoopState.CONNECT
            deliveries = self.engine.connect(event.user_id)
        elif isinstance(event, Disconnect):
            self.state = LoopState.DISCONNECT
            deliveries = self.engine.disconnect(event.user_id)
        elif isinstance(event, Data):
            self.state = LoopState.DATA
            deliveries = self.engine.handle_data(event.user_id, event.payload)
        else:
            raise TypeError(f"Unknown channel event: {event!r}")
        self._dispatch(deliveries)
        self.state = LoopState.IDLE

    def _dispatch(self, deliveries: list[Delivery]) -> None:
        for delivery in deliveries:
            payload = encode_channel_message(delivery.message)
            if delivery.recipient is None:
                self.channel.broadcast(payload)
            else:
                self.channel.send(delivery.recipient, payload)
