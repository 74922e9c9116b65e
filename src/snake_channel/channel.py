"""Transport events, channel errors and an in-process asyncio channel."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Connect:
    user_id: str


@dataclass(frozen=True)
class Disconnect:
    user_id: str


@dataclass(frozen=True)
class Data:
    user_id: str
    payload: bytes


ChannelEvent = Union[Connect, Disconnect, Data]


class ChannelError(Exception):
    """Base class for transport failures reported to the session loop."""


class ChannelTimeout(ChannelError):
    """No event arrived within the receive window."""


class ChannelClosed(ChannelError):
    """The channel was shut down; no further events will arrive."""


class Channel(Protocol):
    """What the session loop needs from a transport."""

    async def recv(self, timeout: float) -> ChannelEvent: ...

    def send(self, user_id: str, payload: bytes) -> None: ...

    def broadcast(self, payload: bytes) -> None: ...


_CLOSED = object()


class QueueChannel:
    """Channel backed by asyncio queues.

    Connection handlers call :meth:`attach`, :meth:`deliver` and
    :meth:`detach`; each attached user gets an outbound queue that receives
    unicast and broadcast frames in FIFO order. Sends are fire-and-forget.
    """

    def __init__(self) -> None:
        self._inbound: asyncio.Queue = asyncio.Queue()
        self._outboxes: dict[str, asyncio.Queue[bytes]] = {}
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def is_attached(self, user_id: str) -> bool:
        return user_id in self._outboxes

    # -- connection side ----------------------------------------------------

    def attach(self, user_id: str) -> asyncio.Queue[bytes]:
        """Register a user and queue a Connect event."""
        if self._closed:
            raise ChannelClosed("Channel is closed.")
        if user_id in self._outboxes:
            raise ValueError(f"User {user_id} is already attached.")
        outbox: asyncio.Queue[bytes] = asyncio.Queue()
        self._outboxes[user_id] = outbox
        self._inbound.put_nowait(Connect(user_id))
        return outbox

    def deliver(self, user_id: str, payload: bytes) -> None:
        """Queue a Data event from an attached user."""
        if self._closed or user_id not in self._outboxes:
            return
        self._inbound.put_nowait(Data(user_id, payload))

    def detach(self, user_id: str) -> None:
        """Unregister a user and queue a Disconnect event."""
        if self._outboxes.pop(user_id, None) is None or self._closed:
            return
        self._inbound.put_nowait(Disconnect(user_id))

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._inbound.put_nowait(_CLOSED)
        logger.info("Channel closed.")

    # -- session side -------------------------------------------------------

    async def recv(self, timeout: float) -> ChannelEvent:
        """Wait up to *timeout* seconds for the next event."""
        if self._closed and self._inbound.empty():
            raise ChannelClosed("Channel is closed.")
        try:
            item = await asyncio.wait_for(self._inbound.get(), timeout)
        except asyncio.TimeoutError:
            raise ChannelTimeout() from None
        if item is _CLOSED:
            raise ChannelClosed("Channel is closed.")
        return item

    def send(self, user_id: str, payload: bytes) -> None:
        outbox = self._outboxes.get(user_id)
        if outbox is not None:
            outbox.put_nowait(payload)

    def broadcast(self, payload: bytes) -> None:
        for outbox in self._outboxes.values():
            outbox.put_nowait(payload)
