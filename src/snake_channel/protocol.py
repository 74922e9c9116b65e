"""Binary wire codec shared by the server and its clients.

Layout rules:

* every integer is little-endian and fixed width;
* an enum value is a ``uint8`` tag (declaration order) followed by its
  fields in declared order;
* a list is a ``uint32`` element count followed by the elements;
* a cell is two ``uint16`` values ``(x, y)``; a snake id is a ``uint8``.

Decoders reject unknown tags, truncated input and trailing bytes.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Union

from snake_channel.session import SnakeSession
from snake_channel.snake import Direction, Snake

_U8 = struct.Struct("<B")
_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")
_CELL = struct.Struct("<HH")

# Tag order is part of the wire format.
_DIRECTIONS: tuple[Direction, ...] = (
    Direction.UP,
    Direction.DOWN,
    Direction.LEFT,
    Direction.RIGHT,
)
_DIRECTION_TAGS: dict[Direction, int] = {d: i for i, d in enumerate(_DIRECTIONS)}


class ProtocolError(ValueError):
    """Raised when bytes cannot be decoded or a value cannot be encoded."""


# --- player → server ------------------------------------------------------


@dataclass(frozen=True)
class JoinGame:
    pass


@dataclass(frozen=True)
class ChangeDirection:
    direction: Direction


@dataclass(frozen=True)
class ResetGame:
    pass


PlayerMessage = Union[JoinGame, ChangeDirection, ResetGame]

# --- server → player ------------------------------------------------------


@dataclass(frozen=True)
class StateUpdate:
    session: SnakeSession


@dataclass(frozen=True)
class PlayerJoined:
    pass


@dataclass(frozen=True)
class PlayerDied:
    pass


ChannelMessage = Union[StateUpdate, PlayerJoined, PlayerDied]

_PLAYER_TAGS: dict[type, int] = {JoinGame: 0, ChangeDirection: 1, ResetGame: 2}
_CHANNEL_TAGS: dict[type, int] = {StateUpdate: 0, PlayerJoined: 1, PlayerDied: 2}


class _Writer:
    def __init__(self) -> None:
        self._buf = bytearray()

    def _pack(self, fmt: struct.Struct, *values: int) -> None:
        try:
            self._buf += fmt.pack(*values)
        except struct.error as exc:
            raise ProtocolError(f"Value out of range: {values}") from exc

    def u8(self, value: int) -> None:
        self._pack(_U8, value)

    def u16(self, value: int) -> None:
        self._pack(_U16, value)

    def u32(self, value: int) -> None:
        self._pack(_U32, value)

    def cells(self, cells: list[tuple[int, int]]) -> None:
        self.u32(len(cells))
        for x, y in cells:
            self._pack(_CELL, x, y)

    def direction(self, direction: Direction) -> None:
        self.u8(_DIRECTION_TAGS[direction])

    def getvalue(self) -> bytes:
        return bytes(self._buf)


class _Reader:
    def __init__(self, data: bytes) -> None:
        self._view = memoryview(data)
        self._pos = 0

    def _unpack(self, fmt: struct.Struct) -> tuple:
        end = self._pos + fmt.size
        if end > len(self._view):
            raise ProtocolError("Unexpected end of input.")
        values = fmt.unpack(self._view[self._pos:end])
        self._pos = end
        return values

    def u8(self) -> int:
        return self._unpack(_U8)[0]

    def u16(self) -> int:
        return self._unpack(_U16)[0]

    def u32(self) -> int:
        return self._unpack(_U32)[0]

    def cells(self) -> list[tuple[int, int]]:
        count = self.u32()
        if count * _CELL.size > len(self._view) - self._pos:
            raise ProtocolError("Cell list longer than remaining input.")
        return [self._unpack(_CELL) for _ in range(count)]

    def direction(self) -> Direction:
        tag = self.u8()
        if tag >= len(_DIRECTIONS):
            raise ProtocolError(f"Unknown Direction tag {tag}.")
        return _DIRECTIONS[tag]

    def finish(self) -> None:
        if self._pos != len(self._view):
            raise ProtocolError(
                f"{len(self._view) - self._pos} trailing bytes after message."
            )


def _write_snake(w: _Writer, snake: Snake) -> None:
    w.cells(snake.positions)
    w.direction(snake.direction)
    w.u8(snake.snake_id)


def _read_snake(r: _Reader) -> Snake:
    positions = r.cells()
    direction = r.direction()
    snake_id = r.u8()
    try:
        return Snake(positions, direction, snake_id)
    except ValueError as exc:
        raise ProtocolError(str(exc)) from exc


def _write_session(w: _Writer, session: SnakeSession) -> None:
    w.u16(session.grid_size)
    w.u32(len(session.snakes))
    for snake in session.snakes:
        _write_snake(w, snake)
    w.cells(session.apples)


def _read_session(r: _Reader) -> SnakeSession:
    grid_size = r.u16()
    snakes = [_read_snake(r) for _ in range(r.u32())]
    apples = r.cells()
    return SnakeSession(grid_size=grid_size, snakes=snakes, apples=apples)


def encode_player_message(message: PlayerMessage) -> bytes:
    w = _Writer()
    w.u8(_PLAYER_TAGS[type(message)])
    if isinstance(message, ChangeDirection):
        w.direction(message.direction)
    return w.getvalue()


def decode_player_message(data: bytes) -> PlayerMessage:
    r = _Reader(data)
    tag = r.u8()
    message: PlayerMessage
    if tag == 0:
        message = JoinGame()
    elif tag == 1:
        message = ChangeDirection(r.direction())
    elif tag == 2:
        message = ResetGame()
    else:
        raise ProtocolError(f"Unknown PlayerMessage tag {tag}.")
    r.finish()
    return message


def encode_channel_message(message: ChannelMessage) -> bytes:
    w = _Writer()
    w.u8(_CHANNEL_TAGS[type(message)])
    if isinstance(message, StateUpdate):
        _write_session(w, message.session)
    return w.getvalue()


def decode_channel_message(data: bytes) -> ChannelMessage:
    r = _Reader(data)
    tag = r.u8()
    message: ChannelMessage
    if tag == 0:
        message = StateUpdate(_read_session(r))
    elif tag == 1:
        message = PlayerJoined()
    elif tag == 2:
        message = PlayerDied()
    else:
        raise ProtocolError(f"Unknown SnakeChannelMessage tag {tag}.")
    r.finish()
    return message
