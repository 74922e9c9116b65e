"""Connected users, snake ownership and the session leader."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

# Snake identifiers travel as uint8.
MAX_SNAKE_ID = 0xFF


class PlayerRegistry:
    """Associates transport user identities with snake identifiers.

    At most one snake per user. The reverse lookup is derived by scanning
    the map. Identifiers are handed out in increasing order and are never
    reused, even across :meth:`clear`.

    The leader is the first user to connect while no leader is set. It is
    tracked for future authority rules and is not consulted otherwise.
    """

    def __init__(self) -> None:
        self._snake_ids: dict[str, int] = {}
        self.connected: set[str] = set()
        self.leader: str | None = None
        self._next_snake_id = 0

    def __len__(self) -> int:
        return len(self._snake_ids)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._snake_ids

    @property
    def entries(self) -> dict[str, int]:
        return dict(self._snake_ids)

    # -- connection lifecycle ---------------------------------------------

    def connect(self, user_id: str) -> None:
        self.connected.add(user_id)
        if self.leader is None:
            self.leader = user_id
            logger.info("User %s is now session leader.", user_id)

    def disconnect(self, user_id: str) -> int | None:
        """Forget a user. Returns the id of the snake they owned, if any."""
        self.connected.discard(user_id)
        if self.leader == user_id:
            self.leader = min(self.connected) if self.connected else None
            logger.info("Session leader reassigned to %s.", self.leader)
        return self._snake_ids.pop(user_id, None)

    # -- ownership ----------------------------------------------------------

    def snake_for(self, user_id: str) -> int | None:
        return self._snake_ids.get(user_id)

    def owner_of(self, snake_id: int) -> str | None:
        for user_id, sid in self._snake_ids.items():
            if sid == snake_id:
                return user_id
        return None

    def allocate_snake_id(self) -> int | None:
        """Reserve the next identifier, or ``None`` once they run out."""
        if self._next_snake_id > MAX_SNAKE_ID:
            return None
        snake_id = self._next_snake_id
        self._next_snake_id += 1
        return snake_id

    def register(self, user_id: str, snake_id: int) -> None:
        if user_id in self._snake_ids:
            raise ValueError(f"User {user_id} already owns a snake.")
        self._snake_ids[user_id] = snake_id

    def release_snake(self, snake_id: int) -> str | None:
        """Drop the entry owning *snake_id* and return its user.

        Clears the leader designation if it pointed at that user.
        """
        user_id = self.owner_of(snake_id)
        if user_id is None:
            return None
        del self._snake_ids[user_id]
        if self.leader == user_id:
            self.leader = None
        return user_id

    def clear(self) -> None:
        """Remove every ownership entry; connections and the counter stay."""
        self._snake_ids.clear()
