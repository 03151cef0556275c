"""
Presence table: which realtime connection currently speaks for a username.

One table per process, shared by every connection handler. All access goes
through an asyncio.Lock so register/lookup/remove are atomic with respect to
each other.
"""

from __future__ import annotations

import asyncio
from typing import Any, Protocol


class Connection(Protocol):
    async def send_json(self, data: Any, mode: str = "text") -> None: ...


class PresenceRegistry:
    def __init__(self) -> None:
        self._connections: dict[str, Connection] = {}
        self._lock = asyncio.Lock()

    async def register(self, username: str, connection: Connection) -> None:
        """
        Bind `connection` to `username`.

        Last writer wins when two connections claim the same username, and a
        connection that re-registers drops its previous username.
        """
        async with self._lock:
            for name, bound in list(self._connections.items()):
                if bound is connection and name != username:
                    del self._connections[name]
            self._connections[username] = connection

    async def lookup(self, username: str) -> Connection | None:
        async with self._lock:
            return self._connections.get(username)

    async def remove(self, connection: Connection) -> str | None:
        """
        Drop whichever username is bound to `connection` and return it.

        A connection that already lost its username to a newer one is a no-op.
        """
        async with self._lock:
            for name, bound in list(self._connections.items()):
                if bound is connection:
                    del self._connections[name]
                    return name
        return None

    async def relay(self, to_username: str, payload: Any) -> bool:
        """
        Deliver `payload` to the connection registered as `to_username`.

        Returns False (and delivers nothing) when nobody is registered under
        that name. There is no queueing for offline users.
        """
        connection = await self.lookup(to_username)
        if connection is None:
            return False
        await connection.send_json(payload)
        return True

    async def online(self) -> list[str]:
        async with self._lock:
            return sorted(self._connections)


registry = PresenceRegistry()
