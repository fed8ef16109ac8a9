"""Per-key asyncio locks."""

import asyncio

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class KeyedLock:
    """A family of `asyncio.Lock` objects, one per key.

    Holders of different keys never block each other. A key's lock is
    discarded once nobody holds or waits for it, so the family does not grow
    with the number of keys ever used.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if not self._users[key]:
                del self._users[key]
                del self._locks[key]

    def __contains__(self, key: str) -> bool:
        return key in self._locks
