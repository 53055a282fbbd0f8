import asyncio
from typing import Protocol


class IdempotencyStore(Protocol):
    """Tracks which capture ids already have (or are getting) a receipt email."""

    async def claim(self, key: str) -> bool:
        """Reserve `key`. Returns False when it is already reserved or completed."""
        ...

    async def complete(self, key: str) -> None:
        ...

    async def release(self, key: str) -> None:
        """Drop an in-progress reservation so a redelivery can try again."""
        ...


class InMemoryIdempotencyStore:
    """Process-local store. Claims do not survive a restart or span workers."""

    def __init__(self):
        self._lock = asyncio.Lock()
        self._in_progress: set[str] = set()
        self._completed: set[str] = set()

    async def claim(self, key: str) -> bool:
        async with self._lock:
            if key in self._in_progress or key in self._completed:
                return False
            self._in_progress.add(key)
            return True

    async def complete(self, key: str) -> None:
        async with self._lock:
            self._in_progress.discard(key)
            self._completed.add(key)

    async def release(self, key: str) -> None:
        async with self._lock:
            self._in_progress.discard(key)
