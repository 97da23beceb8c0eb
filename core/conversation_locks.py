# core/conversation_locks.py
from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict


class ConversationLocks:
    """
    One in-flight request per conversation id.

    Phase is recomputed from the log on every request, so two concurrent
    appends to the same chat would otherwise ask the same question twice.
    """

    def __init__(self) -> None:
        self._locks: Dict[str, asyncio.Lock] = {}
        self._waiters: Dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, chat_id: str) -> AsyncIterator[None]:
        key = str(chat_id)
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._waiters[key] = self._waiters.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[key] -= 1
            if self._waiters[key] == 0:
                # nobody else queued on this chat
                self._waiters.pop(key, None)
                self._locks.pop(key, None)

    def active(self) -> int:
        return len(self._locks)
