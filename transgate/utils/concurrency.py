# -*- coding: utf-8 -*-
"""
Concurrency primitives for upstream provider calls.

- ConcurrencyLimiter bounds simultaneous provider calls (FIFO waiters)
- SingleFlight shares one in-flight call between identical concurrent requests
"""

import asyncio
import json
import logging
from contextlib import asynccontextmanager
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ConcurrencyLimiter:
    """Counting limiter for outbound calls."""

    def __init__(self, capacity: int = 4, acquire_timeout: Optional[float] = None):
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self.acquire_timeout = acquire_timeout
        # asyncio.Semaphore wakes waiters in arrival order (strictly so from 3.11)
        self._semaphore = asyncio.Semaphore(capacity)
        self._in_use = 0
        self._waiting = 0
        self._peak = 0

    @property
    def in_use(self) -> int:
        return self._in_use

    @property
    def waiting(self) -> int:
        return self._waiting

    @property
    def peak(self) -> int:
        return self._peak

    async def acquire(self) -> None:
        """Wait for a free slot. Raises asyncio.TimeoutError if acquire_timeout elapses."""
        self._waiting += 1
        try:
            if self.acquire_timeout is None:
                await self._semaphore.acquire()
            else:
                await asyncio.wait_for(self._semaphore.acquire(), self.acquire_timeout)
        finally:
            self._waiting -= 1
        self._in_use += 1
        self._peak = max(self._peak, self._in_use)

    def release(self) -> None:
        """Return a slot. Must be called exactly once per successful acquire."""
        if self._in_use <= 0:
            raise RuntimeError("release() called without a matching acquire()")
        self._in_use -= 1
        self._semaphore.release()

    @asynccontextmanager
    async def slot(self):
        """Hold a slot for the duration of the block, released on every exit path."""
        await self.acquire()
        try:
            yield
        finally:
            self.release()

    def get_stats(self) -> Dict[str, int]:
        return {
            "capacity": self.capacity,
            "in_use": self._in_use,
            "waiting": self._waiting,
            "peak": self._peak
        }


class SingleFlight:
    """
    At most one in-progress call per key.

    Callers that arrive while a call for the same key is pending await the
    same task and observe the same value or exception. The key is dropped as
    soon as the task settles, so later requests start a fresh call.
    """

    def __init__(self):
        self._pending: Dict[str, asyncio.Task] = {}
        self.started = 0
        self.joined = 0

    @staticmethod
    def make_key(target_lang: str, texts: List[str]) -> str:
        """Deterministic key for (target language, ordered texts)."""
        return json.dumps([target_lang, list(texts)], ensure_ascii=False)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def is_pending(self, key: str) -> bool:
        return key in self._pending

    async def get_or_start(self, key: str, fn: Callable[[], Awaitable[T]]) -> T:
        """
        Await the pending call for ``key`` or start ``fn()`` as that call.

        Cancelling one awaiter does not cancel the shared call.
        """
        task = self._pending.get(key)
        if task is None:
            task = asyncio.ensure_future(fn())
            self._pending[key] = task
            task.add_done_callback(lambda t: self._settle(key, t))
            self.started += 1
        else:
            self.joined += 1
            logger.debug(f"Joining in-flight call ({self.pending} pending)")
        return await asyncio.shield(task)

    def _settle(self, key: str, task: asyncio.Task) -> None:
        if self._pending.get(key) is task:
            del self._pending[key]
        if not task.cancelled():
            # Mark the exception retrieved; every awaiter re-raises it through shield
            task.exception()

    def get_stats(self) -> Dict[str, Any]:
        return {
            "pending": self.pending,
            "started": self.started,
            "joined": self.joined
        }
