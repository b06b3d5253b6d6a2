"""Shared mutable state and the guard that serializes access to it."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Generic, Optional, TypeVar

from .shared.config import CounterConfig
from .shared.errors import CounterOverflow, GuardReentryError

T = TypeVar("T")


class Counter:
    """Signed integer counter, starting at 0.

    Not safe to touch outside a ``StateGuard`` acquisition.
    """

    def __init__(self, config: Optional[CounterConfig] = None) -> None:
        self.config = config or CounterConfig()
        self.value = 0
        half = 1 << (self.config.bits - 1)
        self.min_value = -half
        self.max_value = half - 1

    def add(self, delta: int) -> int:
        """Apply ``delta`` under the configured overflow policy and return the new value."""
        candidate = self.value + delta
        policy = self.config.overflow
        if policy != "unbounded" and not self.min_value <= candidate <= self.max_value:
            if policy == "wrap":
                span = 1 << self.config.bits
                candidate = (candidate - self.min_value) % span + self.min_value
            elif policy == "saturate":
                candidate = max(self.min_value, min(self.max_value, candidate))
            else:
                raise CounterOverflow(
                    f"counter would leave the {self.config.bits}-bit range",
                    data={"value": self.value, "delta": delta},
                )
        self.value = candidate
        return candidate


class StateGuard(Generic[T]):
    """Exclusive, non-reentrant access to a shared value.

    ``acquire()`` suspends the calling task while another task holds the guard.
    Acquiring again from the task that already holds it raises
    ``GuardReentryError`` instead of deadlocking.
    """

    def __init__(self, value: T) -> None:
        self._value = value
        self._lock = asyncio.Lock()
        self._owner: Optional[asyncio.Task] = None

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[T]:
        task = asyncio.current_task()
        if task is not None and self._owner is task:
            raise GuardReentryError("StateGuard is already held by the current task")
        async with self._lock:
            self._owner = task
            try:
                yield self._value
            finally:
                self._owner = None

    def locked(self) -> bool:
        return self._lock.locked()
