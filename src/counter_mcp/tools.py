from __future__ import annotations

from .registry import RegistryBuilder, ToolRegistry
from .state import Counter, StateGuard


async def increment(guard: StateGuard[Counter]) -> str:
    async with guard.acquire() as counter:
        value = counter.add(1)
    return str(value)


async def decrement(guard: StateGuard[Counter]) -> str:
    async with guard.acquire() as counter:
        value = counter.add(-1)
    return str(value)


async def get_counter(guard: StateGuard[Counter]) -> str:
    async with guard.acquire() as counter:
        value = counter.value
    return str(value)


def build_registry() -> ToolRegistry:
    builder = RegistryBuilder()
    builder.register("increment", "Increment the counter by 1 and return the new value", increment)
    builder.register("decrement", "Decrement the counter by 1 and return the new value", decrement)
    builder.register("get_counter", "Return the current value of the counter", get_counter)
    return builder.build()
