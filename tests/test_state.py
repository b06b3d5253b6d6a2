import asyncio

import pytest

from counter_mcp.shared.config import CounterConfig
from counter_mcp.shared.errors import CounterOverflow, GuardReentryError
from counter_mcp.state import Counter, StateGuard


def test_counter_starts_at_zero_and_goes_negative():
    counter = Counter()
    assert counter.value == 0
    assert counter.add(-1) == -1
    assert counter.add(-1) == -2
    assert counter.value == -2


def test_counter_unbounded_by_default():
    counter = Counter()
    counter.value = counter.max_value
    assert counter.add(1) == 2**31


def test_counter_wrap_policy():
    counter = Counter(CounterConfig(overflow="wrap", bits=8))
    counter.value = 127
    assert counter.add(1) == -128
    assert counter.add(-1) == 127


def test_counter_saturate_policy():
    counter = Counter(CounterConfig(overflow="saturate", bits=8))
    counter.value = -128
    assert counter.add(-1) == -128
    counter.value = 127
    assert counter.add(1) == 127


def test_counter_error_policy_leaves_value_unchanged():
    counter = Counter(CounterConfig(overflow="error"))
    counter.value = 2**31 - 1
    with pytest.raises(CounterOverflow) as exc:
        counter.add(1)
    assert counter.value == 2**31 - 1
    assert exc.value.data == {"value": 2**31 - 1, "delta": 1}


def test_guard_yields_protected_value():
    async def scenario():
        counter = Counter()
        guard = StateGuard(counter)
        async with guard.acquire() as held:
            assert held is counter
            assert guard.locked()
        assert not guard.locked()

    asyncio.run(scenario())


def test_guard_serializes_waiters():
    async def scenario():
        guard = StateGuard(Counter())
        order = []

        async def holder():
            async with guard.acquire() as counter:
                order.append("held")
                await asyncio.sleep(0.01)
                counter.add(1)
                order.append("release")

        async def waiter():
            await asyncio.sleep(0)
            async with guard.acquire() as counter:
                order.append(f"waiter:{counter.value}")

        await asyncio.gather(holder(), waiter())
        return order

    assert asyncio.run(scenario()) == ["held", "release", "waiter:1"]


def test_guard_released_on_error():
    async def scenario():
        guard = StateGuard(Counter())
        with pytest.raises(RuntimeError):
            async with guard.acquire():
                raise RuntimeError("boom")
        assert not guard.locked()
        async with guard.acquire() as counter:
            return counter.value

    assert asyncio.run(scenario()) == 0


def test_nested_acquire_is_rejected():
    async def scenario():
        guard = StateGuard(Counter())
        async with guard.acquire():
            with pytest.raises(GuardReentryError):
                async with guard.acquire():
                    pass
            assert guard.locked()
        assert not guard.locked()

    asyncio.run(scenario())


def test_other_task_may_acquire_after_holder():
    async def scenario():
        guard = StateGuard(Counter())

        async def bump():
            async with guard.acquire() as counter:
                value = counter.value
                await asyncio.sleep(0)
                counter.value = value + 1

        await asyncio.gather(*(bump() for _ in range(25)))
        async with guard.acquire() as counter:
            return counter.value

    assert asyncio.run(scenario()) == 25
