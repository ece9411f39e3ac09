from __future__ import annotations

import asyncio

from sequence_runner import awaitables


async def _double(value: int) -> int:
    await asyncio.sleep(0)
    return value * 2


def test_plain_values_pass_through() -> None:
    assert awaitables.resolve(3) == 3
    assert awaitables.call(lambda a, b: a + b, 1, 2) == 3


def test_coroutines_are_awaited() -> None:
    assert awaitables.resolve(_double(4)) == 8
    assert awaitables.call(_double, 5) == 10


def test_works_inside_a_running_loop() -> None:
    async def main() -> int:
        return awaitables.call(_double, 6)

    assert asyncio.run(main()) == 12
