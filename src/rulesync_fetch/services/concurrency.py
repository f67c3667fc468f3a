"""Fail-fast task fan-out shared by the tree walker and fetch scheduler."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Iterable, TypeVar

T = TypeVar("T")


async def gather_fail_fast(coros: Iterable[Awaitable[T]]) -> list[T]:
    """Run *coros* concurrently and return their results in input order.

    The first exception propagates unchanged and every task still pending
    is cancelled, so callers never observe partial results.
    """
    tasks = [asyncio.ensure_future(c) for c in coros]
    if not tasks:
        return []
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
