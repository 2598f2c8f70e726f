"""
Async Utilities for Concurrent Upstream Calls.

Provides:
- Parallel execution that settles every coroutine (no fail-fast)
- Per-call timeouts mapped onto the exception hierarchy
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

from .exceptions import UpstreamTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


# =============================================================================
# Parallel Execution with TaskGroup
# =============================================================================

async def gather_settled(*coros: Awaitable[T]) -> list[T | Exception]:
    """
    Execute coroutines in parallel and wait for all of them to settle.

    A failing coroutine yields its exception in the result list instead of
    cancelling its siblings. Results keep the order of the arguments, not
    the order of completion.

    Example:
        labels, candidates = await gather_settled(
            openfda.search("aspirin", 10),
            rxnorm.search("aspirin", 10),
        )
    """

    async def settle(coro: Awaitable[T]) -> T | Exception:
        try:
            return await coro
        except Exception as e:
            return e

    async with asyncio.TaskGroup() as tg:
        tasks = [tg.create_task(settle(coro)) for coro in coros]

    return [task.result() for task in tasks]


# =============================================================================
# Timeouts
# =============================================================================

async def with_timeout(coro: Awaitable[T], timeout: float, service: str) -> T:
    """
    Await a coroutine under a deadline.

    Raises:
        UpstreamTimeoutError: if the deadline passes first
    """
    try:
        return await asyncio.wait_for(coro, timeout=timeout)
    except TimeoutError as e:
        logger.warning(f"{service}: timed out after {timeout:g}s")
        raise UpstreamTimeoutError(service, timeout) from e

