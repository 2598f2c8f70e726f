"""Tests for async_utils.py: gather_settled and with_timeout."""

import asyncio

import pytest

from pharmapulse.core.async_utils import gather_settled, with_timeout
from pharmapulse.core.exceptions import UpstreamTimeoutError


async def _value(value, delay=0.0):
    await asyncio.sleep(delay)
    return value


async def _fail(exc, delay=0.0):
    await asyncio.sleep(delay)
    raise exc


class TestGatherSettled:
    async def test_results_in_argument_order(self):
        results = await gather_settled(_value("slow", 0.03), _value("fast", 0.0))
        assert results == ["slow", "fast"]

    async def test_failure_does_not_cancel_siblings(self):
        error = ValueError("boom")
        results = await gather_settled(_fail(error), _value("ok", 0.02))
        assert results[0] is error
        assert results[1] == "ok"

    async def test_all_fail(self):
        results = await gather_settled(_fail(KeyError("a")), _fail(KeyError("b")))
        assert all(isinstance(r, KeyError) for r in results)

    async def test_no_coroutines(self):
        assert await gather_settled() == []

    async def test_runs_concurrently(self):
        loop = asyncio.get_running_loop()
        start = loop.time()
        await gather_settled(_value(1, 0.05), _value(2, 0.05), _value(3, 0.05))
        assert loop.time() - start < 0.14


class TestWithTimeout:
    async def test_returns_result(self):
        assert await with_timeout(_value(42), 1.0, "openFDA") == 42

    async def test_raises_upstream_timeout(self):
        with pytest.raises(UpstreamTimeoutError) as exc_info:
            await with_timeout(_value(1, 1.0), 0.01, "RxNorm")
        assert exc_info.value.context.source == "RxNorm"
        assert exc_info.value.timeout == 0.01

    async def test_other_errors_propagate(self):
        with pytest.raises(ValueError):
            await with_timeout(_fail(ValueError("x")), 1.0, "openFDA")

    async def test_timeout_settles_as_result(self):
        results = await gather_settled(
            with_timeout(_value(1, 1.0), 0.01, "RxNorm"),
            with_timeout(_value(2), 1.0, "openFDA"),
        )
        assert isinstance(results[0], UpstreamTimeoutError)
        assert results[1] == 2
