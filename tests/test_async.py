"""Deferred continuations driven by an asyncio event loop."""

import asyncio

import pytest

from compose_middleware.exceptions import DoubleInvocationError
from compose_middleware.pipeline import compose


class TestDeferredContinuations:
    @pytest.mark.asyncio
    async def test_call_soon(self) -> None:
        loop = asyncio.get_running_loop()
        finished: asyncio.Future = loop.create_future()
        order: list[str] = []

        def first(request, response, next):
            order.append("first")
            loop.call_soon(next)

        def second(request, response, next):
            order.append("second")
            next()

        compose(first, second)({}, {}, lambda err=None: finished.set_result(err))

        # Nothing past the first handler runs until the loop turns.
        assert order == ["first"]
        assert await asyncio.wait_for(finished, 1) is None
        assert order == ["first", "second"]

    @pytest.mark.asyncio
    async def test_deferred_error_reaches_error_handler(self) -> None:
        loop = asyncio.get_running_loop()
        finished: asyncio.Future = loop.create_future()
        error = ValueError("late")
        recovered: list[object] = []

        def slow(request, response, next):
            loop.call_later(0.01, next, error)

        def skipped(request, response, next):
            recovered.append("skipped")
            next()

        def recover(err, request, response, next):
            recovered.append(err)
            next()

        compose(slow, skipped, recover)({}, {}, lambda err=None: finished.set_result(err))

        assert await asyncio.wait_for(finished, 1) is None
        assert recovered == [error]

    @pytest.mark.asyncio
    async def test_concurrent_runs_finish_independently(self) -> None:
        loop = asyncio.get_running_loop()

        def wait(request, response, next):
            loop.call_later(request["delay"], next)

        def stamp(request, response, next):
            request["stamped"] = True
            next()

        app = compose(wait, stamp)
        slow, fast = {"delay": 0.05}, {"delay": 0.0}
        slow_done: asyncio.Future = loop.create_future()
        fast_done: asyncio.Future = loop.create_future()

        app(slow, {}, lambda err=None: slow_done.set_result(err))
        app(fast, {}, lambda err=None: fast_done.set_result(err))

        assert await asyncio.wait_for(fast_done, 1) is None
        assert fast["stamped"] is True
        assert "stamped" not in slow
        assert await asyncio.wait_for(slow_done, 1) is None
        assert slow["stamped"] is True

    @pytest.mark.asyncio
    async def test_late_second_call_raises(self) -> None:
        loop = asyncio.get_running_loop()
        finished: asyncio.Future = loop.create_future()
        held: list = []

        def handler(request, response, next):
            held.append(next)
            loop.call_soon(next)

        compose(handler)({}, {}, lambda err=None: finished.set_result(err))
        await asyncio.wait_for(finished, 1)

        with pytest.raises(DoubleInvocationError):
            held[0]()
