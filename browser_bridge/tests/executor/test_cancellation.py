import asyncio
import threading

import pytest

from browser_bridge.contracts.errors import ExecutionCancelled
from browser_bridge.executor.cancellation import NEVER_CANCELLED, CancellationToken, resolve_token


def test_token_raises_once_cancelled():
    token = CancellationToken()
    token.raise_if_cancelled()

    token.cancel("user stopped the shortcut")

    assert token.cancelled is True
    with pytest.raises(ExecutionCancelled, match="user stopped the shortcut"):
        token.raise_if_cancelled()


def test_first_reason_wins():
    token = CancellationToken()
    token.cancel("first")
    token.cancel("second")

    assert token.reason == "first"


def test_sleep_wakes_early_on_cancel_from_another_thread():
    token = CancellationToken()

    async def scenario():
        loop = asyncio.get_running_loop()
        start = loop.time()
        threading.Timer(0.02, token.cancel).start()
        with pytest.raises(ExecutionCancelled):
            await token.sleep(5.0, slice_seconds=0.01)
        return loop.time() - start

    elapsed = asyncio.run(scenario())

    assert elapsed < 1.0


def test_sleep_before_cancel_completes():
    token = CancellationToken()

    asyncio.run(token.sleep(0.01))

    assert token.cancelled is False


def test_resolve_token_defaults_to_shared_noop():
    assert resolve_token(None) is NEVER_CANCELLED
    with pytest.raises(RuntimeError):
        NEVER_CANCELLED.cancel()


def test_run_returns_result_when_not_cancelled():
    async def work():
        await asyncio.sleep(0.01)
        return "done"

    assert asyncio.run(CancellationToken().run(work())) == "done"


def test_run_abandons_slow_work_on_cancel():
    token = CancellationToken()
    state = {}

    async def slow():
        try:
            await asyncio.sleep(3)
        except asyncio.CancelledError:
            state["cancelled"] = True
            raise

    async def scenario():
        loop = asyncio.get_running_loop()
        loop.call_later(0.05, token.cancel)
        start = loop.time()
        with pytest.raises(ExecutionCancelled):
            await token.run(slow(), slice_seconds=0.01)
        elapsed = loop.time() - start
        await asyncio.sleep(0)
        return elapsed

    assert asyncio.run(scenario()) < 1.0
    assert state.get("cancelled") is True


def test_run_on_cancelled_token_never_starts_work():
    token = CancellationToken()
    token.cancel()
    started = []

    async def work():
        started.append(True)

    with pytest.raises(ExecutionCancelled):
        asyncio.run(token.run(work()))
    assert started == []
