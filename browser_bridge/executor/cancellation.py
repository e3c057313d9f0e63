"""
Cooperative cancellation for the action and snapshot pipelines.

A token is checked before every script evaluation, between actions and
inside waits. Tripping it aborts the whole batch with `ExecutionCancelled`.
"""

from __future__ import annotations

import asyncio
import threading
from typing import Awaitable, Optional, TypeVar

from browser_bridge.contracts.errors import ExecutionCancelled

T = TypeVar("T")


class CancellationToken:
    def __init__(self) -> None:
        self._flag = threading.Event()
        self._reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._flag.is_set()

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def cancel(self, reason: Optional[str] = None) -> None:
        """Safe to call from any thread."""
        if not self._flag.is_set():
            self._reason = reason
        self._flag.set()

    def raise_if_cancelled(self) -> None:
        if self._flag.is_set():
            raise ExecutionCancelled(self._reason or "cancelled")

    async def sleep(self, seconds: float, *, slice_seconds: float = 0.05) -> None:
        """Sleep for `seconds`, waking early (and raising) once cancelled."""
        self.raise_if_cancelled()
        loop = asyncio.get_running_loop()
        deadline = loop.time() + max(0.0, seconds)
        while True:
            remaining = deadline - loop.time()
            if remaining <= 0:
                break
            await asyncio.sleep(min(slice_seconds, remaining))
            self.raise_if_cancelled()

    async def run(self, awaitable: Awaitable[T], *, slice_seconds: float = 0.05) -> T:
        """
        Await `awaitable`, checking the token every `slice_seconds`.

        On cancellation the pending work is cancelled and ExecutionCancelled
        is raised without waiting for it to finish.
        """
        if self.cancelled:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            self.raise_if_cancelled()
        task = asyncio.ensure_future(awaitable)
        try:
            while True:
                done, _ = await asyncio.wait({task}, timeout=slice_seconds)
                if done:
                    return task.result()
                self.raise_if_cancelled()
        finally:
            if not task.done():
                task.cancel()


class _NeverCancelled(CancellationToken):
    def cancel(self, reason: Optional[str] = None) -> None:
        raise RuntimeError("the shared no-op token cannot be cancelled")

    async def sleep(self, seconds: float, *, slice_seconds: float = 0.05) -> None:
        await asyncio.sleep(max(0.0, seconds))

    async def run(self, awaitable: Awaitable[T], *, slice_seconds: float = 0.05) -> T:
        return await awaitable


NEVER_CANCELLED = _NeverCancelled()


def resolve_token(token: Optional[CancellationToken]) -> CancellationToken:
    return token if token is not None else NEVER_CANCELLED


__all__ = ["CancellationToken", "NEVER_CANCELLED", "resolve_token"]
