from __future__ import annotations

import asyncio
import logging
from typing import Optional

from browser_bridge.executor.cancellation import CancellationToken, resolve_token
from browser_bridge.executor.scripts import READY_STATE_SCRIPT
from browser_bridge.surface.base import Surface

log = logging.getLogger(__name__)

READY_STATES = {"interactive", "complete"}
POLL_INTERVAL = 0.2

NAVIGATE_SETTLE_TIMEOUT = 5.0
CLICK_SETTLE_TIMEOUT = 3.0
TYPE_SETTLE_TIMEOUT = 1.0


async def _is_ready(surface: Surface) -> bool:
    try:
        state = await surface.evaluate(READY_STATE_SCRIPT)
    except Exception as exc:  # noqa: BLE001
        # Mid-navigation the document may be gone; treat as not ready yet.
        log.debug("readyState query failed: %s", exc)
        return False
    return isinstance(state, str) and state in READY_STATES


async def wait_for_ready_state(
    surface: Surface,
    timeout: float,
    token: Optional[CancellationToken] = None,
    interval: float = POLL_INTERVAL,
) -> bool:
    """
    Poll document.readyState until interactive/complete or `timeout` seconds pass.

    Best effort: returns whether readiness was observed and never raises on
    timeout. Raises ExecutionCancelled if `token` trips.
    """
    token = resolve_token(token)
    loop = asyncio.get_running_loop()
    deadline = loop.time() + max(0.0, timeout)
    while loop.time() < deadline:
        token.raise_if_cancelled()
        if await _is_ready(surface):
            return True
        remaining = deadline - loop.time()
        if remaining <= 0:
            break
        await token.sleep(min(interval, remaining))
    return False


__all__ = [
    "READY_STATES",
    "POLL_INTERVAL",
    "NAVIGATE_SETTLE_TIMEOUT",
    "CLICK_SETTLE_TIMEOUT",
    "TYPE_SETTLE_TIMEOUT",
    "wait_for_ready_state",
]
