from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Mapping, Optional, Tuple

from browser_bridge.contracts.execution import ActionOutcome
from browser_bridge.executor import scripts
from browser_bridge.executor.actions_schema import (
    BrowserAction,
    ClickAtAction,
    NavigateAction,
    ScrollAction,
    TypeAction,
    WaitAction,
)
from browser_bridge.contracts.errors import ExecutionCancelled
from browser_bridge.executor.cancellation import CancellationToken
from browser_bridge.executor.ready_state import (
    CLICK_SETTLE_TIMEOUT,
    NAVIGATE_SETTLE_TIMEOUT,
    TYPE_SETTLE_TIMEOUT,
    wait_for_ready_state,
)
from browser_bridge.surface.base import Surface

log = logging.getLogger(__name__)

NORMALIZED_MAX = 1000.0

NO_ELEMENT_AT_POINT = "No element found at the requested point."
SCROLL_FAILED = "Scroll request failed to run."
NO_FORM_FIELD = "No active form field to type into."
HOST_ERROR = "The page raised an error while running {kind}."

Handler = Callable[[Surface, Any, CancellationToken], Awaitable[ActionOutcome]]


class Dispatcher:
    """
    Minimal forwarding shell to route typed actions to their handlers.

    Handlers are looked up by the action's `kind` so tests and hosts can swap
    individual handlers without touching the pipeline.
    """

    def __init__(self, handlers: Mapping[str, Handler]) -> None:
        self._handlers = dict(handlers or {})

    def get_handler(self, action_key: str) -> Optional[Handler]:
        return self._handlers.get(action_key)

    async def dispatch(self, surface: Surface, action: BrowserAction, token: CancellationToken) -> ActionOutcome:
        handler = self.get_handler(action.kind)
        if handler is None:
            return ActionOutcome(success=False, warning=f"No handler registered for {action.kind}.")
        try:
            return await handler(surface, action, token)
        except ExecutionCancelled:
            raise
        except Exception as exc:  # noqa: BLE001
            # Host errors (closed context, navigation races) fail this action only.
            log.warning("%s handler raised: %s", action.kind, exc)
            return ActionOutcome(success=False, warning=HOST_ERROR.format(kind=action.kind))


async def _evaluate_bool(surface: Surface, script: str) -> bool:
    try:
        return (await surface.evaluate(script)) is True
    except Exception as exc:  # noqa: BLE001
        log.info("action script failed: %s", exc)
        return False


def resolve_click_point(x: float, y: float, viewport: Tuple[float, float]) -> Tuple[float, float]:
    """Clamp normalized 0-1000 coordinates and scale them to viewport pixels."""
    width, height = viewport
    nx = max(0.0, min(NORMALIZED_MAX, float(x))) / NORMALIZED_MAX
    ny = max(0.0, min(NORMALIZED_MAX, float(y))) / NORMALIZED_MAX
    return nx * float(width), ny * float(height)


async def handle_navigate(surface: Surface, action: NavigateAction, token: CancellationToken) -> ActionOutcome:
    await token.run(surface.load(action.url))
    await wait_for_ready_state(surface, NAVIGATE_SETTLE_TIMEOUT, token)
    return ActionOutcome(success=True)


async def handle_click_at(surface: Surface, action: ClickAtAction, token: CancellationToken) -> ActionOutcome:
    px, py = resolve_click_point(action.x, action.y, await surface.viewport_size())
    log.debug("click_at (%s, %s) -> pixel (%s, %s)", action.x, action.y, px, py)
    token.raise_if_cancelled()
    found = await _evaluate_bool(surface, scripts.click_script(px, py))
    if not found:
        return ActionOutcome(success=False, warning=NO_ELEMENT_AT_POINT)
    await wait_for_ready_state(surface, CLICK_SETTLE_TIMEOUT, token)
    return ActionOutcome(success=True)


async def handle_scroll(surface: Surface, action: ScrollAction, token: CancellationToken) -> ActionOutcome:
    token.raise_if_cancelled()
    try:
        await surface.evaluate(scripts.scroll_script(action.delta_y))
    except Exception as exc:  # noqa: BLE001
        log.info("scroll script failed: %s", exc)
        return ActionOutcome(success=False, warning=SCROLL_FAILED)
    return ActionOutcome(success=True)


async def handle_type(surface: Surface, action: TypeAction, token: CancellationToken) -> ActionOutcome:
    token.raise_if_cancelled()
    typed = await _evaluate_bool(surface, scripts.type_script(action.text))
    if not typed:
        return ActionOutcome(success=False, warning=NO_FORM_FIELD)
    await wait_for_ready_state(surface, TYPE_SETTLE_TIMEOUT, token)
    return ActionOutcome(success=True)


async def handle_wait(surface: Surface, action: WaitAction, token: CancellationToken) -> ActionOutcome:
    token.raise_if_cancelled()
    if action.ms > 0:
        await token.sleep(action.ms / 1000.0)
    return ActionOutcome(success=True)


ACTION_HANDLERS = {
    NavigateAction.kind: handle_navigate,
    ClickAtAction.kind: handle_click_at,
    ScrollAction.kind: handle_scroll,
    TypeAction.kind: handle_type,
    WaitAction.kind: handle_wait,
}


def default_dispatcher() -> Dispatcher:
    return Dispatcher(ACTION_HANDLERS)


__all__ = [
    "Dispatcher",
    "ACTION_HANDLERS",
    "default_dispatcher",
    "resolve_click_point",
    "handle_navigate",
    "handle_click_at",
    "handle_scroll",
    "handle_type",
    "handle_wait",
    "NO_ELEMENT_AT_POINT",
    "SCROLL_FAILED",
    "NO_FORM_FIELD",
    "HOST_ERROR",
]
