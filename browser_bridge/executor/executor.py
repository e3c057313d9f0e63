"""
Action executor for the browser action batch.

Provides `execute_actions`, which:
- resolves the active surface and parses the batch (terminal on failure),
- applies the action cap and, optionally, the risk gate on the current page,
- runs each record in order, skipping malformed ones and recording runtime
  failures without stopping the batch,
- reports counts, messages and whether the page navigated.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Union

from browser_bridge.contracts.errors import BridgeError, ExecutionCancelled, NoActiveSurfaceError
from browser_bridge.contracts.execution import ExecutionResult
from browser_bridge.executor.actions_schema import NavigateAction, RawAction, build_action, parse_action_batch
from browser_bridge.executor.cancellation import CancellationToken, resolve_token
from browser_bridge.executor.dispatch import Dispatcher, default_dispatcher
from browser_bridge.executor.gates import PAUSED_WARNING, GateDecision, evaluate_risk_gate
from browser_bridge.surface.base import Surface
from browser_bridge.surface.registry import SurfaceRegistry, resolve_live_surface
from browser_bridge.vision.page_text import fetch_page_context, read_surface_title

log = logging.getLogger(__name__)

MAX_ACTIONS = 10
NO_ACTIONS_WARNING = "No actions to execute."


async def _current_url(surface: Surface) -> Optional[str]:
    try:
        return await surface.current_url()
    except Exception as exc:  # noqa: BLE001
        log.info("could not read surface url: %s", exc)
        return None


async def scan_for_risk(surface: Surface, token: Optional[CancellationToken] = None) -> GateDecision:
    """Run the risk gate against what the page says right now."""
    context = await fetch_page_context(surface, include_text=True, token=token)
    return evaluate_risk_gate(context)


class BrowserActionExecutor:
    """Runs validated actions against one surface and aggregates their outcomes."""

    def __init__(
        self,
        surface: Surface,
        *,
        dispatcher: Optional[Dispatcher] = None,
        token: Optional[CancellationToken] = None,
    ) -> None:
        self.surface = surface
        self.dispatcher = dispatcher or default_dispatcher()
        self.token = resolve_token(token)

    async def scan_for_risk(self) -> GateDecision:
        return await scan_for_risk(self.surface, self.token)

    async def execute(self, actions: List[RawAction]) -> ExecutionResult:
        result = ExecutionResult()
        did_navigate = False
        initial_url = await _current_url(self.surface)

        for index, raw in enumerate(actions):
            self.token.raise_if_cancelled()
            action = build_action(raw)
            if action is None:
                result.skipped_count += 1
                result.warnings.append(f"Skipped unsupported or invalid action: {raw.type}")
                log.info("[EXEC] step %s skipped: %s", index, raw.type)
                continue

            outcome = await self.dispatcher.dispatch(self.surface, action, self.token)
            if outcome.warning:
                result.warnings.append(outcome.warning)
            if outcome.success:
                result.executed_count += 1
                log.info("[EXEC] step %s ok: %s", index, action.describe())
            else:
                result.errors.append(f"Failed to execute action: {action.describe()}")
                log.info("[EXEC] step %s failed: %s", index, action.describe())

            if isinstance(action, NavigateAction):
                did_navigate = True

        final_url = await _current_url(self.surface)
        result.final_url = final_url
        result.final_title = await read_surface_title(self.surface)
        result.did_navigate = did_navigate or initial_url != final_url
        return result


async def _run(
    surface: Surface,
    actions_text: Union[str, bytes],
    require_confirmation: bool,
    max_actions: int,
    dispatcher: Optional[Dispatcher],
    token: CancellationToken,
) -> ExecutionResult:
    batch = parse_action_batch(actions_text)
    actions = batch.limited(max_actions)
    if not actions:
        return ExecutionResult(warnings=[NO_ACTIONS_WARNING])

    executor = BrowserActionExecutor(surface, dispatcher=dispatcher, token=token)
    if require_confirmation:
        decision = await executor.scan_for_risk()
        if not decision.allowed:
            log.info("risk gate paused batch: %s", decision.matched)
            return ExecutionResult(errors=[decision.error_message], warnings=[PAUSED_WARNING])

    return await executor.execute(actions)


async def execute_actions(
    actions_text: Union[str, bytes],
    require_confirmation: bool = True,
    max_actions: int = MAX_ACTIONS,
    *,
    registry: Optional[SurfaceRegistry] = None,
    dispatcher: Optional[Dispatcher] = None,
    token: Optional[CancellationToken] = None,
) -> ExecutionResult:
    """
    Validate and execute an action batch against the active surface.

    Terminal problems (no surface, undecodable or schema-invalid input) come
    back as an errors-only result. Raises ExecutionCancelled if `token` trips;
    no partial result is returned in that case.
    """
    token = resolve_token(token)
    surface = resolve_live_surface(registry)
    if surface is None:
        return ExecutionResult.failure(NoActiveSurfaceError().message)

    token.raise_if_cancelled()
    try:
        return await _run(surface, actions_text, require_confirmation, max_actions, dispatcher, token)
    except BridgeError as exc:
        log.info("execute failed: %s", exc.message)
        return ExecutionResult.failure(exc.message)
    except ExecutionCancelled:
        log.info("execute cancelled")
        raise
    except Exception:
        # The host closed the surface while the batch was running.
        if not surface.is_alive():
            return ExecutionResult.failure(NoActiveSurfaceError().message)
        raise


__all__ = ["MAX_ACTIONS", "NO_ACTIONS_WARNING", "BrowserActionExecutor", "scan_for_risk", "execute_actions"]
