import base64
import logging
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from pydantic import BaseModel, ConfigDict, Field

from browser_bridge import config
from browser_bridge.contracts.snapshot import SNAPSHOT_FILENAME, SnapshotResult
from browser_bridge.executor.executor import execute_actions
from browser_bridge.logging_setup import setup_logging
from browser_bridge.logging_utils import generate_request_id, log_event, summarize_batch, summarize_execution
from browser_bridge.surface.registry import resolve_live_surface
from browser_bridge.vision.snapshot import capture_snapshot

setup_logging()
load_dotenv()

log = logging.getLogger(__name__)


class SnapshotRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    include_text: bool = Field(default=True, alias="includeText")


class ExecuteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    actions_json: str = Field(alias="actionsJson")
    require_confirmation: Optional[bool] = Field(default=None, alias="requireConfirmation")
    max_actions: Optional[int] = Field(default=None, alias="maxActions")


@asynccontextmanager
async def lifespan(app: FastAPI):
    host = None
    if config.launch_browser_enabled():
        from browser_bridge.surface.playwright_surface import BrowserHost

        host = BrowserHost(
            headless=config.headless_enabled(),
            viewport=config.viewport_size(),
            start_url=config.start_url(),
        )
        await host.start()
    app.state.browser_host = host
    try:
        yield
    finally:
        if host is not None:
            await host.close()


app = FastAPI(lifespan=lifespan)


def _snapshot_payload(snapshot: SnapshotResult, request_id: str) -> dict:
    image_b64 = base64.b64encode(snapshot.image).decode("ascii") if snapshot.image else None
    return {
        "imageBase64": image_b64,
        "filename": SNAPSHOT_FILENAME if image_b64 else None,
        "url": snapshot.url,
        "title": snapshot.title,
        "viewportWidth": snapshot.viewport_width,
        "viewportHeight": snapshot.viewport_height,
        "textSnippet": snapshot.text_snippet,
        "error": snapshot.error,
        "requestId": request_id,
    }


@app.get("/")
async def read_root():
    return {"status": "ok", "surface": resolve_live_surface() is not None}


@app.post("/api/browser/snapshot")
async def browser_snapshot(payload: Optional[SnapshotRequest] = None):
    """Capture the active surface; failures are reported in `error`, not as HTTP errors."""
    request = payload or SnapshotRequest()
    request_id = generate_request_id()
    log_event("browser_snapshot.start", request_id, {"include_text": request.include_text})
    snapshot = await capture_snapshot(include_text=request.include_text)
    log_event(
        "browser_snapshot.finished",
        request_id,
        {"error": snapshot.error, "url": snapshot.url, "has_snippet": snapshot.text_snippet is not None},
    )
    return _snapshot_payload(snapshot, request_id)


@app.post("/api/browser/execute")
async def browser_execute(payload: ExecuteRequest):
    """
    Validate and execute an action batch against the active surface.
    Does not call any orchestrator; the caller decides the next step.
    """
    request_id = generate_request_id()
    require_confirmation = (
        config.DEFAULT_REQUIRE_CONFIRMATION if payload.require_confirmation is None else payload.require_confirmation
    )
    max_actions = config.DEFAULT_MAX_ACTIONS if payload.max_actions is None else payload.max_actions
    log_event(
        "browser_execute.start",
        request_id,
        {
            "require_confirmation": require_confirmation,
            "batch": summarize_batch(payload.actions_json, max_actions),
        },
    )
    result = await execute_actions(
        payload.actions_json,
        require_confirmation=require_confirmation,
        max_actions=max_actions,
    )
    body = result.to_wire()
    log_event("browser_execute.finished", request_id, {"execution": summarize_execution(body)})
    body["requestId"] = request_id
    return body
