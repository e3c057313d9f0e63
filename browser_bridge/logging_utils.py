"""Helpers for the structured event log: request ids, payload scrubbing, summaries."""

from __future__ import annotations

import json
import logging
import uuid
from typing import Any, Dict, Iterable, List, Optional, Set

event_logger = logging.getLogger("browser_bridge.events")

TEXT_LIMIT = 2000
LIST_LIMIT = 50

# Snapshot payload keys; their values are megabytes of base64 and never worth logging.
IMAGE_KEYS = frozenset({"image", "image_base64", "imageBase64"})


def generate_request_id() -> str:
    return uuid.uuid4().hex


def _truncate(value: str, max_len: int = TEXT_LIMIT) -> str:
    overflow = len(value) - max_len
    if overflow <= 0:
        return value
    return f"{value[:max_len]}...<truncated {overflow} chars>"


def _scrub(value: Any, keep: Set[str]) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return f"<bytes:{len(value)}>"
    if isinstance(value, str):
        return _truncate(value)
    if isinstance(value, (list, tuple)):
        return [_scrub(item, keep) for item in list(value)[:LIST_LIMIT]]
    if not isinstance(value, dict):
        return value

    scrubbed: Dict[str, Any] = {}
    for key, item in value.items():
        if key in IMAGE_KEYS:
            scrubbed[key] = "<redacted:image>"
        elif key in keep:
            scrubbed[key] = item
        else:
            scrubbed[key] = _scrub(item, keep)
    return scrubbed


def sanitize_payload(payload: Dict[str, Any], keep_full: Optional[Iterable[str]] = None) -> Dict[str, Any]:
    """
    Copy `payload` for logging: image fields redacted, raw bytes replaced by
    their length, long strings cut, long lists capped. Keys in `keep_full`
    are copied as-is.
    """
    try:
        return dict(_scrub(payload, set(keep_full or ())))
    except Exception:  # noqa: BLE001
        return {"error": "failed_to_sanitize"}


def summarize_batch(actions_text: Any, max_actions: Optional[int] = None) -> Dict[str, Any]:
    """Preview of an incoming batch for the event log. Action fields (typed text, URLs) are left out."""
    if not isinstance(actions_text, str):
        return {"present": False}
    summary: Dict[str, Any] = {"present": True, "chars": len(actions_text), "max_actions": max_actions}
    try:
        data = json.loads(actions_text)
    except ValueError:
        return {**summary, "parsable": False}

    summary["parsable"] = isinstance(data, dict)
    if not summary["parsable"]:
        return summary
    actions = data.get("actions")
    if isinstance(actions, list):
        summary["total_actions"] = len(actions)
        summary["types_preview"] = [
            item.get("type") if isinstance(item, dict) else None for item in actions[:15]
        ]
    if "done" in data:
        summary["done"] = data["done"]
    return summary


def summarize_execution(execution: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    if not isinstance(execution, dict):
        return {"present": False}
    errors: List[Any] = execution.get("errors") or []
    warnings: List[Any] = execution.get("warnings") or []
    return {
        "present": True,
        "executed": execution.get("executedCount"),
        "skipped": execution.get("skippedCount"),
        "errors": len(errors),
        "last_error": _truncate(str(errors[-1]), 500) if errors else None,
        "warnings": len(warnings),
        "did_navigate": execution.get("didNavigate"),
        "final_url": execution.get("finalURL"),
    }


def log_event(event: str, request_id: str, payload: Optional[Dict[str, Any]] = None) -> None:
    """Write one JSON line to the event log. Never raises."""
    record: Dict[str, Any] = {"event": event, "request_id": request_id}
    if payload:
        record.update(sanitize_payload(payload))
    try:
        line = json.dumps(record, ensure_ascii=True, default=str)
    except (TypeError, ValueError):
        line = f"{event} {request_id} {record!r}"
    event_logger.info(line)
