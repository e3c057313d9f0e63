"""
Schemas and validation helpers for action batches.

Decoding happens in two steps so that "not JSON / wrong shape" and
"well-formed record that is not a usable action" stay distinguishable:

1. `parse_action_batch` turns the raw text into an `ActionBatch` whose
   actions are loosely typed `RawAction` records. Failure here is terminal.
2. `build_action` turns one `RawAction` into one of the five typed actions,
   or returns None so the executor can skip just that record.

Supported actions and their required fields:
- navigate: {"url": "https://example.com"} (absolute URL).
- click_at: {"x": <0-1000>, "y": <0-1000>} normalized viewport coordinates.
- scroll: {"deltaY": <number>} pixels; positive scrolls down.
- type: {"text": "<text to append>"}.
- wait: {"ms": <int>} milliseconds.
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar, Dict, List, Optional, Type, Union
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr, ValidationError, field_validator

from browser_bridge.contracts.errors import InvalidBatchEncodingError, InvalidBatchSchemaError

log = logging.getLogger(__name__)

_HOST_REQUIRED_SCHEMES = {"http", "https", "ws", "wss", "ftp"}


class RawAction(BaseModel):
    """One record of the `actions` array before it is checked against its tag."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    type: StrictStr
    url: Any = None
    x: Any = None
    y: Any = None
    delta_y: Any = Field(default=None, alias="deltaY")
    text: Any = None
    ms: Any = None


class ActionBatch(BaseModel):
    """The envelope sent by the orchestrator. `done`/`note` are informational only."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    actions: Optional[List[RawAction]] = None
    done: Optional[StrictBool] = None
    note: Optional[StrictStr] = None

    def limited(self, max_actions: int) -> List[RawAction]:
        """First `max(1, max_actions)` records; non-positive caps are coerced to one."""
        return list(self.actions or [])[: max(1, int(max_actions))]


class _TypedAction(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True, extra="ignore", populate_by_name=True)

    kind: ClassVar[str] = ""

    def describe(self) -> str:
        """Short call-like form used in logs and error messages. Every action overrides it."""
        raise NotImplementedError


class NavigateAction(_TypedAction):
    kind: ClassVar[str] = "navigate"

    url: str

    @field_validator("url")
    @classmethod
    def _absolute_url(cls, value: str) -> str:
        value = value.strip()
        if not value or any(ch.isspace() for ch in value):
            raise ValueError("url must be a non-empty URL without whitespace")
        parts = urlsplit(value)
        if not parts.scheme:
            raise ValueError("url must be absolute")
        if parts.scheme.lower() in _HOST_REQUIRED_SCHEMES and not parts.netloc:
            raise ValueError(f"{parts.scheme} url requires a host")
        return value

    def describe(self) -> str:
        return f"navigate({self.url})"


class ClickAtAction(_TypedAction):
    kind: ClassVar[str] = "click_at"

    x: float = Field(allow_inf_nan=False)
    y: float = Field(allow_inf_nan=False)

    def describe(self) -> str:
        return f"click_at({self.x},{self.y})"


class ScrollAction(_TypedAction):
    kind: ClassVar[str] = "scroll"

    delta_y: float = Field(alias="deltaY", allow_inf_nan=False)

    def describe(self) -> str:
        return f"scroll({self.delta_y})"


class TypeAction(_TypedAction):
    kind: ClassVar[str] = "type"

    text: str

    def describe(self) -> str:
        return f"type({self.text})"


class WaitAction(_TypedAction):
    kind: ClassVar[str] = "wait"

    ms: int

    def describe(self) -> str:
        return f"wait({self.ms})"


BrowserAction = Union[NavigateAction, ClickAtAction, ScrollAction, TypeAction, WaitAction]

ACTION_MODELS: Dict[str, Type[_TypedAction]] = {
    model.kind: model for model in (NavigateAction, ClickAtAction, ScrollAction, TypeAction, WaitAction)
}


def build_action(raw: RawAction) -> Optional[BrowserAction]:
    """Construct the typed action for `raw`, or None if its tag or fields are unusable."""
    model = ACTION_MODELS.get(raw.type)
    if model is None:
        return None
    fields = raw.model_dump(by_alias=True, exclude_none=True)
    fields.pop("type", None)
    try:
        return model.model_validate(fields)  # type: ignore[return-value]
    except ValidationError as exc:
        log.debug("rejected %s action: %s", raw.type, exc)
        return None


def _decode_text(actions_text: Union[str, bytes, bytearray]) -> str:
    if isinstance(actions_text, (bytes, bytearray)):
        try:
            return bytes(actions_text).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidBatchEncodingError() from exc
    if not isinstance(actions_text, str):
        raise InvalidBatchSchemaError(detail=f"expected text, got {type(actions_text).__name__}")
    try:
        # Lone surrogates survive in str but have no UTF-8 form.
        actions_text.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise InvalidBatchEncodingError() from exc
    return actions_text


def parse_action_batch(actions_text: Union[str, bytes, bytearray]) -> ActionBatch:
    """
    Parse the orchestrator's JSON text into an ActionBatch.

    Raises:
        InvalidBatchEncodingError: The input has no valid UTF-8 form.
        InvalidBatchSchemaError: The input is not JSON or does not fit the batch schema.
    """
    text = _decode_text(actions_text)
    try:
        return ActionBatch.model_validate_json(text)
    except ValidationError as exc:
        raise InvalidBatchSchemaError(detail=str(exc)) from exc


__all__ = [
    "RawAction",
    "ActionBatch",
    "NavigateAction",
    "ClickAtAction",
    "ScrollAction",
    "TypeAction",
    "WaitAction",
    "BrowserAction",
    "ACTION_MODELS",
    "build_action",
    "parse_action_batch",
]
