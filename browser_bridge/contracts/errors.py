"""Error taxonomy shared by the snapshot and action pipelines.

`BridgeError` subclasses are terminal precondition failures: the public
operations convert them into errors-only results carrying `message`.
`ExecutionCancelled` is deliberately not a `BridgeError`; it propagates.
"""

from __future__ import annotations

NO_ACTIVE_SURFACE = "No active browser view is available."
NO_PAGE_LOADED = "No page is currently loaded."
SNAPSHOT_ENCODING_FAILED = "Unable to encode snapshot image."
INVALID_BATCH_ENCODING = "actionsJson is not valid UTF-8."
INVALID_BATCH_SCHEMA = "actionsJson is not valid according to the schema."


class BridgeError(Exception):
    """Base class for terminal failures reported back to the caller."""

    default_message = "browser bridge error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NoActiveSurfaceError(BridgeError):
    default_message = NO_ACTIVE_SURFACE


class NoPageLoadedError(BridgeError):
    default_message = NO_PAGE_LOADED


class SnapshotEncodingError(BridgeError):
    default_message = SNAPSHOT_ENCODING_FAILED


class InvalidBatchEncodingError(BridgeError):
    default_message = INVALID_BATCH_ENCODING


class InvalidBatchSchemaError(BridgeError):
    """Raised for malformed JSON as well as JSON that does not fit the batch schema."""

    default_message = INVALID_BATCH_SCHEMA

    def __init__(self, message: str | None = None, detail: str | None = None) -> None:
        super().__init__(message)
        self.detail = detail


class ExecutionCancelled(Exception):
    """Cooperative cancellation was observed; the rest of the batch is abandoned."""


__all__ = [
    "NO_ACTIVE_SURFACE",
    "NO_PAGE_LOADED",
    "SNAPSHOT_ENCODING_FAILED",
    "INVALID_BATCH_ENCODING",
    "INVALID_BATCH_SCHEMA",
    "BridgeError",
    "NoActiveSurfaceError",
    "NoPageLoadedError",
    "SnapshotEncodingError",
    "InvalidBatchEncodingError",
    "InvalidBatchSchemaError",
    "ExecutionCancelled",
]
