"""
Snapshot service: a point-in-time observation of the active surface.

The image is produced by the host's rasterizer and re-encoded through Pillow
so callers always receive a decodable PNG, whatever format the host emits.
"""

from __future__ import annotations

import logging
from io import BytesIO
from typing import Optional

from PIL import Image, UnidentifiedImageError

from browser_bridge.contracts.errors import (
    BridgeError,
    ExecutionCancelled,
    NoActiveSurfaceError,
    NoPageLoadedError,
    SnapshotEncodingError,
)
from browser_bridge.contracts.snapshot import SnapshotResult
from browser_bridge.executor.cancellation import CancellationToken, resolve_token
from browser_bridge.surface.base import Surface
from browser_bridge.surface.registry import SurfaceRegistry, resolve_live_surface
from browser_bridge.vision.page_text import fetch_page_context, read_surface_title

log = logging.getLogger(__name__)


def encode_png(raw: Optional[bytes]) -> bytes:
    """Decode whatever raster the host produced and return it as PNG bytes."""
    if not raw:
        raise SnapshotEncodingError()
    try:
        with Image.open(BytesIO(raw)) as img:
            img.load()
            if img.width <= 0 or img.height <= 0:
                raise SnapshotEncodingError()
            if img.mode not in {"RGB", "RGBA", "L", "LA", "P"}:
                img = img.convert("RGBA")
            buffer = BytesIO()
            img.save(buffer, format="PNG")
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise SnapshotEncodingError() from exc
    return buffer.getvalue()


async def _rasterize(surface: Surface, token: CancellationToken) -> bytes:
    token.raise_if_cancelled()
    try:
        raw = await surface.screenshot()
    except Exception as exc:  # noqa: BLE001
        log.warning("surface rasterization failed: %s", exc)
        raise SnapshotEncodingError() from exc
    return encode_png(raw)


async def _capture(surface: Surface, include_text: bool, token: CancellationToken) -> SnapshotResult:
    url = await surface.current_url()
    if not url:
        raise NoPageLoadedError()

    width, height = await surface.viewport_size()
    image = await _rasterize(surface, token)

    if include_text:
        context = await fetch_page_context(surface, include_text=True, token=token)
        title, snippet = context.title, context.snippet
    else:
        title, snippet = await read_surface_title(surface), None

    return SnapshotResult(
        image=image,
        url=url,
        title=title,
        viewport_width=float(width),
        viewport_height=float(height),
        text_snippet=snippet,
    )


async def capture_snapshot(
    include_text: bool = True,
    *,
    registry: Optional[SurfaceRegistry] = None,
    token: Optional[CancellationToken] = None,
) -> SnapshotResult:
    """
    Capture the active surface.

    Returns a SnapshotResult; precondition failures come back as a result
    whose only field is `error`. Raises ExecutionCancelled if `token` trips.
    """
    token = resolve_token(token)
    surface = resolve_live_surface(registry)
    if surface is None:
        return SnapshotResult.failure(NoActiveSurfaceError().message)

    token.raise_if_cancelled()
    try:
        return await _capture(surface, include_text, token)
    except BridgeError as exc:
        log.info("snapshot failed: %s", exc.message)
        return SnapshotResult.failure(exc.message)
    except ExecutionCancelled:
        raise
    except Exception:
        # The host closed the surface while we were reading from it.
        if not surface.is_alive():
            return SnapshotResult.failure(NoActiveSurfaceError().message)
        raise


__all__ = ["encode_png", "capture_snapshot"]
