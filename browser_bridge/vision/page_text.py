"""
Text extraction: the single answer to "what does the page say".

Both the snapshot service and the executor's risk scan go through
`fetch_page_context`, so the text they see is produced identically.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from pydantic import ValidationError

from browser_bridge.contracts.snapshot import PageContext
from browser_bridge.executor.cancellation import CancellationToken, resolve_token
from browser_bridge.surface.base import Surface

log = logging.getLogger(__name__)

SNIPPET_LIMIT = 2000

PAGE_CONTEXT_SCRIPT = r"""
(() => {
    const text = ((document.body && document.body.innerText) || '').replace(/\s+/g, ' ').trim();
    return JSON.stringify({
        title: document.title || '',
        snippet: text.slice(0, 2000)
    });
})()
"""

_WHITESPACE = re.compile(r"\s+")


def normalize_snippet(text: str, limit: int = SNIPPET_LIMIT) -> str:
    """Collapse whitespace runs to single spaces, trim, and cut to `limit` characters."""
    return _WHITESPACE.sub(" ", text or "").strip()[:limit]


async def read_surface_title(surface: Surface) -> str:
    """The surface's own title, or "" when the host cannot provide one."""
    try:
        return (await surface.title()) or ""
    except Exception as exc:  # noqa: BLE001
        log.debug("surface title unavailable: %s", exc)
        return ""


async def fetch_page_context(
    surface: Surface,
    include_text: bool = True,
    token: Optional[CancellationToken] = None,
) -> PageContext:
    """
    Read the page title and a normalized body-text snippet.

    Never fails on extraction problems: the title falls back to the
    surface's own title and the snippet is left out. With
    `include_text=False` no script is run at all.
    """
    token = resolve_token(token)
    if not include_text:
        return PageContext(title=await read_surface_title(surface), snippet=None)

    token.raise_if_cancelled()
    try:
        raw = await surface.evaluate(PAGE_CONTEXT_SCRIPT)
        if not isinstance(raw, str):
            raise TypeError(f"page context script returned {type(raw).__name__}")
        context = PageContext.model_validate_json(raw)
    except (ValidationError, TypeError, ValueError) as exc:
        log.info("page text extraction returned unusable data: %s", exc)
        return PageContext(title=await read_surface_title(surface), snippet=None)
    except Exception as exc:  # noqa: BLE001
        # Script errors come from the host engine with engine-specific types.
        log.info("page text extraction failed: %s", exc)
        return PageContext(title=await read_surface_title(surface), snippet=None)

    snippet = normalize_snippet(context.snippet) if context.snippet is not None else None
    return PageContext(title=context.title or "", snippet=snippet)


__all__ = ["SNIPPET_LIMIT", "PAGE_CONTEXT_SCRIPT", "normalize_snippet", "read_surface_title", "fetch_page_context"]
