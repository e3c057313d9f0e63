"""
The interface the core expects from a live renderable surface.

Hosts implement this over whatever engine they embed; the core never
mutates the surface itself, it only reads from it or issues effectful
requests (script evaluation, navigation, rasterization) through it.
Implementations are responsible for running each call on the context that
owns the surface's rendering state.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, Tuple, runtime_checkable


@runtime_checkable
class Surface(Protocol):
    def is_alive(self) -> bool:
        """False once the underlying page/view has been closed or replaced."""
        ...

    async def current_url(self) -> Optional[str]: ...

    async def title(self) -> Optional[str]: ...

    async def viewport_size(self) -> Tuple[float, float]:
        """Current layout size in CSS pixels as (width, height)."""
        ...

    async def evaluate(self, script: str) -> Any:
        """Evaluate a JavaScript expression and return its JSON-compatible value."""
        ...

    async def load(self, url: str) -> None:
        """Start loading `url`; must not wait for the load to finish."""
        ...

    async def screenshot(self) -> bytes:
        """Rasterize the visible part of the surface."""
        ...


__all__ = ["Surface"]
