"""
Process-wide pointer to the surface the bridge should drive.

The registry keeps only a weak reference: the host owns the surface and may
close or replace it at any time, so callers must treat whatever `current()`
returns as possibly stale and re-check it at the point of use.
"""

from __future__ import annotations

import threading
import weakref
from typing import Optional

from browser_bridge.surface.base import Surface


class SurfaceRegistry:
    def __init__(self) -> None:
        self._ref: Optional[weakref.ReferenceType] = None
        self._lock = threading.Lock()

    def set_active(self, surface: Optional[Surface]) -> None:
        """Track `surface` as the active one; None clears the registry."""
        with self._lock:
            self._ref = weakref.ref(surface) if surface is not None else None

    def current(self) -> Optional[Surface]:
        with self._lock:
            ref = self._ref
        if ref is None:
            return None
        return ref()

    def clear(self) -> None:
        self.set_active(None)


ACTIVE_SURFACE = SurfaceRegistry()


def resolve_registry(registry: Optional[SurfaceRegistry] = None) -> SurfaceRegistry:
    return registry if registry is not None else ACTIVE_SURFACE


def resolve_live_surface(registry: Optional[SurfaceRegistry] = None) -> Optional[Surface]:
    """Return the active surface if it is still alive, else None."""
    surface = resolve_registry(registry).current()
    if surface is None:
        return None
    try:
        alive = surface.is_alive()
    except Exception:  # noqa: BLE001
        alive = False
    return surface if alive else None


__all__ = ["SurfaceRegistry", "ACTIVE_SURFACE", "resolve_registry", "resolve_live_surface"]
