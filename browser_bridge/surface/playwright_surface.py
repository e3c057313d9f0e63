"""
Playwright host adapter.

`PlaywrightSurface` wraps one `Page` and implements the `Surface` protocol.
Playwright objects are bound to the event loop that created them, so every
call is marshaled onto that loop when it arrives from elsewhere (another
thread's loop, e.g. a web worker running the action pipeline).

`BrowserHost` owns a launched Chromium instance for the service lifespan and
hands its page to the surface registry.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Tuple, TypeVar

from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Playwright,
    async_playwright,
)

from browser_bridge.surface.registry import SurfaceRegistry, resolve_registry

log = logging.getLogger(__name__)

T = TypeVar("T")

NAVIGATION_COMMIT_TIMEOUT_MS = 15_000
VIEWPORT_SCRIPT = "[window.innerWidth, window.innerHeight]"


class PlaywrightSurface:
    def __init__(self, page: Page, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        """
        Args:
            page: the live page to drive.
            loop: the loop that owns `page`. Defaults to the running loop, so
                construct the surface from inside that loop when omitted.
        """
        self.page = page
        self._loop = loop or asyncio.get_running_loop()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    def is_alive(self) -> bool:
        if self._loop.is_closed():
            return False
        try:
            return not self.page.is_closed()
        except Exception:  # noqa: BLE001
            return False

    async def _on_owner(self, factory: Callable[[], Awaitable[T]]) -> T:
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self._loop:
            return await factory()
        future = asyncio.run_coroutine_threadsafe(factory(), self._loop)
        return await asyncio.wrap_future(future)

    async def current_url(self) -> Optional[str]:
        async def _read() -> Optional[str]:
            return self.page.url

        url = await self._on_owner(_read)
        return url or None

    async def title(self) -> Optional[str]:
        return await self._on_owner(self.page.title)

    async def viewport_size(self) -> Tuple[float, float]:
        async def _read() -> Tuple[float, float]:
            size = self.page.viewport_size
            if size:
                return float(size["width"]), float(size["height"])
            # No fixed viewport (e.g. headed with no_viewport): ask the layout.
            width, height = await self.page.evaluate(VIEWPORT_SCRIPT)
            return float(width), float(height)

        return await self._on_owner(_read)

    async def evaluate(self, script: str) -> Any:
        return await self._on_owner(lambda: self.page.evaluate(script))

    async def load(self, url: str) -> None:
        async def _goto() -> None:
            try:
                await self.page.goto(url, wait_until="commit", timeout=NAVIGATION_COMMIT_TIMEOUT_MS)
            except PlaywrightError as exc:
                # Load failures show up on the next snapshot as a missing/blank page.
                log.warning("navigation to %s did not commit: %s", url, exc)

        await self._on_owner(_goto)

    async def screenshot(self) -> bytes:
        return await self._on_owner(lambda: self.page.screenshot(type="png", full_page=False))


class BrowserHost:
    """Launches Chromium and keeps the page that backs the active surface."""

    def __init__(
        self,
        *,
        headless: bool = True,
        viewport: Tuple[int, int] = (1280, 800),
        start_url: str = "about:blank",
        registry: Optional[SurfaceRegistry] = None,
    ) -> None:
        self.headless = headless
        self.viewport = viewport
        self.start_url = start_url
        self.registry = resolve_registry(registry)
        self.surface: Optional[PlaywrightSurface] = None
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None

    async def start(self) -> PlaywrightSurface:
        if self.surface is not None and self.surface.is_alive():
            return self.surface
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(headless=self.headless)
            width, height = self.viewport
            self._context = await self._browser.new_context(viewport={"width": width, "height": height})
            page = await self._context.new_page()
            if self.start_url and self.start_url != "about:blank":
                await page.goto(self.start_url)
        except Exception:
            await self.close()
            raise

        self.surface = PlaywrightSurface(page)
        page.on("close", lambda _page: self._on_page_closed())
        self.registry.set_active(self.surface)
        log.info("browser host started (headless=%s, viewport=%sx%s)", self.headless, width, height)
        return self.surface

    def _on_page_closed(self) -> None:
        if self.registry.current() is self.surface:
            self.registry.set_active(None)

    async def close(self) -> None:
        if self.registry.current() is self.surface and self.surface is not None:
            self.registry.set_active(None)
        if self._context is not None:
            try:
                await self._context.close()
            except PlaywrightError:
                pass
        if self._browser is not None:
            try:
                await self._browser.close()
            except PlaywrightError:
                pass
        if self._playwright is not None:
            try:
                await self._playwright.stop()
            except Exception:  # noqa: BLE001
                pass
        self._playwright = None
        self._browser = None
        self._context = None
        self.surface = None


__all__ = ["PlaywrightSurface", "BrowserHost"]
