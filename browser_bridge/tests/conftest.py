import json
from io import BytesIO
from typing import Any, List, Optional, Tuple

import pytest
from PIL import Image

from browser_bridge.executor.scripts import READY_STATE_SCRIPT
from browser_bridge.surface.registry import SurfaceRegistry
from browser_bridge.vision.page_text import PAGE_CONTEXT_SCRIPT


def png_bytes(size=(40, 20), color="white") -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, color=color).save(buffer, format="PNG")
    return buffer.getvalue()


class FakeSurface:
    """Scriptable stand-in for a browser page; recognizes the bridge's own scripts."""

    def __init__(
        self,
        url: Optional[str] = "https://example.com/",
        title: Optional[str] = "Example Domain",
        viewport: Tuple[float, float] = (400.0, 800.0),
        body_text: str = "",
    ) -> None:
        self.url = url
        self.page_title = title
        self.viewport = viewport
        self.body_text = body_text
        self.alive = True
        self.ready_states: List[Any] = ["complete"]
        self.click_result: Any = True
        self.click_navigates_to: Optional[str] = None
        self.type_result: Any = True
        self.scroll_error: Optional[Exception] = None
        self.context_error: Optional[Exception] = None
        self.context_payload: Any = None
        self.image: Optional[bytes] = png_bytes()
        self.screenshot_error: Optional[Exception] = None
        self.scripts: List[str] = []
        self.loads: List[str] = []
        self.screenshots = 0

    def is_alive(self) -> bool:
        return self.alive

    async def current_url(self) -> Optional[str]:
        return self.url

    async def title(self) -> Optional[str]:
        return self.page_title

    async def viewport_size(self) -> Tuple[float, float]:
        return self.viewport

    async def evaluate(self, script: str) -> Any:
        self.scripts.append(script)
        if script == READY_STATE_SCRIPT:
            if len(self.ready_states) > 1:
                return self.ready_states.pop(0)
            return self.ready_states[0]
        if script == PAGE_CONTEXT_SCRIPT:
            if self.context_error is not None:
                raise self.context_error
            if self.context_payload is not None:
                return self.context_payload
            return json.dumps({"title": self.page_title or "", "snippet": self.body_text})
        if "pointerdown" in script:
            if self.click_result is True and self.click_navigates_to:
                self.url = self.click_navigates_to
            return self.click_result
        if "scrollBy" in script:
            if self.scroll_error is not None:
                raise self.scroll_error
            return True
        if "new Event('input'" in script:
            return self.type_result
        raise AssertionError(f"unexpected script: {script}")

    async def load(self, url: str) -> None:
        self.loads.append(url)
        self.url = url

    async def screenshot(self) -> bytes:
        self.screenshots += 1
        if self.screenshot_error is not None:
            raise self.screenshot_error
        return self.image

    def count_scripts(self, marker: str) -> int:
        return sum(1 for script in self.scripts if marker in script)


@pytest.fixture
def surface() -> FakeSurface:
    return FakeSurface()


@pytest.fixture
def registry(surface) -> SurfaceRegistry:
    reg = SurfaceRegistry()
    reg.set_active(surface)
    return reg


@pytest.fixture
def empty_registry() -> SurfaceRegistry:
    return SurfaceRegistry()
