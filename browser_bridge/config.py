"""Shared configuration helpers for the bridge service and its host browser."""

from __future__ import annotations

import os
from typing import Tuple


def _flag_from_env(var: str, default: bool) -> bool:
    value = os.getenv(var)
    if value is None:
        return default
    return str(value).strip().lower() not in {"0", "false", "off", "no", "none"}


def _int_from_env(var: str, default: int) -> int:
    try:
        return int(os.getenv(var, str(default)))
    except (TypeError, ValueError):
        return default


# Dedicated ports for dev and test runs so they never collide.
DEV_HOST = os.getenv("BROWSER_BRIDGE_HOST", "127.0.0.1")
DEV_PORT = _int_from_env("BROWSER_BRIDGE_PORT", 5020)
TEST_HOST = os.getenv("BROWSER_BRIDGE_TEST_HOST", DEV_HOST)
TEST_PORT = _int_from_env("BROWSER_BRIDGE_TEST_PORT", 5021)

# Request defaults for the execute endpoint.
DEFAULT_MAX_ACTIONS = _int_from_env("BROWSER_BRIDGE_MAX_ACTIONS", 10)
DEFAULT_REQUIRE_CONFIRMATION = _flag_from_env("BROWSER_BRIDGE_REQUIRE_CONFIRMATION", True)

# Host browser started by the service lifespan.
DEFAULT_VIEWPORT = (1280, 800)


def launch_browser_enabled() -> bool:
    """Read at startup so the launcher can flip it after import."""
    return _flag_from_env("BROWSER_BRIDGE_LAUNCH_BROWSER", False)


def headless_enabled() -> bool:
    return _flag_from_env("BROWSER_BRIDGE_HEADLESS", True)


def start_url() -> str:
    return os.getenv("BROWSER_BRIDGE_START_URL") or "about:blank"


def viewport_size() -> Tuple[int, int]:
    """Parse BROWSER_BRIDGE_VIEWPORT ("1280x800"); fall back to the default on bad input."""
    raw = (os.getenv("BROWSER_BRIDGE_VIEWPORT") or "").strip().lower()
    if not raw:
        return DEFAULT_VIEWPORT
    try:
        width, height = (int(part) for part in raw.split("x", 1))
    except ValueError:
        return DEFAULT_VIEWPORT
    if width <= 0 or height <= 0:
        return DEFAULT_VIEWPORT
    return width, height


def is_test_mode() -> bool:
    """Detect pytest/BRIDGE_TEST_MODE runs."""
    return os.getenv("BRIDGE_TEST_MODE") == "1" or bool(os.getenv("PYTEST_CURRENT_TEST"))


def resolve_host_port(host: str | None = None, port: int | None = None) -> Tuple[str, int]:
    """Return the host/port tuple for the current mode, honoring overrides."""
    if host and port:
        return host, int(port)

    if is_test_mode():
        resolved_host = host or TEST_HOST
        resolved_port = int(port or TEST_PORT)
    else:
        resolved_host = host or DEV_HOST
        resolved_port = int(port or DEV_PORT)

    return resolved_host, resolved_port
