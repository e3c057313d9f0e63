"""Command-line launcher for the bridge service.

Refuses to start when the port is taken, and can ask the service to open its
own Chromium page as the active surface (`--launch-browser`).
"""

from __future__ import annotations

import argparse
import os
import socket
import sys
from typing import List, Optional

import uvicorn

from browser_bridge.config import resolve_host_port

APP_PATH = "browser_bridge.app:app"


def log(message: str) -> None:
    print(f"[bridge-launch] {message}", flush=True)


def port_available(host: str, port: int) -> bool:
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((host, port))
    except OSError:
        return False
    finally:
        sock.close()
    return True


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the browser bridge HTTP service.")
    parser.add_argument("--host", default=None, help="Interface to bind (default from BROWSER_BRIDGE_HOST).")
    parser.add_argument("--port", type=int, default=None, help="Port to bind (default from BROWSER_BRIDGE_PORT).")
    parser.add_argument(
        "--launch-browser",
        action="store_true",
        help="Start a Playwright Chromium page and register it as the active surface.",
    )
    parser.add_argument("--headed", action="store_true", help="Show the launched browser window.")
    parser.add_argument("--start-url", default=None, help="First page to open in the launched browser.")
    return parser


def apply_browser_env(args: argparse.Namespace) -> None:
    """Forward CLI switches to the env flags the app reads at startup."""
    if args.launch_browser:
        os.environ["BROWSER_BRIDGE_LAUNCH_BROWSER"] = "1"
    if args.headed:
        os.environ["BROWSER_BRIDGE_HEADLESS"] = "0"
    if args.start_url:
        os.environ["BROWSER_BRIDGE_START_URL"] = args.start_url


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    host, port = resolve_host_port(args.host, args.port)
    if not port_available(host, port):
        log(f"Port {port} on {host} is already in use; stop the other listener or pass --port.")
        return 1
    apply_browser_env(args)
    log(f"Starting {APP_PATH} on http://{host}:{port}")
    uvicorn.run(APP_PATH, host=host, port=port, log_level="info")
    return 0


if __name__ == "__main__":
    sys.exit(main())
