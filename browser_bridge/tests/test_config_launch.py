import os
import socket

import pytest

from browser_bridge import config, launch


def test_flags_read_env(monkeypatch):
    monkeypatch.setenv("BROWSER_BRIDGE_LAUNCH_BROWSER", "1")
    monkeypatch.setenv("BROWSER_BRIDGE_HEADLESS", "off")

    assert config.launch_browser_enabled() is True
    assert config.headless_enabled() is False


def test_flags_default_when_unset(monkeypatch):
    monkeypatch.delenv("BROWSER_BRIDGE_LAUNCH_BROWSER", raising=False)
    monkeypatch.delenv("BROWSER_BRIDGE_HEADLESS", raising=False)
    monkeypatch.delenv("BROWSER_BRIDGE_START_URL", raising=False)

    assert config.launch_browser_enabled() is False
    assert config.headless_enabled() is True
    assert config.start_url() == "about:blank"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("1024x768", (1024, 768)),
        (" 800X600 ", (800, 600)),
        ("", config.DEFAULT_VIEWPORT),
        ("wide", config.DEFAULT_VIEWPORT),
        ("0x600", config.DEFAULT_VIEWPORT),
    ],
)
def test_viewport_parsing(monkeypatch, raw, expected):
    monkeypatch.setenv("BROWSER_BRIDGE_VIEWPORT", raw)

    assert config.viewport_size() == expected


def test_resolve_host_port_prefers_test_port_under_pytest():
    assert config.is_test_mode() is True
    assert config.resolve_host_port() == (config.TEST_HOST, config.TEST_PORT)
    assert config.resolve_host_port("0.0.0.0", 9000) == ("0.0.0.0", 9000)


def test_apply_browser_env_sets_flags(monkeypatch):
    for var in ("BROWSER_BRIDGE_LAUNCH_BROWSER", "BROWSER_BRIDGE_HEADLESS", "BROWSER_BRIDGE_START_URL"):
        monkeypatch.delenv(var, raising=False)
    args = launch.build_parser().parse_args(["--launch-browser", "--headed", "--start-url", "https://example.com"])

    launch.apply_browser_env(args)

    assert os.environ["BROWSER_BRIDGE_LAUNCH_BROWSER"] == "1"
    assert os.environ["BROWSER_BRIDGE_HEADLESS"] == "0"
    assert os.environ["BROWSER_BRIDGE_START_URL"] == "https://example.com"


def test_main_refuses_busy_port(monkeypatch):
    started = []
    monkeypatch.setattr(launch.uvicorn, "run", lambda *a, **kw: started.append((a, kw)))

    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        sock.listen(1)
        port = sock.getsockname()[1]

        assert launch.main(["--host", "127.0.0.1", "--port", str(port)]) == 1

    assert started == []


def test_main_starts_uvicorn(monkeypatch):
    started = []
    monkeypatch.setattr(launch, "port_available", lambda host, port: True)
    monkeypatch.setattr(launch.uvicorn, "run", lambda app, **kw: started.append((app, kw)))

    assert launch.main(["--host", "127.0.0.1", "--port", "5999"]) == 0

    assert started == [("browser_bridge.app:app", {"host": "127.0.0.1", "port": 5999, "log_level": "info"})]
