import gc
import threading

from browser_bridge.surface.registry import SurfaceRegistry, resolve_live_surface


class _Handle:
    def __init__(self, alive=True):
        self.alive = alive

    def is_alive(self):
        return self.alive


def test_set_and_clear_active_surface():
    registry = SurfaceRegistry()
    handle = _Handle()

    assert registry.current() is None
    registry.set_active(handle)
    assert registry.current() is handle
    registry.set_active(None)
    assert registry.current() is None


def test_registry_does_not_keep_surface_alive():
    registry = SurfaceRegistry()
    handle = _Handle()
    registry.set_active(handle)

    del handle
    gc.collect()

    assert registry.current() is None


def test_replacing_surface_drops_previous():
    registry = SurfaceRegistry()
    first, second = _Handle(), _Handle()
    registry.set_active(first)
    registry.set_active(second)

    assert registry.current() is second


def test_resolve_live_surface_checks_liveness():
    registry = SurfaceRegistry()
    handle = _Handle(alive=False)
    registry.set_active(handle)

    assert resolve_live_surface(registry) is None
    handle.alive = True
    assert resolve_live_surface(registry) is handle


def test_liveness_check_errors_count_as_dead():
    class Exploding(_Handle):
        def is_alive(self):
            raise RuntimeError("page crashed")

    registry = SurfaceRegistry()
    handle = Exploding()
    registry.set_active(handle)

    assert resolve_live_surface(registry) is None


def test_concurrent_readers_see_consistent_values():
    registry = SurfaceRegistry()
    handles = [_Handle() for _ in range(4)]
    seen = []

    def reader():
        for _ in range(200):
            seen.append(registry.current())

    def writer():
        for i in range(200):
            registry.set_active(handles[i % len(handles)])

    threads = [threading.Thread(target=reader) for _ in range(3)] + [threading.Thread(target=writer)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert all(item is None or item in handles for item in seen)
