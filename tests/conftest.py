"""
Shared pytest fixtures for hyprgrid tests.
"""

import pytest
from pubsub import pub

from hyprgrid.compositor import CompositorClient, WindowInfo, WindowMode
from hyprgrid.geometry import GridSpec, ScreenGeometry


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without a live compositor")


@pytest.fixture(autouse=True)
def clean_bus():
    """Drop every event bus listener after each test."""
    yield
    pub.unsubAll()


@pytest.fixture
def bus():
    return pub


class FakeCompositor(CompositorClient):
    """Compositor double that answers from canned state and records commands."""

    def __init__(self, screen=None, windows=None, window_count=1):
        self.screen = screen if screen is not None else ScreenGeometry(1920, 1080)
        if windows is None:
            windows = [WindowInfo("0xabc", "kitty", "shell", WindowMode.TILED)]
        # Focused window per query; the last entry repeats
        self.windows = list(windows)
        self.modes = {w.handle: w.mode for w in self.windows if w is not None}
        self.mode_sequence = []
        self.window_count = window_count
        self.running = True

        self.toggle_ok = True
        self.toggle_takes_effect = True
        self.move_results = []
        self.geometry = None
        self.rules_ok = True
        self.notify_ok = True
        self.notify_error = None

        self.toggles = []
        self.moves = []
        self.placed = {}
        self.notifications = []
        self.rules_cleared = 0
        self.count_queries = 0

    def is_running(self):
        return self.running

    def query_focused_window(self):
        if not self.windows:
            return None
        if len(self.windows) > 1:
            return self.windows.pop(0)
        return self.windows[0]

    def query_focused_screen(self):
        return self.screen

    def query_window_mode(self, handle):
        if self.mode_sequence:
            return self.mode_sequence.pop(0)
        return self.modes.get(handle, WindowMode.UNKNOWN)

    def query_window_geometry(self, handle):
        if self.geometry is not None:
            return self.geometry
        return self.placed.get(handle)

    def count_windows_in_current_workspace(self):
        self.count_queries += 1
        return self.window_count

    def toggle_floating_mode(self, handle):
        self.toggles.append(handle)
        if self.toggle_ok and self.toggle_takes_effect:
            current = self.modes.get(handle, WindowMode.UNKNOWN)
            if current == WindowMode.FLOATING:
                self.modes[handle] = WindowMode.TILED
            elif current == WindowMode.TILED:
                self.modes[handle] = WindowMode.FLOATING
        return self.toggle_ok

    def move_and_resize(self, handle, rect):
        ok = self.move_results.pop(0) if self.move_results else True
        self.moves.append((handle, rect))
        if ok:
            self.placed[handle] = rect
        return ok

    def clear_window_rules(self):
        self.rules_cleared += 1
        return self.rules_ok

    def notify(self, title, body, timeout_ms=3000):
        if self.notify_error is not None:
            raise self.notify_error
        self.notifications.append((title, body, timeout_ms))
        return self.notify_ok


@pytest.fixture
def fake_compositor():
    """Factory fixture for FakeCompositor instances."""
    return FakeCompositor


@pytest.fixture
def compositor():
    """FakeCompositor with one tiled window on a 1920x1080 screen."""
    return FakeCompositor()


@pytest.fixture
def no_sleep():
    """Sleep replacement that records requested delays."""

    class Sleeper:
        def __init__(self):
            self.calls = []

        def __call__(self, seconds):
            self.calls.append(seconds)

    return Sleeper()


@pytest.fixture
def standard_screen():
    """Standard 1920x1080 screen."""
    return ScreenGeometry(1920, 1080)


@pytest.fixture
def portrait_screen():
    """Portrait 1080x1920 screen."""
    return ScreenGeometry(1080, 1920)


@pytest.fixture
def grid_3x3():
    """3x3 grid with 5px gaps."""
    return GridSpec(rows=3, columns=3, gap=5)
