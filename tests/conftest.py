from __future__ import annotations

import os
import queue
import sys
import threading
import time

import pytest


def _ensure_project_root_on_path() -> None:
    # When running via the venv's pytest entrypoint, the CWD is not guaranteed to
    # be on sys.path. Ensure the repository root (containing `gridmenu/`) is importable.
    project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    if project_root not in sys.path:
        sys.path.insert(0, project_root)


_ensure_project_root_on_path()

from gridmenu.renderer import Renderer  # noqa: E402


class FakeRenderer(Renderer):
    """Records draw calls; tests feed input through `events`."""

    def __init__(self, with_events: bool = True, fail_items: bool = False):
        self.events: queue.Queue | None = queue.Queue() if with_events else None
        self.fail_items = fail_items
        self.headers: list[list[str]] = []
        self.item_draws: list[tuple[int, int]] = []
        self.ticks = 0
        self.closed = False

    def draw_tab_header(self, names, colors):
        self.headers.append(list(names))

    def draw_items(self, items, colors, selected):
        if self.fail_items:
            raise OSError("terminal went away")
        self.item_draws.append(selected)

    def subscribe_events(self):
        return self.events

    def tick(self):
        self.ticks += 1

    def close(self):
        self.closed = True

    def send(self, *events) -> None:
        for event in events:
            self.events.put(event)


class ScriptedDevice:
    """Controller handle replaying a fixed list of raw events, then blocking."""

    def __init__(self, events):
        self._events = list(events)
        self.exhausted = threading.Event()
        self._unplugged = threading.Event()

    def get_event_blocking(self):
        if self._events:
            return self._events.pop(0)
        self.exhausted.set()
        self._unplugged.wait()
        raise OSError("device unplugged")

    def unplug(self) -> None:
        self._unplugged.set()


def wait_for(predicate, timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


@pytest.fixture
def renderer() -> FakeRenderer:
    return FakeRenderer()
