"""Input normalization: raw controller and keyboard events to `HidEvent`.

Each device gets one `DeviceInputSource`, a background thread that blocks
on the device and forwards translated events into a queue owned by that
source alone. The engine drains the queue; the thread never touches the
layout.
"""
from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from prompt_toolkit.keys import Keys

from .events import HidEvent

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# CONTROLLER DEVICES
# ═══════════════════════════════════════════════════════════════════════════════

class ControllerButton(Enum):
    DPAD_UP = "dpad_up"
    DPAD_DOWN = "dpad_down"
    DPAD_LEFT = "dpad_left"
    DPAD_RIGHT = "dpad_right"
    SOUTH = "south"
    EAST = "east"
    NORTH = "north"
    WEST = "west"
    L = "l"
    R = "r"
    START = "start"
    SELECT = "select"
    MODE = "mode"


@dataclass(frozen=True)
class ControllerEvent:
    """A raw button transition reported by a controller handle."""

    button: ControllerButton
    pressed: bool = True


class DeviceHandle(Protocol):
    """Externally owned controller handle.

    `get_event_blocking()` waits for the next raw event. It may return None
    on a spurious wakeup, and raises `OSError` once the device is gone.
    """

    def get_event_blocking(self) -> Optional[ControllerEvent]:
        ...


CONTROLLER_MAP: dict[ControllerButton, HidEvent] = {
    ControllerButton.DPAD_UP: HidEvent.UP,
    ControllerButton.DPAD_DOWN: HidEvent.DOWN,
    ControllerButton.DPAD_LEFT: HidEvent.LEFT,
    ControllerButton.DPAD_RIGHT: HidEvent.RIGHT,
    ControllerButton.SOUTH: HidEvent.BUTTON_PRESS,
    ControllerButton.R: HidEvent.NEXT_TAB,
    ControllerButton.L: HidEvent.PREVIOUS_TAB,
    ControllerButton.MODE: HidEvent.QUIT,
}


def translate_controller_event(event: ControllerEvent) -> Optional[HidEvent]:
    """Map a controller event to a `HidEvent`; releases and unmapped buttons give None."""
    if not event.pressed:
        return None
    return CONTROLLER_MAP.get(event.button)


class DeviceInputSource:
    """Background producer reading one controller handle."""

    def __init__(self, handle: DeviceHandle, name: str = "gridmenu-device-input"):
        self.handle = handle
        self.queue: queue.Queue[HidEvent] = queue.Queue()
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)

    def start(self) -> DeviceInputSource:
        self._thread.start()
        return self

    def stop(self, timeout: Optional[float] = None) -> bool:
        """Ask the producer to stop after its current blocking read.

        The thread is a daemon parked in `get_event_blocking()`, so it only
        exits once the handle returns or raises. With `timeout`, wait at most
        that long for it. Returns True when the thread has exited.
        """
        self._stop.set()
        if timeout is not None and self._thread.is_alive():
            self._thread.join(timeout)
        return not self._thread.is_alive()

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                raw = self.handle.get_event_blocking()
            except OSError as exc:
                logger.info("Input device closed: %s", exc)
                break
            if raw is None or self._stop.is_set():
                continue
            event = translate_controller_event(raw)
            if event is None:
                logger.debug("Discarding unmapped controller event %s", raw)
                continue
            self.queue.put(event)


# ═══════════════════════════════════════════════════════════════════════════════
# KEYBOARD
# ═══════════════════════════════════════════════════════════════════════════════

KEY_MAP: dict[Keys, HidEvent] = {
    Keys.Up: HidEvent.UP,
    Keys.Down: HidEvent.DOWN,
    Keys.Left: HidEvent.LEFT,
    Keys.Right: HidEvent.RIGHT,
    Keys.ControlM: HidEvent.BUTTON_PRESS,  # Enter
    Keys.ControlJ: HidEvent.BUTTON_PRESS,  # Enter on some terminals
    Keys.ControlI: HidEvent.NEXT_TAB,  # Tab
    Keys.BackTab: HidEvent.PREVIOUS_TAB,
    Keys.Escape: HidEvent.QUIT,
    Keys.ControlC: HidEvent.QUIT,
}


def translate_key(key: Keys | str) -> Optional[HidEvent]:
    """Map a prompt_toolkit key to a `HidEvent`, or None for anything else."""
    if not isinstance(key, Keys):
        return None
    return KEY_MAP.get(key)
