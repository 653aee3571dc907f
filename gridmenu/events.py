"""Event types flowing into and out of the navigation engine.

Inputs are normalized into the closed `HidEvent` set. Renderers may also
send `RendererSignal` values through their event queue. The engine answers
each `Gui.next_event()` call with exactly one `GuiEvent`.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class HidEvent(Enum):
    """Directional/activation input, independent of where it came from."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    BUTTON_PRESS = "button_press"
    NEXT_TAB = "next_tab"
    PREVIOUS_TAB = "previous_tab"
    QUIT = "quit"


class RendererSignal(Enum):
    """Backend events that are not user input."""

    REFRESH = "refresh"
    WINDOW_CLOSED = "window_closed"


# A renderer queue carries either a backend signal or forwarded input.
RendererEvent = Union[RendererSignal, HidEvent]


@dataclass(frozen=True)
class GuiEvent:
    """Base class of the semantic events returned to the caller."""


@dataclass(frozen=True)
class ItemSelected(GuiEvent):
    label: str
    position: tuple[int, int]


@dataclass(frozen=True)
class StatefulButtonChange(GuiEvent):
    label: str
    state: bool
    id: int


@dataclass(frozen=True)
class StatelessButtonPress(GuiEvent):
    label: str
    id: int


@dataclass(frozen=True)
class TabChanged(GuiEvent):
    name: str
    index: int


@dataclass(frozen=True)
class Quit(GuiEvent):
    """Terminal event: the user asked to leave or the window was closed."""
