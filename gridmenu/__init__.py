"""gridmenu: tabbed grid menus driven by game pads and keyboards.

Declare a layout with `Layout.builder()`, hand it to `Gui` together with a
renderer, and pull semantic events with `Gui.next_event()`.
"""
from .engine import Gui
from .events import (
    GuiEvent,
    HidEvent,
    ItemSelected,
    Quit,
    RendererSignal,
    StatefulButtonChange,
    StatelessButtonPress,
    TabChanged,
)
from .layout import Layout, LayoutError, StatefulButton, StatelessButton, Tab, Text
from .palette import Color, ColorPalette
from .renderer import Renderer, RenderError
from .state import GuiState

__all__ = [
    "Color",
    "ColorPalette",
    "Gui",
    "GuiEvent",
    "GuiState",
    "HidEvent",
    "ItemSelected",
    "Layout",
    "LayoutError",
    "Quit",
    "RenderError",
    "Renderer",
    "RendererSignal",
    "StatefulButton",
    "StatefulButtonChange",
    "StatelessButton",
    "StatelessButtonPress",
    "Tab",
    "TabChanged",
    "Text",
]
