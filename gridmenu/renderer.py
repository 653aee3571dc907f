"""Drawing contract implemented by every rendering backend."""
from __future__ import annotations

import queue
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional, Sequence

if TYPE_CHECKING:
    from .events import RendererEvent
    from .layout import Line
    from .palette import ColorPalette


class RenderError(RuntimeError):
    """A backend failed to draw, or no backend can draw at all."""


class Renderer(ABC):
    """Abstract base class for drawing backends.

    The engine only ever talks to this interface; it never checks which
    backend it was given. Draw methods must raise on failure, since the
    screen is the only output the user has.
    """

    @abstractmethod
    def draw_tab_header(self, names: Sequence[str], colors: ColorPalette) -> None:
        """Redraw the tab bar.

        Args:
            names: Tab names starting at the focused tab
            colors: Palette to draw with
        """

    @abstractmethod
    def draw_items(
        self,
        items: Sequence[Line],
        colors: ColorPalette,
        selected: tuple[int, int],
    ) -> None:
        """Redraw the item grid of the focused tab.

        Args:
            items: Rows of the focused tab (rows may differ in length)
            colors: Palette to draw with
            selected: Focused `(row, column)`
        """

    @abstractmethod
    def subscribe_events(self) -> Optional[queue.Queue[RendererEvent]]:
        """Return the queue of backend-originated events, or None if there are none.

        Called once, when the engine is constructed.
        """

    @abstractmethod
    def tick(self) -> None:
        """Non-blocking housekeeping, called on every loop iteration."""

    def close(self) -> None:
        """Release the backend (restore the terminal, close the window)."""
