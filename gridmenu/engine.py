"""Navigation engine: merges input, moves focus, drives the renderer."""
from __future__ import annotations

import logging
import queue
import time
from typing import Optional, Sequence

from .events import (
    GuiEvent,
    HidEvent,
    ItemSelected,
    Quit,
    RendererEvent,
    RendererSignal,
    StatefulButtonChange,
    StatelessButtonPress,
    TabChanged,
)
from .input import DeviceHandle, DeviceInputSource
from .layout import Layout, LayoutError, StatefulButton, StatelessButton, Tab
from .palette import ColorPalette
from .renderer import Renderer, RenderError
from .state import GuiState

logger = logging.getLogger(__name__)

# Per-queue poll timeout, in seconds.
DEFAULT_POLL_TIMEOUT = 0.01


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


class Gui:
    """Grid-of-tabs menu driven by directional input.

    The engine owns the layout, the palette and both input queues. Callers
    pull semantic events one at a time with `next_event()`:

        gui = Gui(layout, renderer)
        while not isinstance(event := gui.next_event(), Quit):
            handle(event)
        state = gui.exit_dumping_state()

    Device input is polled before renderer input on every iteration, so a
    controller wins over the keyboard when both are ready at once.
    """

    def __init__(
        self,
        layout: Layout,
        renderer: Renderer,
        device: DeviceHandle | None = None,
        *,
        palette: ColorPalette | None = None,
        poll_timeout: float = DEFAULT_POLL_TIMEOUT,
        report_focus: bool = False,
    ):
        """Draw the initial screen and start listening for input.

        Args:
            layout: Finished layout; must hold at least one tab
            renderer: Drawing backend
            device: Optional controller handle; None means no device
            palette: Colors to draw with (defaults to `ColorPalette.default()`)
            poll_timeout: Seconds to wait on each input queue per iteration
            report_focus: Also emit `ItemSelected` when focus moves

        Raises:
            LayoutError: If the layout has no tab
            RenderError: If the initial draw fails
        """
        if len(layout) == 0:
            raise LayoutError("Cannot start a GUI without any tab")

        self._layout = layout
        self._renderer = renderer
        self._palette = palette or ColorPalette.default()
        self._poll_timeout = poll_timeout
        self._report_focus = report_focus

        self._tab_index = 0
        self._item_position: tuple[int, int] = (0, 0)
        self._ignore_input = False
        self._closed = False

        self._redraw_tabs = False
        self._redraw_items = False

        self._draw_tab_header()
        self._draw_items()

        self._renderer_events: Optional[queue.Queue[RendererEvent]] = renderer.subscribe_events()
        self._device_source = DeviceInputSource(device).start() if device is not None else None

        logger.info(
            "GUI started (tabs=%d, device=%s, renderer events=%s)",
            len(layout),
            device is not None,
            self._renderer_events is not None,
        )

    # ───────────────────────────────────────────────────────────────────────────
    # Caller API
    # ───────────────────────────────────────────────────────────────────────────

    @property
    def tab_index(self) -> int:
        return self._tab_index

    @property
    def item_position(self) -> tuple[int, int]:
        return self._item_position

    def set_ignore_input(self, value: bool) -> None:
        """Drain and discard input while set. Refresh and window-close still apply."""
        self._ignore_input = value

    def next_event(self) -> GuiEvent:
        """Block until user input produces a semantic event, and return it.

        Raises:
            RenderError: If a redraw fails
            RuntimeError: If the GUI was already shut down
        """
        if self._closed:
            raise RuntimeError("GUI has been shut down")

        while True:
            self._redraw_tabs = False
            self._redraw_items = False

            event = self._step()

            if self._redraw_tabs:
                self._draw_tab_header()
            if self._redraw_items:
                self._draw_items()

            if event is not None:
                logger.debug("Emitting %r", event)
                return event

            self._renderer.tick()

    def exit_dumping_state(self) -> GuiState:
        """Shut the GUI down and return its final state."""
        self.close()
        return GuiState(
            layout=self._layout,
            tab_index=self._tab_index,
            item_position=self._item_position,
        )

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._device_source is not None:
            if not self._device_source.stop(timeout=self._poll_timeout):
                logger.debug("Device input thread still blocked on its handle; left to exit on its own")
        self._renderer.close()
        logger.info("GUI stopped (tab=%d, position=%s)", self._tab_index, self._item_position)

    # ───────────────────────────────────────────────────────────────────────────
    # Event merging
    # ───────────────────────────────────────────────────────────────────────────

    def _poll(self, source: Optional[queue.Queue]) -> Optional[RendererEvent]:
        if source is None:
            return None
        try:
            return source.get(timeout=self._poll_timeout)
        except queue.Empty:
            return None

    def _next_input(self) -> Optional[RendererEvent]:
        device_events = self._device_source.queue if self._device_source is not None else None
        if device_events is None and self._renderer_events is None:
            time.sleep(self._poll_timeout)
            return None

        event = self._poll(device_events)
        if event is None:
            event = self._poll(self._renderer_events)
        return event

    def _step(self) -> Optional[GuiEvent]:
        """Act on at most one logical input."""
        event = self._next_input()
        if event is None:
            return None

        if event is RendererSignal.REFRESH:
            self._redraw_tabs = True
            self._redraw_items = True
            return None
        if event is RendererSignal.WINDOW_CLOSED:
            return Quit()

        if self._ignore_input:
            logger.debug("Ignoring input %s", event)
            return None

        if event is HidEvent.QUIT:
            return Quit()
        if event is HidEvent.BUTTON_PRESS:
            return self._activate()
        if event is HidEvent.NEXT_TAB:
            return self._change_tab(1)
        if event is HidEvent.PREVIOUS_TAB:
            return self._change_tab(-1)
        if event is HidEvent.UP:
            return self._move_row(-1)
        if event is HidEvent.DOWN:
            return self._move_row(1)
        if event is HidEvent.LEFT:
            return self._move_column(-1)
        if event is HidEvent.RIGHT:
            return self._move_column(1)
        return None

    # ───────────────────────────────────────────────────────────────────────────
    # Transitions
    # ───────────────────────────────────────────────────────────────────────────

    def _current_tab(self) -> Tab | None:
        return self._layout.tab(self._tab_index)

    def _activate(self) -> Optional[GuiEvent]:
        tab = self._current_tab()
        if tab is None:
            return None
        item = tab.item_at(*self._item_position)

        if isinstance(item, StatefulButton):
            item.state = not item.state
            self._redraw_items = True
            return StatefulButtonChange(item.label, item.state, item.id)
        if isinstance(item, StatelessButton):
            return StatelessButtonPress(item.label, item.id)
        return None

    def _change_tab(self, delta: int) -> Optional[GuiEvent]:
        new_index = _clamp(self._tab_index + delta, 0, self._layout.max_tab_index())
        if new_index == self._tab_index:
            return None

        self._tab_index = new_index
        self._item_position = (0, 0)
        self._redraw_tabs = True
        self._redraw_items = True

        return TabChanged(self._layout.tab_names()[new_index], new_index)

    def _move_row(self, delta: int) -> Optional[GuiEvent]:
        tab = self._current_tab()
        if tab is None:
            return None
        row, column = self._item_position
        last_row = max(len(tab.grid) - 1, 0)
        new_row = _clamp(row + delta, 0, last_row)

        # Rows are ragged: only move if the target row reaches this column.
        if tab.item_at(new_row, column) is None:
            return None
        return self._focus(tab, (new_row, column))

    def _move_column(self, delta: int) -> Optional[GuiEvent]:
        tab = self._current_tab()
        if tab is None:
            return None
        row, column = self._item_position
        if row < len(tab.grid):
            last_column = max(len(tab.grid[row]) - 1, 0)
            new_column = _clamp(column + delta, 0, last_column)
        else:
            new_column = 0
        return self._focus(tab, (row, new_column))

    def _focus(self, tab: Tab, position: tuple[int, int]) -> Optional[GuiEvent]:
        if position == self._item_position:
            return None
        self._item_position = position
        self._redraw_items = True

        item = tab.item_at(*position)
        if self._report_focus and item is not None:
            return ItemSelected(item.label, position)
        return None

    # ───────────────────────────────────────────────────────────────────────────
    # Drawing
    # ───────────────────────────────────────────────────────────────────────────

    def _draw_tab_header(self) -> None:
        names: Sequence[str] = self._layout.tab_names()[self._tab_index:]
        try:
            self._renderer.draw_tab_header(names, self._palette)
        except RenderError:
            raise
        except Exception as exc:
            raise RenderError(f"Failed to draw tab header: {exc}") from exc

    def _draw_items(self) -> None:
        tab = self._current_tab()
        if tab is None:
            return
        try:
            self._renderer.draw_items(tab.grid, self._palette, self._item_position)
        except RenderError:
            raise
        except Exception as exc:
            raise RenderError(f"Failed to draw items: {exc}") from exc
