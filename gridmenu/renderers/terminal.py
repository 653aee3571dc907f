"""Terminal renderer built on rich, with keyboard input read through prompt_toolkit."""
from __future__ import annotations

import logging
import queue
import select
import threading
from typing import Callable, Optional, Sequence

from prompt_toolkit.input import Input, create_input
from rich import box
from rich.console import Console, Group, RenderableType
from rich.panel import Panel
from rich.style import Style
from rich.table import Table
from rich.text import Text as RichText

from ..events import RendererEvent, RendererSignal
from ..input import translate_key
from ..layout import Item, Line, StatefulButton
from ..palette import ColorPalette
from ..renderer import Renderer, RenderError

logger = logging.getLogger(__name__)


def item_caption(item: Item) -> str:
    """Text shown for an item; stateful buttons get a checkbox prefix."""
    if isinstance(item, StatefulButton):
        return f"[{'X' if item.state else ' '}] {item.label}"
    return item.label


def render_tab_header(names: Sequence[str], colors: ColorPalette) -> Panel:
    """Tab bar: the focused tab first, in the accent color."""
    text = RichText(no_wrap=True, overflow="ellipsis")
    for i, name in enumerate(names):
        if i:
            text.append(" │ ", style=Style(color=colors.tab_outline.hex))
        color = colors.tab_accent if i == 0 else colors.tab_text
        text.append(name, style=Style(color=color.hex, bold=i == 0))
    return Panel(
        text,
        box=box.SQUARE,
        border_style=Style(color=colors.tab_outline.hex),
        style=Style(bgcolor=colors.tab_bg.hex),
    )


def render_item_grid(
    items: Sequence[Line],
    colors: ColorPalette,
    selected: tuple[int, int],
) -> Panel:
    """Item grid: every line splits the width evenly between its items."""
    sel_row, sel_col = selected
    text_style = Style(color=colors.item_text.hex)
    accent_style = Style(color=colors.item_accent.hex, bold=True)

    lines: list[RenderableType] = []
    for row, line in enumerate(items):
        if not line:
            lines.append(RichText(""))
            continue
        grid = Table.grid(expand=True)
        for _ in line:
            grid.add_column(ratio=1, no_wrap=True, overflow="ellipsis")
        grid.add_row(*[
            RichText(
                item_caption(item),
                style=accent_style if (row, column) == (sel_row, sel_col) else text_style,
            )
            for column, item in enumerate(line)
        ])
        lines.append(grid)

    return Panel(
        Group(*lines),
        box=box.SQUARE,
        border_style=Style(color=colors.item_outline.hex),
        style=Style(bgcolor=colors.item_bg.hex),
    )


class TerminalRenderer(Renderer):
    """Full-screen terminal backend.

    rich cannot address cells directly, so every draw repaints the whole
    screen from the last tab bar and item grid it was given.

    Keyboard input is read on a background thread (started by
    `subscribe_events()`) with the terminal in raw mode. The same thread
    watches the terminal size and sends `RendererSignal.REFRESH` on resize.
    POSIX terminals only: the reader waits with `select()`.
    """

    def __init__(
        self,
        console: Console | None = None,
        input_factory: Callable[[], Input] = create_input,
        input_poll_interval: float = 0.1,
    ):
        self.console = console or Console(highlight=False)
        self._input_factory = input_factory
        self._input_poll_interval = input_poll_interval
        self._header: Optional[RenderableType] = None
        self._body: Optional[RenderableType] = None
        self._header_pending = False
        self._stop = threading.Event()
        self._reader: Optional[threading.Thread] = None
        self._started = False

    def start(self) -> TerminalRenderer:
        """Switch to the alternate screen and hide the cursor."""
        if not self.console.is_terminal:
            raise RenderError("Standard output is not a terminal")
        try:
            self.console.set_alt_screen(True)
            self.console.show_cursor(False)
        except OSError as exc:
            raise RenderError(f"Failed to set up the terminal: {exc}") from exc
        self._started = True
        return self

    def close(self) -> None:
        self._stop.set()
        if self._reader is not None:
            self._reader.join(timeout=self._input_poll_interval * 5)
            self._reader = None
        if self._started:
            self.console.show_cursor(True)
            self.console.set_alt_screen(False)
            self._started = False

    # Drawing

    def _repaint(self) -> None:
        self._header_pending = False
        parts = [part for part in (self._header, self._body) if part is not None]
        try:
            self.console.clear()
            self.console.print(Group(*parts))
        except OSError as exc:
            raise RenderError(f"Terminal write failed: {exc}") from exc

    def draw_tab_header(self, names: Sequence[str], colors: ColorPalette) -> None:
        # Painted by the next draw_items() or tick().
        self._header = render_tab_header(names, colors)
        self._header_pending = True

    def draw_items(
        self,
        items: Sequence[Line],
        colors: ColorPalette,
        selected: tuple[int, int],
    ) -> None:
        self._body = render_item_grid(items, colors, selected)
        self._repaint()

    def tick(self) -> None:
        """Paint a header left pending. Input and resize are handled by the reader thread."""
        if self._header_pending:
            self._repaint()

    # Input

    def subscribe_events(self) -> queue.Queue[RendererEvent]:
        events: queue.Queue[RendererEvent] = queue.Queue()
        self._reader = threading.Thread(
            target=self._read_input,
            args=(events,),
            name="gridmenu-terminal-input",
            daemon=True,
        )
        self._reader.start()
        return events

    def _read_input(self, events: queue.Queue[RendererEvent]) -> None:
        try:
            terminal_input = self._input_factory()
            with terminal_input.raw_mode():
                self._pump(terminal_input, events)
        except (OSError, ValueError) as exc:
            logger.error("Terminal input failed: %s", exc)
            events.put(RendererSignal.WINDOW_CLOSED)

    def _pump(self, terminal_input: Input, events: queue.Queue[RendererEvent]) -> None:
        last_size = self.console.size
        while not self._stop.is_set():
            ready, _, _ = select.select([terminal_input.fileno()], [], [], self._input_poll_interval)
            # A lone Escape is held back by the parser until flushed.
            key_presses = terminal_input.read_keys() if ready else terminal_input.flush_keys()
            for key_press in key_presses:
                event = translate_key(key_press.key)
                if event is not None:
                    events.put(event)

            size = self.console.size
            if size != last_size:
                last_size = size
                events.put(RendererSignal.REFRESH)

            if terminal_input.closed:
                logger.info("Terminal input closed")
                events.put(RendererSignal.WINDOW_CLOSED)
                break
