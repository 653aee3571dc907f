from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from .engine import Gui
from .events import Quit
from .layout import Layout, LayoutError, StatefulButton, StatelessButton
from .logging import setup_logging
from .renderer import RenderError
from .renderers import autopick_renderer
from .renderers.terminal import item_caption
from .settings import load_settings
from .state import GuiState

logger = logging.getLogger(__name__)

app = typer.Typer(
    add_completion=False,
    help="gridmenu: tabbed grid menus for game pads and keyboards",
    rich_markup_mode="rich",
)
console = Console()


# ═══════════════════════════════════════════════════════════════════════════════
# HELPERS
# ═══════════════════════════════════════════════════════════════════════════════

def demo_layout() -> Layout:
    """The layout shown by `gridmenu demo` when no file is given."""
    return (
        Layout.builder()
        .tab("Example tab")
            .line()
                .text("Sample Text")
                .text("More Text")
            .line()
                .button_stateful("I'm a button!", True, 1)
        .tab("Another tab, empty")
        .tab("I AM A TAB")
            .line()
                .button_stateful("baton", False, 2)
                .button_stateless("i don't have a state", 3)
        .build()
    )


def load_layout(path: Path) -> Layout:
    """Load a layout from JSON. Snapshot files written by `--dump-state` work too."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise LayoutError(f"Cannot read layout {path}: {exc}") from exc
    if isinstance(data, dict) and "layout" in data:
        return GuiState.from_dict(data).layout
    return Layout.from_dict(data)


def layout_tree(layout: Layout, title: str = "Layout") -> Tree:
    tree = Tree(f"[bold]{title}[/bold]")
    for index, tab in enumerate(layout):
        branch = tree.add(f"[cyan]{index}[/cyan] {tab.name}")
        if not tab.grid:
            branch.add("[dim](empty)[/dim]")
        for row, line in enumerate(tab.grid):
            captions = []
            for item in line:
                caption = item_caption(item).replace("[", "\\[")
                if isinstance(item, (StatefulButton, StatelessButton)):
                    caption += f" [dim]#{item.id}[/dim]"
                captions.append(caption)
            branch.add(f"[dim]line {row}:[/dim] " + "  ".join(captions))
    return tree


def _print_buttons(state: GuiState) -> None:
    table = Table(title="[bold]Toggles[/bold]", show_header=True)
    table.add_column("Tab", style="bold")
    table.add_column("Button")
    table.add_column("Id", justify="right")
    table.add_column("State", style="cyan")
    for tab in state.layout:
        for line in tab.grid:
            for item in line:
                if isinstance(item, StatefulButton):
                    table.add_row(tab.name, item.label, str(item.id), "on" if item.state else "off")
    console.print(table)


# ═══════════════════════════════════════════════════════════════════════════════
# COMMANDS
# ═══════════════════════════════════════════════════════════════════════════════

@app.command("demo", help="Run a menu in the terminal until Escape is pressed")
def demo(
    layout_path: Optional[Path] = typer.Option(None, "--layout", "-l", help="JSON layout to show"),
    dump_state: Optional[Path] = typer.Option(None, "--dump-state", help="Write the final state as JSON"),
):
    """Run the demo layout (or a JSON layout) and log every semantic event."""
    settings = load_settings()
    log_file = setup_logging(settings)

    try:
        layout = load_layout(layout_path) if layout_path else demo_layout()
        renderer = autopick_renderer(settings)
    except (LayoutError, RenderError, ValueError) as exc:
        console.print(f"[red]✗ {exc}[/red]")
        raise typer.Exit(code=1)

    try:
        gui = Gui(
            layout,
            renderer,
            poll_timeout=settings.poll_timeout,
            report_focus=settings.GRIDMENU_REPORT_FOCUS,
        )
    except RenderError as exc:
        renderer.close()
        console.print(f"[red]✗ {exc}[/red]")
        raise typer.Exit(code=1)

    try:
        while True:
            event = gui.next_event()
            logger.info("event: %r", event)
            if isinstance(event, Quit):
                break
    except RenderError as exc:
        gui.close()
        console.print(f"[red]✗ {exc}[/red]")
        raise typer.Exit(code=1)

    state = gui.exit_dumping_state()
    logger.info("final state: %s", json.dumps(state.to_dict()))

    _print_buttons(state)
    if dump_state:
        written = state.save(dump_state)
        console.print(f"[dim]State written to {written}[/dim]")
    console.print(f"[dim]Log: {log_file}[/dim]")


@app.command("show", help="Print a JSON layout or state file as a tree")
def show(path: Path = typer.Argument(..., help="Layout or state JSON file")):
    try:
        layout = load_layout(path)
    except LayoutError as exc:
        console.print(f"[red]✗ {exc}[/red]")
        raise typer.Exit(code=1)
    console.print(layout_tree(layout, title=path.name))


def main():
    app()
