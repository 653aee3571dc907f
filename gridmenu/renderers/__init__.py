"""Concrete renderers and startup probing."""
from __future__ import annotations

import logging

from rich.console import Console

from ..renderer import Renderer, RenderError
from ..settings import Settings
from .terminal import TerminalRenderer

logger = logging.getLogger(__name__)

RENDERERS = ("auto", "terminal")


def autopick_renderer(settings: Settings, console: Console | None = None) -> Renderer:
    """Pick and start the first backend able to draw.

    Args:
        settings: Application settings (GRIDMENU_RENDERER selects the backend)
        console: Console to draw on (defaults to a new rich Console)

    Raises:
        ValueError: If GRIDMENU_RENDERER names an unknown backend
        RenderError: If no backend can draw
    """
    choice = settings.GRIDMENU_RENDERER
    if choice not in RENDERERS:
        raise ValueError(f"Unknown renderer {choice!r}, expected one of {', '.join(RENDERERS)}")

    console = console or Console(highlight=False)
    if not console.is_terminal:
        raise RenderError("No usable renderer: standard output is not a terminal")

    logger.info("Using terminal renderer (%sx%s)", console.width, console.height)
    return TerminalRenderer(console).start()


__all__ = ["RENDERERS", "TerminalRenderer", "autopick_renderer"]
