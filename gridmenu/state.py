"""Shutdown snapshot of the navigation engine."""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .layout import Layout, LayoutError


@dataclass(frozen=True)
class GuiState:
    """Final engine state, produced by `Gui.exit_dumping_state()`.

    Holds the layout as the engine left it (button states included) along
    with the focused tab and item. Useful for persisting toggles between
    runs, or for logging what the user ended up on.
    """

    layout: Layout
    tab_index: int = 0
    item_position: tuple[int, int] = (0, 0)

    def to_dict(self) -> dict[str, Any]:
        """Plain, JSON-compatible record of the snapshot."""
        return {
            "layout": self.layout.to_dict(),
            "tab_index": self.tab_index,
            "item_position": list(self.item_position),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GuiState:
        if not isinstance(data, dict) or "layout" not in data:
            raise LayoutError("Snapshot record must contain a 'layout'")
        layout = Layout.from_dict(data["layout"])
        try:
            row, column = data.get("item_position", (0, 0))
            tab_index = int(data.get("tab_index", 0))
            item_position = (int(row), int(column))
        except (TypeError, ValueError) as exc:
            raise LayoutError(f"Malformed snapshot position: {exc}") from exc
        return cls(layout=layout, tab_index=tab_index, item_position=item_position)

    def save(self, path: Path) -> Path:
        """Write the snapshot as JSON and return the path written."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_dict(), indent=2) + "\n", encoding="utf-8")
        return path
