"""Layout model: tabs, lines and items, plus the builder used to declare them."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator


class LayoutError(ValueError):
    """Raised when a layout is declared or loaded incorrectly."""


# ═══════════════════════════════════════════════════════════════════════════════
# ITEMS
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass
class Item:
    """Base class of the leaf UI elements placed in a tab's grid."""

    label: str

    kind = "item"

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "label": self.label}


@dataclass
class Text(Item):
    """Static, non-interactive text."""

    kind = "text"


@dataclass
class StatefulButton(Item):
    """A toggle button. `state` is flipped in place by the engine."""

    state: bool = False
    id: int = 0

    kind = "stateful_button"

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "label": self.label, "state": self.state, "id": self.id}


@dataclass
class StatelessButton(Item):
    """A momentary button; pressing it only reports its id."""

    id: int = 0

    kind = "stateless_button"

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "label": self.label, "id": self.id}


def item_from_dict(data: dict[str, Any]) -> Item:
    """Rebuild an item from the record produced by `Item.to_dict()`."""
    try:
        kind = data["kind"]
        label = str(data["label"])
    except (KeyError, TypeError) as exc:
        raise LayoutError(f"Malformed item record: {data!r}") from exc

    if kind == Text.kind:
        return Text(label)
    if kind not in (StatefulButton.kind, StatelessButton.kind):
        raise LayoutError(f"Unknown item kind: {kind!r}")

    try:
        item_id = int(data.get("id", 0))
    except (TypeError, ValueError) as exc:
        raise LayoutError(f"Item {label!r} has a non-integer id: {data.get('id')!r}") from exc

    if kind == StatefulButton.kind:
        state = data.get("state", False)
        if not isinstance(state, bool):
            raise LayoutError(f"Item {label!r} has a non-boolean state: {state!r}")
        return StatefulButton(label, state, item_id)
    return StatelessButton(label, item_id)


def _grid_from_list(name: str, grid_data: Any) -> list[Line]:
    if not isinstance(grid_data, list):
        raise LayoutError(f"Tab {name!r}: grid must be a list of lines")
    grid: list[Line] = []
    for line_data in grid_data:
        if not isinstance(line_data, list):
            raise LayoutError(f"Tab {name!r}: every line must be a list, got {line_data!r}")
        grid.append([item_from_dict(item) for item in line_data])
    return grid


# ═══════════════════════════════════════════════════════════════════════════════
# TABS & LAYOUT
# ═══════════════════════════════════════════════════════════════════════════════

Line = list[Item]


@dataclass
class Tab:
    """A named screen holding a (possibly ragged) grid of items."""

    name: str
    grid: list[Line] = field(default_factory=list)

    def item_at(self, row: int, column: int) -> Item | None:
        """Return the item at `(row, column)`, or None when the cell does not exist."""
        if row < 0 or column < 0 or row >= len(self.grid):
            return None
        line = self.grid[row]
        if column >= len(line):
            return None
        return line[column]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "grid": [[item.to_dict() for item in line] for line in self.grid],
        }


class Layout:
    """Ordered, fixed sequence of tabs.

    The sequence of tabs never changes after construction. Items inside a
    tab's grid may still be mutated in place (button states).
    """

    def __init__(self, tabs: list[Tab] | tuple[Tab, ...]):
        self._tabs: tuple[Tab, ...] = tuple(tabs)

    @staticmethod
    def builder() -> LayoutBuilder:
        return LayoutBuilder()

    def __len__(self) -> int:
        return len(self._tabs)

    def __iter__(self) -> Iterator[Tab]:
        return iter(self._tabs)

    def __repr__(self) -> str:
        return f"Layout(tabs={self.tab_names()!r})"

    def max_tab_index(self) -> int:
        """Highest valid tab index (inclusive), i.e. the number of tabs minus one."""
        return len(self._tabs) - 1

    def tab_names(self) -> list[str]:
        return [tab.name for tab in self._tabs]

    def tab(self, index: int) -> Tab | None:
        """Get a tab by index.

        Returns:
            The tab, or None when `index` is out of range (negative included)
        """
        if 0 <= index < len(self._tabs):
            return self._tabs[index]
        return None

    def to_dict(self) -> dict[str, Any]:
        return {"tabs": [tab.to_dict() for tab in self._tabs]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Layout:
        """Load a layout from the record produced by `to_dict()`.

        Raises:
            LayoutError: If the record is malformed or holds no tab
        """
        tabs_data = data.get("tabs") if isinstance(data, dict) else None
        if not isinstance(tabs_data, list):
            raise LayoutError("Layout record must contain a 'tabs' list")

        tabs: list[Tab] = []
        for tab_data in tabs_data:
            if not isinstance(tab_data, dict) or "name" not in tab_data:
                raise LayoutError(f"Malformed tab record: {tab_data!r}")
            name = str(tab_data["name"])
            tabs.append(Tab(name, _grid_from_list(name, tab_data.get("grid", []))))

        if not tabs:
            raise LayoutError("Layout has no tabs")
        return cls(tabs)


# ═══════════════════════════════════════════════════════════════════════════════
# BUILDER
# ═══════════════════════════════════════════════════════════════════════════════

class BuilderScope(Enum):
    LAYOUT = "layout"
    TAB = "tab"
    LINE = "line"


class LayoutBuilder:
    """Fluent, strictly nested layout declaration.

    Every transition moves the open line into its tab and the open tab into
    the layout before advancing, so nothing declared is ever dropped:

        layout = (
            Layout.builder()
            .tab("Audio")
                .line().text("Volume").button_stateful("Mute", False, 1).endl()
            .tab("System")
                .line().button_stateless("Reboot", 2)
            .build()
        )

    Operations used outside their scope raise `LayoutError`.
    """

    def __init__(self):
        self.scope = BuilderScope.LAYOUT
        self._tabs: list[Tab] = []
        self._tab: Tab | None = None
        self._line: Line | None = None

    def _require(self, *scopes: BuilderScope, action: str) -> None:
        if self.scope not in scopes:
            raise LayoutError(f"Cannot {action} while in {self.scope.value} scope")

    def _flush_line(self) -> None:
        if self._line is not None and self._tab is not None:
            self._tab.grid.append(self._line)
            self._line = None

    def _flush_tab(self) -> None:
        self._flush_line()
        if self._tab is not None:
            self._tabs.append(self._tab)
            self._tab = None

    # Layout scope

    def tab(self, name: str) -> LayoutBuilder:
        """Open a new tab, closing any open line and tab first."""
        self._flush_tab()
        self._tab = Tab(name)
        self.scope = BuilderScope.TAB
        return self

    def build(self) -> Layout:
        """Close everything still open and return the finished layout."""
        self._flush_tab()
        self.scope = BuilderScope.LAYOUT
        if not self._tabs:
            raise LayoutError("Cannot build a layout without any tab")
        return Layout(self._tabs)

    # Tab scope

    def line(self) -> LayoutBuilder:
        self._require(BuilderScope.TAB, BuilderScope.LINE, action="start a line")
        self._flush_line()
        self._line = []
        self.scope = BuilderScope.LINE
        return self

    def end_tab(self) -> LayoutBuilder:
        self._require(BuilderScope.TAB, BuilderScope.LINE, action="close a tab")
        self._flush_tab()
        self.scope = BuilderScope.LAYOUT
        return self

    # Line scope

    def _append(self, item: Item) -> LayoutBuilder:
        self._require(BuilderScope.LINE, action=f"add {item.kind!r}")
        if self._line is None:
            raise LayoutError(f"Cannot add {item.kind!r} without an open line")
        self._line.append(item)
        return self

    def text(self, label: str) -> LayoutBuilder:
        return self._append(Text(label))

    def button_stateful(self, label: str, state: bool, id: int) -> LayoutBuilder:
        return self._append(StatefulButton(label, state, id))

    def button_stateless(self, label: str, id: int) -> LayoutBuilder:
        return self._append(StatelessButton(label, id))

    def endl(self) -> LayoutBuilder:
        self._require(BuilderScope.LINE, action="close a line")
        self._flush_line()
        self.scope = BuilderScope.TAB
        return self
