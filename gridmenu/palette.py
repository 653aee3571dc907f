"""Fixed color palette shared by every renderer."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Color:
    r: int
    g: int
    b: int

    @property
    def hex(self) -> str:
        """Color as `#rrggbb`, the form rich styles accept."""
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.r, self.g, self.b)


WHITE = Color(255, 255, 255)
BLACK = Color(0, 0, 0)
RED = Color(255, 0, 0)


@dataclass(frozen=True)
class ColorPalette:
    """Eight color slots: four for the tab bar, four for the item grid."""

    tab_outline: Color
    tab_text: Color
    tab_bg: Color
    tab_accent: Color

    item_outline: Color
    item_text: Color
    item_bg: Color
    item_accent: Color

    @classmethod
    def default(cls) -> ColorPalette:
        return cls(
            tab_outline=WHITE,
            tab_text=WHITE,
            tab_bg=BLACK,
            tab_accent=RED,
            item_outline=RED,
            item_text=WHITE,
            item_bg=BLACK,
            item_accent=RED,
        )
