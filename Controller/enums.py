from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

# Shape that the digitizer produces with the next click
class DrawMode(Enum):
    POINT = auto()
    POLYGON = auto()

# What the map viewport is currently used for
class ViewKind(Enum):
    INTERACTIVE = auto()
    STATIC = auto()
    DIGITIZING = auto()


@dataclass(frozen=True)
class ViewportMode:
    # Interactive | Static | Digitizing(DrawMode). Only DIGITIZING carries a draw mode.
    kind: ViewKind
    draw_mode: Optional[DrawMode] = None

    def __post_init__(self):
        if self.kind is ViewKind.DIGITIZING and self.draw_mode is None:
            raise ValueError("Digitizing mode needs a draw mode")
        if self.kind is not ViewKind.DIGITIZING and self.draw_mode is not None:
            raise ValueError(f"{self.kind.name} mode does not take a draw mode")

    @classmethod
    def interactive(cls) -> "ViewportMode":
        return cls(ViewKind.INTERACTIVE)

    @classmethod
    def static(cls) -> "ViewportMode":
        return cls(ViewKind.STATIC)

    @classmethod
    def digitizing(cls, draw_mode: DrawMode = DrawMode.POINT) -> "ViewportMode":
        return cls(ViewKind.DIGITIZING, draw_mode)

    @property
    def is_static(self) -> bool:
        return self.kind is ViewKind.STATIC

    @property
    def is_digitizing(self) -> bool:
        return self.kind is ViewKind.DIGITIZING

    # Capabilities derived from the variant
    @property
    def can_pan(self) -> bool:
        return self.kind is ViewKind.INTERACTIVE

    @property
    def can_wheel_zoom(self) -> bool:
        return self.kind is not ViewKind.STATIC

    @property
    def navigates_on_click(self) -> bool:
        return self.kind is not ViewKind.DIGITIZING
