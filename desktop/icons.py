"""Desktop icon layout and icon drag with grid snapping."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Awaitable, Callable

from desktop.geometry import Point, Viewport
from desktop.pointer import PointerCapture, PointerHub
from shared.file_types import ViewerKind, viewer_for

GRID_SIZE = 80
FALLBACK_COLUMNS = 8
FALLBACK_CELL_WIDTH = 80
FALLBACK_CELL_HEIGHT = 90
FALLBACK_MARGIN = 16
SYSTEM_ICON_BOTTOM_OFFSET = 180

RECYCLE_BIN_ICON = "recycle-bin"
USER_ICON = "user"

# Unknown extensions get the text glyph
_GLYPHS = {
    ViewerKind.TEXT: "text",
    ViewerKind.IMAGE: "image",
    ViewerKind.VIDEO: "video",
    ViewerKind.AUDIO: "audio",
    ViewerKind.UNSUPPORTED: "text",
}


def fallback_position(index: int) -> Point:
    return Point(
        (index % FALLBACK_COLUMNS) * FALLBACK_CELL_WIDTH + FALLBACK_MARGIN,
        (index // FALLBACK_COLUMNS) * FALLBACK_CELL_HEIGHT + FALLBACK_MARGIN,
    )


def _snap(value: float) -> int:
    # Half-up, unlike round() which rounds half to even
    return max(0, math.floor(value / GRID_SIZE + 0.5) * GRID_SIZE)


def snap_to_grid(point: Point) -> Point:
    return Point(_snap(point.x), _snap(point.y))


def glyph_for(extension: str) -> str:
    return _GLYPHS[viewer_for(extension)]


@dataclass
class DesktopIcon:
    id: str
    label: str
    glyph: str
    position: Point
    draggable: bool = True
    file: dict | None = None


def layout_icons(files: list[dict], viewport: Viewport | None = None) -> list[DesktopIcon]:
    """Place one icon per file, then the fixed system icons.

    Files with a stored position keep it; the rest fall back to the grid by
    their index in the listing.
    """
    viewport = viewport or Viewport()
    icons = []
    for index, record in enumerate(files):
        x, y = record.get("position_x"), record.get("position_y")
        position = Point(x, y) if x is not None and y is not None else fallback_position(index)
        icons.append(
            DesktopIcon(
                id=record["id"],
                label=f"{record['name']}.{record['extension']}",
                glyph=glyph_for(record["extension"]),
                position=position,
                file=record,
            )
        )

    system_y = viewport.height - SYSTEM_ICON_BOTTOM_OFFSET
    icons.append(
        DesktopIcon(
            id=RECYCLE_BIN_ICON,
            label="Recycle Bin",
            glyph=RECYCLE_BIN_ICON,
            position=Point(16, system_y),
            draggable=False,
        )
    )
    icons.append(
        DesktopIcon(
            id=USER_ICON,
            label="User",
            glyph=USER_ICON,
            position=Point(96, system_y),
            draggable=False,
        )
    )
    return icons


PositionCommit = Callable[[str, Point], Awaitable[None]]


@dataclass
class IconDrag:
    """Live icon drag. Moves follow the pointer unsnapped; release snaps and
    hands the final cell to ``on_commit``.
    """

    icon: DesktopIcon
    press: Point
    pointer: PointerHub
    offset: Point = field(init=False)
    capture: PointerCapture = field(init=False)
    final_position: Point | None = field(init=False, default=None)

    def __post_init__(self) -> None:
        if not self.icon.draggable:
            raise ValueError(f"Icon {self.icon.id!r} is not draggable")
        self.offset = self.press - self.icon.position
        self.capture = self.pointer.attach(self._on_move, self._on_up)

    def _on_move(self, point: Point) -> None:
        self.icon.position = point - self.offset

    def _on_up(self, point: Point) -> None:
        self.capture.release()
        self.final_position = snap_to_grid(point - self.offset)
        self.icon.position = self.final_position

    async def commit(self, on_commit: PositionCommit) -> bool:
        """Persist the final cell once the gesture has ended."""
        if self.final_position is None:
            return False
        await on_commit(self.icon.id, self.final_position)
        return True
