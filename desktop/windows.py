"""Window manager: the open-window set, focus/z-order, and drag/resize gestures.

All window state lives here, in one ordered list plus a z-index counter that
only ever grows. Components never track z-order themselves.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from desktop.geometry import TASKBAR_HEIGHT, Point, Size, Viewport
from desktop.pointer import PointerCapture, PointerHub

DEFAULT_POSITION = Point(100, 100)
DEFAULT_SIZE = Size(600, 400)
MIN_WIDTH = 320
MIN_HEIGHT = 240
BASE_Z_INDEX = 10


class WindowKind(str, Enum):
    FILE = "file"
    RECYCLE_BIN = "recycle-bin"
    SETTINGS = "settings"
    USER = "user"
    UPLOAD = "upload"
    SHARE = "share"
    RENAME = "rename"


# One window per file for these kinds; the rest are singletons
_PER_FILE_KINDS = {WindowKind.FILE, WindowKind.SHARE, WindowKind.RENAME}


def window_id(kind: WindowKind, file_id: str | None = None) -> str:
    """Deterministic identifier: ``file-<id>``, ``share-<id>``, or the kind name."""
    if kind in _PER_FILE_KINDS:
        if file_id is None:
            raise ValueError(f"{kind.value} windows need a file")
        return f"{kind.value}-{file_id}"
    return kind.value


@dataclass
class WindowDescriptor:
    """What to open. The identifier is derived, never chosen by the caller."""

    kind: WindowKind
    title: str
    file: dict | None = None
    maximized: bool = False
    content: Any = None

    @property
    def id(self) -> str:
        return window_id(self.kind, self.file["id"] if self.file else None)


@dataclass
class Window:
    id: str
    kind: WindowKind
    title: str
    file: dict | None = None
    minimized: bool = False
    maximized: bool = False
    position: Point = DEFAULT_POSITION
    size: Size = DEFAULT_SIZE
    z_index: int = BASE_Z_INDEX
    # Geometry to return to when un-maximizing
    restore_position: Point = DEFAULT_POSITION
    restore_size: Size = DEFAULT_SIZE
    # Viewer or dialog hosted by the window
    content: Any = None


@dataclass
class TaskbarEntry:
    window_id: str
    title: str
    pressed: bool


class WindowManager:
    def __init__(self, viewport: Viewport | None = None, pointer: PointerHub | None = None):
        self.viewport = viewport or Viewport()
        self.pointer = pointer or PointerHub()
        self._windows: list[Window] = []
        self.active_id: str | None = None
        self._max_z = BASE_Z_INDEX

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def windows(self) -> tuple[Window, ...]:
        """Open windows in opening order (taskbar order)."""
        return tuple(self._windows)

    def get(self, id: str) -> Window | None:
        for window in self._windows:
            if window.id == id:
                return window
        return None

    def _require(self, id: str) -> Window:
        window = self.get(id)
        if window is None:
            raise KeyError(f"No open window {id!r}")
        return window

    @property
    def active(self) -> Window | None:
        return self.get(self.active_id) if self.active_id else None

    def stacking_order(self) -> list[Window]:
        """Visible windows, bottom to top."""
        visible = [w for w in self._windows if not w.minimized]
        return sorted(visible, key=lambda w: w.z_index)

    def taskbar_entries(self) -> list[TaskbarEntry]:
        return [
            TaskbarEntry(
                window_id=w.id,
                title=w.title,
                pressed=w.id == self.active_id and not w.minimized,
            )
            for w in self._windows
        ]

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _next_z(self) -> int:
        self._max_z += 1
        return self._max_z

    def _maximized_geometry(self) -> tuple[Point, Size]:
        return (
            Point(0, TASKBAR_HEIGHT),
            Size(self.viewport.width, self.viewport.height - TASKBAR_HEIGHT),
        )

    def open(self, descriptor: WindowDescriptor) -> Window:
        """Open a window, or un-minimize and focus the one already open."""
        window = self.get(descriptor.id)
        if window is not None:
            # Content is kept so an unsaved edit buffer survives a reopen
            window.minimized = False
            window.title = descriptor.title
            if descriptor.file is not None:
                window.file = descriptor.file
        else:
            window = Window(
                id=descriptor.id,
                kind=descriptor.kind,
                title=descriptor.title,
                file=descriptor.file,
                content=descriptor.content,
            )
            if descriptor.maximized:
                window.maximized = True
                window.position, window.size = self._maximized_geometry()
            self._windows.append(window)
        self.active_id = window.id
        window.z_index = self._next_z()
        return window

    def close(self, id: str) -> None:
        # Active falls to nobody, not to the next window down
        self._windows = [w for w in self._windows if w.id != id]
        if self.active_id == id:
            self.active_id = None

    def minimize(self, id: str) -> None:
        self._require(id).minimized = True
        if self.active_id == id:
            self.active_id = None

    def maximize(self, id: str) -> None:
        """Toggle maximized; restoring returns to the last manual geometry."""
        window = self._require(id)
        if window.maximized:
            window.maximized = False
            window.position = window.restore_position
            window.size = window.restore_size
        else:
            window.restore_position = window.position
            window.restore_size = window.size
            window.maximized = True
            window.position, window.size = self._maximized_geometry()

    def focus(self, id: str) -> None:
        window = self._require(id)
        self.active_id = id
        window.z_index = self._next_z()

    def taskbar_click(self, id: str) -> None:
        """Minimized → restore and focus; active → minimize; otherwise focus."""
        window = self.get(id)
        if window is None:
            return
        if window.minimized:
            window.minimized = False
            self.focus(id)
        elif self.active_id == id:
            self.minimize(id)
        else:
            self.focus(id)

    def home_click(self) -> None:
        """Show the desktop by minimizing whatever window is active."""
        if self.active_id:
            self.minimize(self.active_id)

    # ------------------------------------------------------------------
    # Gestures
    # ------------------------------------------------------------------

    def begin_drag(self, id: str, x: int, y: int) -> WindowDrag | None:
        """Title-bar press. Maximized and minimized windows do not move."""
        window = self._require(id)
        if window.maximized or window.minimized:
            return None
        self.focus(id)
        return WindowDrag(window, Point(x, y), self.pointer)

    def begin_resize(self, id: str, x: int, y: int) -> WindowResize | None:
        """Corner-handle press. Only available when not maximized."""
        window = self._require(id)
        if window.maximized or window.minimized:
            return None
        return WindowResize(window, Point(x, y), self.pointer)


@dataclass
class WindowDrag:
    """Live title-bar drag. The offset is fixed at press time."""

    window: Window
    press: Point
    pointer: PointerHub
    offset: Point = field(init=False)
    capture: PointerCapture = field(init=False)
    active: bool = field(init=False, default=True)

    def __post_init__(self) -> None:
        self.offset = self.press - self.window.position
        self.capture = self.pointer.attach(self._on_move, self._on_up)

    def _on_move(self, point: Point) -> None:
        self.window.position = Point(
            point.x - self.offset.x,
            max(TASKBAR_HEIGHT, point.y - self.offset.y),
        )

    def _on_up(self, point: Point) -> None:
        self.active = False
        self.capture.release()


@dataclass
class WindowResize:
    """Live corner resize with a minimum size floor."""

    window: Window
    press: Point
    pointer: PointerHub
    start_size: Size = field(init=False)
    capture: PointerCapture = field(init=False)
    active: bool = field(init=False, default=True)

    def __post_init__(self) -> None:
        self.start_size = self.window.size
        self.capture = self.pointer.attach(self._on_move, self._on_up)

    def _on_move(self, point: Point) -> None:
        delta = point - self.press
        self.window.size = Size(
            max(MIN_WIDTH, self.start_size.width + delta.x),
            max(MIN_HEIGHT, self.start_size.height + delta.y),
        )

    def _on_up(self, point: Point) -> None:
        self.active = False
        self.capture.release()
