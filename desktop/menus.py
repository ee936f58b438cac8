"""Right-click menus: ordered command lists per target kind."""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from desktop.geometry import Point, Viewport

MENU_WIDTH = 160
MENU_ITEM_HEIGHT = 28
MENU_PADDING = 8

Action = Callable[[], Any] | Callable[[], Awaitable[Any]]


@dataclass
class MenuItem:
    label: str = ""
    action: Action | None = None
    divider: bool = False
    disabled: bool = False


def divider() -> MenuItem:
    return MenuItem(divider=True)


@dataclass
class ContextMenu:
    items: list[MenuItem]
    requested: Point
    viewport: Viewport = field(default_factory=Viewport)
    on_close: Callable[[], None] | None = None
    closed: bool = field(init=False, default=False)

    @property
    def position(self) -> Point:
        """Requested point pulled back so the menu stays on screen."""
        return Point(
            min(self.requested.x, self.viewport.width - MENU_WIDTH),
            min(
                self.requested.y,
                self.viewport.height - len(self.items) * MENU_ITEM_HEIGHT - MENU_PADDING,
            ),
        )

    @property
    def labels(self) -> list[str]:
        return [item.label for item in self.items if not item.divider]

    def item(self, label: str) -> MenuItem:
        for candidate in self.items:
            if not candidate.divider and candidate.label == label:
                return candidate
        raise KeyError(label)

    async def activate(self, label: str) -> bool:
        """Run the item's action, then close. Disabled items do nothing."""
        item = self.item(label)
        if item.disabled or item.action is None:
            return False
        result = item.action()
        if inspect.isawaitable(result):
            await result
        self.close()
        return True

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self.on_close is not None:
            self.on_close()


def file_menu(open: Action, rename: Action, share: Action, delete: Action) -> list[MenuItem]:
    return [
        MenuItem("Open", open),
        divider(),
        MenuItem("Rename", rename),
        MenuItem("Share", share),
        divider(),
        MenuItem("Delete", delete),
    ]


def desktop_menu(upload: Action, settings: Action) -> list[MenuItem]:
    return [
        MenuItem("Upload File", upload),
        divider(),
        MenuItem("Settings", settings),
    ]


def recycle_bin_menu(open: Action, empty: Action, trash_is_empty: bool) -> list[MenuItem]:
    return [
        MenuItem("Open", open),
        divider(),
        MenuItem("Empty Recycle Bin", empty, disabled=trash_is_empty),
    ]


def user_menu(profile: Action, settings: Action, logout: Action) -> list[MenuItem]:
    return [
        MenuItem("Open Profile", profile),
        MenuItem("Settings", settings),
        divider(),
        MenuItem("Log Out", logout),
    ]
