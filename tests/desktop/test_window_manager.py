"""Tests for the window manager: open/focus/z-order, taskbar, drag and resize."""

from __future__ import annotations

import pytest

from desktop.geometry import TASKBAR_HEIGHT, Point, Size, Viewport
from desktop.windows import (
    BASE_Z_INDEX,
    DEFAULT_POSITION,
    DEFAULT_SIZE,
    MIN_HEIGHT,
    MIN_WIDTH,
    WindowDescriptor,
    WindowKind,
    WindowManager,
    window_id,
)


def file_descriptor(file_id: str = "abc", maximized: bool = False) -> WindowDescriptor:
    file = {"id": file_id, "name": "notes", "extension": "txt"}
    return WindowDescriptor(WindowKind.FILE, "notes.txt", file=file, maximized=maximized)


@pytest.fixture
def manager() -> WindowManager:
    return WindowManager(Viewport(1024, 768))


class TestWindowIds:
    def test_per_file_kinds(self):
        assert window_id(WindowKind.FILE, "1") == "file-1"
        assert window_id(WindowKind.SHARE, "1") == "share-1"
        assert window_id(WindowKind.RENAME, "1") == "rename-1"

    def test_singletons_use_kind_name(self):
        assert window_id(WindowKind.RECYCLE_BIN) == "recycle-bin"
        assert window_id(WindowKind.SETTINGS) == "settings"
        assert window_id(WindowKind.UPLOAD) == "upload"

    def test_per_file_kind_needs_file(self):
        with pytest.raises(ValueError):
            window_id(WindowKind.FILE)


class TestOpenFocus:
    def test_open_sets_active_and_bumps_z(self, manager):
        window = manager.open(WindowDescriptor(WindowKind.SETTINGS, "Settings"))
        assert manager.active_id == "settings"
        assert window.z_index == BASE_Z_INDEX + 1
        assert window.position == DEFAULT_POSITION
        assert window.size == DEFAULT_SIZE
        assert window.minimized is False

    def test_reopen_does_not_duplicate(self, manager):
        """Opening an open window twice yields one focused, un-minimized window."""
        manager.open(file_descriptor())
        manager.open(WindowDescriptor(WindowKind.SETTINGS, "Settings"))
        manager.minimize("file-abc")

        window = manager.open(file_descriptor())

        assert [w.id for w in manager.windows] == ["file-abc", "settings"]
        assert window.minimized is False
        assert manager.active_id == "file-abc"
        assert window.z_index == max(w.z_index for w in manager.windows)

    def test_reopen_refreshes_title_and_file(self, manager):
        viewer = object()
        first = file_descriptor()
        first.content = viewer
        manager.open(first)

        renamed = {"id": "abc", "name": "final", "extension": "txt"}
        window = manager.open(
            WindowDescriptor(WindowKind.FILE, "final.txt", file=renamed, content=object())
        )

        assert window.title == "final.txt"
        assert window.file == renamed
        assert window.content is viewer
        assert manager.taskbar_entries()[0].title == "final.txt"

    def test_z_index_strictly_increases(self, manager):
        seen = []
        manager.open(WindowDescriptor(WindowKind.SETTINGS, "Settings"))
        seen.append(manager.get("settings").z_index)
        manager.open(WindowDescriptor(WindowKind.UPLOAD, "Upload Files"))
        seen.append(manager.get("upload").z_index)
        manager.focus("settings")
        seen.append(manager.get("settings").z_index)
        manager.focus("settings")
        seen.append(manager.get("settings").z_index)
        assert seen == sorted(set(seen))

    def test_stacking_order_excludes_minimized(self, manager):
        manager.open(WindowDescriptor(WindowKind.SETTINGS, "Settings"))
        manager.open(WindowDescriptor(WindowKind.UPLOAD, "Upload Files"))
        manager.open(WindowDescriptor(WindowKind.USER, "User Profile"))
        manager.minimize("upload")
        manager.focus("settings")
        assert [w.id for w in manager.stacking_order()] == ["user", "settings"]

    def test_open_maximized(self, manager):
        window = manager.open(file_descriptor(maximized=True))
        assert window.maximized is True
        assert window.position == Point(0, TASKBAR_HEIGHT)
        assert window.size == Size(1024, 768 - TASKBAR_HEIGHT)


class TestCloseMinimize:
    def test_close_active_clears_active(self, manager):
        manager.open(WindowDescriptor(WindowKind.SETTINGS, "Settings"))
        manager.close("settings")
        assert manager.windows == ()
        assert manager.active_id is None

    def test_close_inactive_keeps_active(self, manager):
        manager.open(WindowDescriptor(WindowKind.SETTINGS, "Settings"))
        manager.open(WindowDescriptor(WindowKind.UPLOAD, "Upload Files"))
        manager.close("settings")
        assert manager.active_id == "upload"

    def test_minimize_clears_active(self, manager):
        manager.open(WindowDescriptor(WindowKind.SETTINGS, "Settings"))
        manager.minimize("settings")
        assert manager.get("settings").minimized is True
        assert manager.active_id is None

    def test_at_most_one_active(self, manager):
        manager.open(WindowDescriptor(WindowKind.SETTINGS, "Settings"))
        manager.open(WindowDescriptor(WindowKind.UPLOAD, "Upload Files"))
        pressed = [e for e in manager.taskbar_entries() if e.pressed]
        assert [e.window_id for e in pressed] == ["upload"]


class TestMaximize:
    def test_toggle_restores_manual_geometry(self, manager):
        manager.open(WindowDescriptor(WindowKind.SETTINGS, "Settings"))
        drag = manager.begin_drag("settings", 110, 105)
        manager.pointer.move(310, 205)
        manager.pointer.up(310, 205)
        moved = manager.get("settings").position
        assert drag is not None

        manager.maximize("settings")
        window = manager.get("settings")
        assert window.position == Point(0, TASKBAR_HEIGHT)
        assert window.size == Size(1024, 768 - TASKBAR_HEIGHT)

        manager.maximize("settings")
        assert window.maximized is False
        assert window.position == moved
        assert window.size == DEFAULT_SIZE


class TestTaskbar:
    def test_click_minimized_restores_and_focuses(self, manager):
        manager.open(WindowDescriptor(WindowKind.SETTINGS, "Settings"))
        manager.minimize("settings")
        manager.taskbar_click("settings")
        assert manager.get("settings").minimized is False
        assert manager.active_id == "settings"

    def test_click_active_minimizes(self, manager):
        manager.open(WindowDescriptor(WindowKind.SETTINGS, "Settings"))
        manager.taskbar_click("settings")
        assert manager.get("settings").minimized is True
        assert manager.active_id is None

    def test_click_inactive_focuses(self, manager):
        manager.open(WindowDescriptor(WindowKind.SETTINGS, "Settings"))
        manager.open(WindowDescriptor(WindowKind.UPLOAD, "Upload Files"))
        manager.taskbar_click("settings")
        assert manager.active_id == "settings"
        assert manager.get("settings").z_index > manager.get("upload").z_index

    def test_click_unknown_is_ignored(self, manager):
        manager.taskbar_click("nope")
        assert manager.active_id is None

    def test_home_minimizes_active(self, manager):
        manager.open(WindowDescriptor(WindowKind.SETTINGS, "Settings"))
        manager.home_click()
        assert manager.get("settings").minimized is True
        manager.home_click()
        assert manager.active_id is None


class TestDrag:
    def test_drag_tracks_offset_from_press(self, manager):
        manager.open(WindowDescriptor(WindowKind.SETTINGS, "Settings"))
        manager.open(WindowDescriptor(WindowKind.UPLOAD, "Upload Files"))

        drag = manager.begin_drag("settings", 150, 110)
        assert manager.active_id == "settings"
        assert drag.offset == Point(50, 10)

        manager.pointer.move(400, 300)
        assert manager.get("settings").position == Point(350, 290)
        manager.pointer.move(420, 310)
        assert manager.get("settings").position == Point(370, 300)

        manager.pointer.up(420, 310)
        assert drag.active is False
        assert manager.pointer.listener_count == 0

        manager.pointer.move(0, 0)
        assert manager.get("settings").position == Point(370, 300)

    def test_vertical_position_clamped_below_taskbar(self, manager):
        manager.open(WindowDescriptor(WindowKind.SETTINGS, "Settings"))
        manager.begin_drag("settings", 110, 110)
        manager.pointer.move(110, 0)
        assert manager.get("settings").position.y == TASKBAR_HEIGHT

    def test_maximized_window_not_draggable(self, manager):
        manager.open(file_descriptor(maximized=True))
        assert manager.begin_drag("file-abc", 10, 50) is None
        assert manager.pointer.listener_count == 0


class TestResize:
    def test_resize_grows_with_pointer(self, manager):
        manager.open(WindowDescriptor(WindowKind.SETTINGS, "Settings"))
        resize = manager.begin_resize("settings", 700, 500)
        manager.pointer.move(750, 560)
        assert manager.get("settings").size == Size(650, 460)
        manager.pointer.up(750, 560)
        assert resize.active is False
        assert manager.pointer.listener_count == 0

    def test_resize_floor(self, manager):
        manager.open(WindowDescriptor(WindowKind.SETTINGS, "Settings"))
        manager.begin_resize("settings", 700, 500)
        manager.pointer.move(0, 0)
        assert manager.get("settings").size == Size(MIN_WIDTH, MIN_HEIGHT)

    def test_no_resize_when_maximized(self, manager):
        manager.open(file_descriptor(maximized=True))
        assert manager.begin_resize("file-abc", 10, 10) is None
