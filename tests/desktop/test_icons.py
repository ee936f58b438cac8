"""Tests for desktop icon layout and grid-snapped icon drag."""

from __future__ import annotations

import pytest

from desktop.geometry import Point, Viewport
from desktop.icons import (
    RECYCLE_BIN_ICON,
    USER_ICON,
    IconDrag,
    fallback_position,
    glyph_for,
    layout_icons,
    snap_to_grid,
)
from desktop.pointer import PointerHub


def make_file(i: int, x: int | None = None, y: int | None = None, ext: str = "txt") -> dict:
    return {"id": f"f{i}", "name": f"file{i}", "extension": ext, "position_x": x, "position_y": y}


class TestFallbackGrid:
    def test_first_row(self):
        assert fallback_position(0) == Point(16, 16)
        assert fallback_position(1) == Point(96, 16)
        assert fallback_position(7) == Point(576, 16)

    def test_wraps_after_eight(self):
        assert fallback_position(8) == Point(16, 106)
        assert fallback_position(17) == Point(96, 196)

    def test_positions_are_distinct(self):
        positions = [fallback_position(i) for i in range(40)]
        assert len(set(positions)) == 40


class TestSnap:
    @pytest.mark.parametrize(
        "raw, snapped",
        [
            (Point(39, 39), Point(0, 0)),
            (Point(40, 40), Point(80, 80)),
            (Point(119, 121), Point(80, 160)),
            (Point(-30, -100), Point(0, 0)),
        ],
    )
    def test_half_up_and_clamped(self, raw, snapped):
        assert snap_to_grid(raw) == snapped


class TestLayout:
    def test_stored_position_wins(self):
        icons = layout_icons([make_file(0, 240, 160), make_file(1)], Viewport(1024, 768))
        assert icons[0].position == Point(240, 160)
        assert icons[1].position == fallback_position(1)

    def test_labels_and_glyphs(self):
        icons = layout_icons([make_file(0, ext="PNG"), make_file(1, ext="xyz")])
        assert icons[0].label == "file0.PNG"
        assert icons[0].glyph == "image"
        assert icons[1].glyph == "text"

    def test_system_icons(self):
        icons = layout_icons([], Viewport(1024, 768))
        by_id = {icon.id: icon for icon in icons}
        assert by_id[RECYCLE_BIN_ICON].position == Point(16, 768 - 180)
        assert by_id[USER_ICON].position == Point(96, 768 - 180)
        assert not by_id[RECYCLE_BIN_ICON].draggable
        assert not by_id[USER_ICON].draggable

    def test_glyph_families(self):
        assert glyph_for("mkv") == "video"
        assert glyph_for("flac") == "audio"
        assert glyph_for("css") == "text"


class TestIconDrag:
    async def test_drag_persists_only_final_snapped_cell(self):
        pointer = PointerHub()
        [icon, *_] = layout_icons([make_file(0, 160, 80)])
        commits = []

        async def commit(file_id, position):
            commits.append((file_id, position))

        drag = IconDrag(icon, Point(170, 95), pointer)
        assert drag.offset == Point(10, 15)

        pointer.move(300, 300)
        assert icon.position == Point(290, 285)
        pointer.move(335, 250)
        pointer.up(335, 250)

        assert icon.position == Point(320, 240)
        assert pointer.listener_count == 0
        assert await drag.commit(commit) is True
        assert commits == [("f0", Point(320, 240))]

    async def test_commit_before_release_does_nothing(self):
        pointer = PointerHub()
        [icon, *_] = layout_icons([make_file(0, 0, 0)])
        drag = IconDrag(icon, Point(5, 5), pointer)

        async def commit(file_id, position):
            raise AssertionError("should not persist mid-drag")

        assert await drag.commit(commit) is False

    def test_system_icons_refuse_drag(self):
        icons = layout_icons([])
        with pytest.raises(ValueError):
            IconDrag(icons[0], Point(20, 20), PointerHub())
