"""Tests for context menus, dialogs, themes, and the query cache."""

from __future__ import annotations

import pytest

from desktop.cache import DELETED_FILES_KEY, FILES_KEY, QueryCache
from desktop.dialogs import (
    ProfileView,
    RenameDialog,
    SettingsPanel,
    ShareDialog,
    SharePage,
    UploadDialog,
)
from desktop.geometry import Point, Viewport
from desktop.menus import (
    MENU_ITEM_HEIGHT,
    MENU_WIDTH,
    ContextMenu,
    desktop_menu,
    file_menu,
    recycle_bin_menu,
    user_menu,
)
from desktop.themes import THEMES, get_theme, is_dark


def noop():
    return None


class TestMenuBuilders:
    def test_file_menu(self):
        items = file_menu(noop, noop, noop, noop)
        assert [i.label if not i.divider else "-" for i in items] == [
            "Open", "-", "Rename", "Share", "-", "Delete",
        ]

    def test_desktop_menu(self):
        menu = ContextMenu(desktop_menu(noop, noop), Point(0, 0))
        assert menu.labels == ["Upload File", "Settings"]

    def test_user_menu(self):
        menu = ContextMenu(user_menu(noop, noop, noop), Point(0, 0))
        assert menu.labels == ["Open Profile", "Settings", "Log Out"]

    def test_empty_recycle_bin_disabled_when_trash_empty(self):
        assert recycle_bin_menu(noop, noop, trash_is_empty=True)[-1].disabled is True
        assert recycle_bin_menu(noop, noop, trash_is_empty=False)[-1].disabled is False


class TestContextMenu:
    async def test_activate_runs_action_then_closes(self):
        calls = []
        closed = []
        menu = ContextMenu(
            desktop_menu(lambda: calls.append("upload"), noop),
            Point(10, 10),
            on_close=lambda: closed.append(True),
        )
        assert await menu.activate("Upload File") is True
        assert calls == ["upload"]
        assert menu.closed is True
        assert closed == [True]

    async def test_async_actions_are_awaited(self):
        calls = []

        async def empty():
            calls.append("empty")

        menu = ContextMenu(recycle_bin_menu(noop, empty, trash_is_empty=False), Point(0, 0))
        await menu.activate("Empty Recycle Bin")
        assert calls == ["empty"]

    async def test_disabled_item_does_nothing(self):
        calls = []
        menu = ContextMenu(
            recycle_bin_menu(noop, lambda: calls.append("x"), trash_is_empty=True), Point(0, 0)
        )
        assert await menu.activate("Empty Recycle Bin") is False
        assert calls == []
        assert menu.closed is False

    def test_placement_clamped_to_viewport(self):
        items = file_menu(noop, noop, noop, noop)
        menu = ContextMenu(items, Point(1000, 750), Viewport(1024, 768))
        assert menu.position == Point(1024 - MENU_WIDTH, 768 - len(items) * MENU_ITEM_HEIGHT - 8)

    def test_placement_untouched_when_it_fits(self):
        menu = ContextMenu(desktop_menu(noop, noop), Point(200, 150), Viewport(1024, 768))
        assert menu.position == Point(200, 150)


class TestDialogs:
    def test_share_dialog_pending_without_token(self):
        dialog = ShareDialog({"id": "1", "name": "a", "extension": "txt", "share_token": None})
        assert dialog.pending is True
        assert dialog.share_url == ""
        assert dialog.message == "Generating share link..."

    def test_share_dialog_url(self):
        file = {"id": "1", "name": "a", "extension": "txt", "share_token": "abc123"}
        dialog = ShareDialog(file, "https://desk.example/")
        assert dialog.pending is False
        assert dialog.share_url == "https://desk.example/share/abc123"

    async def test_rename_ignores_blank(self):
        renamed = []

        async def on_rename(name):
            renamed.append(name)

        dialog = RenameDialog({"name": "old"}, on_rename)
        assert dialog.value == "old"
        dialog.value = "   "
        assert await dialog.submit() is False
        dialog.value = "  new  "
        assert await dialog.submit() is True
        assert renamed == ["new"]

    async def test_upload_pending_while_in_flight(self):
        seen = []

        async def on_upload(files):
            seen.append(dialog.pending)
            return True

        dialog = UploadDialog(on_upload)
        assert await dialog.submit() is False
        dialog.select(("a.txt", b"a"))
        assert await dialog.submit() is True
        assert seen == [True]
        assert dialog.pending is False

    async def test_settings_panel_saves_theme_colours(self):
        saved = []

        async def on_save(changes):
            saved.append(changes)

        panel = SettingsPanel(None, on_save)
        assert panel.selected_theme == "classic"
        panel.select_theme("ocean")
        panel.set_background("data:,x")
        await panel.apply()
        assert saved == [
            {
                "theme": "ocean",
                "desktop_background": "data:,x",
                "custom_colors": THEMES["ocean"].colors,
            }
        ]

    def test_settings_panel_rejects_unknown_theme(self):
        panel = SettingsPanel({"theme": "dark"}, None)
        with pytest.raises(ValueError):
            panel.select_theme("neon")

    def test_profile_view_names(self):
        user = {"first_name": "Ada", "last_name": "Lovelace", "email": "ada@example.com"}
        full = ProfileView(user, None)
        assert full.display_name == "Ada Lovelace"
        assert full.initials == "AL"

        email_only = ProfileView({**user, "last_name": None}, None)
        assert email_only.display_name == "ada@example.com"
        assert email_only.initials == "A"
        assert email_only.fields()["Last Name"] == "Not set"

        assert ProfileView({}, None).initials == "U"

    async def test_share_page_signed_out_cannot_add(self):
        added = []

        async def on_add(token):
            added.append(token)

        page = SharePage("tok", {"name": "a"}, False, on_add)
        assert page.prompt == "Sign in to add this file to your desktop."
        assert page.action_label == "Sign In to Add File"
        assert page.content_url == "/api/share/tok/content"
        assert await page.add() is None
        assert added == []

    async def test_share_page_missing_file(self):
        page = SharePage("gone", None, True, None)
        assert page.prompt == "This share link is invalid or has been removed."
        assert await page.add() is None


class TestThemes:
    def test_four_themes(self):
        assert list(THEMES) == ["classic", "dark", "high-contrast", "ocean"]

    def test_unknown_falls_back_to_classic(self):
        assert get_theme("neon").id == "classic"
        assert get_theme(None).id == "classic"

    def test_only_dark_theme_sets_dark_mode(self):
        assert is_dark("dark") is True
        assert is_dark("classic") is False
        assert is_dark("ocean") is False


class TestQueryCache:
    async def test_fetches_once_until_invalidated(self):
        cache = QueryCache()
        calls = []

        async def fetch():
            calls.append(1)
            return len(calls)

        assert await cache.get(FILES_KEY, fetch) == 1
        assert await cache.get(FILES_KEY, fetch) == 1
        cache.invalidate(FILES_KEY)
        assert await cache.get(FILES_KEY, fetch) == 2

    async def test_invalidation_is_exact(self):
        cache = QueryCache()

        async def fetch():
            return []

        await cache.get(FILES_KEY, fetch)
        await cache.get(DELETED_FILES_KEY, fetch)
        cache.invalidate(FILES_KEY)
        assert not cache.is_cached(FILES_KEY)
        assert cache.is_cached(DELETED_FILES_KEY)
