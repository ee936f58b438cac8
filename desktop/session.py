"""Desktop session: ties the window manager, icons, menus and dialogs to the API.

Every mutation goes through here so the cached reads it affects are
invalidated in one place.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial

import httpx
import structlog

from desktop.api import DesktopApiClient
from desktop.cache import DELETED_FILES_KEY, FILES_KEY, SETTINGS_KEY, USER_KEY, QueryCache
from desktop.dialogs import (
    ProfileView,
    RecycleBinView,
    RenameDialog,
    SettingsPanel,
    ShareDialog,
    SharePage,
    UploadDialog,
)
from desktop.geometry import Point, Viewport
from desktop.icons import DesktopIcon, IconDrag, layout_icons
from desktop.menus import ContextMenu, desktop_menu, file_menu, recycle_bin_menu, user_menu
from desktop.pointer import PointerHub
from desktop.themes import is_dark
from desktop.viewers import open_viewer
from desktop.windows import Window, WindowDescriptor, WindowKind, WindowManager, window_id

logger = structlog.get_logger()


@dataclass
class Toast:
    title: str
    destructive: bool = False


class DesktopSession:
    def __init__(
        self,
        api: DesktopApiClient,
        viewport: Viewport | None = None,
        base_url: str | None = None,
    ):
        self.api = api
        self.cache = QueryCache()
        self.windows = WindowManager(viewport)
        self.base_url = base_url if base_url is not None else api.base_url
        self.toasts: list[Toast] = []
        self.context_menu: ContextMenu | None = None
        self.logged_out = False

    @property
    def viewport(self) -> Viewport:
        return self.windows.viewport

    @property
    def pointer(self) -> PointerHub:
        return self.windows.pointer

    def _toast(self, title: str, destructive: bool = False) -> None:
        self.toasts.append(Toast(title, destructive))

    # ------------------------------------------------------------------
    # Cached reads
    # ------------------------------------------------------------------

    async def files(self) -> list[dict]:
        return await self.cache.get(FILES_KEY, self.api.list_files)

    async def deleted_files(self) -> list[dict]:
        return await self.cache.get(DELETED_FILES_KEY, self.api.list_deleted_files)

    async def settings(self) -> dict:
        return await self.cache.get(SETTINGS_KEY, self.api.get_settings)

    async def user(self) -> dict:
        return await self.cache.get(USER_KEY, self.api.current_user)

    async def icons(self) -> list[DesktopIcon]:
        return layout_icons(await self.files(), self.viewport)

    async def dark_mode(self) -> bool:
        return is_dark((await self.settings()).get("theme"))

    # ------------------------------------------------------------------
    # Windows
    # ------------------------------------------------------------------

    def open_file(self, file: dict) -> Window:
        """Open a file maximized; the viewer is picked once, here."""
        descriptor = WindowDescriptor(
            kind=WindowKind.FILE,
            title=f"{file['name']}.{file['extension']}",
            file=file,
            maximized=True,
            content=open_viewer(file, on_save=partial(self.save_content, file["id"])),
        )
        return self.windows.open(descriptor)

    def open_recycle_bin(self) -> Window:
        view = RecycleBinView(
            load=self.deleted_files,
            on_restore=self.restore_file,
            on_permanent_delete=self.permanent_delete,
            on_empty=self.empty_trash,
        )
        return self.windows.open(
            WindowDescriptor(WindowKind.RECYCLE_BIN, "Recycle Bin", content=view)
        )

    async def open_profile(self) -> Window:
        view = ProfileView(await self.user(), self.logout)
        return self.windows.open(WindowDescriptor(WindowKind.USER, "User Profile", content=view))

    def open_upload(self) -> Window:
        return self.windows.open(
            WindowDescriptor(WindowKind.UPLOAD, "Upload Files", content=UploadDialog(self.upload))
        )

    async def open_settings(self) -> Window:
        panel = SettingsPanel(await self.settings(), self.save_settings)
        return self.windows.open(WindowDescriptor(WindowKind.SETTINGS, "Settings", content=panel))

    def open_rename(self, file: dict) -> Window:
        dialog = RenameDialog(file, partial(self.rename, file["id"]))
        return self.windows.open(
            WindowDescriptor(WindowKind.RENAME, "Rename", file=file, content=dialog)
        )

    def close_window(self, id: str) -> None:
        self.windows.close(id)

    def taskbar_click(self, id: str) -> None:
        self.windows.taskbar_click(id)

    def home_click(self) -> None:
        self.windows.home_click()

    # ------------------------------------------------------------------
    # File mutations
    # ------------------------------------------------------------------

    async def update_file(self, file_id: str, **changes) -> dict:
        record = await self.api.update_file(file_id, **changes)
        self.cache.invalidate(FILES_KEY)
        return record

    async def rename(self, file_id: str, name: str) -> dict:
        record = await self.update_file(file_id, name=name)
        self.windows.close(window_id(WindowKind.RENAME, file_id))
        return record

    async def save_content(self, file_id: str, content: str) -> dict:
        return await self.update_file(file_id, content=content)

    async def move_icon(self, file_id: str, position: Point) -> dict:
        return await self.update_file(file_id, position_x=position.x, position_y=position.y)

    def begin_icon_drag(self, icon: DesktopIcon, x: int, y: int) -> IconDrag:
        return IconDrag(icon, Point(x, y), self.pointer)

    async def drop_icon(self, drag: IconDrag, x: int, y: int) -> bool:
        """Release the pointer and persist the snapped cell."""
        self.pointer.up(x, y)
        return await drag.commit(self.move_icon)

    async def delete_file(self, file_id: str) -> None:
        await self.api.delete_file(file_id)
        self.cache.invalidate(FILES_KEY, DELETED_FILES_KEY)
        self._toast("File moved to Recycle Bin")

    async def restore_file(self, file_id: str) -> None:
        await self.api.restore_file(file_id)
        self.cache.invalidate(FILES_KEY, DELETED_FILES_KEY)
        self._toast("File restored")

    async def permanent_delete(self, file_id: str) -> None:
        await self.api.permanent_delete(file_id)
        self.cache.invalidate(FILES_KEY, DELETED_FILES_KEY)
        self._toast("File permanently deleted")

    async def empty_trash(self) -> int:
        removed = await self.api.empty_trash()
        self.cache.invalidate(FILES_KEY, DELETED_FILES_KEY)
        self._toast("Recycle Bin emptied")
        return removed

    async def share(self, file: dict) -> Window:
        """Provision a token if the file has none, then show the link."""
        if not file.get("share_token"):
            file = await self.api.share_file(file["id"])
            self.cache.invalidate(FILES_KEY)
        dialog = ShareDialog(file, self.base_url)
        return self.windows.open(
            WindowDescriptor(WindowKind.SHARE, "Share File", file=file, content=dialog)
        )

    async def upload(self, files: list[tuple[str, bytes]]) -> bool:
        """Upload and close the upload window; on failure it stays open."""
        try:
            await self.api.upload(files)
        except httpx.HTTPStatusError as e:
            logger.warning("upload_failed", status=e.response.status_code, count=len(files))
            self._toast("Upload failed", destructive=True)
            return False
        self.cache.invalidate(FILES_KEY)
        self._toast("Files uploaded successfully")
        if self.windows.get(WindowKind.UPLOAD.value) is not None:
            self.windows.close(WindowKind.UPLOAD.value)
        return True

    async def add_shared(self, token: str) -> dict | None:
        try:
            record = await self.api.add_shared(token)
        except httpx.HTTPStatusError as e:
            logger.warning("add_shared_failed", status=e.response.status_code)
            self._toast("Failed to add file", destructive=True)
            return None
        self.cache.invalidate(FILES_KEY)
        self._toast("File added to your desktop!")
        return record

    async def open_share_page(self, token: str) -> SharePage:
        """Load the landing page a share link points at."""
        try:
            file = await self.api.get_shared(token)
        except httpx.HTTPStatusError as e:
            if e.response.status_code != 404:
                raise
            file = None

        authenticated = False
        if not self.logged_out:
            try:
                await self.user()
                authenticated = True
            except httpx.HTTPStatusError as e:
                if e.response.status_code != 401:
                    raise
        return SharePage(token, file, authenticated, self.add_shared)

    async def save_settings(self, changes: dict) -> dict:
        record = await self.api.update_settings(**changes)
        self.cache.invalidate(SETTINGS_KEY)
        self._toast("Settings saved")
        return record

    async def logout(self) -> None:
        await self.api.logout()
        self.cache.clear()
        self.logged_out = True

    # ------------------------------------------------------------------
    # Context menus
    # ------------------------------------------------------------------

    def _show_menu(self, items, x: int, y: int) -> ContextMenu:
        if self.context_menu is not None:
            self.context_menu.close()
        self.context_menu = ContextMenu(items, Point(x, y), self.viewport, self._menu_closed)
        return self.context_menu

    def _menu_closed(self) -> None:
        self.context_menu = None

    def dismiss_menu(self) -> None:
        if self.context_menu is not None:
            self.context_menu.close()

    def file_context_menu(self, file: dict, x: int, y: int) -> ContextMenu:
        items = file_menu(
            open=partial(self.open_file, file),
            rename=partial(self.open_rename, file),
            share=partial(self.share, file),
            delete=partial(self.delete_file, file["id"]),
        )
        return self._show_menu(items, x, y)

    def desktop_context_menu(self, x: int, y: int) -> ContextMenu:
        return self._show_menu(desktop_menu(self.open_upload, self.open_settings), x, y)

    async def recycle_bin_context_menu(self, x: int, y: int) -> ContextMenu:
        deleted = await self.deleted_files()
        items = recycle_bin_menu(self.open_recycle_bin, self.empty_trash, not deleted)
        return self._show_menu(items, x, y)

    def user_context_menu(self, x: int, y: int) -> ContextMenu:
        return self._show_menu(user_menu(self.open_profile, self.open_settings, self.logout), x, y)
