"""Utility dialogs hosted in desktop windows."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Awaitable, Callable

from desktop.themes import THEMES, get_theme
from shared.models.user_settings import DEFAULT_THEME


@dataclass
class ShareDialog:
    """Shows the public link once the file carries a share token."""

    file: dict
    base_url: str = ""

    @property
    def pending(self) -> bool:
        return not self.file.get("share_token")

    @property
    def share_url(self) -> str:
        token = self.file.get("share_token")
        if not token:
            return ""
        return f"{self.base_url.rstrip('/')}/share/{token}"

    @property
    def message(self) -> str:
        if self.pending:
            return "Generating share link..."
        return f'Share "{self.file["name"]}.{self.file["extension"]}" with others by copying the link below:'


@dataclass
class RenameDialog:
    file: dict
    on_rename: Callable[[str], Awaitable[None]]
    value: str = field(init=False)

    def __post_init__(self) -> None:
        self.value = self.file["name"]

    async def submit(self) -> bool:
        """Blank names are ignored and leave the dialog open."""
        name = self.value.strip()
        if not name:
            return False
        await self.on_rename(name)
        return True


@dataclass
class UploadDialog:
    on_upload: Callable[[list[tuple[str, bytes]]], Awaitable[bool]]
    selected: list[tuple[str, bytes]] = field(default_factory=list)
    pending: bool = field(init=False, default=False)

    def select(self, *files: tuple[str, bytes]) -> None:
        self.selected = list(files)

    def clear(self) -> None:
        self.selected = []

    async def submit(self) -> bool:
        if not self.selected or self.pending:
            return False
        self.pending = True
        try:
            return await self.on_upload(self.selected)
        finally:
            self.pending = False


@dataclass
class SettingsPanel:
    """Theme picker and background chooser; Apply saves, OK saves and closes."""

    settings: dict | None
    on_save: Callable[[dict], Awaitable[None]]
    selected_theme: str = field(init=False)
    background: str | None = field(init=False)

    def __post_init__(self) -> None:
        current = self.settings or {}
        self.selected_theme = current.get("theme") or DEFAULT_THEME
        self.background = current.get("desktop_background")

    @property
    def theme_ids(self) -> list[str]:
        return list(THEMES)

    def select_theme(self, theme_id: str) -> None:
        if theme_id not in THEMES:
            raise ValueError(f"Unknown theme {theme_id!r}")
        self.selected_theme = theme_id

    def set_background(self, data_url: str | None) -> None:
        self.background = data_url

    def changes(self) -> dict:
        return {
            "theme": self.selected_theme,
            "desktop_background": self.background,
            "custom_colors": get_theme(self.selected_theme).colors,
        }

    async def apply(self) -> None:
        await self.on_save(self.changes())


@dataclass
class RecycleBinView:
    """Deleted files with per-item Restore and Delete Permanently."""

    load: Callable[[], Awaitable[list[dict]]]
    on_restore: Callable[[str], Awaitable[None]]
    on_permanent_delete: Callable[[str], Awaitable[None]]
    on_empty: Callable[[], Awaitable[int]]

    async def rows(self) -> list[tuple[str, str, str | None]]:
        """``(id, display name, deleted_at)`` for each trashed file."""
        return [
            (f["id"], f"{f['name']}.{f['extension']}", f.get("deleted_at"))
            for f in await self.load()
        ]

    async def status(self) -> str:
        count = len(await self.load())
        if count == 0:
            return "Recycle Bin is empty"
        return f"{count} item{'' if count == 1 else 's'}"

    async def can_empty(self) -> bool:
        return bool(await self.load())

    async def restore(self, file_id: str) -> None:
        await self.on_restore(file_id)

    async def delete_permanently(self, file_id: str) -> None:
        await self.on_permanent_delete(file_id)

    async def empty(self) -> int:
        if not await self.can_empty():
            return 0
        return await self.on_empty()


@dataclass
class ProfileView:
    user: dict
    on_logout: Callable[[], Awaitable[None]]

    @property
    def display_name(self) -> str:
        first, last = self.user.get("first_name"), self.user.get("last_name")
        if first and last:
            return f"{first} {last}"
        return self.user.get("email") or "User"

    @property
    def initials(self) -> str:
        first, last = self.user.get("first_name"), self.user.get("last_name")
        if first and last:
            return f"{first[0]}{last[0]}".upper()
        if self.user.get("email"):
            return self.user["email"][0].upper()
        return "U"

    def fields(self) -> dict[str, str]:
        return {
            "First Name": self.user.get("first_name") or "Not set",
            "Last Name": self.user.get("last_name") or "Not set",
            "Email": self.user.get("email") or "Not set",
        }

    async def logout(self) -> None:
        await self.on_logout()


@dataclass
class SharePage:
    """Public landing page for a share link.

    ``file`` is None when the token does not resolve. Signed-out visitors
    are pointed at the login route instead of the add button.
    """

    token: str
    file: dict | None
    authenticated: bool
    on_add: Callable[[str], Awaitable[dict | None]]
    pending: bool = field(init=False, default=False)

    @property
    def content_url(self) -> str:
        return f"/api/share/{self.token}/content"

    @property
    def prompt(self) -> str:
        if self.file is None:
            return "This share link is invalid or has been removed."
        if self.authenticated:
            return "Click the button below to add this file to your desktop."
        return "Sign in to add this file to your desktop."

    @property
    def action_label(self) -> str:
        if not self.authenticated:
            return "Sign In to Add File"
        return "Adding..." if self.pending else "Add to My Desktop"

    async def add(self) -> dict | None:
        if self.file is None or not self.authenticated or self.pending:
            return None
        self.pending = True
        try:
            return await self.on_add(self.token)
        finally:
            self.pending = False
