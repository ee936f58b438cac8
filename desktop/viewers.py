"""File viewers, chosen once per window from the extension table."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Awaitable, Callable

from shared.file_types import ViewerKind, viewer_for

UNSUPPORTED_MESSAGE = "Cannot preview this file type"

SaveCallback = Callable[[str], Awaitable[None]]


def content_url(file_id: str) -> str:
    return f"/api/files/{file_id}/content"


@dataclass
class TextViewer:
    """Read view of the raw content plus an editable buffer.

    Toggling back to the read view without saving keeps the buffer, so an
    unsaved edit is still there on the next toggle.
    """

    file: dict
    on_save: SaveCallback | None = None
    kind: ViewerKind = field(init=False, default=ViewerKind.TEXT)
    buffer: str = field(init=False)
    editing: bool = field(init=False, default=False)

    def __post_init__(self) -> None:
        self.buffer = self.file.get("content") or ""

    @property
    def text(self) -> str:
        return self.buffer

    def toggle_edit(self) -> None:
        self.editing = not self.editing

    def edit(self, text: str) -> None:
        if not self.editing:
            raise RuntimeError("Viewer is not in edit mode")
        self.buffer = text

    async def save(self) -> None:
        if self.on_save is not None:
            await self.on_save(self.buffer)
        self.editing = False


@dataclass
class MediaViewer:
    """Image, video or audio element streaming from the content endpoint."""

    file: dict
    kind: ViewerKind

    @property
    def source(self) -> str:
        return content_url(self.file["id"])


@dataclass
class UnsupportedViewer:
    file: dict
    kind: ViewerKind = field(init=False, default=ViewerKind.UNSUPPORTED)
    message: str = field(init=False, default=UNSUPPORTED_MESSAGE)


Viewer = TextViewer | MediaViewer | UnsupportedViewer


def open_viewer(file: dict, on_save: SaveCallback | None = None) -> Viewer:
    kind = viewer_for(file["extension"])
    if kind is ViewerKind.TEXT:
        return TextViewer(file, on_save)
    if kind is ViewerKind.UNSUPPORTED:
        return UnsupportedViewer(file)
    return MediaViewer(file, kind)
