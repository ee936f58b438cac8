"""Extension tables shared by the upload path and the desktop viewers.

The extension is authoritative: nothing here sniffs content or trusts the
browser-reported MIME type for viewer selection.
"""

from __future__ import annotations

from enum import Enum


class ViewerKind(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    UNSUPPORTED = "unsupported"


TEXT_EXTENSIONS = frozenset({"txt", "md", "json", "js", "ts", "html", "css"})
IMAGE_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "gif", "webp", "svg", "bmp"})
VIDEO_EXTENSIONS = frozenset({"mp4", "webm", "mov", "avi", "mkv"})
AUDIO_EXTENSIONS = frozenset({"mp3", "wav", "ogg", "flac", "m4a"})

_VIEWER_TABLE: dict[frozenset[str], ViewerKind] = {
    TEXT_EXTENSIONS: ViewerKind.TEXT,
    IMAGE_EXTENSIONS: ViewerKind.IMAGE,
    VIDEO_EXTENSIONS: ViewerKind.VIDEO,
    AUDIO_EXTENSIONS: ViewerKind.AUDIO,
}

MIME_MAP = {
    "txt": "text/plain",
    "md": "text/markdown",
    "json": "application/json",
    "js": "text/javascript",
    "ts": "text/typescript",
    "html": "text/html",
    "css": "text/css",
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "webp": "image/webp",
    "svg": "image/svg+xml",
    "bmp": "image/bmp",
    "mp4": "video/mp4",
    "webm": "video/webm",
    "mov": "video/quicktime",
    "avi": "video/x-msvideo",
    "mkv": "video/x-matroska",
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "ogg": "audio/ogg",
    "flac": "audio/flac",
    "m4a": "audio/mp4",
    "pdf": "application/pdf",
    "zip": "application/zip",
}

DEFAULT_EXTENSION = "bin"
DEFAULT_MIME_TYPE = "application/octet-stream"


def viewer_for(extension: str) -> ViewerKind:
    """Map an extension (case-insensitive, no dot) to its viewer family."""
    ext = extension.lower()
    for extensions, kind in _VIEWER_TABLE.items():
        if ext in extensions:
            return kind
    return ViewerKind.UNSUPPORTED


def is_text_extension(extension: str) -> bool:
    return extension.lower() in TEXT_EXTENSIONS


def split_filename(filename: str) -> tuple[str, str]:
    """Split ``notes.txt`` into ``("notes", "txt")``.

    Files without an extension get ``bin``. Leading-dot names such as
    ``.bashrc`` are treated as having no extension.
    """
    base = filename.replace("\\", "/").rsplit("/", 1)[-1]
    stem, dot, ext = base.rpartition(".")
    if not dot or not stem or not ext:
        return base, DEFAULT_EXTENSION
    return stem, ext


def guess_mime_type(extension: str, reported: str | None = None) -> str:
    """Prefer the client-reported MIME type, fall back to the extension table."""
    if reported and reported != DEFAULT_MIME_TYPE:
        return reported
    return MIME_MAP.get(extension.lower(), DEFAULT_MIME_TYPE)
