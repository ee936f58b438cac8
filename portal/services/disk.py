"""On-disk storage for uploaded file content."""

from __future__ import annotations

import secrets
import shutil
import time
from pathlib import Path

import structlog
from fastapi import UploadFile

from portal.errors import ContentIOError, ForbiddenError, UploadRejectedError
from shared.config import get_settings

logger = structlog.get_logger()

CHUNK_SIZE = 64 * 1024


def ensure_upload_dir() -> Path:
    """Return the upload directory, creating it if absent."""
    path = get_settings().upload_path
    if not path.exists():
        path.mkdir(parents=True, exist_ok=True)
        logger.info("upload_dir_created", path=str(path))
    return path


def safe_filename(filename: str) -> str:
    base = filename.replace("\\", "/").rsplit("/", 1)[-1]
    safe_name = "".join(c if c.isalnum() or c in "-_. " else "" for c in base)
    safe_name = safe_name.strip().replace(" ", "_").lstrip(".")
    return safe_name or "file"


def unique_disk_path(filename: str) -> Path:
    """``<millis>-<random>-<safe name>`` inside the upload directory."""
    suffix = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}"
    return ensure_upload_dir() / f"{suffix}-{safe_filename(filename)}"


def resolve_inside_upload_dir(file_path: str) -> Path:
    """Resolve ``file_path`` and refuse anything outside the upload directory."""
    upload_root = ensure_upload_dir()
    resolved = Path(file_path).resolve()
    if not resolved.is_relative_to(upload_root):
        logger.warning("path_traversal_blocked", file_path=file_path)
        raise ForbiddenError("Invalid file path")
    return resolved


async def save_upload(upload: UploadFile, max_bytes: int) -> tuple[Path, int]:
    """Stream one multipart part to disk. Returns (path, size).

    Raises UploadRejectedError (413) once the part exceeds ``max_bytes``;
    the partial file is removed first.
    """
    target = unique_disk_path(upload.filename or "upload")
    size = 0
    try:
        with target.open("wb") as out:
            while chunk := await upload.read(CHUNK_SIZE):
                size += len(chunk)
                if size > max_bytes:
                    raise UploadRejectedError(
                        f"File too large (max {max_bytes // (1024 * 1024)} MB)",
                        status_code=413,
                    )
                out.write(chunk)
    except UploadRejectedError:
        target.unlink(missing_ok=True)
        raise
    except OSError as e:
        target.unlink(missing_ok=True)
        raise ContentIOError() from e
    return target, size


def copy_into_upload_dir(file_path: str, filename: str) -> Path | None:
    """Copy existing content to a fresh path. None if the source is gone."""
    source = resolve_inside_upload_dir(file_path)
    if not source.exists():
        return None
    target = unique_disk_path(filename)
    try:
        shutil.copyfile(source, target)
    except OSError as e:
        raise ContentIOError() from e
    return target


def remove_file(file_path: str | None) -> bool:
    """Unlink backing content if it exists. Returns True when a file was removed."""
    if not file_path:
        return False
    try:
        path = resolve_inside_upload_dir(file_path)
    except ForbiddenError:
        return False
    if not path.exists():
        return False
    try:
        path.unlink()
    except OSError as e:
        raise ContentIOError() from e
    return True


def overwrite_text(file_path: str, content: str) -> None:
    """Keep the on-disk copy of an edited text file in step with the row."""
    path = resolve_inside_upload_dir(file_path)
    if not path.exists():
        return
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise ContentIOError() from e
