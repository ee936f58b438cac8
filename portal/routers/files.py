"""Desktop file endpoints: upload, listing, content, edits, recycle bin, sharing."""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import FileResponse, Response
from pydantic import BaseModel, Field

from portal.auth import PortalUser, require_auth
from portal.services.file_store import FileStore
from shared.config import get_settings
from shared.database import get_session_factory
from shared.models.file import DesktopFile

router = APIRouter(prefix="/api/files", tags=["files"])


class FileUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    content: str | None = None
    position_x: int | None = None
    position_y: int | None = None


def _get_store() -> FileStore:
    return FileStore(get_settings(), get_session_factory())


def format_file(record: DesktopFile) -> dict:
    return {
        "id": str(record.id),
        "user_id": str(record.user_id),
        "name": record.name,
        "extension": record.extension,
        "mime_type": record.mime_type,
        "size": record.size,
        "content": record.content,
        "position_x": record.position_x,
        "position_y": record.position_y,
        "is_deleted": record.is_deleted,
        "deleted_at": record.deleted_at.isoformat() if record.deleted_at else None,
        "share_token": record.share_token,
        "created_at": record.created_at.isoformat() if record.created_at else None,
        "updated_at": record.updated_at.isoformat() if record.updated_at else None,
    }


def content_response(store: FileStore, record: DesktopFile) -> Response:
    source = store.content_source(record)
    if source.path is not None:
        return FileResponse(source.path, media_type=source.media_type)
    return Response(content=source.data, media_type=source.media_type)


# ---------------------------------------------------------------------------
# Listings (fixed paths before /{file_id})
# ---------------------------------------------------------------------------


@router.get("")
async def list_files(user: PortalUser = Depends(require_auth)) -> dict:
    """Files on the caller's desktop (not soft-deleted)."""
    records = await _get_store().list_files(user.user_id, deleted=False)
    return {"files": [format_file(r) for r in records]}


@router.get("/deleted")
async def list_deleted_files(user: PortalUser = Depends(require_auth)) -> dict:
    """Files in the caller's recycle bin."""
    records = await _get_store().list_files(user.user_id, deleted=True)
    return {"files": [format_file(r) for r in records]}


@router.post("/upload")
async def upload_files(
    files: list[UploadFile] = File(...),
    user: PortalUser = Depends(require_auth),
) -> dict:
    """Multipart upload, one row per part. All parts succeed or none are kept."""
    records = await _get_store().create_uploads(user.user_id, files)
    return {"files": [format_file(r) for r in records]}


@router.delete("/trash/empty")
async def empty_trash(user: PortalUser = Depends(require_auth)) -> dict:
    """Permanently delete everything in the recycle bin."""
    removed = await _get_store().empty_trash(user.user_id)
    return {"success": True, "removed": removed}


# ---------------------------------------------------------------------------
# Single file
# ---------------------------------------------------------------------------


@router.get("/{file_id}")
async def get_file(file_id: str, user: PortalUser = Depends(require_auth)) -> dict:
    record = await _get_store().get_file(file_id, user.user_id)
    return format_file(record)


@router.get("/{file_id}/content")
async def get_file_content(
    file_id: str, user: PortalUser = Depends(require_auth)
) -> Response:
    """Raw bytes with the stored MIME type. Disk first, inline text second."""
    store = _get_store()
    record = await store.get_file(file_id, user.user_id)
    return content_response(store, record)


@router.patch("/{file_id}")
async def update_file(
    file_id: str,
    body: FileUpdate,
    user: PortalUser = Depends(require_auth),
) -> dict:
    """Partial update of name, content, or desktop position."""
    changes = body.model_dump(exclude_unset=True)
    record = await _get_store().update_file(file_id, user.user_id, changes)
    return format_file(record)


@router.delete("/{file_id}")
async def delete_file(file_id: str, user: PortalUser = Depends(require_auth)) -> dict:
    """Move a file to the recycle bin."""
    await _get_store().soft_delete(file_id, user.user_id)
    return {"success": True}


@router.post("/{file_id}/restore")
async def restore_file(file_id: str, user: PortalUser = Depends(require_auth)) -> dict:
    await _get_store().restore(file_id, user.user_id)
    return {"success": True}


@router.delete("/{file_id}/permanent")
async def permanent_delete_file(
    file_id: str, user: PortalUser = Depends(require_auth)
) -> dict:
    """Remove the row and its on-disk content."""
    await _get_store().permanent_delete(file_id, user.user_id)
    return {"success": True}


@router.post("/{file_id}/share")
async def share_file(file_id: str, user: PortalUser = Depends(require_auth)) -> dict:
    """Issue a share token if the file has none. Returns the file."""
    record = await _get_store().share(file_id, user.user_id)
    return format_file(record)
