"""Share-by-token endpoints. Lookup is public; adding to a desktop needs a session."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from portal.auth import PortalUser, require_auth
from portal.routers.files import _get_store, content_response, format_file
from shared.models.file import DesktopFile

router = APIRouter(prefix="/api/share", tags=["share"])


def _format_shared(record: DesktopFile) -> dict:
    """Public view of a shared file: no owner, path, or desktop state."""
    return {
        "name": record.name,
        "extension": record.extension,
        "mime_type": record.mime_type,
        "size": record.size,
        "share_token": record.share_token,
        "created_at": record.created_at.isoformat() if record.created_at else None,
    }


@router.get("/{token}")
async def get_shared_file(token: str) -> dict:
    record = await _get_store().get_by_share_token(token)
    return _format_shared(record)


@router.get("/{token}/content")
async def get_shared_content(token: str) -> Response:
    store = _get_store()
    record = await store.get_by_share_token(token)
    return content_response(store, record)


@router.post("/{token}/add")
async def add_shared_file(token: str, user: PortalUser = Depends(require_auth)) -> dict:
    """Clone the shared file onto the caller's desktop as a new, independent row."""
    record = await _get_store().clone_shared(token, user.user_id)
    return format_file(record)
