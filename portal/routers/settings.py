"""Desktop appearance settings: theme, background, custom palette."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from portal.auth import PortalUser, require_auth
from portal.services.settings_store import SettingsStore
from shared.database import get_session_factory
from shared.models.user_settings import DEFAULT_THEME, UserSettings

router = APIRouter(prefix="/api/settings", tags=["settings"])


class SettingsUpdate(BaseModel):
    theme: str | None = Field(default=None, min_length=1, max_length=64)
    desktop_background: str | None = None
    custom_colors: dict[str, str] | None = None


def _get_settings_store() -> SettingsStore:
    return SettingsStore(get_session_factory())


def _format_settings(record: UserSettings | None) -> dict:
    if record is None:
        return {"theme": DEFAULT_THEME, "desktop_background": None, "custom_colors": None}
    return {
        "theme": record.theme,
        "desktop_background": record.desktop_background,
        "custom_colors": record.custom_colors,
    }


@router.get("")
async def get_user_settings(user: PortalUser = Depends(require_auth)) -> dict:
    """Stored settings, or the classic defaults when none were saved yet."""
    record = await _get_settings_store().get(user.user_id)
    return _format_settings(record)


@router.patch("")
async def update_user_settings(
    body: SettingsUpdate,
    user: PortalUser = Depends(require_auth),
) -> dict:
    record = await _get_settings_store().upsert(
        user.user_id, body.model_dump(exclude_unset=True)
    )
    return _format_settings(record)
