"""Per-user desktop settings, one row per user."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shared.models.user_settings import DEFAULT_THEME, UserSettings

logger = structlog.get_logger()

SETTINGS_FIELDS = ("theme", "desktop_background", "custom_colors")


class SettingsStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def get(self, user_id: uuid.UUID) -> UserSettings | None:
        async with self.session_factory() as session:
            result = await session.execute(
                select(UserSettings).where(UserSettings.user_id == user_id)
            )
            return result.scalar_one_or_none()

    async def upsert(self, user_id: uuid.UUID, changes: dict) -> UserSettings:
        """Create the record if absent, otherwise apply only the given fields."""
        async with self.session_factory() as session:
            result = await session.execute(
                select(UserSettings).where(UserSettings.user_id == user_id)
            )
            record = result.scalar_one_or_none()
            if record is None:
                record = UserSettings(user_id=user_id, theme=DEFAULT_THEME)
                session.add(record)
            for field in SETTINGS_FIELDS:
                if field in changes and not (field == "theme" and changes[field] is None):
                    setattr(record, field, changes[field])
            record.updated_at = datetime.now(timezone.utc)
            await session.commit()

        logger.info("settings_saved", user_id=str(user_id), fields=sorted(changes))
        return record
