"""Desktop file model: one row per uploaded (or cloned) file."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.models.base import Base


class DesktopFile(Base):
    __tablename__ = "desktop_files"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"), index=True)
    name: Mapped[str]
    extension: Mapped[str]
    mime_type: Mapped[str]
    size: Mapped[int]
    # Inline text for text-like extensions; binary files keep only file_path
    content: Mapped[str | None] = mapped_column(Text, default=None)
    file_path: Mapped[str | None] = mapped_column(default=None)
    # Null until the user drags the icon; the desktop computes a fallback
    position_x: Mapped[int | None] = mapped_column(default=None)
    position_y: Mapped[int | None] = mapped_column(default=None)
    is_deleted: Mapped[bool] = mapped_column(default=False)
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), default=None
    )
    share_token: Mapped[str | None] = mapped_column(
        String(64), unique=True, default=None
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    owner: Mapped["User"] = relationship(back_populates="files")  # noqa: F821

    @property
    def display_name(self) -> str:
        return f"{self.name}.{self.extension}"
