"""File store: owned-file CRUD, soft delete, trash, and share tokens."""

from __future__ import annotations

import random
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

import structlog
from fastapi import UploadFile
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from portal.errors import ContentIOError, ForbiddenError, NotFoundError, UploadRejectedError
from portal.services import disk
from shared.config import Settings
from shared.file_types import guess_mime_type, is_text_extension, split_filename
from shared.models.file import DesktopFile

logger = structlog.get_logger()

# Fields a PATCH may touch
UPDATABLE_FIELDS = ("name", "content", "position_x", "position_y")
# A null for these means "leave unchanged"
NON_NULLABLE_FIELDS = ("name",)


def random_position() -> tuple[int, int]:
    """Initial icon position for new uploads and clones."""
    return random.randrange(400) + 16, random.randrange(300) + 16


def parse_file_id(file_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(file_id)
    except ValueError:
        raise NotFoundError()


@dataclass
class ContentSource:
    """Where to stream a file's bytes from: disk first, inline text second."""

    media_type: str
    path: Path | None = None
    data: bytes | None = None


class FileStore:
    """Persistence operations for desktop files, scoped to their owner."""

    def __init__(self, settings: Settings, session_factory: async_sessionmaker[AsyncSession]):
        self.settings = settings
        self.session_factory = session_factory

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_files(self, user_id: uuid.UUID, deleted: bool = False) -> list[DesktopFile]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(DesktopFile)
                .where(DesktopFile.user_id == user_id, DesktopFile.is_deleted.is_(deleted))
                .order_by(DesktopFile.created_at)
            )
            return list(result.scalars().all())

    async def _get_owned(
        self, session: AsyncSession, file_id: str, user_id: uuid.UUID
    ) -> DesktopFile:
        record = await session.get(DesktopFile, parse_file_id(file_id))
        if record is None:
            raise NotFoundError()
        if record.user_id != user_id:
            raise ForbiddenError()
        return record

    async def get_file(self, file_id: str, user_id: uuid.UUID) -> DesktopFile:
        async with self.session_factory() as session:
            return await self._get_owned(session, file_id, user_id)

    async def get_by_share_token(self, token: str) -> DesktopFile:
        async with self.session_factory() as session:
            result = await session.execute(
                select(DesktopFile).where(DesktopFile.share_token == token)
            )
            record = result.scalar_one_or_none()
        if record is None:
            raise NotFoundError("Shared file not found")
        return record

    def content_source(self, record: DesktopFile) -> ContentSource:
        """Resolve the bytes behind ``record``; 403 on traversal, 404 if none."""
        if record.file_path:
            path = disk.resolve_inside_upload_dir(record.file_path)
            if path.exists():
                return ContentSource(media_type=record.mime_type, path=path)
        if record.content is not None:
            return ContentSource(media_type=record.mime_type, data=record.content.encode("utf-8"))
        raise NotFoundError("File content not found")

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create_uploads(
        self, user_id: uuid.UUID, uploads: list[UploadFile]
    ) -> list[DesktopFile]:
        """Store every part and create one row each, or keep nothing."""
        if not uploads:
            raise UploadRejectedError("No files provided")
        if len(uploads) > self.settings.max_upload_files:
            raise UploadRejectedError(
                f"Too many files (max {self.settings.max_upload_files})"
            )

        written: list[Path] = []
        records: list[DesktopFile] = []
        try:
            for upload in uploads:
                path, size = await disk.save_upload(upload, self.settings.max_upload_bytes)
                written.append(path)
                name, extension = split_filename(upload.filename or "upload")

                content = None
                if is_text_extension(extension):
                    try:
                        content = path.read_text(encoding="utf-8", errors="replace")
                    except OSError as e:
                        raise ContentIOError() from e

                x, y = random_position()
                records.append(
                    DesktopFile(
                        user_id=user_id,
                        name=name,
                        extension=extension,
                        mime_type=guess_mime_type(extension, upload.content_type),
                        size=size,
                        content=content,
                        file_path=str(path),
                        position_x=x,
                        position_y=y,
                        is_deleted=False,
                    )
                )

            async with self.session_factory() as session:
                session.add_all(records)
                await session.commit()
        except Exception:
            for path in written:
                path.unlink(missing_ok=True)
            raise

        logger.info(
            "files_uploaded",
            user_id=str(user_id),
            count=len(records),
            names=[r.display_name for r in records],
        )
        return records

    async def update_file(
        self, file_id: str, user_id: uuid.UUID, changes: dict
    ) -> DesktopFile:
        async with self.session_factory() as session:
            record = await self._get_owned(session, file_id, user_id)
            for field in UPDATABLE_FIELDS:
                if field not in changes:
                    continue
                if changes[field] is None and field in NON_NULLABLE_FIELDS:
                    continue
                setattr(record, field, changes[field])
            if changes.get("content") is not None:
                record.size = len(changes["content"].encode("utf-8"))
                if record.file_path and is_text_extension(record.extension):
                    disk.overwrite_text(record.file_path, changes["content"])
            record.updated_at = datetime.now(timezone.utc)
            await session.commit()
        logger.info("file_updated", file_id=file_id, fields=sorted(changes))
        return record

    async def soft_delete(self, file_id: str, user_id: uuid.UUID) -> None:
        async with self.session_factory() as session:
            record = await self._get_owned(session, file_id, user_id)
            record.is_deleted = True
            record.deleted_at = datetime.now(timezone.utc)
            await session.commit()
        logger.info("file_soft_deleted", file_id=file_id)

    async def restore(self, file_id: str, user_id: uuid.UUID) -> None:
        async with self.session_factory() as session:
            record = await self._get_owned(session, file_id, user_id)
            record.is_deleted = False
            record.deleted_at = None
            await session.commit()
        logger.info("file_restored", file_id=file_id)

    async def permanent_delete(self, file_id: str, user_id: uuid.UUID) -> None:
        async with self.session_factory() as session:
            record = await self._get_owned(session, file_id, user_id)
            file_path = record.file_path
            await session.delete(record)
            await session.commit()
        logger.info("file_permanently_deleted", file_id=file_id)
        self._discard_content([file_path])

    def _discard_content(self, file_paths: list[str | None]) -> None:
        """Unlink content whose rows are already gone.

        Runs after the commit. A failed unlink leaves an orphan on disk
        (see ``retrodesk storage orphans``) rather than a row with no bytes.
        """
        for file_path in file_paths:
            try:
                disk.remove_file(file_path)
            except ContentIOError as e:
                logger.warning(
                    "orphaned_file", file_path=file_path, error=str(e.__cause__)
                )

    async def empty_trash(self, user_id: uuid.UUID) -> int:
        """Hard-delete every soft-deleted file of ``user_id``. Returns the count."""
        async with self.session_factory() as session:
            result = await session.execute(
                select(DesktopFile).where(
                    DesktopFile.user_id == user_id, DesktopFile.is_deleted.is_(True)
                )
            )
            trashed = result.scalars().all()
            file_paths = [record.file_path for record in trashed]
            await session.execute(
                delete(DesktopFile).where(
                    DesktopFile.id.in_([record.id for record in trashed])
                )
            )
            await session.commit()
        logger.info("trash_emptied", user_id=str(user_id), count=len(trashed))
        self._discard_content(file_paths)
        return len(trashed)

    async def share(self, file_id: str, user_id: uuid.UUID) -> DesktopFile:
        """Issue a share token if the file has none; an existing token is kept."""
        async with self.session_factory() as session:
            record = await self._get_owned(session, file_id, user_id)
            if record.share_token is None:
                record.share_token = secrets.token_hex(16)
                record.updated_at = datetime.now(timezone.utc)
                await session.commit()
                logger.info("share_token_issued", file_id=file_id)
        return record

    async def clone_shared(self, token: str, user_id: uuid.UUID) -> DesktopFile:
        """Copy a shared file (metadata, text, disk content) to ``user_id``."""
        original = await self.get_by_share_token(token)

        new_path = None
        if original.file_path:
            new_path = disk.copy_into_upload_dir(original.file_path, original.display_name)

        x, y = random_position()
        clone = DesktopFile(
            user_id=user_id,
            name=original.name,
            extension=original.extension,
            mime_type=original.mime_type,
            size=original.size,
            content=original.content,
            file_path=str(new_path) if new_path else None,
            position_x=x,
            position_y=y,
            is_deleted=False,
        )
        try:
            async with self.session_factory() as session:
                session.add(clone)
                await session.commit()
        except Exception:
            if new_path:
                new_path.unlink(missing_ok=True)
            raise

        logger.info(
            "shared_file_added",
            source_id=str(original.id),
            file_id=str(clone.id),
            user_id=str(user_id),
        )
        return clone
