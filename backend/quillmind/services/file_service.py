"""
QuillMind Backend — File Service
==================================

What:  Create, list, read, update and delete the text files of a project.
How:   Project-scoped operations (create, list) pass the project through
       the ownership gate; file-scoped operations (get, update, delete)
       resolve the file through its parent project. No row is read for
       content or written before the gate says PERMITTED.
Who:   Called by the /api/projects/{id}/files and /api/files/{id} routes.

Content semantics:
    - New files start with content "" (never NULL)
    - Updates replace content wholesale and refresh updated_at; writing
      the same content twice leaves the same stored value
    - Concurrent writers: last write wins, no merge or version check
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import asc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from quillmind.exceptions import DatabaseError, ValidationError
from quillmind.models.file import File
from quillmind.schemas.project import FileDetail, FileSummary
from quillmind.services.ownership import OwnershipResolver, ownership_resolver

logger = logging.getLogger(__name__)

DEFAULT_FILE_TYPE = "markdown"


class FileService:
    """Business logic for files, always behind the ownership gate."""

    def __init__(self, resolver: OwnershipResolver = ownership_resolver):
        self.resolver = resolver

    async def create_file(
        self,
        db: AsyncSession,
        owner_id: int,
        project_id: int,
        name: str,
        file_type: Optional[str] = None,
        path: Optional[str] = None,
    ) -> FileDetail:
        """
        Create an empty file inside a project the caller owns.

        `path` defaults to the file name and `file_type` to "markdown".

        Raises:
            NotFoundError / ForbiddenError: from the ownership gate
            ValidationError: name is empty or blank
        """
        await self.resolver.require_project(db, owner_id, project_id)

        name = (name or "").strip()
        if not name:
            raise ValidationError(message="File name must not be empty.", field="name")

        try:
            file = File(
                project_id=project_id,
                name=name,
                path=(path or "").strip() or name,
                file_type=(file_type or "").strip() or DEFAULT_FILE_TYPE,
                content="",
            )
            db.add(file)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating file in project %s: %s", project_id, str(e))
            raise DatabaseError(
                message="Could not create the file. Please try again.",
                context={"project_id": project_id},
            )

        logger.info("File %s created in project %s", file.id, project_id)
        return FileDetail.model_validate(file)

    async def list_files(
        self, db: AsyncSession, owner_id: int, project_id: int
    ) -> List[FileSummary]:
        """File metadata for a project, ordered by name ascending. No content."""
        await self.resolver.require_project(db, owner_id, project_id)

        try:
            result = await db.execute(
                select(File)
                .where(File.project_id == project_id)
                .order_by(asc(File.name), asc(File.id))
            )
            files = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing files of project %s: %s", project_id, str(e))
            raise DatabaseError(
                message="Could not retrieve files. Please try again.",
                context={"project_id": project_id},
            )

        return [FileSummary.model_validate(f) for f in files]

    async def get_file(self, db: AsyncSession, owner_id: int, file_id: int) -> FileDetail:
        """Full metadata plus content of one file."""
        file = await self.resolver.require_file(db, owner_id, file_id)
        return FileDetail.model_validate(file)

    async def update_file_content(
        self, db: AsyncSession, owner_id: int, file_id: int, content: str
    ) -> FileDetail:
        """
        Replace a file's content and refresh its update timestamp.

        Raises:
            ValidationError: content is not a string
            NotFoundError / ForbiddenError: from the ownership gate
        """
        if not isinstance(content, str):
            raise ValidationError(message="Content must be a string.", field="content")

        file = await self.resolver.require_file(db, owner_id, file_id)

        try:
            file.content = content
            file.updated_at = datetime.now(timezone.utc)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating file %s: %s", file_id, str(e))
            raise DatabaseError(
                message="Could not save the file. Please try again.",
                context={"file_id": file_id},
            )

        logger.info("File %s content replaced (%d chars)", file_id, len(content))
        return FileDetail.model_validate(file)

    async def delete_file(self, db: AsyncSession, owner_id: int, file_id: int) -> None:
        """
        Remove a file. A second delete of the same id reports NotFound.
        """
        file = await self.resolver.require_file(db, owner_id, file_id)

        try:
            await db.delete(file)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting file %s: %s", file_id, str(e))
            raise DatabaseError(
                message="Could not delete the file. Please try again.",
                context={"file_id": file_id},
            )

        logger.info("File %s deleted by user %s", file_id, owner_id)


# ── Singleton Instance ────────────────────────────────────────────────────
file_service = FileService()
