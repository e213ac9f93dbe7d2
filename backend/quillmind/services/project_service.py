"""
QuillMind Backend — Project Service
=====================================

What:  Create, list and delete projects for their owner.
How:   Every operation on an existing project goes through the
       OwnershipResolver first; deletion removes the project's files and
       the project row inside the request's single transaction.
Who:   Called by the /api/projects route handlers.
"""

import logging
from typing import List

from sqlalchemy import delete, desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from quillmind.exceptions import DatabaseError, ValidationError
from quillmind.models.file import File
from quillmind.models.project import Project
from quillmind.schemas.project import ProjectResponse
from quillmind.services.ownership import OwnershipResolver, ownership_resolver

logger = logging.getLogger(__name__)


class ProjectService:
    """
    Business logic for projects.

    Error Handling Strategy:
        Validation and ownership failures propagate as-is. Unexpected
        SQLAlchemy errors are logged with detail and re-raised as a
        DatabaseError carrying only a generic message.
    """

    def __init__(self, resolver: OwnershipResolver = ownership_resolver):
        self.resolver = resolver

    async def create_project(
        self, db: AsyncSession, owner_id: int, name: str
    ) -> ProjectResponse:
        """
        Create a project owned by `owner_id`.

        Raises:
            ValidationError: name is empty or blank
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError(message="Project name must not be empty.", field="name")

        try:
            project = Project(owner_id=owner_id, name=name)
            db.add(project)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating project for user %s: %s", owner_id, str(e))
            raise DatabaseError(
                message="Could not create the project. Please try again.",
                context={"owner_id": owner_id},
            )

        logger.info("Project %s created for user %s", project.id, owner_id)
        return ProjectResponse.model_validate(project)

    async def list_projects(self, db: AsyncSession, owner_id: int) -> List[ProjectResponse]:
        """
        All projects owned by `owner_id`, newest-created first.

        Ties on created_at fall back to the higher id first.
        """
        try:
            result = await db.execute(
                select(Project)
                .where(Project.owner_id == owner_id)
                .order_by(desc(Project.created_at), desc(Project.id))
            )
            projects = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing projects for user %s: %s", owner_id, str(e))
            raise DatabaseError(
                message="Could not retrieve projects. Please try again.",
                context={"owner_id": owner_id},
            )

        return [ProjectResponse.model_validate(p) for p in projects]

    async def delete_project(self, db: AsyncSession, owner_id: int, project_id: int) -> None:
        """
        Delete a project together with all of its files.

        Both deletes run on the request's session; get_db_session commits
        them together or rolls both back.

        Raises:
            NotFoundError / ForbiddenError: from the ownership gate
        """
        await self.resolver.require_project(db, owner_id, project_id)

        try:
            files_result = await db.execute(delete(File).where(File.project_id == project_id))
            await db.execute(delete(Project).where(Project.id == project_id))
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting project %s: %s", project_id, str(e))
            raise DatabaseError(
                message="Could not delete the project. Please try again.",
                context={"project_id": project_id},
            )

        logger.info(
            "Project %s deleted by user %s (%s files removed)",
            project_id, owner_id, files_result.rowcount,
        )


# ── Singleton Instance ────────────────────────────────────────────────────
project_service = ProjectService()
