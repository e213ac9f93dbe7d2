"""
QuillMind Backend — Ownership Resolver
========================================

What:  Decides whether a principal may act on a project or a file.
How:   Looks the resource up by id and compares the owning project's
       `owner_id` with the requesting user id:

           id outside INTEGER range   → NOT_FOUND (no query)
           absent                     → NOT_FOUND
           owner_id != principal      → FORBIDDEN
           otherwise                  → PERMITTED (carrying the loaded row)

       A file is always resolved through a join on its parent project;
       there is no owner column on files to consult.
Who:   ProjectService and FileService call `require_project` /
       `require_file` before every read that reveals content and every
       mutation.

Response policy:
    NOT_FOUND and FORBIDDEN map to different status codes (404 / 403) but
    share one message, so the body never tells a stranger whether the id
    exists.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from quillmind.exceptions import ForbiddenError, NotFoundError
from quillmind.models.file import File
from quillmind.models.project import Project

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Largest value an INTEGER primary key can hold; no row has a larger id.
MAX_ROW_ID = 2**31 - 1


class Decision(str, enum.Enum):
    PERMITTED = "permitted"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"


@dataclass(frozen=True)
class Resolution(Generic[T]):
    """Outcome of an ownership check; `resource` is set only when permitted."""
    decision: Decision
    resource: Optional[T] = None

    @property
    def permitted(self) -> bool:
        return self.decision is Decision.PERMITTED


def _storable(resource_id: int) -> bool:
    return 1 <= resource_id <= MAX_ROW_ID


def _denied_message(resource: str, resource_id: int) -> str:
    return f"{resource.capitalize()} {resource_id} was not found or you do not have access to it."


def _raise_for(decision: Decision, resource: str, resource_id: int) -> None:
    message = _denied_message(resource, resource_id)
    if decision is Decision.NOT_FOUND:
        raise NotFoundError(resource=resource, resource_id=str(resource_id), message=message)
    raise ForbiddenError(
        message=message,
        context={"resource": resource, "resource_id": str(resource_id)},
    )


class OwnershipResolver:
    """Stateless authorization checks over the relational store."""

    async def resolve_project(
        self, db: AsyncSession, principal_id: int, project_id: int
    ) -> Resolution[Project]:
        if not _storable(project_id):
            return Resolution(Decision.NOT_FOUND)
        result = await db.execute(select(Project).where(Project.id == project_id))
        project = result.scalar_one_or_none()
        if project is None:
            return Resolution(Decision.NOT_FOUND)
        if project.owner_id != principal_id:
            logger.warning(
                "User %s denied access to project %s owned by %s",
                principal_id, project_id, project.owner_id,
            )
            return Resolution(Decision.FORBIDDEN)
        return Resolution(Decision.PERMITTED, project)

    async def resolve_file(
        self, db: AsyncSession, principal_id: int, file_id: int
    ) -> Resolution[File]:
        if not _storable(file_id):
            return Resolution(Decision.NOT_FOUND)
        result = await db.execute(
            select(File, Project.owner_id)
            .join(Project, File.project_id == Project.id)
            .where(File.id == file_id)
        )
        row = result.one_or_none()
        if row is None:
            return Resolution(Decision.NOT_FOUND)
        file, owner_id = row
        if owner_id != principal_id:
            logger.warning(
                "User %s denied access to file %s in project %s",
                principal_id, file_id, file.project_id,
            )
            return Resolution(Decision.FORBIDDEN)
        return Resolution(Decision.PERMITTED, file)

    async def require_project(
        self, db: AsyncSession, principal_id: int, project_id: int
    ) -> Project:
        """Return the project or raise NotFoundError / ForbiddenError."""
        resolution = await self.resolve_project(db, principal_id, project_id)
        if not resolution.permitted:
            _raise_for(resolution.decision, "project", project_id)
        return resolution.resource

    async def require_file(
        self, db: AsyncSession, principal_id: int, file_id: int
    ) -> File:
        """Return the file or raise NotFoundError / ForbiddenError."""
        resolution = await self.resolve_file(db, principal_id, file_id)
        if not resolution.permitted:
            _raise_for(resolution.decision, "file", file_id)
        return resolution.resource


# ── Singleton Instance ────────────────────────────────────────────────────
ownership_resolver = OwnershipResolver()
