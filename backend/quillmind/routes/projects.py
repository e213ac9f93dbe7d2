"""
QuillMind Backend — Project Route Handlers
============================================

What:  /api/projects (create, list, delete) and the project-scoped file
       routes /api/projects/{project_id}/files (create, list).
Who:   Called by the client's project explorer.

Every handler requires a bearer token; ownership is enforced in the
service layer, so a handler never touches a row on its own.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from quillmind.database import get_db_session
from quillmind.routes.deps import get_current_principal
from quillmind.schemas.common import ErrorResponse, MessageResponse
from quillmind.schemas.project import (
    FileCreate,
    FileDetail,
    FileSummary,
    ProjectCreate,
    ProjectResponse,
)
from quillmind.services.file_service import file_service
from quillmind.services.project_service import project_service
from quillmind.services.token_service import Principal

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/projects", tags=["Projects"])

_AUTH_ERRORS = {
    401: {"description": "Missing bearer token", "model": ErrorResponse},
    403: {"description": "Invalid token or not the owner", "model": ErrorResponse},
}
_OWNED_ERRORS = {
    **_AUTH_ERRORS,
    404: {"description": "Project not found", "model": ErrorResponse},
}


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ProjectResponse,
    responses={400: {"description": "Empty name", "model": ErrorResponse}, **_AUTH_ERRORS},
    summary="Create a project",
)
async def create_project(
    body: ProjectCreate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> ProjectResponse:
    return await project_service.create_project(db=db, owner_id=principal.user_id, name=body.name)


@router.get(
    "",
    response_model=List[ProjectResponse],
    responses=_AUTH_ERRORS,
    summary="List the caller's projects, newest first",
)
async def list_projects(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> List[ProjectResponse]:
    return await project_service.list_projects(db=db, owner_id=principal.user_id)


@router.delete(
    "/{project_id}",
    response_model=MessageResponse,
    responses=_OWNED_ERRORS,
    summary="Delete a project and all of its files",
)
async def delete_project(
    project_id: int,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await project_service.delete_project(db=db, owner_id=principal.user_id, project_id=project_id)
    return MessageResponse(message="Project deleted successfully.")


@router.post(
    "/{project_id}/files",
    status_code=status.HTTP_201_CREATED,
    response_model=FileDetail,
    responses={400: {"description": "Empty name", "model": ErrorResponse}, **_OWNED_ERRORS},
    summary="Create an empty file in a project",
)
async def create_file(
    project_id: int,
    body: FileCreate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> FileDetail:
    return await file_service.create_file(
        db=db,
        owner_id=principal.user_id,
        project_id=project_id,
        name=body.name,
        file_type=body.file_type,
        path=body.path,
    )


@router.get(
    "/{project_id}/files",
    response_model=List[FileSummary],
    responses=_OWNED_ERRORS,
    summary="List a project's files (metadata only), by name",
)
async def list_files(
    project_id: int,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> List[FileSummary]:
    return await file_service.list_files(db=db, owner_id=principal.user_id, project_id=project_id)
