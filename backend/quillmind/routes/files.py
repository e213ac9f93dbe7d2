"""
QuillMind Backend — File Route Handlers
=========================================

What:  GET, PUT and DELETE on /api/files/{file_id}.
How:   The file is resolved through its parent project's owner before any
       content is read or written (see OwnershipResolver).
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from quillmind.database import get_db_session
from quillmind.routes.deps import get_current_principal
from quillmind.schemas.common import ErrorResponse, MessageResponse
from quillmind.schemas.project import FileContentUpdate, FileDetail
from quillmind.services.file_service import file_service
from quillmind.services.token_service import Principal

router = APIRouter(prefix="/api/files", tags=["Files"])

_ERRORS = {
    401: {"description": "Missing bearer token", "model": ErrorResponse},
    403: {"description": "Invalid token or not the owner", "model": ErrorResponse},
    404: {"description": "File not found", "model": ErrorResponse},
}


@router.get(
    "/{file_id}",
    response_model=FileDetail,
    responses=_ERRORS,
    summary="Get a file with its content",
)
async def get_file(
    file_id: int,
    response: Response,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> FileDetail:
    result = await file_service.get_file(db=db, owner_id=principal.user_id, file_id=file_id)
    # Content changes on every save; never serve it from a shared cache.
    response.headers["Cache-Control"] = "private, no-store"
    return result


@router.put(
    "/{file_id}",
    response_model=FileDetail,
    responses={400: {"description": "Content missing or not a string", "model": ErrorResponse}, **_ERRORS},
    summary="Replace a file's content",
)
async def update_file_content(
    file_id: int,
    body: FileContentUpdate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> FileDetail:
    return await file_service.update_file_content(
        db=db, owner_id=principal.user_id, file_id=file_id, content=body.content,
    )


@router.delete(
    "/{file_id}",
    response_model=MessageResponse,
    responses=_ERRORS,
    summary="Delete a file",
)
async def delete_file(
    file_id: int,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await file_service.delete_file(db=db, owner_id=principal.user_id, file_id=file_id)
    return MessageResponse(message="File deleted successfully.")
