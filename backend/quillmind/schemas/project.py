"""
QuillMind Backend — Project & File Schemas
============================================

What:  Bodies for the /api/projects and /api/files routes.

Listing vs detail:
    FileSummary (list endpoint) never carries content; FileDetail
    (single-file endpoints) always does.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, StrictStr


# ══════════════════════════════════════════════════════════════════════════
# Requests
# ══════════════════════════════════════════════════════════════════════════


class ProjectCreate(BaseModel):
    name: str = Field(max_length=255)


class FileCreate(BaseModel):
    name: str = Field(max_length=255)
    file_type: Optional[str] = Field(default=None, max_length=50)
    path: Optional[str] = Field(default=None, max_length=1024)


class FileContentUpdate(BaseModel):
    """
    Wholesale replacement of a file's content.

    StrictStr: numbers, booleans and null are rejected rather than coerced;
    the empty string is a valid value.
    """
    content: StrictStr


# ══════════════════════════════════════════════════════════════════════════
# Responses
# ══════════════════════════════════════════════════════════════════════════


class ProjectResponse(BaseModel):
    id: int
    owner_id: int
    name: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class FileSummary(BaseModel):
    """File metadata only, as returned by GET /api/projects/{id}/files."""
    id: int
    project_id: int
    name: str
    path: str
    file_type: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class FileDetail(FileSummary):
    """File metadata plus content, as returned by GET/PUT /api/files/{id}."""
    content: str
