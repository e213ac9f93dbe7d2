"""
QuillMind Backend — ORM Models
================================

What:  SQLAlchemy models for the three persisted entities.
How:   Importing this package registers every table on Base.metadata.

Ownership chain:
    users ──< projects (owner_id) ──< files (project_id, ON DELETE CASCADE)
"""

from quillmind.models.user import User
from quillmind.models.project import Project
from quillmind.models.file import File

__all__ = ["User", "Project", "File"]
