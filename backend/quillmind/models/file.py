"""
QuillMind Backend — File SQLAlchemy Model
===========================================

What:  ORM model representing the `files` table.
Who:   Used by FileService; always reached through its parent project.

Table Design:
    - project_id → projects.id with ON DELETE CASCADE: a file never
      outlives its project
    - No owner column: ownership is always resolved through the project
    - content is TEXT NOT NULL with '' as the initial value, so "empty"
      and "absent" never get confused
    - file_type is a free-form tag ("markdown", "fountain", ...)
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from quillmind.database import Base


class File(Base):
    """A text document inside a project."""

    __tablename__ = "files"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    project_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    path: Mapped[str] = mapped_column(
        String(1024),
        nullable=False,
        default="",
        server_default=text("''"),
        comment="Client-side path of the file inside its project tree",
    )

    file_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="markdown",
        server_default=text("'markdown'"),
    )

    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        server_default=text("''"),
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_files_project_name", "project_id", "name"),
    )

    def __repr__(self) -> str:
        return f"<File(id={self.id}, project_id={self.project_id}, name='{self.name}')>"
