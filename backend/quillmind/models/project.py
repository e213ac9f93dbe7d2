"""
QuillMind Backend — Project SQLAlchemy Model
==============================================

What:  ORM model representing the `projects` table.
Who:   Used by ProjectService and by the OwnershipResolver, which reads
       `owner_id` to authorize every project and file operation.

Index on (owner_id, created_at):
    Serves the only listing query, "my projects, newest first".
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from quillmind.database import Base


class Project(Base):
    """
    A container of files owned by exactly one user.

    Deleting a project deletes its files in the same transaction
    (ON DELETE CASCADE on files.project_id, plus an explicit delete in
    ProjectService so the behaviour does not depend on the dialect).
    """

    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    owner_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        comment="The only user allowed to read or modify this project",
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

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
        Index("idx_projects_owner_created", "owner_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Project(id={self.id}, owner_id={self.owner_id}, name='{self.name}')>"
