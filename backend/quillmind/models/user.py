"""
QuillMind Backend — User SQLAlchemy Model
===========================================

What:  ORM model representing the `users` table.
Who:   Used by AuthService for registration and login.

Table Design:
    - Integer primary key, exposed to clients as `user_id`
    - username and email are each UNIQUE; the database is the final
      arbiter when two registrations race
    - password_hash holds the bcrypt verifier; it is never serialized
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from quillmind.database import Base


class User(Base):
    """
    A registered account.

    Lifecycle:
        1. Created at registration
        2. Read at login to check the password verifier
        3. Never deleted by the API
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    username: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
        comment="Display name, unique across all users",
    )

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        comment="Login identifier, unique across all users",
    )

    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="bcrypt password verifier (never returned by the API)",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"
