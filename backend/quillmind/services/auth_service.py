"""
QuillMind Backend — Authentication Service
============================================

What:  User registration and login.
How:   Passwords are hashed with passlib's bcrypt scheme; login verifies the
       hash and asks TokenService for a session token.
Who:   Called by the /api/auth route handlers.

Uniqueness:
    Email and username are checked before insert so the caller gets a
    precise message; the UNIQUE constraints still decide when two
    registrations race, and that IntegrityError is reported as Conflict too.
"""

import logging
from typing import Tuple

from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from quillmind.config import settings
from quillmind.exceptions import ConflictError, UnauthorizedError, ValidationError
from quillmind.models.user import User
from quillmind.schemas.auth import UserResponse
from quillmind.services.token_service import Principal, TokenService, token_service

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)


def hash_password(password: str) -> str:
    """Hash the plain password."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its stored hash."""
    return pwd_context.verify(plain_password, hashed_password)


def to_user_response(user: User) -> UserResponse:
    return UserResponse(
        user_id=user.id,
        username=user.username,
        email=user.email,
        created_at=user.created_at,
    )


class AuthService:
    """Registration and credential checks."""

    def __init__(self, tokens: TokenService = token_service):
        self.tokens = tokens

    async def register(
        self,
        db: AsyncSession,
        username: str,
        email: str,
        password: str,
    ) -> UserResponse:
        """
        Create a new user.

        Raises:
            ValidationError: a field is missing or blank
            ConflictError: email or username already registered
        """
        username = (username or "").strip()
        email = (email or "").strip()
        if not username or not email or not password:
            raise ValidationError(message="Username, email, and password are required.")

        existing = await db.execute(select(User.id).where(User.email == email))
        if existing.scalar_one_or_none() is not None:
            raise ConflictError(message="Email already registered.", field="email")

        existing = await db.execute(select(User.id).where(User.username == username))
        if existing.scalar_one_or_none() is not None:
            raise ConflictError(message="Username already taken.", field="username")

        user = User(
            username=username,
            email=email,
            password_hash=hash_password(password),
        )
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            logger.info("Registration lost a uniqueness race for username=%s", username)
            raise ConflictError(message="Email or username already registered.")

        logger.info("User registered: id=%s username=%s", user.id, user.username)
        return to_user_response(user)

    async def login(
        self,
        db: AsyncSession,
        email: str,
        password: str,
    ) -> Tuple[str, UserResponse]:
        """
        Check credentials and issue a session token.

        Unknown email and wrong password produce the same error so the
        response does not reveal which emails are registered.

        Returns:
            (token, user)
        """
        email = (email or "").strip()
        if not email or not password:
            raise ValidationError(message="Email and password are required.")

        result = await db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        if user is None or not verify_password(password, user.password_hash):
            raise UnauthorizedError(message="Invalid credentials.")

        token = self.tokens.issue(Principal(user_id=user.id, username=user.username))
        logger.info("User logged in: id=%s", user.id)
        return token, to_user_response(user)


# ── Singleton Instance ────────────────────────────────────────────────────
auth_service = AuthService()
