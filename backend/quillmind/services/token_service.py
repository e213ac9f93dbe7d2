"""
QuillMind Backend — Session Token Service
===========================================

What:  Issues and verifies signed, time-limited identity assertions (JWT).
How:   python-jose HS256 tokens carrying `sub` (user id), `username`,
       `iat` and `exp`. Stateless: there is no server-side revocation list,
       so a token is valid exactly when its signature checks out and it has
       not expired.
Who:   AuthService issues tokens at login; the `get_current_principal`
       dependency verifies them on every protected request.

Failure mapping (HTTP contract):
    missing token               → UnauthorizedError (401), raised by the dependency
    bad signature / malformed   → ForbiddenError (403)
    expired                     → ForbiddenError (403)
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt

from quillmind.config import settings
from quillmind.exceptions import ForbiddenError, InternalError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    """The authenticated identity extracted from a verified token."""
    user_id: int
    username: str


class TokenService:
    """
    Signs and verifies session tokens with a symmetric key.

    The secret, algorithm and lifetime default to the application settings
    but can be injected (tests issue already-expired tokens this way).
    """

    def __init__(
        self,
        secret: Optional[str] = None,
        algorithm: Optional[str] = None,
        expires_minutes: Optional[int] = None,
    ):
        self.secret = secret if secret is not None else settings.jwt_secret
        self.algorithm = algorithm or settings.jwt_algorithm
        self.expires_minutes = expires_minutes or settings.jwt_expires_minutes

    def _require_secret(self) -> str:
        if not self.secret:
            logger.error("JWT_SECRET is not configured; cannot sign or verify tokens")
            raise InternalError(message="Internal server configuration error.")
        return self.secret

    def issue(self, principal: Principal, expires_delta: Optional[timedelta] = None) -> str:
        """
        Produce a signed token for `principal`.

        Only the user id and username are embedded; the password verifier
        and any other secret never enter the payload.
        """
        secret = self._require_secret()
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta if expires_delta is not None
                        else timedelta(minutes=self.expires_minutes))
        payload = {
            "sub": str(principal.user_id),
            "username": principal.username,
            "iat": int(now.timestamp()),
            "exp": int(expire.timestamp()),
        }
        return jwt.encode(payload, secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Principal:
        """
        Verify `token` and return the principal it asserts.

        Raises:
            ForbiddenError: signature mismatch, malformed token, missing
                claims, or expired token.
        """
        secret = self._require_secret()
        try:
            payload = jwt.decode(token, secret, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise ForbiddenError(message="Session token has expired. Please log in again.")
        except JWTError as e:
            logger.info("Rejected session token: %s", type(e).__name__)
            raise ForbiddenError(message="Invalid session token.")

        sub = payload.get("sub")
        username = payload.get("username")
        try:
            user_id = int(sub)
        except (TypeError, ValueError):
            raise ForbiddenError(message="Invalid session token.")
        if not isinstance(username, str):
            raise ForbiddenError(message="Invalid session token.")

        return Principal(user_id=user_id, username=username)


# ── Singleton Instance ────────────────────────────────────────────────────
token_service = TokenService()
