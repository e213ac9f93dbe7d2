"""
QuillMind Backend — Route Dependencies
========================================

What:  The bearer-token gate shared by every protected route.
How:   HTTPBearer(auto_error=False) hands us the credentials or None so the
       missing-token case can be reported through the shared error envelope
       (401) instead of FastAPI's default body; anything present is passed
       to TokenService.verify, which raises ForbiddenError (403) when the
       token is invalid or expired.

An Authorization header with another scheme (e.g. "Basic ...") carries
no bearer credentials, so HTTPBearer yields None and the request gets the
same 401 as a request with no header at all.
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from quillmind.exceptions import UnauthorizedError
from quillmind.services.token_service import Principal, token_service

bearer_scheme = HTTPBearer(auto_error=False, description="Session token from /api/auth/login")


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Principal:
    """Resolve the request's principal or fail with 401 / 403."""
    if credentials is None or not credentials.credentials.strip():
        raise UnauthorizedError(message="Authentication required. Provide a bearer token.")
    return token_service.verify(credentials.credentials.strip())
