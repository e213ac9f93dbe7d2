"""
QuillMind Client — HTTP API Client
====================================

What:  Async client for every QuillMind endpoint.
How:   One httpx.AsyncClient per instance. Success bodies are parsed into
       the same Pydantic schemas the server returns; error responses are
       turned into ApiError from the shared error envelope.
Who:   Desktop/UI code and quillmind.client.sync. Tests pass an
       httpx.ASGITransport to talk to the app in-process.
"""

import logging
import time
from typing import Any, Dict, List, Optional, Type, TypeVar

import httpx
from jose import JWTError, jwt
from pydantic import BaseModel, TypeAdapter

from quillmind.schemas.ai import TextActionResponse
from quillmind.schemas.auth import LoginResponse, RegisterResponse
from quillmind.schemas.common import HealthResponse, MessageResponse
from quillmind.schemas.project import FileDetail, FileSummary, ProjectResponse

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

DEFAULT_BASE_URL = "http://localhost:5001"

_projects_adapter = TypeAdapter(List[ProjectResponse])
_files_adapter = TypeAdapter(List[FileSummary])


class ApiError(Exception):
    """A non-2xx response, carrying the server's error envelope."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        request_id: Optional[str] = None,
    ):
        super().__init__(f"{status_code} {code}: {message}")
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = details or {}
        self.request_id = request_id

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ApiError":
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and "message" in body:
            return cls(
                status_code=response.status_code,
                code=str(body.get("code", "http_error")),
                message=str(body["message"]),
                details=body.get("details") if isinstance(body.get("details"), dict) else None,
                request_id=body.get("request_id") or response.headers.get("X-Request-ID"),
            )
        return cls(
            status_code=response.status_code,
            code="http_error",
            message=response.text or response.reason_phrase,
            request_id=response.headers.get("X-Request-ID"),
        )


def is_token_expired(token: str, leeway: int = 0) -> bool:
    """
    True when `token` cannot be used any more, judged from its claims alone.

    The signature is not checked here (the client does not hold the
    secret); the server still verifies every request.
    """
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError:
        return True
    exp = claims.get("exp")
    if not isinstance(exp, (int, float)):
        return True
    return exp <= time.time() + leeway


class QuillMindClient:
    """
    Usage:
        async with QuillMindClient("http://localhost:5001") as api:
            await api.login("ada@example.com", "secret")
            projects = await api.list_projects()
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        token: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if token is not None and is_token_expired(token):
            logger.info("Discarding expired session token")
            token = None
        self.token = token
        self._http = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def __aenter__(self) -> "QuillMindClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def logout(self) -> None:
        self.token = None

    # ── Transport ─────────────────────────────────────────────────────────

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        ok_statuses: tuple = (),
    ) -> httpx.Response:
        headers = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        response = await self._http.request(method, path, json=json, headers=headers)
        if response.is_error and response.status_code not in ok_statuses:
            error = ApiError.from_response(response)
            logger.debug("%s %s failed: %s", method, path, error)
            raise error
        return response

    async def _model(self, model: Type[ModelT], method: str, path: str, **kwargs) -> ModelT:
        response = await self._request(method, path, **kwargs)
        return model.model_validate(response.json())

    # ── Auth ──────────────────────────────────────────────────────────────

    async def register(self, username: str, email: str, password: str) -> RegisterResponse:
        return await self._model(
            RegisterResponse, "POST", "/api/auth/register",
            json={"username": username, "email": email, "password": password},
        )

    async def login(self, email: str, password: str) -> LoginResponse:
        """Log in and keep the returned token for later calls."""
        result = await self._model(
            LoginResponse, "POST", "/api/auth/login",
            json={"email": email, "password": password},
        )
        self.token = result.access_token
        return result

    # ── Projects ──────────────────────────────────────────────────────────

    async def create_project(self, name: str) -> ProjectResponse:
        return await self._model(ProjectResponse, "POST", "/api/projects", json={"name": name})

    async def list_projects(self) -> List[ProjectResponse]:
        response = await self._request("GET", "/api/projects")
        return _projects_adapter.validate_python(response.json())

    async def delete_project(self, project_id: int) -> MessageResponse:
        return await self._model(MessageResponse, "DELETE", f"/api/projects/{project_id}")

    # ── Files ─────────────────────────────────────────────────────────────

    async def create_file(
        self,
        project_id: int,
        name: str,
        file_type: Optional[str] = None,
        path: Optional[str] = None,
    ) -> FileDetail:
        body: Dict[str, Any] = {"name": name}
        if file_type is not None:
            body["file_type"] = file_type
        if path is not None:
            body["path"] = path
        return await self._model(FileDetail, "POST", f"/api/projects/{project_id}/files", json=body)

    async def list_files(self, project_id: int) -> List[FileSummary]:
        response = await self._request("GET", f"/api/projects/{project_id}/files")
        return _files_adapter.validate_python(response.json())

    async def get_file(self, file_id: int) -> FileDetail:
        return await self._model(FileDetail, "GET", f"/api/files/{file_id}")

    async def update_file_content(self, file_id: int, content: str) -> FileDetail:
        return await self._model(FileDetail, "PUT", f"/api/files/{file_id}", json={"content": content})

    async def delete_file(self, file_id: int) -> MessageResponse:
        return await self._model(MessageResponse, "DELETE", f"/api/files/{file_id}")

    # ── AI & health ───────────────────────────────────────────────────────

    async def text_action(self, action: str, text: str) -> TextActionResponse:
        return await self._model(
            TextActionResponse, "POST", "/api/ai/action",
            json={"action": action, "text": text},
        )

    async def health(self) -> HealthResponse:
        """Health report; a 503 "unhealthy" report is returned, not raised."""
        return await self._model(HealthResponse, "GET", "/health", ok_statuses=(503,))
