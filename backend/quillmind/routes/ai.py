"""
QuillMind Backend — Text Action Route
=======================================

What:  POST /api/ai/action — run an action verb over a span of text.
How:   Authenticated but touches no stored data; TextActionService builds
       the prompt and calls the generative API.

Errors:
    400  action or text missing, or action unsupported
    5xx  upstream failure (status passed through when the provider sent one)
    503  circuit breaker open
"""

from fastapi import APIRouter, Depends

from quillmind.routes.deps import get_current_principal
from quillmind.schemas.ai import TextActionRequest, TextActionResponse
from quillmind.schemas.common import ErrorResponse
from quillmind.services import ai_service
from quillmind.services.token_service import Principal

router = APIRouter(prefix="/api/ai", tags=["AI"])


@router.post(
    "/action",
    response_model=TextActionResponse,
    responses={
        400: {"description": "Missing or unsupported action", "model": ErrorResponse},
        401: {"description": "Missing bearer token", "model": ErrorResponse},
        403: {"description": "Invalid session token", "model": ErrorResponse},
        502: {"description": "AI service returned an error", "model": ErrorResponse},
        503: {"description": "AI service unavailable", "model": ErrorResponse},
    },
    summary="Transform text with the AI service",
)
async def perform_text_action(
    body: TextActionRequest,
    principal: Principal = Depends(get_current_principal),
) -> TextActionResponse:
    return await ai_service.text_action_service.perform(action=body.action, text=body.text)
