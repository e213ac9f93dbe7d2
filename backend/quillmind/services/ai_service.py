"""
QuillMind Backend — Text Action Service
=========================================

What:  Turns (action, text) into a prompt and returns the model's output.
How:   The action verb is normalized (trimmed, lower-cased) and looked up in
       a fixed table of prompt templates; the selected text is substituted
       in and the prompt goes to the LLMService.
Who:   Called by POST /api/ai/action.

Stateless: nothing about a request is remembered after it returns.
"""

import logging

from quillmind.exceptions import ValidationError
from quillmind.schemas.ai import TextActionResponse
from quillmind.services.gemini_service import gemini_service
from quillmind.services.llm_base import LLMService

logger = logging.getLogger(__name__)

_SUFFIX = "\n\nReturn only the resulting text, without commentary.\n\nText:\n{text}"

ACTION_TEMPLATES = {
    "rewrite": "Rewrite the following text so it reads more clearly while keeping its meaning and tone." + _SUFFIX,
    "summarize": "Summarize the following text in a few concise sentences." + _SUFFIX,
    "expand": "Expand the following text with more detail and description, keeping its voice." + _SUFFIX,
    "shorten": "Shorten the following text, keeping its essential meaning." + _SUFFIX,
    "fix_grammar": "Correct the spelling, grammar and punctuation of the following text. Change nothing else." + _SUFFIX,
    "continue": "Continue the following text for one or two paragraphs in the same style." + _SUFFIX,
}

SUPPORTED_ACTIONS = tuple(ACTION_TEMPLATES)


def build_prompt(action: str, text: str) -> str:
    """
    Map a normalized action onto its template.

    Raises:
        ValidationError: the action is not one of SUPPORTED_ACTIONS
    """
    template = ACTION_TEMPLATES.get(action)
    if template is None:
        raise ValidationError(
            message=(
                f"Unsupported action '{action}'. "
                f"Supported actions: {', '.join(SUPPORTED_ACTIONS)}."
            ),
            field="action",
            context={"action": action},
        )
    return template.format(text=text)


class TextActionService:
    def __init__(self, llm: LLMService = gemini_service):
        self.llm = llm

    async def perform(self, action: str, text: str) -> TextActionResponse:
        """
        Run one text action.

        Raises:
            ValidationError: action or text empty, or action unsupported
            UpstreamError / CircuitBreakerOpenError: from the LLM provider
        """
        normalized = (action or "").strip().lower()
        if not normalized:
            raise ValidationError(message="Action is required.", field="action")
        if not text or not text.strip():
            raise ValidationError(message="Text is required.", field="text")

        prompt = build_prompt(normalized, text)
        result = await self.llm.generate(prompt)

        logger.info(
            "Text action '%s' completed (%d chars in, %d chars out)",
            normalized, len(text), len(result),
        )
        return TextActionResponse(action=normalized, result=result)


# ── Singleton Instance ────────────────────────────────────────────────────
text_action_service = TextActionService()
