"""
QuillMind Backend — Text Action Schemas
=========================================

What:  Body of POST /api/ai/action and its response.
"""

from pydantic import BaseModel, Field


class TextActionRequest(BaseModel):
    action: str = Field(description="Action verb, e.g. 'rewrite' or 'summarize'")
    text: str = Field(description="Selected span of the open file")


class TextActionResponse(BaseModel):
    action: str
    result: str = Field(description="Transformed text returned by the AI service")
