"""
Request and response models for the text generation service.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class GenerationType(str, Enum):
    """What a generation request is for; selects the system prompt."""
    CONTENT = "content"
    CONTINUE = "continue"
    SUMMARIZE = "summarize"
    IMPROVE = "improve"
    TITLE = "title"
    TEMPLATE = "template"


class GenerationRequest(BaseModel):
    """
    A single prompt sent to the generation service.
    """

    prompt: str = Field(
        ...,
        description="The user prompt; must not be blank"
    )

    context: Optional[str] = Field(
        None,
        description="Extra context appended to the system prompt"
    )

    type: GenerationType = Field(
        GenerationType.CONTENT,
        description="Kind of generation requested"
    )

    @field_validator("prompt")
    @classmethod
    def prompt_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Prompt is required")
        return value


class TokenUsage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class GenerationResponse(BaseModel):
    """
    Text returned by the generation service.
    """
    content: str
    usage: Optional[TokenUsage] = None
    model: Optional[str] = None
