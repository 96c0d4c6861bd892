"""Text generation: prompts, the service runner and the writing assistant."""

from ..models import GenerationRequest, GenerationResponse, GenerationType, TokenUsage
from .registry import prompt_registry, PromptRegistry, PromptConfig
from .runner import GenerationRunner, GenerationError
from .slots import GenerationSlots
from .assistant import WritingAssistant

__all__ = [
    "GenerationRequest",
    "GenerationResponse",
    "GenerationType",
    "TokenUsage",
    "prompt_registry",
    "PromptRegistry",
    "PromptConfig",
    "GenerationRunner",
    "GenerationError",
    "GenerationSlots",
    "WritingAssistant"
]
