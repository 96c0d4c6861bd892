"""
Generation runner for Pagesmith.

This module handles communication with an Ollama-compatible text generation
service. Each request is turned into one ``/api/generate`` call using the
system prompt and sampling settings registered for its generation type.
"""

import httpx
import logging
import time
from typing import Any, Dict, Optional

from ..config import config
from ..models import GenerationRequest, GenerationResponse, TokenUsage
from .registry import PromptRegistry, prompt_registry


class GenerationError(Exception):
    """Raised when the generation service cannot produce content."""


class GenerationRunner:
    """
    Sends generation requests to the text generation service.
    """

    def __init__(self, host: Optional[str] = None, model: Optional[str] = None,
                 timeout: Optional[float] = None, registry: Optional[PromptRegistry] = None,
                 client: Optional[httpx.AsyncClient] = None):
        """
        Initialize the generation runner.

        Args:
            host: The service URL (defaults to config value)
            model: The model name to use for inference (defaults to config value)
            timeout: Request timeout in seconds (defaults to config value)
            registry: Prompt registry (defaults to the global registry)
            client: HTTP client to use instead of creating one
        """
        self.host = (host or config.ai_host).rstrip("/")
        self.model = model or config.model_name
        self.registry = registry or prompt_registry
        self.client = client or httpx.AsyncClient(timeout=timeout or config.ai_timeout)

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    def build_payload(self, request: GenerationRequest) -> Dict[str, Any]:
        """
        Build the request body for a generation request.

        The request context, if any, is appended to the system prompt.
        """
        prompt_config = self.registry.get(request.type)
        system_prompt = prompt_config.system_prompt
        if request.context:
            system_prompt = f"{system_prompt} Context: {request.context}"

        return {
            "model": self.model,
            "prompt": request.prompt,
            "system": system_prompt,
            "stream": False,
            "options": {
                "num_predict": prompt_config.max_tokens,
                "temperature": prompt_config.temperature
            }
        }

    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        """
        Run one generation request.

        Args:
            request: The prompt, optional context and generation type

        Returns:
            The generated text with token usage when the service reports it

        Raises:
            GenerationError: If the service is unreachable, answers with an
                error status, or returns no content
        """
        payload = self.build_payload(request)
        start_time = time.time()

        try:
            response = await self.client.post(f"{self.host}/api/generate", json=payload)
            response.raise_for_status()
            result = response.json()
        except httpx.RequestError as e:
            raise GenerationError(f"Failed to connect to generation service: {e}") from e
        except httpx.HTTPStatusError as e:
            raise GenerationError(f"Generation request failed: {e.response.status_code}") from e
        except ValueError as e:
            raise GenerationError(f"Generation service returned invalid JSON: {e}") from e

        content = result.get("response") if isinstance(result, dict) else None
        if not isinstance(content, str) or not content.strip():
            raise GenerationError("No content generated")

        execution_time_ms = int((time.time() - start_time) * 1000)
        logging.debug(f"Generated {request.type.value} content in {execution_time_ms} ms")

        return GenerationResponse(
            content=content.strip(),
            usage=self._usage(result),
            model=result.get("model", self.model)
        )

    @staticmethod
    def _usage(result: Dict[str, Any]) -> Optional[TokenUsage]:
        prompt_tokens = result.get("prompt_eval_count")
        completion_tokens = result.get("eval_count")
        if prompt_tokens is None and completion_tokens is None:
            return None

        prompt_tokens = prompt_tokens or 0
        completion_tokens = completion_tokens or 0
        return TokenUsage(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens
        )
