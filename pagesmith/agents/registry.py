"""
Prompt registry for Pagesmith.

This module defines the system prompt and sampling settings used for each
kind of generation request. Keeping them in one registry makes it easy to
tune a prompt, or override it from config.yaml under ``ai.prompts``.
"""

from dataclasses import dataclass, replace
from typing import Dict, List, Optional
import logging

from ..config import config
from ..models import GenerationType


@dataclass
class PromptConfig:
    """
    Configuration for one generation type.
    """
    name: str
    description: str
    system_prompt: str
    max_tokens: int = 1000
    temperature: float = 0.7


BASE_PERSONA = "You are a helpful AI assistant for a Notion-like productivity app."


class PromptRegistry:
    """
    Registry of system prompts per generation type.
    """

    def __init__(self, apply_overrides: bool = True):
        """
        Initialize the prompt registry with the default prompts.

        Args:
            apply_overrides: Whether to apply ``ai.prompts`` from the configuration
        """
        self._prompts: Dict[str, PromptConfig] = {}
        self._register_default_prompts()
        if apply_overrides:
            self._apply_config_overrides()

    def _register_default_prompts(self):
        """Register the prompts used by the writing assistant."""

        self.register(PromptConfig(
            name=GenerationType.CONTENT.value,
            description="Free-form content for a page",
            system_prompt=f"{BASE_PERSONA} Generate clear, well-structured content that would fit "
                          "naturally in a productivity workspace."
        ))

        self.register(PromptConfig(
            name=GenerationType.CONTINUE.value,
            description="Continues a page from the preceding blocks",
            system_prompt=f"{BASE_PERSONA} Continue writing based on the provided context. "
                          "Write naturally and maintain the same tone and style."
        ))

        self.register(PromptConfig(
            name=GenerationType.SUMMARIZE.value,
            description="Summarizes a piece of text",
            system_prompt="You are a helpful AI assistant. Provide a clear and concise summary of the "
                          "given content. Focus on the main points and key information."
        ))

        self.register(PromptConfig(
            name=GenerationType.IMPROVE.value,
            description="Rewrites text for clarity",
            system_prompt="You are a helpful writing assistant. Improve the given text while maintaining "
                          "its original meaning. Make it clearer, more engaging, and better structured."
        ))

        # Titles are short and should not wander
        self.register(PromptConfig(
            name=GenerationType.TITLE.value,
            description="Suggests a page title",
            system_prompt="You are a helpful AI assistant. Generate a clear, concise title (5-8 words max) "
                          "based on the provided content. Return only the title without quotes.",
            max_tokens=50,
            temperature=0.3
        ))

        self.register(PromptConfig(
            name=GenerationType.TEMPLATE.value,
            description="Drafts a page template as a JSON array of blocks",
            system_prompt=f"{BASE_PERSONA} Generate a practical template based on the requirements. "
                          "Return a JSON array of content blocks."
        ))

    def _apply_config_overrides(self) -> None:
        """Apply ``ai.prompts.<type>`` overrides from the configuration."""
        for name, override in config.prompt_overrides.items():
            current = self._prompts.get(name)
            if current is None:
                logging.warning(f"Ignoring prompt override for unknown generation type '{name}'")
                continue
            if not isinstance(override, dict):
                logging.warning(f"Prompt override for '{name}' must be a mapping")
                continue

            fields = {key: override[key] for key in ("system_prompt", "max_tokens", "temperature") if key in override}
            self._prompts[name] = replace(current, **fields)
            logging.debug(f"Applied prompt override for '{name}': {sorted(fields)}")

    def register(self, prompt: PromptConfig) -> None:
        """
        Register a prompt configuration.

        Args:
            prompt: The prompt configuration to register
        """
        self._prompts[prompt.name] = prompt

    def get(self, generation_type) -> Optional[PromptConfig]:
        """
        Get the prompt configuration for a generation type.

        Args:
            generation_type: A GenerationType or its string value

        Returns:
            The prompt configuration, or None if not found
        """
        return self._prompts.get(GenerationType(generation_type).value)

    def list_types(self) -> List[str]:
        return list(self._prompts.keys())


# Global prompt registry instance
prompt_registry = PromptRegistry()
