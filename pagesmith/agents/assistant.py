"""
Writing assistant built on the generation runner.

Each helper builds a prompt for one editor action and turns a failed
generation into a harmless fallback value, so callers never have to handle
service errors themselves.
"""

import asyncio
import logging
import re
from typing import List, Optional, Sequence

from ..editor import BlockDocument
from ..models import Block, GenerationRequest, GenerationResponse, GenerationType
from ..templates import heading_stub, parse_template_blocks
from .runner import GenerationError, GenerationRunner
from .slots import GenerationSlots

CONTINUE_FALLBACK = "Failed to generate content. Please try again."
SUMMARY_FALLBACK = "Failed to generate summary"
TITLE_FALLBACK = "Untitled"

# Number of preceding blocks sent along when continuing a page
CONTEXT_BLOCKS = 3
TITLE_SOURCE_CHARS = 500

TEMPLATE_BLOCK_TYPES = (
    "paragraph, heading_1, heading_2, heading_3, bulleted_list_item, "
    "numbered_list_item, to_do, quote, divider"
)

_SURROUNDING_QUOTES = re.compile(r"^[\"']|[\"']$")


class WritingAssistant:
    """
    Editor-facing generation helpers.
    """

    def __init__(self, runner: GenerationRunner, slots: Optional[GenerationSlots] = None):
        """
        Initialize the writing assistant.

        Args:
            runner: Runner used for all generation requests
            slots: Per-target bookkeeping of running generations
        """
        self.runner = runner
        self.slots = slots or GenerationSlots()

    async def generate(self, prompt: str, context: Optional[str] = None,
                       generation_type: GenerationType = GenerationType.CONTENT) -> GenerationResponse:
        """
        Run a raw generation request.

        Raises:
            GenerationError: If the service fails
        """
        request = GenerationRequest(prompt=prompt, context=context, type=generation_type)
        return await self.runner.generate(request)

    async def continue_writing(self, blocks: Sequence[Block], block_id: str) -> str:
        """
        Write the text that should follow the blocks before ``block_id``.

        Up to three preceding blocks are sent as context. An unknown block
        id continues from the end of the sequence.
        """
        index = next((i for i, block in enumerate(blocks) if block.id == block_id), len(blocks))
        preceding = blocks[max(0, index - CONTEXT_BLOCKS):index]
        context = "\n".join(block.plain_text() for block in preceding)

        prompt = ("Continue writing based on this context. Write the next paragraph or section "
                  f"that would naturally follow:\n\n{context}")

        try:
            response = await self.generate(prompt, "Content continuation for a productivity workspace",
                                           GenerationType.CONTINUE)
            return response.content
        except GenerationError as e:
            logging.error(f"Continue writing failed: {e}")
            return CONTINUE_FALLBACK

    async def summarize(self, text: str, max_length: int = 150) -> str:
        prompt = (f"Please provide a concise summary of the following text in approximately "
                  f"{max_length} characters or less:\n\n{text}")

        try:
            response = await self.generate(prompt, "Text summarization task", GenerationType.SUMMARIZE)
            return response.content
        except GenerationError as e:
            logging.error(f"Summarization failed: {e}")
            return SUMMARY_FALLBACK

    async def suggest_title(self, content: str) -> str:
        """Suggest a title from the first 500 characters of ``content``."""
        prompt = ("Based on this content, suggest a clear and concise title (5-8 words max):\n\n"
                  f"{content[:TITLE_SOURCE_CHARS]}")

        try:
            response = await self.generate(prompt, "Title suggestion task", GenerationType.TITLE)
        except GenerationError as e:
            logging.error(f"Title suggestion failed: {e}")
            return TITLE_FALLBACK

        title = _SURROUNDING_QUOTES.sub("", response.content).strip()
        return title or TITLE_FALLBACK

    async def improve_writing(self, text: str, instruction: Optional[str] = None) -> str:
        """Rewrite ``text``; the original text comes back if generation fails."""
        if instruction:
            prompt = f'Please improve this text according to the instruction: "{instruction}"\n\nText: {text}'
        else:
            prompt = ("Please improve the clarity and flow of this text while maintaining its "
                      f"original meaning:\n\n{text}")

        try:
            response = await self.generate(prompt, "Writing improvement task", GenerationType.IMPROVE)
            return response.content
        except GenerationError as e:
            logging.error(f"Writing improvement failed: {e}")
            return text

    async def generate_template_blocks(self, category: str, description: str) -> List[Block]:
        """
        Draft template blocks for a category and description.

        Returns:
            Parsed blocks; a heading-plus-description stub when the answer
            is unusable, or a heading-only stub when the service failed
        """
        prompt = f"""Create a {category} template with the following requirements: {description}.

Return the template as a JSON array of content blocks. Each block should have this structure:
{{
  "id": "unique_id",
  "type": "block_type",
  "content": "block_content",
  "properties": {{}}
}}

Use these block types: {TEMPLATE_BLOCK_TYPES}.

Make sure the content is practical and useful for the specified category."""

        try:
            response = await self.generate(prompt, "Template generation task", GenerationType.TEMPLATE)
        except GenerationError as e:
            logging.error(f"Template generation failed: {e}")
            return heading_stub(category)

        return parse_template_blocks(response.content, category, description)

    async def _continue_into(self, document: BlockDocument, block_id: str) -> Optional[str]:
        content = await self.continue_writing(document.blocks, block_id)
        if document.get(block_id) is None:
            logging.info(f"Block {block_id} was removed while generating; discarding result")
            return None
        document.update_content(block_id, content)
        return content

    async def continue_block(self, document: BlockDocument, block_id: str) -> Optional[str]:
        """
        Fill a block with generated continuation text.

        Runs in the block's generation slot: starting another generation for
        the same block cancels this one. The result is written only if the
        block still exists when the answer arrives.

        Returns:
            The written text, or None if the run was superseded or the block is gone
        """
        task = self.slots.start(block_id, self._continue_into(document, block_id))
        await asyncio.wait({task})

        if task.cancelled():
            logging.debug(f"Generation for block {block_id} was superseded")
            return None
        return task.result()
