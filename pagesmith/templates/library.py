"""
Template library.

Templates are named block sequences used to seed new pages. The library
browses and searches the stored templates, turns a template into a new page,
and asks the writing assistant to draft new templates from a description.
"""

import copy
import json
import logging
import re
from typing import Any, List, Mapping, Optional

from ..models import Block, BlockType, Page, Template, new_block_id, new_id
from ..storage import PersistenceStore

ALL_CATEGORIES = "all"

GENERATED_TEMPLATE_NAME = "AI Generated Template"
GENERATED_TEMPLATE_CATEGORY = "AI Generated"
GENERATED_TEMPLATE_ICON = "🤖"

# Browsing categories offered next to "all"
TEMPLATE_CATEGORIES = [
    "Productivity",
    "Project Management",
    "Meeting",
    "Planning",
    "Creative",
    "Personal",
]

_JSON_ARRAY = re.compile(r"\[[\s\S]*\]")


def heading_stub(category: str) -> List[Block]:
    """The single-heading template used when the assistant could not be reached."""
    return [Block.create(BlockType.HEADING_1, f"{category} Template")]


def fallback_stub(category: str, description: str) -> List[Block]:
    """Heading plus the request text, used when the assistant's answer is unusable."""
    return heading_stub(category) + [Block.create(BlockType.PARAGRAPH, description)]


def parse_template_blocks(raw: str, category: str, description: str) -> List[Block]:
    """
    Extract template blocks from generated text.

    The first bracketed JSON array found in ``raw`` is decoded. Items that
    are not objects are skipped, unknown block types become paragraphs and
    missing or repeated ids are replaced.

    Args:
        raw: Text returned by the generation service
        category: Requested template category
        description: What the template was requested for

    Returns:
        The parsed blocks, or a heading-plus-description stub when no
        usable block could be found
    """
    match = _JSON_ARRAY.search(raw or "")
    if not match:
        logging.warning("Generated template contains no JSON array, using fallback")
        return fallback_stub(category, description)

    try:
        items = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        logging.warning(f"Generated template is not valid JSON, using fallback: {e}")
        return fallback_stub(category, description)

    if not isinstance(items, list):
        return fallback_stub(category, description)

    blocks: List[Block] = []
    seen = set()
    for item in items:
        if not isinstance(item, Mapping):
            continue
        block = Block.coerce(item)
        if block.id in seen:
            block = block.model_copy(update={"id": new_block_id()})
        seen.add(block.id)
        blocks.append(block)

    if not blocks:
        logging.warning("Generated template has no usable blocks, using fallback")
        return fallback_stub(category, description)

    return blocks


class TemplateLibrary:
    """
    Browses, instantiates and generates templates kept in a PersistenceStore.
    """

    def __init__(self, store: PersistenceStore):
        self.store = store

    def list_templates(self) -> List[Template]:
        return self.store.load_templates()

    def get(self, template_id: str) -> Optional[Template]:
        for template in self.list_templates():
            if template.id == template_id:
                return template
        return None

    def categories(self) -> List[str]:
        """Known categories followed by any others found in stored templates."""
        result = list(TEMPLATE_CATEGORIES)
        known = {category.lower() for category in result}
        for template in self.list_templates():
            if template.category and template.category.lower() not in known:
                known.add(template.category.lower())
                result.append(template.category)
        return result

    def search(self, query: str = "", category: str = ALL_CATEGORIES) -> List[Template]:
        """
        Filter templates by text and category.

        Args:
            query: Case-insensitive substring of the name or description
            category: Category name (case-insensitive), or "all"

        Returns:
            Matching templates in stored order
        """
        wanted = query.lower()
        wanted_category = (category or ALL_CATEGORIES).lower()

        results = []
        for template in self.list_templates():
            if wanted and wanted not in template.name.lower() and wanted not in template.description.lower():
                continue
            if wanted_category != ALL_CATEGORIES and template.category.lower() != wanted_category:
                continue
            results.append(template)
        return results

    def add(self, template: Template) -> Template:
        """Append a template and save the collection."""
        templates = self.list_templates()
        templates.append(template)
        self.store.save_templates(templates)
        logging.info(f"Added template {template.id} '{template.name}'")
        return template

    def instantiate(self, template_id: str, title: Optional[str] = None,
                    parent_id: Optional[str] = None, user_id: str = "system",
                    workspace_id: str = "default_workspace") -> Page:
        """
        Build a new, unsaved page from a template.

        Blocks are copied under fresh ids so the page never shares ids with
        the template. The template's usage count is incremented and saved.

        Raises:
            KeyError: If no template has that id
        """
        templates = self.list_templates()
        index = next((i for i, t in enumerate(templates) if t.id == template_id), None)
        if index is None:
            raise KeyError(f"Template not found: {template_id}")

        template = templates[index]
        blocks = [
            Block.create(
                block_type=block.type,
                content=copy.deepcopy(block.content),
                properties=copy.deepcopy(block.properties)
            )
            for block in template.content
        ]

        page = Page(
            id=new_id("page"),
            title=title or template.name,
            icon=template.icon,
            content=blocks,
            parent_id=parent_id,
            workspace_id=workspace_id,
            created_by=user_id,
            last_edited_by=user_id
        )

        templates[index] = template.model_copy(update={"usage_count": template.usage_count + 1})
        self.store.save_templates(templates)
        return page

    async def generate(self, description: str, assistant: Any, category: str = "custom") -> Template:
        """
        Ask the assistant for a template and save it.

        Args:
            description: What the template should cover
            assistant: Object with an async ``generate_template_blocks(category, description)``
            category: Category passed to the assistant

        Returns:
            The saved template
        """
        blocks = await assistant.generate_template_blocks(category, description)

        template = Template(
            id=new_id("custom"),
            name=GENERATED_TEMPLATE_NAME,
            description=description,
            icon=GENERATED_TEMPLATE_ICON,
            category=GENERATED_TEMPLATE_CATEGORY,
            content=blocks,
            is_public=False,
            created_by="ai",
            usage_count=0
        )
        return self.add(template)
