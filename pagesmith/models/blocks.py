"""
Block data models for Pagesmith.

A block is a single typed unit of content within a page. Blocks are immutable
once created; every edit produces a new block via ``model_copy``.
"""

import copy
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from pydantic import ConfigDict, Field, field_validator

from .base import CamelModel, new_id, utc_now


class BlockType(str, Enum):
    """Supported block types."""

    # Text blocks
    PARAGRAPH = "paragraph"
    HEADING_1 = "heading_1"
    HEADING_2 = "heading_2"
    HEADING_3 = "heading_3"

    # List blocks
    BULLETED_LIST_ITEM = "bulleted_list_item"
    NUMBERED_LIST_ITEM = "numbered_list_item"
    TO_DO = "to_do"
    TOGGLE = "toggle"

    # Special blocks
    QUOTE = "quote"
    CODE = "code"
    DIVIDER = "divider"

    # Media and embeds
    IMAGE = "image"
    VIDEO = "video"
    FILE = "file"
    TABLE = "table"
    DATABASE = "database"
    EMBED = "embed"
    BOOKMARK = "bookmark"


# Block types whose content is plain text
TEXT_BLOCK_TYPES = frozenset({
    BlockType.PARAGRAPH,
    BlockType.HEADING_1,
    BlockType.HEADING_2,
    BlockType.HEADING_3,
    BlockType.BULLETED_LIST_ITEM,
    BlockType.NUMBERED_LIST_ITEM,
    BlockType.TO_DO,
    BlockType.TOGGLE,
    BlockType.QUOTE,
    BlockType.CODE,
})

# Fixed content of a divider block
DIVIDER_CONTENT = "---"


class BlockProperties(dict):
    """
    Read-only properties mapping of a block.

    Blocks are shared between document snapshots, so their properties cannot
    be changed in place; build a new mapping and a new block instead.
    """

    def _read_only(self, *args, **kwargs):
        raise TypeError("Block properties are read-only; edit a copy and replace the block")

    __setitem__ = _read_only
    __delitem__ = _read_only
    __ior__ = _read_only
    clear = _read_only
    pop = _read_only
    popitem = _read_only
    setdefault = _read_only
    update = _read_only

    def __copy__(self) -> "BlockProperties":
        return self

    def __deepcopy__(self, memo) -> "BlockProperties":
        return BlockProperties(copy.deepcopy(dict(self), memo))

    def __reduce__(self):
        return (BlockProperties, (dict(self),))


def new_block_id() -> str:
    """Generate a fresh block identifier."""
    return new_id("block")


class Block(CamelModel):
    """
    A single typed unit of content within a page.

    Ordering is positional: a block has no order field, its index in the
    owning page's sequence is its order.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(
        ...,
        description="Identifier, unique within the owning page"
    )

    type: BlockType = Field(
        BlockType.PARAGRAPH,
        description="The block type; decides how content is interpreted"
    )

    content: Any = Field(
        "",
        description="Plain text for text blocks, a fixed literal for dividers, or a structured payload"
    )

    properties: Dict[str, Any] = Field(
        default_factory=dict,
        description="Open type-specific properties (e.g. 'completed' for to-do blocks)"
    )

    created_at: datetime = Field(
        default_factory=utc_now,
        description="When the block was created"
    )

    updated_at: datetime = Field(
        default_factory=utc_now,
        description="When the block was last edited"
    )

    @field_validator("properties", mode="after")
    @classmethod
    def _freeze_properties(cls, value: Dict[str, Any]) -> BlockProperties:
        return BlockProperties(copy.deepcopy(dict(value)))

    @property
    def is_empty(self) -> bool:
        """True when the block holds no content."""
        return self.content is None or self.content == ""

    def plain_text(self) -> str:
        """Content as text, for prompts and previews."""
        if self.content is None:
            return ""
        return self.content if isinstance(self.content, str) else str(self.content)

    @classmethod
    def create(cls, block_type: BlockType = BlockType.PARAGRAPH, content: Any = "",
               properties: Optional[Dict[str, Any]] = None, block_id: Optional[str] = None) -> "Block":
        """Create a block with a fresh id and current timestamps."""
        now = utc_now()
        return cls(
            id=block_id or new_block_id(),
            type=block_type,
            content=content,
            properties=dict(properties or {}),
            created_at=now,
            updated_at=now
        )

    @classmethod
    def coerce(cls, data: Mapping[str, Any]) -> "Block":
        """
        Build a block from an untrusted block-shaped mapping.

        Unknown types become paragraphs, a missing id is generated, and a
        non-mapping ``properties`` value is discarded.

        Args:
            data: Mapping with any of ``id``, ``type``, ``content``, ``properties``

        Returns:
            A valid block
        """
        try:
            block_type = BlockType(data.get("type"))
        except (ValueError, TypeError):
            block_type = BlockType.PARAGRAPH

        properties = data.get("properties")
        if not isinstance(properties, Mapping):
            properties = {}

        content = data.get("content")
        if content is None:
            content = DIVIDER_CONTENT if block_type == BlockType.DIVIDER else ""

        block_id = data.get("id")
        return cls.create(
            block_type=block_type,
            content=content,
            properties=dict(properties),
            block_id=str(block_id) if block_id else None
        )
