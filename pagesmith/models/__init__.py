"""Data models for Pagesmith."""

from .base import utc_now, new_id
from .blocks import Block, BlockProperties, BlockType, TEXT_BLOCK_TYPES, DIVIDER_CONTENT, new_block_id
from .pages import Page, PageTreeNode, Template
from .database import (
    Database, DatabaseEntry, DatabaseProperty, DatabaseView,
    PropertyType, ViewType, FilterCondition
)
from .settings import Settings
from .generation import GenerationType, GenerationRequest, GenerationResponse, TokenUsage

__all__ = [
    "utc_now",
    "new_id",
    "new_block_id",
    "Block",
    "BlockProperties",
    "BlockType",
    "TEXT_BLOCK_TYPES",
    "DIVIDER_CONTENT",
    "Page",
    "PageTreeNode",
    "Template",
    "Database",
    "DatabaseEntry",
    "DatabaseProperty",
    "DatabaseView",
    "PropertyType",
    "ViewType",
    "FilterCondition",
    "Settings",
    "GenerationType",
    "GenerationRequest",
    "GenerationResponse",
    "TokenUsage"
]
