"""Page templates: browsing, instantiation and generation."""

from .library import (
    TemplateLibrary, parse_template_blocks, heading_stub, fallback_stub,
    ALL_CATEGORIES, TEMPLATE_CATEGORIES, GENERATED_TEMPLATE_CATEGORY
)

__all__ = [
    "TemplateLibrary",
    "parse_template_blocks",
    "heading_stub",
    "fallback_stub",
    "ALL_CATEGORIES",
    "TEMPLATE_CATEGORIES",
    "GENERATED_TEMPLATE_CATEGORY"
]
