"""Page hierarchy and page management."""

from .tree import build_page_tree, filter_page_tree, get_ancestor_ids, would_create_cycle
from .service import PageService, EditorSession

__all__ = [
    "build_page_tree",
    "filter_page_tree",
    "get_ancestor_ids",
    "would_create_cycle",
    "PageService",
    "EditorSession"
]
