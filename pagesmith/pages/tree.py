"""
Page tree construction for navigation.

The stored page collection is flat; each page may name a parent by id. This
module turns that collection into a forest of PageTreeNode objects. Building
is total: dangling parent references make a page a root, and pages caught
in a parent cycle are still shown exactly once.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Set

from ..models import Page, PageTreeNode

UNTITLED = "Untitled"


def _node(page: Page, expanded: Set[str]) -> PageTreeNode:
    return PageTreeNode(
        id=page.id,
        title=page.title if page.title.strip() else UNTITLED,
        icon=page.icon,
        children=[],
        has_children=False,
        is_expanded=page.id in expanded
    )


def _materialize(root: Page, children_by_parent: Dict[str, List[Page]],
                 placed: Set[str], expanded: Set[str]) -> PageTreeNode:
    """Build the subtree under ``root`` without recursion, skipping already placed pages."""
    placed.add(root.id)
    root_node = _node(root, expanded)
    stack = [(root_node, root.id)]

    while stack:
        node, page_id = stack.pop()
        for child in children_by_parent.get(page_id, ()):
            if child.id in placed:
                logging.warning(f"Page {child.id} would appear twice in the page tree; dropping the link from {page_id}")
                continue
            placed.add(child.id)
            child_node = _node(child, expanded)
            node.children.append(child_node)
            stack.append((child_node, child.id))
        node.has_children = bool(node.children)

    return root_node


def _cycle_entry(page: Page, by_id: Dict[str, Page]) -> Page:
    """Follow parent links from ``page`` until one repeats; return the repeated page."""
    seen: Set[str] = set()
    current = page
    while current.id not in seen:
        seen.add(current.id)
        parent = by_id.get(current.parent_id) if current.parent_id else None
        if parent is None:
            return current
        current = parent
    return current


def build_page_tree(pages: Iterable[Page], expanded_ids: Optional[Iterable[str]] = None) -> List[PageTreeNode]:
    """
    Build the navigation forest from a flat page collection.

    Args:
        pages: All pages of the workspace
        expanded_ids: Ids of pages the caller shows expanded

    Returns:
        Root nodes in collection order, each with its nested children
    """
    expanded = set(expanded_ids or ())

    by_id: Dict[str, Page] = {}
    ordered: List[Page] = []
    for page in pages:
        if page.id in by_id:
            logging.warning(f"Duplicate page id {page.id}; keeping the first occurrence")
            continue
        by_id[page.id] = page
        ordered.append(page)

    # Index children by parent in one pass
    children_by_parent: Dict[str, List[Page]] = defaultdict(list)
    roots: List[Page] = []
    for page in ordered:
        parent_id = page.parent_id
        if not parent_id or parent_id == page.id or parent_id not in by_id:
            roots.append(page)
        else:
            children_by_parent[parent_id].append(page)

    placed: Set[str] = set()
    forest = [_materialize(root, children_by_parent, placed, expanded) for root in roots]

    # Whatever is left hangs off a parent cycle
    for page in ordered:
        if page.id in placed:
            continue
        entry = _cycle_entry(page, by_id)
        logging.warning(f"Page {entry.id} is part of a parent cycle; showing it as a root")
        forest.append(_materialize(entry, children_by_parent, placed, expanded))

    return forest


def filter_page_tree(nodes: List[PageTreeNode], query: str) -> List[PageTreeNode]:
    """
    Keep nodes whose title contains ``query`` (case-insensitive), together
    with their ancestors. A matching node keeps its whole subtree.
    """
    if not query:
        return list(nodes)

    wanted = query.lower()
    result = []
    for node in nodes:
        if wanted in node.title.lower():
            result.append(node)
            continue
        children = filter_page_tree(node.children, query)
        if children:
            result.append(node.model_copy(update={"children": children, "has_children": True}))
    return result


def get_ancestor_ids(pages: Iterable[Page], page_id: str) -> List[str]:
    """
    Ids of a page's ancestors, nearest first. Stops at a missing parent or
    when the chain loops.
    """
    parents = {page.id: page.parent_id for page in pages}
    ancestors: List[str] = []
    seen = {page_id}
    current = parents.get(page_id)

    while current and current in parents and current not in seen:
        ancestors.append(current)
        seen.add(current)
        current = parents.get(current)

    return ancestors


def would_create_cycle(pages: Iterable[Page], page_id: str, new_parent_id: Optional[str]) -> bool:
    """True if making ``new_parent_id`` the parent of ``page_id`` would make a page its own ancestor."""
    if not new_parent_id:
        return False
    if new_parent_id == page_id:
        return True
    return page_id in get_ancestor_ids(pages, new_parent_id)
