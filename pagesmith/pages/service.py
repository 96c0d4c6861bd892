"""
Page management on top of the persistence store.

PageService creates, renames, moves and deletes pages and opens them for
editing. An open page is an EditorSession: the page record, its block
document and the autosave scheduler that writes edits back.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from ..config import config
from ..editor import AutosaveScheduler, BlockDocument, CallLater
from ..models import Block, BlockType, Page, PageTreeNode, new_id, utc_now
from ..storage import PersistenceStore
from ..templates import TemplateLibrary
from .tree import build_page_tree, would_create_cycle


@dataclass
class EditorSession:
    """A page opened for editing."""
    page: Page
    document: BlockDocument
    autosave: AutosaveScheduler

    def close(self) -> None:
        """Stop autosaving; a pending write is dropped."""
        self.autosave.close()


class PageService:
    """
    High-level page operations for one workspace.
    """

    def __init__(self, store: PersistenceStore, templates: Optional[TemplateLibrary] = None):
        """
        Initialize the page service.

        Args:
            store: Where pages are kept
            templates: Template library (defaults to one over the same store)
        """
        self.store = store
        self.templates = templates or TemplateLibrary(store)

    def create_page(self, title: str, icon: str = "📄", description: str = "",
                    parent_id: Optional[str] = None, user_id: Optional[str] = None,
                    workspace_id: Optional[str] = None) -> Page:
        """
        Create and save a new page.

        The page starts with its title as a heading, the description (if
        any) as a paragraph, and an empty paragraph to write in.

        Raises:
            ValueError: If the title is blank
        """
        title = title.strip()
        if not title:
            raise ValueError("Page title must not be blank")

        blocks = [Block.create(BlockType.HEADING_1, title)]
        if description.strip():
            blocks.append(Block.create(BlockType.PARAGRAPH, description.strip()))
        blocks.append(Block.create(BlockType.PARAGRAPH, ""))

        user = user_id or config.default_user
        page = Page(
            id=new_id("page"),
            title=title,
            icon=icon,
            content=blocks,
            parent_id=parent_id,
            workspace_id=workspace_id or config.workspace_id,
            created_by=user,
            last_edited_by=user
        )

        self.store.save_page(page)
        logging.info(f"Created page {page.id} '{title}'")
        return page

    def create_from_template(self, template_id: str, title: Optional[str] = None,
                             parent_id: Optional[str] = None) -> Page:
        """
        Create and save a page seeded from a template.

        Raises:
            KeyError: If no template has that id
        """
        page = self.templates.instantiate(
            template_id,
            title=title,
            parent_id=parent_id,
            user_id=config.default_user,
            workspace_id=config.workspace_id
        )
        self.store.save_page(page)
        logging.info(f"Created page {page.id} from template {template_id}")
        return page

    def get(self, page_id: str) -> Optional[Page]:
        return self.store.get_page(page_id)

    def rename(self, page_id: str, title: str) -> Optional[Page]:
        """Change a page's title. Returns the saved page, or None if it does not exist."""
        page = self.store.get_page(page_id)
        if page is None:
            return None

        return self.store.update_page(page, {
            "title": title,
            "last_edited_by": config.default_user,
            "updated_at": utc_now()
        })

    def reparent(self, page_id: str, new_parent_id: Optional[str]) -> bool:
        """
        Move a page under another page, or to the top level with None.

        Returns:
            False if either page is missing or the move would create a cycle
        """
        pages = self.store.load_pages()
        page = next((p for p in pages if p.id == page_id), None)
        if page is None:
            logging.warning(f"Cannot move missing page {page_id}")
            return False

        if new_parent_id is not None and not any(p.id == new_parent_id for p in pages):
            logging.warning(f"Cannot move page {page_id} under missing page {new_parent_id}")
            return False

        if would_create_cycle(pages, page_id, new_parent_id):
            logging.warning(f"Moving page {page_id} under {new_parent_id} would create a cycle")
            return False

        self.store.update_page(page, {"parent_id": new_parent_id, "updated_at": utc_now()})
        return True

    def delete(self, page_id: str) -> List[str]:
        """Delete a page and its direct children; returns the removed ids."""
        return self.store.delete_page(page_id)

    def tree(self, expanded_ids=None) -> List[PageTreeNode]:
        return build_page_tree(self.store.load_pages(), expanded_ids)

    def open(self, page_id: str, call_later: Optional[CallLater] = None) -> EditorSession:
        """
        Open a page for editing with autosave attached.

        Autosave runs on the current event loop unless ``call_later`` is given.

        Raises:
            KeyError: If the page does not exist
            RuntimeError: If no timer is given and no event loop is running
        """
        page = self.store.get_page(page_id)
        if page is None:
            raise KeyError(f"Page not found: {page_id}")

        document = BlockDocument.from_page(page)
        page = page.model_copy(update={"content": list(document.blocks), "last_edited_by": config.default_user})

        autosave = AutosaveScheduler(self.store, page, document, call_later=call_later)
        return EditorSession(page=page, document=document, autosave=autosave)
