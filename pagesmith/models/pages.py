"""
Page, page tree and template models for Pagesmith.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from .base import CamelModel, utc_now
from .blocks import Block


class Page(CamelModel):
    """
    A titled document: an ordered sequence of blocks, optionally parented
    under another page by id.
    """

    id: str = Field(
        ...,
        description="Identifier, unique across all pages"
    )

    title: str = Field(
        "",
        description="The page title"
    )

    icon: Optional[str] = Field(
        None,
        description="Emoji or short icon shown next to the title"
    )

    cover: Optional[str] = Field(
        None,
        description="Optional cover image reference"
    )

    content: List[Block] = Field(
        default_factory=list,
        description="The page's blocks in display order"
    )

    parent_id: Optional[str] = Field(
        None,
        description="Id of the parent page; a weak reference, never an owning pointer"
    )

    workspace_id: str = Field(
        "default_workspace",
        description="The workspace the page belongs to"
    )

    created_by: str = Field(
        "system",
        description="Id of the creating user"
    )

    last_edited_by: str = Field(
        "system",
        description="Id of the last user to edit the page"
    )

    created_at: datetime = Field(
        default_factory=utc_now,
        description="When the page was created"
    )

    updated_at: datetime = Field(
        default_factory=utc_now,
        description="When the page was last saved"
    )

    is_template: Optional[bool] = None
    is_public: Optional[bool] = None
    archived: Optional[bool] = None


class PageTreeNode(CamelModel):
    """
    A node of the derived navigation forest. Rebuilt on demand, never stored.
    """

    id: str
    title: str
    icon: Optional[str] = None
    children: List['PageTreeNode'] = Field(default_factory=list)
    has_children: bool = False
    is_expanded: bool = False


class Template(CamelModel):
    """
    A named, categorized, reusable block sequence used to seed new pages.
    """

    id: str = Field(
        ...,
        description="Identifier of the template"
    )

    name: str = Field(
        ...,
        description="Display name"
    )

    description: str = Field(
        "",
        description="What the template is for"
    )

    icon: str = Field(
        "📄",
        description="Emoji shown next to the name"
    )

    category: str = Field(
        "",
        description="Category used for browsing (e.g. 'Productivity')"
    )

    content: List[Block] = Field(
        default_factory=list,
        description="The seed blocks copied into new pages"
    )

    is_public: bool = False
    created_by: str = "system"
    usage_count: int = 0


# Enable forward references for self-referencing model
PageTreeNode.model_rebuild()
