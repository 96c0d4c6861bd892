"""
Built-in default collections.

These are returned whenever a stored collection is missing or cannot be read,
and seed a brand-new workspace. Every call builds fresh objects.
"""

from typing import List

from ..models import Block, BlockType, Page, Settings, Template, utc_now


def _block(block_id: str, block_type: BlockType, content: str) -> Block:
    now = utc_now()
    return Block(id=block_id, type=block_type, content=content, created_at=now, updated_at=now)


def default_pages() -> List[Page]:
    """The welcome page shown in an empty workspace."""
    now = utc_now()
    welcome = Page(
        id="welcome_page",
        title="Welcome to Your Workspace",
        icon="👋",
        content=[
            _block("block_1", BlockType.HEADING_1, "Welcome to Your Workspace"),
            _block("block_2", BlockType.PARAGRAPH,
                   "This is your personal productivity workspace. You can create pages, "
                   "databases, and organize your thoughts and projects here."),
            _block("block_3", BlockType.HEADING_2, "Getting Started"),
            _block("block_4", BlockType.BULLETED_LIST_ITEM,
                   'Create a new page with "new" or by picking a template'),
            _block("block_5", BlockType.BULLETED_LIST_ITEM,
                   'Try different content blocks by typing "/" in any page'),
            _block("block_6", BlockType.BULLETED_LIST_ITEM,
                   "Create databases to organize information in tables, boards, or galleries"),
            _block("block_7", BlockType.BULLETED_LIST_ITEM,
                   "Use AI assistance to generate content and improve your writing"),
        ],
        workspace_id="default_workspace",
        created_by="system",
        last_edited_by="system",
        created_at=now,
        updated_at=now
    )
    return [welcome]


def default_templates() -> List[Template]:
    """The templates every workspace starts with."""
    return [
        Template(
            id="template_meeting_notes",
            name="Meeting Notes",
            description="Template for taking structured meeting notes",
            icon="📝",
            category="Productivity",
            content=[
                _block("tmpl_1", BlockType.HEADING_1, "Meeting Notes"),
                _block("tmpl_2", BlockType.PARAGRAPH, "Date: "),
                _block("tmpl_3", BlockType.PARAGRAPH, "Attendees: "),
                _block("tmpl_4", BlockType.HEADING_2, "Agenda"),
                _block("tmpl_5", BlockType.HEADING_2, "Discussion Points"),
                _block("tmpl_6", BlockType.HEADING_2, "Action Items"),
            ],
            is_public=True,
            created_by="system",
            usage_count=0
        ),
        Template(
            id="template_project_brief",
            name="Project Brief",
            description="Template for project planning and briefs",
            icon="🚀",
            category="Project Management",
            content=[
                _block("tmpl_7", BlockType.HEADING_1, "Project Brief"),
                _block("tmpl_8", BlockType.HEADING_2, "Project Overview"),
                _block("tmpl_9", BlockType.HEADING_2, "Objectives"),
                _block("tmpl_10", BlockType.HEADING_2, "Timeline"),
                _block("tmpl_11", BlockType.HEADING_2, "Resources"),
                _block("tmpl_12", BlockType.HEADING_2, "Success Criteria"),
            ],
            is_public=True,
            created_by="system",
            usage_count=0
        ),
    ]


def default_settings() -> Settings:
    return Settings()
