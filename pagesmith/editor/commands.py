"""
Block commands for the "/" menu.

A command maps a typed token (``/h1``, ``/todo``, ``/divider``) to a block
type and the content a block of that type starts with. Showing the menu and
picking an entry is up to the interface; this module only knows the
catalogue and how to look things up in it.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..models import BlockType, DIVIDER_CONTENT


@dataclass(frozen=True)
class BlockCommand:
    """
    One entry of the block menu.
    """
    key: str
    title: str
    description: str
    icon: str
    category: str
    block_type: Optional[BlockType]
    aliases: Tuple[str, ...] = ()

    @property
    def is_ai_action(self) -> bool:
        """True for entries that ask the assistant instead of changing the block type."""
        return self.block_type is None

    @property
    def initial_content(self) -> str:
        return DIVIDER_CONTENT if self.block_type == BlockType.DIVIDER else ""


# Key of the assistant entry
AI_CONTINUE = "ai_continue"

COMMAND_CATEGORIES: List[Tuple[str, str]] = [
    ("text", "Basic blocks"),
    ("list", "Lists"),
    ("media", "Media"),
    ("advanced", "Advanced"),
    ("ai", "AI Assistant"),
]

BLOCK_COMMANDS: List[BlockCommand] = [
    # Text blocks
    BlockCommand("paragraph", "Text", "Just start writing with plain text", "📝", "text",
                 BlockType.PARAGRAPH, ("text", "p")),
    BlockCommand("heading_1", "Heading 1", "Big section heading", "H1", "text",
                 BlockType.HEADING_1, ("h1",)),
    BlockCommand("heading_2", "Heading 2", "Medium section heading", "H2", "text",
                 BlockType.HEADING_2, ("h2",)),
    BlockCommand("heading_3", "Heading 3", "Small section heading", "H3", "text",
                 BlockType.HEADING_3, ("h3",)),

    # List blocks
    BlockCommand("bulleted_list_item", "Bulleted list", "Create a simple bulleted list", "•", "list",
                 BlockType.BULLETED_LIST_ITEM, ("bullet", "ul", "-")),
    BlockCommand("numbered_list_item", "Numbered list", "Create a list with numbering", "1.", "list",
                 BlockType.NUMBERED_LIST_ITEM, ("number", "ol", "1.")),
    BlockCommand("to_do", "To-do list", "Track tasks with a to-do list", "☐", "list",
                 BlockType.TO_DO, ("todo", "task", "[]")),
    BlockCommand("toggle", "Toggle list", "Toggleable list item", "▶", "list",
                 BlockType.TOGGLE, (">",)),

    # Advanced blocks
    BlockCommand("quote", "Quote", "Capture a quote", '"', "advanced",
                 BlockType.QUOTE, ("blockquote",)),
    BlockCommand("code", "Code", "Capture a code snippet", "{}", "advanced",
                 BlockType.CODE, ("```",)),
    BlockCommand("divider", "Divider", "Visually divide blocks", "―", "advanced",
                 BlockType.DIVIDER, ("hr", "---")),

    # Media blocks
    BlockCommand("image", "Image", "Upload or embed with a link", "🖼️", "media",
                 BlockType.IMAGE, ("img",)),

    # AI blocks
    BlockCommand(AI_CONTINUE, "Continue writing", "Let AI continue the content", "🤖", "ai",
                 None, ("continue", "ai")),
]


def _normalize(token: str) -> str:
    return token.strip().lstrip("/").strip().lower()


def find_command(token: str) -> Optional[BlockCommand]:
    """
    Look up a command by key, alias or title.

    Args:
        token: What the user typed, with or without the leading "/"

    Returns:
        The matching command, or None
    """
    wanted = _normalize(token)
    if not wanted:
        return None

    for command in BLOCK_COMMANDS:
        if wanted == command.key or wanted in command.aliases or wanted == command.title.lower():
            return command
    return None


def resolve_command(token: str) -> Optional[Tuple[BlockType, str]]:
    """
    Resolve a typed token to the block type and initial content it selects.

    Assistant entries and unknown tokens resolve to None.
    """
    command = find_command(token)
    if command is None or command.is_ai_action:
        return None
    return command.block_type, command.initial_content


def search_commands(query: str = "") -> List[BlockCommand]:
    """Filter the catalogue by a case-insensitive match on title or description."""
    if not query:
        return list(BLOCK_COMMANDS)

    wanted = query.lower()
    return [
        command for command in BLOCK_COMMANDS
        if wanted in command.title.lower() or wanted in command.description.lower()
    ]


def group_commands(commands: List[BlockCommand]) -> List[Tuple[str, List[BlockCommand]]]:
    """
    Group commands by category, in menu order, leaving out empty categories.

    Returns:
        List of (category display name, commands) pairs
    """
    grouped = []
    for category_id, category_name in COMMAND_CATEGORIES:
        items = [command for command in commands if command.category == category_id]
        if items:
            grouped.append((category_name, items))
    return grouped
