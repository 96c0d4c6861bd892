"""Block editing: the document model, block commands and autosave."""

from .document import BlockDocument, Snapshot, MOVE_UP, MOVE_DOWN
from .commands import (
    BlockCommand, BLOCK_COMMANDS, AI_CONTINUE,
    find_command, resolve_command, search_commands, group_commands
)
from .autosave import AutosaveScheduler, CallLater, DebouncedTask

__all__ = [
    "BlockDocument",
    "Snapshot",
    "MOVE_UP",
    "MOVE_DOWN",
    "BlockCommand",
    "BLOCK_COMMANDS",
    "AI_CONTINUE",
    "find_command",
    "resolve_command",
    "search_commands",
    "group_commands",
    "AutosaveScheduler",
    "CallLater",
    "DebouncedTask"
]
