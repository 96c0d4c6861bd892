"""
Pagesmith: a block-based page workspace.

Pages are ordered sequences of typed blocks arranged in a page tree, kept in
a key-value store, and edited through a block document with autosave.
"""

__version__ = "0.1.0"
__author__ = "Pagesmith Project"

# Import main components
from .models import Block, BlockType, Page, PageTreeNode, Template
from .storage import PersistenceStore, MemoryBackend, DuckDBBackend
from .editor import BlockDocument, AutosaveScheduler
from .pages import PageService, build_page_tree
from .templates import TemplateLibrary
from .agents import GenerationRunner, WritingAssistant

__all__ = [
    "Block",
    "BlockType",
    "Page",
    "PageTreeNode",
    "Template",
    "PersistenceStore",
    "MemoryBackend",
    "DuckDBBackend",
    "BlockDocument",
    "AutosaveScheduler",
    "PageService",
    "build_page_tree",
    "TemplateLibrary",
    "GenerationRunner",
    "WritingAssistant"
]
