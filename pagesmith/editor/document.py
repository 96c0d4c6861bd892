"""
In-memory block document for one open page.

The document owns the ordered block sequence of a page and the "active
block" cursor. Every mutation returns a snapshot: an immutable tuple of
immutable blocks. A mutation that changes nothing returns the very same
tuple object and notifies nobody, so observers can detect changes by
identity alone.

Requests that would break the document (deleting its last block, inserting
after a block that no longer exists, moving past either end) are ignored
rather than raised.
"""

import copy
import logging
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Set, Tuple

from ..models import Block, BlockProperties, BlockType, DIVIDER_CONTENT, Page, new_block_id, utc_now
from .commands import resolve_command

Snapshot = Tuple[Block, ...]

MOVE_UP = "up"
MOVE_DOWN = "down"


class BlockDocument:
    """
    Ordered collection of blocks with the editing operations of a page.
    """

    def __init__(self, blocks: Iterable[Block] = ()):
        """
        Initialize the document.

        Args:
            blocks: Initial blocks; an empty sequence starts the document
                with a single empty paragraph
        """
        initial = tuple(block.model_copy(deep=True) for block in blocks)
        if not initial:
            initial = (Block.create(),)

        self._blocks: Snapshot = self._with_unique_ids(initial)
        self.active_block_id: Optional[str] = None
        self._listeners: List[Callable[[Snapshot], None]] = []

    @classmethod
    def from_page(cls, page: Page) -> "BlockDocument":
        return cls(page.content)

    @staticmethod
    def _with_unique_ids(blocks: Snapshot) -> Snapshot:
        seen: Set[str] = set()
        result = []
        for block in blocks:
            if block.id in seen:
                replacement = new_block_id()
                while replacement in seen:
                    replacement = new_block_id()
                logging.warning(f"Duplicate block id {block.id} reassigned to {replacement}")
                block = block.model_copy(update={"id": replacement})
            seen.add(block.id)
            result.append(block)
        return tuple(result)

    # Read access

    @property
    def blocks(self) -> Snapshot:
        """The current snapshot."""
        return self._blocks

    def __len__(self) -> int:
        return len(self._blocks)

    def __iter__(self) -> Iterator[Block]:
        return iter(self._blocks)

    def index_of(self, block_id: str) -> Optional[int]:
        """Position of a block, or None if it is not in the document."""
        for index, block in enumerate(self._blocks):
            if block.id == block_id:
                return index
        return None

    def get(self, block_id: str) -> Optional[Block]:
        index = self.index_of(block_id)
        return None if index is None else self._blocks[index]

    def to_page(self, page: Page) -> Page:
        """Copy of ``page`` holding this document's blocks and a fresh ``updated_at``."""
        return page.model_copy(update={"content": list(self._blocks), "updated_at": utc_now()})

    # Observers

    def subscribe(self, listener: Callable[[Snapshot], None]) -> Callable[[], None]:
        """
        Register a listener for new snapshots.

        Args:
            listener: Called with every snapshot produced by a real change

        Returns:
            A function that unregisters the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _commit(self, blocks: List[Block]) -> Snapshot:
        self._blocks = tuple(blocks)
        for listener in list(self._listeners):
            try:
                listener(self._blocks)
            except Exception as e:
                logging.error(f"Document listener failed: {e}")
        return self._blocks

    def _fresh_id(self, taken: Optional[Set[str]] = None) -> str:
        used = {block.id for block in self._blocks}
        if taken:
            used |= taken
        block_id = new_block_id()
        while block_id in used:
            block_id = new_block_id()
        return block_id

    # Focus

    def focus(self, block_id: Optional[str]) -> None:
        """Move the active-block cursor; unknown ids are ignored."""
        if block_id is None or self.index_of(block_id) is not None:
            self.active_block_id = block_id

    # Mutations

    def insert_after(self, anchor_id: str, block_type: BlockType = BlockType.PARAGRAPH,
                     content: Any = "") -> Snapshot:
        """
        Insert a new empty block right after another block and focus it.

        Args:
            anchor_id: Id of the block to insert after
            block_type: Type of the new block
            content: Initial content of the new block

        Returns:
            The new snapshot, or the current one if the anchor is gone
        """
        index = self.index_of(anchor_id)
        if index is None:
            logging.debug(f"insert_after: anchor {anchor_id} not found, ignoring")
            return self._blocks

        block = Block.create(block_type=BlockType(block_type), content=content, block_id=self._fresh_id())
        blocks = list(self._blocks)
        blocks.insert(index + 1, block)

        self.active_block_id = block.id
        return self._commit(blocks)

    def delete(self, block_id: str) -> Snapshot:
        """
        Remove a block. The last remaining block is never removed.
        """
        index = self.index_of(block_id)
        if index is None or len(self._blocks) == 1:
            logging.debug(f"delete: refusing to remove {block_id}")
            return self._blocks

        blocks = list(self._blocks)
        del blocks[index]

        if self.active_block_id == block_id:
            self.active_block_id = blocks[max(index - 1, 0)].id

        return self._commit(blocks)

    def backspace(self, block_id: str) -> Snapshot:
        """
        Handle backspace in a block: an empty block is removed and the
        previous block takes focus. Non-empty blocks and the only block of
        the document are left alone.
        """
        index = self.index_of(block_id)
        if index is None or len(self._blocks) == 1 or not self._blocks[index].is_empty:
            return self._blocks

        blocks = list(self._blocks)
        del blocks[index]
        self.active_block_id = blocks[max(index - 1, 0)].id

        return self._commit(blocks)

    def move(self, block_id: str, direction: str) -> Snapshot:
        """
        Swap a block with its neighbour.

        Args:
            block_id: Block to move
            direction: "up" or "down"

        Raises:
            ValueError: If direction is neither "up" nor "down"
        """
        if direction not in (MOVE_UP, MOVE_DOWN):
            raise ValueError(f"Unknown direction '{direction}'")

        index = self.index_of(block_id)
        if index is None:
            return self._blocks

        target = index - 1 if direction == MOVE_UP else index + 1
        if target < 0 or target >= len(self._blocks):
            return self._blocks

        blocks = list(self._blocks)
        blocks[index], blocks[target] = blocks[target], blocks[index]
        return self._commit(blocks)

    def duplicate(self, block_id: str) -> Snapshot:
        """Insert a copy of a block, under a new id, right after the original."""
        index = self.index_of(block_id)
        if index is None:
            return self._blocks

        original = self._blocks[index]
        clone = Block.create(
            block_type=original.type,
            content=copy.deepcopy(original.content),
            properties=copy.deepcopy(original.properties),
            block_id=self._fresh_id()
        )

        blocks = list(self._blocks)
        blocks.insert(index + 1, clone)
        return self._commit(blocks)

    def _replace(self, block_id: str, **changes: Any) -> Snapshot:
        index = self.index_of(block_id)
        if index is None:
            return self._blocks

        changes["updated_at"] = utc_now()
        blocks = list(self._blocks)
        blocks[index] = blocks[index].model_copy(update=changes)
        return self._commit(blocks)

    def update_content(self, block_id: str, content: Any) -> Snapshot:
        """Replace a block's content and bump its ``updated_at``."""
        return self._replace(block_id, content=content)

    def update_properties(self, block_id: str, patch: Dict[str, Any]) -> Snapshot:
        """Merge ``patch`` into a block's properties and bump its ``updated_at``."""
        block = self.get(block_id)
        if block is None:
            return self._blocks
        return self._replace(block_id, properties=BlockProperties({**block.properties, **copy.deepcopy(patch)}))

    def change_type(self, block_id: str, new_type: BlockType) -> Snapshot:
        """
        Change a block's type. Content is kept as it is, except that a
        divider always holds the divider literal.
        """
        new_type = BlockType(new_type)
        block = self.get(block_id)
        if block is None:
            return self._blocks

        content = DIVIDER_CONTENT if new_type == BlockType.DIVIDER else block.content
        if block.type == new_type and block.content == content:
            return self._blocks

        return self._replace(block_id, type=new_type, content=content)

    def split_paste(self, block_id: str, raw_text: str) -> Snapshot:
        """
        Paste multi-line text into a block.

        Blank lines are dropped. The first line replaces the block's content
        and every following line becomes a new paragraph, in order, right
        after it. Text without a line break is left to the caller.

        Returns:
            The new snapshot, or the current one if nothing was pasted
        """
        if "\n" not in raw_text and "\r" not in raw_text:
            return self._blocks

        index = self.index_of(block_id)
        if index is None:
            return self._blocks

        lines = [line for line in raw_text.splitlines() if line.strip()]
        if not lines:
            return self._blocks

        now = utc_now()
        blocks = list(self._blocks)
        blocks[index] = blocks[index].model_copy(update={"content": lines[0], "updated_at": now})

        taken: Set[str] = set()
        new_blocks = []
        for line in lines[1:]:
            block_id_for_line = self._fresh_id(taken)
            taken.add(block_id_for_line)
            new_blocks.append(Block.create(BlockType.PARAGRAPH, line, block_id=block_id_for_line))

        blocks[index + 1:index + 1] = new_blocks
        return self._commit(blocks)

    def apply_slash_command(self, block_id: str, token: str) -> Snapshot:
        """
        Turn a block into the type selected by a "/" command token.

        Unknown tokens and assistant commands leave the document unchanged.
        """
        resolved = resolve_command(token)
        if resolved is None:
            return self._blocks

        block_type, _initial_content = resolved
        return self.change_type(block_id, block_type)
