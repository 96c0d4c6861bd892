"""
Unit tests for the block document and the block command catalogue.
"""

import random
import unittest

from pagesmith.editor import (
    BLOCK_COMMANDS, AI_CONTINUE, BlockDocument, MOVE_DOWN, MOVE_UP,
    find_command, group_commands, resolve_command, search_commands
)
from pagesmith.models import Block, BlockType
from pagesmith.storage.defaults import default_pages


def ids(snapshot):
    return [block.id for block in snapshot]


def contents(snapshot):
    return [block.content for block in snapshot]


class TestBlockDocumentBasics(unittest.TestCase):

    def setUp(self):
        self.blocks = [
            Block.create(BlockType.HEADING_1, "Title", block_id="a"),
            Block.create(BlockType.PARAGRAPH, "First", block_id="b"),
            Block.create(BlockType.PARAGRAPH, "", block_id="c"),
        ]
        self.doc = BlockDocument(self.blocks)
        self.snapshots = []
        self.doc.subscribe(self.snapshots.append)

    def test_empty_document_gets_one_paragraph(self):
        doc = BlockDocument([])
        self.assertEqual(len(doc), 1)
        self.assertEqual(doc.blocks[0].type, BlockType.PARAGRAPH)
        self.assertEqual(doc.blocks[0].content, "")

    def test_duplicate_initial_ids_are_reassigned(self):
        doc = BlockDocument([Block.create(block_id="x"), Block.create(block_id="x")])
        self.assertEqual(len(set(ids(doc.blocks))), 2)
        self.assertEqual(doc.blocks[0].id, "x")

    def test_insert_after_seven_block_page(self):
        page = default_pages()[0]
        doc = BlockDocument.from_page(page)
        self.assertEqual(len(doc), 7)

        snapshot = doc.insert_after("block_4")

        self.assertEqual(len(snapshot), 8)
        new_block = snapshot[4]
        self.assertEqual(ids(snapshot)[:4], ["block_1", "block_2", "block_3", "block_4"])
        self.assertEqual(ids(snapshot)[5:], ["block_5", "block_6", "block_7"])
        self.assertEqual(new_block.type, BlockType.PARAGRAPH)
        self.assertEqual(new_block.content, "")
        self.assertNotIn(new_block.id, ids(page.content))
        self.assertEqual(doc.active_block_id, new_block.id)

    def test_insert_after_missing_anchor_is_noop(self):
        before = self.doc.blocks
        self.assertIs(self.doc.insert_after("nope"), before)
        self.assertEqual(self.snapshots, [])

    def test_delete_keeps_last_block(self):
        doc = BlockDocument([Block.create(block_id="only")])
        before = doc.blocks
        self.assertIs(doc.delete("only"), before)
        self.assertEqual(len(doc), 1)

    def test_delete_moves_focus_to_previous(self):
        self.doc.focus("b")
        snapshot = self.doc.delete("b")

        self.assertEqual(ids(snapshot), ["a", "c"])
        self.assertEqual(self.doc.active_block_id, "a")
        self.assertEqual(len(self.snapshots), 1)

    def test_backspace_only_removes_empty_blocks(self):
        before = self.doc.blocks
        self.assertIs(self.doc.backspace("b"), before)

        snapshot = self.doc.backspace("c")
        self.assertEqual(ids(snapshot), ["a", "b"])
        self.assertEqual(self.doc.active_block_id, "b")

    def test_backspace_on_first_block_focuses_new_first(self):
        doc = BlockDocument([Block.create(block_id="e"), Block.create(BlockType.PARAGRAPH, "x", block_id="f")])
        doc.backspace("e")
        self.assertEqual(doc.active_block_id, "f")

    def test_move_round_trip(self):
        original = ids(self.doc.blocks)

        self.doc.move("b", MOVE_DOWN)
        self.assertEqual(ids(self.doc.blocks), ["a", "c", "b"])

        self.doc.move("b", MOVE_UP)
        self.assertEqual(ids(self.doc.blocks), original)

    def test_move_past_edges_is_noop(self):
        before = self.doc.blocks
        self.assertIs(self.doc.move("a", MOVE_UP), before)
        self.assertIs(self.doc.move("c", MOVE_DOWN), before)
        self.assertEqual(self.snapshots, [])

    def test_move_rejects_unknown_direction(self):
        with self.assertRaises(ValueError):
            self.doc.move("a", "sideways")

    def test_duplicate_then_delete_round_trip(self):
        original = self.doc.blocks

        snapshot = self.doc.duplicate("b")
        clone = snapshot[2]
        self.assertEqual(clone.content, "First")
        self.assertEqual(clone.type, BlockType.PARAGRAPH)
        self.assertNotEqual(clone.id, "b")

        snapshot = self.doc.delete(clone.id)
        self.assertEqual(ids(snapshot), ids(original))
        self.assertEqual(contents(snapshot), contents(original))

    def test_duplicate_copies_properties_deeply(self):
        doc = BlockDocument([Block.create(BlockType.TO_DO, "task", {"tags": ["x"]}, block_id="t")])
        snapshot = doc.duplicate("t")

        snapshot[1].properties["tags"].append("y")
        self.assertEqual(doc.get("t").properties["tags"], ["x"])

    def test_snapshot_block_properties_are_read_only(self):
        self.doc.update_properties("b", {"completed": False})
        before = self.doc.blocks
        self.snapshots.clear()

        with self.assertRaises(TypeError):
            self.doc.blocks[1].properties["completed"] = True
        with self.assertRaises(TypeError):
            self.doc.blocks[1].properties.update(completed=True)

        self.assertIs(self.doc.blocks, before)
        self.assertEqual(self.doc.get("b").properties, {"completed": False})
        self.assertEqual(self.snapshots, [])

    def test_caller_blocks_are_copied_in(self):
        payload = {"rows": [1, 2]}
        block = Block.create(BlockType.TABLE, payload, block_id="t")
        doc = BlockDocument([block])

        payload["rows"].append(3)
        block.content["rows"].append(4)
        self.assertEqual(doc.get("t").content, {"rows": [1, 2]})

    def test_update_properties_does_not_share_the_patch(self):
        patch = {"tags": ["x"]}
        self.doc.update_properties("b", patch)
        patch["tags"].append("y")
        self.assertEqual(self.doc.get("b").properties["tags"], ["x"])

    def test_update_content_bumps_timestamp(self):
        before = self.doc.get("b")
        snapshot = self.doc.update_content("b", "Changed")

        self.assertEqual(self.doc.get("b").content, "Changed")
        self.assertGreaterEqual(self.doc.get("b").updated_at, before.updated_at)
        self.assertIs(snapshot, self.doc.blocks)
        self.assertEqual(before.content, "First")

    def test_update_properties_merges(self):
        self.doc.update_properties("b", {"checked": True})
        self.doc.update_properties("b", {"color": "red"})
        self.assertEqual(self.doc.get("b").properties, {"checked": True, "color": "red"})

    def test_change_type_keeps_content_except_divider(self):
        self.doc.change_type("b", BlockType.QUOTE)
        self.assertEqual(self.doc.get("b").type, BlockType.QUOTE)
        self.assertEqual(self.doc.get("b").content, "First")

        self.doc.change_type("b", "divider")
        self.assertEqual(self.doc.get("b").type, BlockType.DIVIDER)
        self.assertEqual(self.doc.get("b").content, "---")

    def test_change_type_to_same_type_is_noop(self):
        before = self.doc.blocks
        self.assertIs(self.doc.change_type("a", BlockType.HEADING_1), before)

    def test_split_paste(self):
        snapshot = self.doc.split_paste("b", "line1\nline2\n\nline3")

        self.assertEqual(len(snapshot), 5)
        self.assertEqual(contents(snapshot)[1:4], ["line1", "line2", "line3"])
        self.assertEqual(snapshot[1].id, "b")
        self.assertTrue(all(block.type == BlockType.PARAGRAPH for block in snapshot[2:4]))
        self.assertEqual(snapshot[4].id, "c")
        self.assertEqual(len(set(ids(snapshot))), 5)

    def test_split_paste_without_newline_is_noop(self):
        before = self.doc.blocks
        self.assertIs(self.doc.split_paste("b", "just one line"), before)

    def test_split_paste_handles_crlf(self):
        snapshot = self.doc.split_paste("c", "one\r\ntwo\r\n")
        self.assertEqual(contents(snapshot)[2:], ["one", "two"])

    def test_unknown_ids_are_noops(self):
        before = self.doc.blocks
        for result in (
            self.doc.delete("zzz"),
            self.doc.backspace("zzz"),
            self.doc.move("zzz", MOVE_UP),
            self.doc.duplicate("zzz"),
            self.doc.update_content("zzz", "x"),
            self.doc.update_properties("zzz", {"a": 1}),
            self.doc.change_type("zzz", BlockType.CODE),
            self.doc.split_paste("zzz", "a\nb"),
        ):
            self.assertIs(result, before)
        self.assertEqual(self.snapshots, [])

    def test_unsubscribe_stops_notifications(self):
        seen = []
        unsubscribe = self.doc.subscribe(seen.append)
        self.doc.update_content("a", "One")
        unsubscribe()
        self.doc.update_content("a", "Two")
        self.assertEqual(len(seen), 1)

    def test_focus_ignores_unknown_ids(self):
        self.doc.focus("b")
        self.doc.focus("missing")
        self.assertEqual(self.doc.active_block_id, "b")

    def test_to_page_carries_blocks(self):
        page = default_pages()[0]
        doc = BlockDocument.from_page(page)
        doc.update_content("block_1", "Renamed")

        saved = doc.to_page(page)
        self.assertEqual(saved.content[0].content, "Renamed")
        self.assertEqual(page.content[0].content, "Welcome to Your Workspace")


class TestBlockDocumentInvariants(unittest.TestCase):

    def test_random_mutations_keep_ids_unique_and_document_non_empty(self):
        rng = random.Random(42)
        doc = BlockDocument()

        for step in range(300):
            target = rng.choice(doc.blocks).id
            action = rng.randrange(7)
            if action == 0:
                doc.insert_after(target)
            elif action == 1:
                doc.delete(target)
            elif action == 2:
                doc.duplicate(target)
            elif action == 3:
                doc.move(target, rng.choice([MOVE_UP, MOVE_DOWN]))
            elif action == 4:
                doc.split_paste(target, f"x{step}\ny{step}")
            elif action == 5:
                doc.backspace(target)
            else:
                doc.update_content(target, "")

            block_ids = ids(doc.blocks)
            self.assertGreaterEqual(len(block_ids), 1)
            self.assertEqual(len(block_ids), len(set(block_ids)))


class TestSlashCommands(unittest.TestCase):

    def setUp(self):
        self.doc = BlockDocument([Block.create(BlockType.PARAGRAPH, "Hello", block_id="p")])

    def test_find_command_by_alias_and_title(self):
        self.assertEqual(find_command("/h1").block_type, BlockType.HEADING_1)
        self.assertEqual(find_command("todo").block_type, BlockType.TO_DO)
        self.assertEqual(find_command("/Bulleted list").block_type, BlockType.BULLETED_LIST_ITEM)
        self.assertIsNone(find_command("/nothing"))
        self.assertIsNone(find_command("/"))

    def test_resolve_command(self):
        self.assertEqual(resolve_command("/divider"), (BlockType.DIVIDER, "---"))
        self.assertEqual(resolve_command("/quote"), (BlockType.QUOTE, ""))
        self.assertIsNone(resolve_command("/ai"))

    def test_apply_slash_command_changes_type(self):
        self.doc.apply_slash_command("p", "/h2")
        self.assertEqual(self.doc.get("p").type, BlockType.HEADING_2)
        self.assertEqual(self.doc.get("p").content, "Hello")

        self.doc.apply_slash_command("p", "/hr")
        self.assertEqual(self.doc.get("p").content, "---")

    def test_unknown_and_assistant_commands_leave_document_alone(self):
        before = self.doc.blocks
        self.assertIs(self.doc.apply_slash_command("p", "/bogus"), before)
        self.assertIs(self.doc.apply_slash_command("p", f"/{AI_CONTINUE}"), before)

    def test_search_and_group(self):
        results = search_commands("heading")
        self.assertEqual([c.key for c in results], ["heading_1", "heading_2", "heading_3"])

        grouped = group_commands(BLOCK_COMMANDS)
        names = [name for name, _ in grouped]
        self.assertEqual(names, ["Basic blocks", "Lists", "Media", "Advanced", "AI Assistant"])
        self.assertEqual(sum(len(items) for _, items in grouped), len(BLOCK_COMMANDS))


if __name__ == '__main__':
    unittest.main(verbosity=2)
