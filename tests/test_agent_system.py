"""
Unit tests for the generation system.

Tests the prompt registry, the generation runner against a mocked HTTP
transport, the writing assistant's fallbacks and per-block generation slots.
"""

import asyncio
import json
import unittest
from unittest.mock import patch

import httpx
from pydantic import ValidationError

from pagesmith.agents import (
    GenerationError, GenerationRunner, GenerationSlots, PromptConfig, PromptRegistry, WritingAssistant
)
from pagesmith.editor import BlockDocument
from pagesmith.models import Block, BlockType, GenerationRequest, GenerationType


def ok(text, **extra):
    return httpx.Response(200, json={"model": "test-model", "response": text, **extra})


class TestPromptRegistry(unittest.TestCase):
    """Test prompt registry functionality."""

    def setUp(self):
        self.registry = PromptRegistry(apply_overrides=False)

    def test_default_prompts_registered(self):
        self.assertEqual(
            sorted(self.registry.list_types()),
            sorted(t.value for t in GenerationType)
        )

    def test_sampling_settings(self):
        title = self.registry.get(GenerationType.TITLE)
        self.assertEqual(title.max_tokens, 50)
        self.assertEqual(title.temperature, 0.3)

        for generation_type in ("content", "continue", "summarize", "improve", "template"):
            prompt = self.registry.get(generation_type)
            self.assertEqual(prompt.max_tokens, 1000)
            self.assertEqual(prompt.temperature, 0.7)

    def test_template_prompt_asks_for_json(self):
        self.assertIn("JSON array", self.registry.get("template").system_prompt)

    def test_unknown_type_raises(self):
        with self.assertRaises(ValueError):
            self.registry.get("poetry")

    def test_custom_registration(self):
        self.registry.register(PromptConfig(
            name="summarize",
            description="Terse summaries",
            system_prompt="Be terse.",
            max_tokens=80
        ))
        self.assertEqual(self.registry.get("summarize").system_prompt, "Be terse.")
        self.assertEqual(self.registry.get("summarize").max_tokens, 80)

    @patch('pagesmith.agents.registry.config')
    def test_config_overrides(self, mock_config):
        mock_config.prompt_overrides = {
            "improve": {"system_prompt": "Polish it.", "temperature": 0.2},
            "unknown": {"system_prompt": "ignored"},
            "title": "not a mapping"
        }

        registry = PromptRegistry()

        improve = registry.get("improve")
        self.assertEqual(improve.system_prompt, "Polish it.")
        self.assertEqual(improve.temperature, 0.2)
        self.assertEqual(improve.max_tokens, 1000)
        self.assertEqual(registry.get("title").max_tokens, 50)
        self.assertNotIn("unknown", registry.list_types())


class TestGenerationRequest(unittest.TestCase):

    def test_defaults(self):
        request = GenerationRequest(prompt="Write something")
        self.assertEqual(request.type, GenerationType.CONTENT)
        self.assertIsNone(request.context)

    def test_blank_prompt_rejected(self):
        with self.assertRaises(ValidationError):
            GenerationRequest(prompt="   ")

    def test_unknown_type_rejected(self):
        with self.assertRaises(ValidationError):
            GenerationRequest(prompt="x", type="poetry")


class GenerationTestCase(unittest.IsolatedAsyncioTestCase):
    """Base class wiring a runner to a mocked transport."""

    def handle(self, request):
        return ok("generated text")

    async def asyncSetUp(self):
        self.requests = []

        async def handler(request):
            self.requests.append(json.loads(request.content))
            result = self.handle(request)
            if asyncio.iscoroutine(result):
                result = await result
            return result

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        self.runner = GenerationRunner(
            host="http://ollama.test",
            model="test-model",
            registry=PromptRegistry(apply_overrides=False),
            client=client
        )
        self.assistant = WritingAssistant(self.runner)

    async def asyncTearDown(self):
        await self.runner.aclose()


class TestGenerationRunner(GenerationTestCase):

    def handle(self, request):
        return ok("  A fine answer.  ", prompt_eval_count=12, eval_count=30)

    async def test_payload_and_response(self):
        response = await self.runner.generate(
            GenerationRequest(prompt="Hello", context="Weekly notes", type=GenerationType.TITLE)
        )

        self.assertEqual(response.content, "A fine answer.")
        self.assertEqual(response.model, "test-model")
        self.assertEqual(response.usage.prompt_tokens, 12)
        self.assertEqual(response.usage.completion_tokens, 30)
        self.assertEqual(response.usage.total_tokens, 42)

        payload = self.requests[0]
        self.assertEqual(payload["model"], "test-model")
        self.assertEqual(payload["prompt"], "Hello")
        self.assertFalse(payload["stream"])
        self.assertTrue(payload["system"].endswith(" Context: Weekly notes"))
        self.assertEqual(payload["options"], {"num_predict": 50, "temperature": 0.3})

    async def test_no_context_leaves_system_prompt_alone(self):
        await self.runner.generate(GenerationRequest(prompt="Hello"))
        self.assertNotIn("Context:", self.requests[0]["system"])


class TestGenerationRunnerErrors(unittest.IsolatedAsyncioTestCase):

    async def run_with(self, handler):
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        async with GenerationRunner(host="http://ollama.test", model="m", client=client,
                                    registry=PromptRegistry(apply_overrides=False)) as runner:
            return await runner.generate(GenerationRequest(prompt="Hello"))

    async def test_http_error(self):
        with self.assertRaises(GenerationError):
            await self.run_with(lambda request: httpx.Response(500, text="boom"))

    async def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with self.assertRaises(GenerationError):
            await self.run_with(handler)

    async def test_missing_content(self):
        with self.assertRaises(GenerationError):
            await self.run_with(lambda request: httpx.Response(200, json={"done": True}))

    async def test_invalid_json(self):
        with self.assertRaises(GenerationError):
            await self.run_with(lambda request: httpx.Response(200, text="<html>"))

    async def test_usage_absent(self):
        response = await self.run_with(lambda request: ok("text"))
        self.assertIsNone(response.usage)


class TestWritingAssistant(GenerationTestCase):

    def handle(self, request):
        return ok('"Quarterly Planning Overview"')

    async def test_continue_writing_sends_three_preceding_blocks(self):
        blocks = [Block.create(BlockType.PARAGRAPH, f"para {i}", block_id=f"b{i}") for i in range(5)]

        await self.assistant.continue_writing(blocks, "b4")

        payload = self.requests[0]
        self.assertTrue(payload["prompt"].endswith("para 1\npara 2\npara 3"))
        self.assertNotIn("para 0", payload["prompt"])
        self.assertIn("Continue writing", payload["system"])

    async def test_suggest_title_strips_quotes_and_truncates(self):
        title = await self.assistant.suggest_title("z" * 2000)

        self.assertEqual(title, "Quarterly Planning Overview")
        self.assertEqual(self.requests[0]["prompt"].count("z"), 500)

    async def test_summarize_mentions_length(self):
        await self.assistant.summarize("Long text", max_length=80)
        self.assertIn("approximately 80 characters", self.requests[0]["prompt"])

    async def test_improve_with_instruction(self):
        await self.assistant.improve_writing("rough draft", instruction="make it formal")
        self.assertIn('"make it formal"', self.requests[0]["prompt"])


class TestWritingAssistantFallbacks(GenerationTestCase):

    def handle(self, request):
        return httpx.Response(503, text="unavailable")

    async def test_fallbacks(self):
        blocks = [Block.create(BlockType.PARAGRAPH, "context", block_id="a")]

        self.assertEqual(await self.assistant.continue_writing(blocks, "a"),
                         "Failed to generate content. Please try again.")
        self.assertEqual(await self.assistant.summarize("text"), "Failed to generate summary")
        self.assertEqual(await self.assistant.suggest_title("text"), "Untitled")
        self.assertEqual(await self.assistant.improve_writing("keep me"), "keep me")

    async def test_template_failure_gives_heading_stub(self):
        blocks = await self.assistant.generate_template_blocks("Travel", "Packing list")

        self.assertEqual(len(blocks), 1)
        self.assertEqual(blocks[0].type, BlockType.HEADING_1)
        self.assertEqual(blocks[0].content, "Travel Template")

    async def test_continue_block_writes_fallback(self):
        document = BlockDocument([Block.create(BlockType.PARAGRAPH, "", block_id="a")])
        await self.assistant.continue_block(document, "a")
        self.assertEqual(document.get("a").content, "Failed to generate content. Please try again.")


class TestContinueBlock(GenerationTestCase):

    async def asyncSetUp(self):
        await super().asyncSetUp()
        self.document = BlockDocument([
            Block.create(BlockType.HEADING_1, "Trip", block_id="h"),
            Block.create(BlockType.PARAGRAPH, "", block_id="p"),
        ])
        self.gate = asyncio.Event()
        self.calls = 0
        self.on_request = None

    async def handle(self, request):
        self.calls += 1
        number = self.calls
        if self.on_request:
            self.on_request(number)
        if number == 1 and self.hold_first:
            await self.gate.wait()
        return ok(f"answer {number}")

    hold_first = False

    async def test_writes_result_into_block(self):
        result = await self.assistant.continue_block(self.document, "p")

        self.assertEqual(result, "answer 1")
        self.assertEqual(self.document.get("p").content, "answer 1")
        self.assertTrue(self.requests[0]["prompt"].endswith("Trip"))

    async def test_deleted_block_is_not_written(self):
        self.on_request = lambda number: self.document.delete("p")

        result = await self.assistant.continue_block(self.document, "p")

        self.assertIsNone(result)
        self.assertIsNone(self.document.get("p"))
        self.assertEqual(len(self.document), 1)

    async def test_newer_request_supersedes_older(self):
        self.hold_first = True

        first = asyncio.ensure_future(self.assistant.continue_block(self.document, "p"))
        while self.calls == 0:
            await asyncio.sleep(0)

        second = await self.assistant.continue_block(self.document, "p")
        first_result = await first

        self.assertIsNone(first_result)
        self.assertEqual(second, "answer 2")
        self.assertEqual(self.document.get("p").content, "answer 2")


class TestGenerationSlots(unittest.IsolatedAsyncioTestCase):

    async def test_targets_are_independent(self):
        slots = GenerationSlots()

        async def answer(value):
            await asyncio.sleep(0)
            return value

        results = await asyncio.gather(slots.run("a", answer(1)), slots.run("b", answer(2)))
        self.assertEqual(results, [1, 2])
        self.assertFalse(slots.is_running("a"))

    async def test_start_cancels_previous_for_same_target(self):
        slots = GenerationSlots()
        never = asyncio.Event()

        first = slots.start("a", never.wait())
        second = slots.start("a", asyncio.sleep(0, result="done"))

        self.assertEqual(await second, "done")
        with self.assertRaises(asyncio.CancelledError):
            await first
        self.assertTrue(first.cancelled())

    async def test_cancel(self):
        slots = GenerationSlots()
        never = asyncio.Event()

        task = slots.start("a", never.wait())
        self.assertTrue(slots.is_running("a"))
        self.assertTrue(slots.cancel("a"))
        with self.assertRaises(asyncio.CancelledError):
            await task
        self.assertFalse(slots.cancel("a"))


if __name__ == '__main__':
    unittest.main(verbosity=2)
