"""Smoke tests against the live Venice API (skipped without VENICE_API_KEY)."""

from __future__ import annotations

import pytest

from venice_llm.models import CanonicalPrompt, Finish, PromptMessage, TextDelta
from venice_llm.streaming import StreamCollector

pytestmark = pytest.mark.smoke


@pytest.mark.asyncio
async def test_stream_simple_prompt(venice_adapter) -> None:
    prompt = CanonicalPrompt(messages=[PromptMessage.user("Reply with the single word: pong")])
    events = [e async for e in venice_adapter.stream(prompt, {"max_tokens": 16})]
    assert any(isinstance(e, TextDelta) for e in events)
    assert isinstance(events[-1], Finish)

    collector = StreamCollector()
    collector.extend(events)
    assert "pong" in collector.to_result().text.lower()


@pytest.mark.asyncio
async def test_complete_simple_prompt(venice_adapter) -> None:
    prompt = CanonicalPrompt(messages=[PromptMessage.user("Say hi")])
    events = await venice_adapter.complete(prompt, {"max_tokens": 16})
    assert isinstance(events[-1], Finish)
