"""Streaming pipeline and event aggregation.

``ResponseDecoder`` chains the frame decoder, the message processor and the
tool-call deduplicator for exactly one response. ``StreamCollector`` folds the
resulting events into a ``CompletionResult``.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Iterable
from dataclasses import dataclass, field

from venice_llm.decoding import SSE_DATA_PREFIX, StreamFrameDecoder
from venice_llm.dedup import ToolCallDeduplicator
from venice_llm.errors import StreamError
from venice_llm.models import (
    CompletionEvent,
    CompletionResult,
    Finish,
    TextDelta,
    TokenUsage,
    ToolCall,
)
from venice_llm.processor import MessageProcessor

logger = logging.getLogger(__name__)


class ResponseDecoder:
    """Decodes one streamed response, chunk by chunk.

    Owns its frame buffer, open tool calls and seen-call set; create a new
    instance per response. To cancel, stop feeding and drop the instance:
    nothing further is emitted.

    Args:
        partial_tool_calls: Emit provisional tool calls while arguments
            stream in.
        line_prefix: Data line prefix of the wire framing, or None for
            newline-delimited JSON.
    """

    def __init__(
        self,
        partial_tool_calls: bool = False,
        line_prefix: str | None = SSE_DATA_PREFIX,
    ) -> None:
        self.frames = StreamFrameDecoder(line_prefix=line_prefix)
        self.processor = MessageProcessor(partial_tool_calls=partial_tool_calls)
        self.dedup = ToolCallDeduplicator()
        self._finished = False

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def usage(self) -> TokenUsage | None:
        """Latest usage seen, including a trailer sent after the Finish event."""
        return self.processor.usage

    def feed(self, chunk: str | bytes) -> list[CompletionEvent]:
        """Decode one transport chunk into the events it completes."""
        if self._finished:
            raise StreamError("feed() called after finish()")
        return self.dedup.filter(self._process(self.frames.feed(chunk)))

    def finish(self) -> list[CompletionEvent]:
        """Flush buffered frames and finalize open tool calls.

        Must be called exactly once, after the last chunk.
        """
        if self._finished:
            raise StreamError("finish() called twice")
        self._finished = True
        events = self._process(self.frames.finish())
        trailing = self.processor.finish()
        if trailing:
            logger.debug("Finalized %d tool call(s) left open at stream end", len(trailing))
        events.extend(trailing)
        return self.dedup.filter(events)

    def _process(self, frames: list) -> list[CompletionEvent]:
        events: list[CompletionEvent] = []
        for frame in frames:
            events.extend(self.processor.process_streamed_message(frame))
        return events


@dataclass
class StreamCollector:
    """Accumulates CompletionEvents into a CompletionResult.

    Provisional tool calls are skipped; only final calls are collected.
    """

    text_parts: list[str] = field(default_factory=list)
    tool_calls: list[ToolCall] = field(default_factory=list)
    finish_reason: str | None = None
    usage: TokenUsage | None = None

    def process_event(self, event: CompletionEvent) -> None:
        """Process a single event."""
        if isinstance(event, TextDelta):
            self.text_parts.append(event.text)
        elif isinstance(event, ToolCall):
            if not event.partial:
                self.tool_calls.append(event)
        elif isinstance(event, Finish):
            self.finish_reason = event.finish_reason
            if event.usage is not None:
                self.usage = event.usage

    def extend(self, events: Iterable[CompletionEvent]) -> None:
        for event in events:
            self.process_event(event)

    def to_result(self) -> CompletionResult:
        """Assemble accumulated events into a CompletionResult."""
        return CompletionResult(
            text="".join(self.text_parts),
            tool_calls=list(self.tool_calls),
            finish_reason=self.finish_reason,
            usage=self.usage,
        )

    async def collect(self, stream: AsyncIterator[CompletionEvent]) -> CompletionResult:
        """Consume an entire async stream and return the assembled result."""
        async for event in stream:
            self.process_event(event)
        return self.to_result()
