"""Map OpenAI-compatible chat-completion objects to CompletionEvents.

``process_message`` handles a whole non-streamed response. For streams,
``process_streamed_message`` is fed one parsed frame at a time and assembles
tool calls from their fragments.
"""

from __future__ import annotations

import itertools
import json
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any

from venice_llm.models import CompletionEvent, Finish, TextDelta, TokenUsage, ToolCall

logger = logging.getLogger(__name__)


@dataclass
class _PendingToolCall:
    """Fragments of one streamed tool call received so far."""

    id: str = ""
    name: str = ""
    arguments_json: str = ""
    fallback_id: str = field(default_factory=lambda: f"call_{uuid.uuid4().hex[:12]}")

    def snapshot(self) -> ToolCall:
        return ToolCall(
            id=self.id or self.fallback_id,
            generated_id=not self.id,
            name=self.name.strip(),
            arguments=parse_partial_json(self.arguments_json),
            arguments_json=self.arguments_json,
            partial=True,
        )

    def finalize(self) -> ToolCall:
        return ToolCall(
            id=self.id or self.fallback_id,
            generated_id=not self.id,
            name=self.name.strip(),
            arguments=_parse_arguments(self.arguments_json, self.name),
            arguments_json=self.arguments_json,
        )


class MessageProcessor:
    """Decodes ``choices[0]`` of chat-completion objects.

    Tool-call fragments continue the open call with the same ``id``, else the
    one with the same ``index``, else (carrying neither) the call opened last.
    A fragment whose ``id`` differs from the open call at its ``index`` starts
    a new call, as vendors that number every parallel call ``index: 0`` do.
    Starting a new call completes every call still open, since
    OpenAI-compatible vendors stream calls one after another.
    ``finish_reason`` completes all of them.

    Usage is attached to the Finish of the frame that carries it, or of any
    later frame. A usage trailer sent after ``finish_reason`` (OpenAI's
    ``stream_options.include_usage``) arrives once Finish is already out; it
    is still recorded on :attr:`usage`.

    Args:
        partial_tool_calls: Emit a provisional ``ToolCall(partial=True)``
            after every fragment, in addition to the final one.
    """

    def __init__(self, partial_tool_calls: bool = False) -> None:
        self.partial_tool_calls = partial_tool_calls
        self.usage: TokenUsage | None = None
        self._open: dict[int, _PendingToolCall] = {}
        self._keys_by_id: dict[str, int] = {}
        self._keys_by_index: dict[Any, int] = {}
        self._last_key: int | None = None
        self._next_key = itertools.count()

    # -----------------------------------------------------------------
    # Batch
    # -----------------------------------------------------------------

    def process_message(self, obj: Any) -> list[CompletionEvent]:
        """Extract text, tool calls and finish from a complete response."""
        choice = _first_choice(obj)
        if choice is None:
            logger.debug("Response carries no choices")
            return []

        events: list[CompletionEvent] = []
        message = choice.get("message")
        if not isinstance(message, dict):
            message = {}

        content = message.get("content")
        if isinstance(content, str) and content:
            events.append(TextDelta(text=content))

        for raw in message.get("tool_calls") or []:
            if not isinstance(raw, dict):
                continue
            fn = raw.get("function") if isinstance(raw.get("function"), dict) else {}
            name = fn.get("name") if isinstance(fn.get("name"), str) else ""
            arguments = fn.get("arguments")
            if isinstance(arguments, dict):
                args, args_json = arguments, json.dumps(arguments)
            else:
                args_json = arguments if isinstance(arguments, str) else ""
                args = _parse_arguments(args_json, name)
            call = ToolCall(name=name.strip(), arguments=args, arguments_json=args_json)
            if isinstance(raw.get("id"), str) and raw["id"]:
                call.id = raw["id"]
            else:
                call.generated_id = True
            events.append(call)

        events.append(
            Finish(
                finish_reason=choice.get("finish_reason") or "stop",
                usage=TokenUsage.from_wire(obj.get("usage")),
            )
        )
        return events

    # -----------------------------------------------------------------
    # Streaming
    # -----------------------------------------------------------------

    def process_streamed_message(self, obj: Any) -> list[CompletionEvent]:
        """Decode one stream frame into zero or more events."""
        if not isinstance(obj, dict):
            return []

        usage = TokenUsage.from_wire(obj.get("usage"))
        if usage is not None:
            self.usage = usage

        choice = _first_choice(obj)
        if choice is None:
            return []

        events: list[CompletionEvent] = []
        delta = choice.get("delta")
        if not isinstance(delta, dict):
            delta = {}

        content = delta.get("content")
        if isinstance(content, str) and content:
            events.append(TextDelta(text=content))

        for fragment in delta.get("tool_calls") or []:
            if isinstance(fragment, dict):
                events.extend(self._add_fragment(fragment))

        finish_reason = choice.get("finish_reason")
        if finish_reason:
            events.extend(self._finalize_open())
            events.append(Finish(finish_reason=finish_reason, usage=self.usage))
        return events

    def finish(self) -> list[CompletionEvent]:
        """Finalize tool calls the vendor never marked complete."""
        return self._finalize_open()

    def _key_for(self, call_id: str, index: Any) -> int | None:
        """Return the open call a fragment continues, or None to start one."""
        if call_id:
            if call_id in self._keys_by_id:
                return self._keys_by_id[call_id]
            key = self._keys_by_index.get(index) if index is not None else None
            # an id-less opening fragment takes the first id sent at its index
            if key is not None and not self._open[key].id:
                return key
            return None
        if index is not None:
            return self._keys_by_index.get(index)
        return self._last_key

    def _add_fragment(self, fragment: dict[str, Any]) -> list[CompletionEvent]:
        events: list[CompletionEvent] = []
        call_id = fragment.get("id") if isinstance(fragment.get("id"), str) else ""
        index = fragment.get("index") if isinstance(fragment.get("index"), (int, str)) else None

        key = self._key_for(call_id, index)
        if key is None:
            events.extend(self._finalize_open())
            key = next(self._next_key)
            self._open[key] = _PendingToolCall()
            if index is not None:
                self._keys_by_index[index] = key
        pending = self._open[key]
        self._last_key = key

        if call_id and not pending.id:
            pending.id = call_id
            self._keys_by_id[call_id] = key

        fn = fragment.get("function")
        if isinstance(fn, dict):
            if isinstance(fn.get("name"), str):
                pending.name += fn["name"]
            arguments = fn.get("arguments")
            if isinstance(arguments, str):
                pending.arguments_json += arguments
            elif isinstance(arguments, dict):
                pending.arguments_json += json.dumps(arguments)

        if self.partial_tool_calls:
            events.append(pending.snapshot())
        return events

    def _finalize_open(self) -> list[CompletionEvent]:
        calls: list[CompletionEvent] = [p.finalize() for p in self._open.values()]
        self._open.clear()
        self._keys_by_id.clear()
        self._keys_by_index.clear()
        self._last_key = None
        return calls


def _first_choice(obj: Any) -> dict[str, Any] | None:
    if not isinstance(obj, dict):
        return None
    choices = obj.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    return choices[0] if isinstance(choices[0], dict) else None


def _parse_arguments(text: str, tool_name: str) -> dict[str, Any]:
    if not text.strip():
        return {}
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.warning("Failed to parse tool call arguments for %s: %s", tool_name, exc)
        return {}
    if not isinstance(parsed, dict):
        logger.warning("Tool call arguments for %s are not an object", tool_name)
        return {}
    return parsed


def parse_partial_json(text: str) -> dict[str, Any]:
    """Best-effort parse of a JSON object whose tail has not arrived yet.

    Closes an open string and any open brackets, then parses. Returns ``{}``
    when the text still cannot be read as an object.
    """
    closers: list[str] = []
    in_string = escaped = False
    for ch in text:
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch in "{[":
            closers.append("}" if ch == "{" else "]")
        elif ch in "}]" and closers:
            closers.pop()

    candidate = text
    if in_string:
        # a dangling backslash would escape the closing quote
        candidate = (candidate[:-1] if escaped else candidate) + '"'
    candidate += "".join(reversed(closers))
    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError:
        return {}
    return parsed if isinstance(parsed, dict) else {}
