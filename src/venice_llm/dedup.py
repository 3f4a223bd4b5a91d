"""Drop tool calls that surface more than once in one response."""

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any

from venice_llm.models import CompletionEvent, ToolCall


class ToolCallDeduplicator:
    """Filters repeated ToolCall events out of one response's event stream.

    A call is identified by the id the vendor sent, or by its name and
    arguments when the vendor sent none (ids generated locally are random
    and never match a resend). Provisional (partial) snapshots are tracked
    apart from final calls and also keyed by their argument text, so a
    growing call still streams through while exact repeats are dropped.

    One instance covers one whole response; never share it across responses.
    """

    def __init__(self) -> None:
        self._seen: set[tuple[Any, ...]] = set()

    def filter(self, events: Iterable[CompletionEvent]) -> list[CompletionEvent]:
        """Return *events* in order, minus tool calls already seen."""
        passed: list[CompletionEvent] = []
        for event in events:
            if isinstance(event, ToolCall):
                key = self.identity(event)
                if key in self._seen:
                    continue
                self._seen.add(key)
            passed.append(event)
        return passed

    @staticmethod
    def identity(call: ToolCall) -> tuple[Any, ...]:
        """Key under which *call* counts as seen.

        Partial and final calls never share a key: a final call passes even
        when provisional snapshots with the same id came before it.
        """
        if call.id and not call.generated_id:
            base: tuple[Any, ...] = ("id", call.id)
        else:
            base = ("call", call.name, json.dumps(call.arguments, sort_keys=True, default=str))
        if call.partial:
            return ("partial", *base, call.arguments_json)
        return ("final", *base)
