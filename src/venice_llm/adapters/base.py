"""Base protocol for vendor adapters."""

from __future__ import annotations

from collections.abc import AsyncIterator, Mapping
from typing import Any, Protocol, runtime_checkable

from venice_llm.models import CanonicalPrompt, CompletionEvent, ToolingContext
from venice_llm.streaming import ResponseDecoder


@runtime_checkable
class VendorAdapter(Protocol):
    """Protocol every vendor variant satisfies.

    Each adapter translates between the vendor-neutral prompt/event models
    and one vendor's wire format. Provider selection and retries belong to
    the caller.
    """

    def provider_name(self) -> str:
        """Return the provider identifier (e.g. 'venice')."""
        ...

    def build_payload(
        self,
        prompt: CanonicalPrompt,
        params: Mapping[str, Any] | None = None,
        tooling: ToolingContext | None = None,
    ) -> dict[str, Any]:
        """Build the outbound request body."""
        ...

    def decode(self, body: str | bytes) -> list[CompletionEvent]:
        """Decode a complete non-streamed response body."""
        ...

    def new_decoder(self, partial_tool_calls: bool = False) -> ResponseDecoder:
        """Return a fresh pipeline for decoding one streamed response."""
        ...

    async def complete(
        self,
        prompt: CanonicalPrompt,
        params: Mapping[str, Any] | None = None,
        tooling: ToolingContext | None = None,
    ) -> list[CompletionEvent]:
        """Send a non-streaming completion request."""
        ...

    def stream(
        self,
        prompt: CanonicalPrompt,
        params: Mapping[str, Any] | None = None,
        tooling: ToolingContext | None = None,
        partial_tool_calls: bool = False,
    ) -> AsyncIterator[CompletionEvent]:
        """Send a streaming request, yielding events as they arrive."""
        ...
