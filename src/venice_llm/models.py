"""Core data models for the Venice completion adapter.

Defines the vendor-neutral prompt types handed in by the harness and the
completion events handed back: a tagged union of text fragments, tool calls
and the end-of-choice marker.
"""

from __future__ import annotations

import enum
import json
import uuid
from dataclasses import dataclass, field
from typing import Any

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class Role(str, enum.Enum):
    """Message roles following the standard chat conversation model."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class EventKind(str, enum.Enum):
    """Discriminator for the CompletionEvent tagged union."""

    TEXT_DELTA = "text_delta"
    TOOL_CALL = "tool_call"
    FINISH = "finish"


# ---------------------------------------------------------------------------
# Prompt
# ---------------------------------------------------------------------------


@dataclass
class PromptMessage:
    """A single conversation message.

    ``content`` is whatever the dialect produced; it is coerced to text when
    the payload is built.
    """

    role: Role | str
    content: Any = ""

    @staticmethod
    def system(text: str) -> PromptMessage:
        return PromptMessage(role=Role.SYSTEM, content=text)

    @staticmethod
    def user(text: str) -> PromptMessage:
        return PromptMessage(role=Role.USER, content=text)

    @staticmethod
    def assistant(text: str) -> PromptMessage:
        return PromptMessage(role=Role.ASSISTANT, content=text)


@dataclass
class ToolDefinition:
    """Definition of a tool that can be invoked by the model.

    Every field is optional so that half-built definitions coming out of the
    dialect degrade to empty values instead of failing.
    """

    name: str | None = None
    description: str | None = None
    parameters: dict[str, Any] | None = None


@dataclass
class ToolChoice:
    """Which tool (if any) the model must call.

    Attributes:
        mode: One of ``"auto"``, ``"none"``, ``"required"`` or ``"named"``.
        tool_name: The tool to force when ``mode`` is ``"named"``.
    """

    mode: str = "auto"
    tool_name: str | None = None

    @staticmethod
    def normalize(choice: ToolChoice | str | dict[str, Any] | None) -> ToolChoice | None:
        """Normalize a string, mapping or ToolChoice into a ToolChoice."""
        if choice is None:
            return None
        if isinstance(choice, ToolChoice):
            return choice
        if isinstance(choice, str):
            return ToolChoice(mode=choice)
        if isinstance(choice, dict):
            return ToolChoice(
                mode=choice.get("mode", "named" if choice.get("tool_name") else "auto"),
                tool_name=choice.get("tool_name"),
            )
        return None


@dataclass
class CanonicalPrompt:
    """Vendor-neutral conversation history plus tool declarations."""

    messages: list[PromptMessage | dict[str, Any]] = field(default_factory=list)
    tools: list[ToolDefinition | dict[str, Any]] = field(default_factory=list)
    tool_choice: ToolChoice | str | dict[str, Any] | None = None


@dataclass
class ToolingContext:
    """How tools are exposed to the model for one request.

    Attributes:
        disable_native_tools: When True the dialect emulates tool calling in
            plain text (XML), so no ``tools`` or ``tool_choice`` are sent.
    """

    disable_native_tools: bool = False


# ---------------------------------------------------------------------------
# Completion events (tagged union)
# ---------------------------------------------------------------------------


@dataclass
class TokenUsage:
    """Token consumption reported by the vendor."""

    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    @classmethod
    def from_wire(cls, usage: Any) -> TokenUsage | None:
        """Build from an OpenAI-style ``usage`` object, or None if absent."""
        if not isinstance(usage, dict):
            return None
        return cls(
            input_tokens=usage.get("prompt_tokens") or 0,
            output_tokens=usage.get("completion_tokens") or 0,
        )


@dataclass
class TextDelta:
    """A fragment of assistant text."""

    kind: EventKind = field(default=EventKind.TEXT_DELTA, init=False)
    text: str = ""


@dataclass
class ToolCall:
    """A tool invocation requested by the model.

    ``partial`` marks a provisional snapshot emitted while the call's
    arguments are still streaming in. ``arguments_json`` keeps the raw
    argument text as received. ``generated_id`` is set when the vendor sent
    no id and ``id`` was made up locally.
    """

    kind: EventKind = field(default=EventKind.TOOL_CALL, init=False)
    id: str = field(default_factory=lambda: f"call_{uuid.uuid4().hex[:12]}")
    name: str = ""
    arguments: dict[str, Any] = field(default_factory=dict)
    arguments_json: str = ""
    partial: bool = False
    generated_id: bool = field(default=False, compare=False)

    def __post_init__(self) -> None:
        if self.arguments and not self.arguments_json:
            self.arguments_json = json.dumps(self.arguments)


@dataclass
class Finish:
    """End of the choice: the model stopped generating."""

    kind: EventKind = field(default=EventKind.FINISH, init=False)
    finish_reason: str = "stop"
    usage: TokenUsage | None = None


CompletionEvent = TextDelta | ToolCall | Finish


@dataclass
class CompletionResult:
    """All events of one response folded together."""

    text: str = ""
    tool_calls: list[ToolCall] = field(default_factory=list)
    finish_reason: str | None = None
    usage: TokenUsage | None = None

    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)
