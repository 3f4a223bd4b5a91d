"""Outbound request payload construction.

Turns a CanonicalPrompt plus caller parameter overrides into the body sent to
an OpenAI-compatible chat-completions endpoint. Everything here is pure: no
I/O, and malformed input degrades to empty values instead of raising.
"""

from __future__ import annotations

import enum
import logging
import uuid
from collections.abc import Mapping
from typing import Any

from venice_llm.models import (
    CanonicalPrompt,
    PromptMessage,
    ToolChoice,
    ToolDefinition,
    ToolingContext,
)

logger = logging.getLogger(__name__)

VENICE_PARAMETER_RENAMES: dict[str, str] = {
    "max_tokens": "max_completion_tokens",
    "temperature": "max_temp",
    "stop_sequences": "stop",
}


def normalize_parameters(
    params: Mapping[str, Any] | None,
    renames: Mapping[str, str] = VENICE_PARAMETER_RENAMES,
) -> dict[str, Any]:
    """Rename canonical parameter names to the vendor's names.

    Unknown keys pass through. A renamed key replaces its canonical key, and
    wins over a vendor key the caller may have set directly.

    Args:
        params: Caller parameter overrides (may be None).
        renames: Canonical name to vendor name table.

    Returns:
        A new dict; the input is never mutated.
    """
    if not params:
        return {}
    normalized = {k: v for k, v in params.items() if k not in renames}
    for canonical, vendor in renames.items():
        if canonical in params:
            normalized[vendor] = params[canonical]
    return normalized


def prune_absent(value: Any) -> Any:
    """Recursively drop None from mappings and sequences.

    ``False``, ``0`` and ``""`` are values, not absence, and are kept.
    """
    if isinstance(value, Mapping):
        return {k: prune_absent(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple)):
        return [prune_absent(v) for v in value if v is not None]
    return value


def build_payload(
    prompt: CanonicalPrompt,
    params: Mapping[str, Any] | None = None,
    tooling: ToolingContext | None = None,
    *,
    default_options: Mapping[str, Any] | None = None,
    renames: Mapping[str, str] = VENICE_PARAMETER_RENAMES,
) -> dict[str, Any]:
    """Build the vendor request body.

    Defaults are overlaid by the caller's parameters, then ``messages`` and
    (when native tool calling is on and the prompt declares tools)
    ``tools``/``tool_choice`` are set from the prompt. The result never
    contains None at any depth.

    Args:
        prompt: Conversation history and tool declarations.
        params: Caller parameter overrides, canonical or vendor names.
        tooling: Whether native tools are disabled for this request.
        default_options: Vendor defaults (model, stream, user, extras).
        renames: Canonical name to vendor name table.

    Returns:
        The payload as a plain dict, ready for JSON encoding.
    """
    tooling = tooling or ToolingContext()
    payload = normalize_parameters(default_options, renames)
    payload.update(normalize_parameters(params, renames))
    payload["messages"] = [_map_message(m) for m in prompt.messages]

    if not tooling.disable_native_tools:
        tools = _map_tools(prompt.tools)
        if tools:
            payload["tools"] = tools
            tool_choice = _map_tool_choice(prompt.tool_choice)
            if tool_choice is not None:
                payload["tool_choice"] = tool_choice

    return prune_absent(payload)


# ---------------------------------------------------------------------------
# Message mapping
# ---------------------------------------------------------------------------


def _map_message(msg: PromptMessage | Mapping[str, Any]) -> dict[str, str]:
    if isinstance(msg, Mapping):
        role, content = msg.get("role"), msg.get("content")
    else:
        role, content = msg.role, msg.content
    return {"role": _as_text(role), "content": _as_text(content)}


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, enum.Enum):
        return _as_text(value.value)
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        parts = []
        for part in value:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, Mapping) and isinstance(part.get("text"), str):
                parts.append(part["text"])
        return "".join(parts)
    return str(value)


# ---------------------------------------------------------------------------
# Tool mapping
# ---------------------------------------------------------------------------


def _map_tools(
    tools: list[ToolDefinition | Mapping[str, Any]] | None,
) -> list[dict[str, Any]]:
    mapped: list[dict[str, Any]] = []
    for tool in tools or []:
        if isinstance(tool, ToolDefinition):
            name, description, parameters = tool.name, tool.description, tool.parameters
        elif isinstance(tool, Mapping):
            name = tool.get("name")
            description = tool.get("description")
            parameters = tool.get("parameters")
        else:
            logger.debug("Ignoring unsupported tool definition %r", tool)
            continue

        if not name:
            name = f"tool_{uuid.uuid4().hex[:12]}"
        mapped.append(
            {
                "type": "function",
                "function": {
                    "name": _as_text(name),
                    "description": _as_text(description),
                    "parameters": dict(parameters) if isinstance(parameters, Mapping) else {},
                },
            }
        )
    return mapped


def _map_tool_choice(
    choice: ToolChoice | str | dict[str, Any] | None,
) -> str | dict[str, Any] | None:
    """Map a ToolChoice to the OpenAI-compatible ``tool_choice`` field.

    ``"none"``, ``"auto"`` and ``"required"`` pass through unchanged; a named
    choice becomes a function selector.
    """
    normalized = ToolChoice.normalize(choice)
    if normalized is None:
        return None
    if normalized.mode == "named":
        if not normalized.tool_name:
            return None
        return {"type": "function", "function": {"name": normalized.tool_name}}
    if normalized.mode in ("none", "auto", "required"):
        return normalized.mode
    # Anything else is treated as the name of the tool to force.
    return {"type": "function", "function": {"name": normalized.mode}}
