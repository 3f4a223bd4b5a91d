"""CLI entry point for the Venice adapter.

Provides ``payload``, ``decode`` and ``chat`` sub-commands using Click and
Rich for output formatting.

Usage::

    venice-llm payload prompt.json --param max_tokens=200
    venice-llm decode capture.sse --chunk-size 7 --partial-tool-calls
    venice-llm chat "What is the capital of France?" --model llama-3.3-70b
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from venice_llm.adapters.venice_adapter import VeniceAdapter
from venice_llm.config import DEFAULT_MODEL, AdapterConfig
from venice_llm.errors import VeniceError
from venice_llm.models import (
    CanonicalPrompt,
    CompletionEvent,
    Finish,
    PromptMessage,
    TextDelta,
    ToolCall,
    ToolingContext,
)
from venice_llm.streaming import ResponseDecoder, StreamCollector

console = Console()


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _parse_param(raw: str) -> tuple[str, Any]:
    key, sep, value = raw.partition("=")
    if not sep or not key:
        raise click.BadParameter(f"expected KEY=VALUE, got {raw!r}")
    try:
        return key, json.loads(value)
    except json.JSONDecodeError:
        return key, value


def _load_prompt(path: str) -> CanonicalPrompt:
    data = json.loads(Path(path).read_text())
    if isinstance(data, list):
        data = {"messages": data}
    return CanonicalPrompt(
        messages=list(data.get("messages") or []),
        tools=list(data.get("tools") or []),
        tool_choice=data.get("tool_choice"),
    )


def _describe(event: CompletionEvent) -> tuple[str, str]:
    if isinstance(event, TextDelta):
        return "text", repr(event.text)
    if isinstance(event, ToolCall):
        label = "tool_call (partial)" if event.partial else "tool_call"
        return label, f"{event.id} {event.name}({json.dumps(event.arguments)})"
    if isinstance(event, Finish):
        usage = f" tokens={event.usage.total_tokens}" if event.usage else ""
        return "finish", f"{event.finish_reason}{usage}"
    return "unknown", repr(event)


@click.group()
@click.version_option(package_name="venice-llm")
def main() -> None:
    """Venice AI completion adapter tools."""


@main.command()
@click.argument("prompt_json", type=click.Path(exists=True))
@click.option("--model", default=DEFAULT_MODEL, help="Model name for the payload.")
@click.option(
    "--param", "params", multiple=True, help="Parameter override as KEY=VALUE (JSON values)."
)
@click.option("--no-native-tools", is_flag=True, help="Omit tools (XML tool emulation).")
def payload(prompt_json: str, model: str, params: tuple[str, ...], no_native_tools: bool) -> None:
    """Print the request body that would be sent for PROMPT_JSON."""
    try:
        prompt = _load_prompt(prompt_json)
    except (OSError, ValueError, AttributeError) as exc:
        console.print(f"[red]Failed to read prompt:[/red] {exc}")
        raise SystemExit(1) from exc

    adapter = VeniceAdapter(AdapterConfig(model=model))
    overrides = dict(_parse_param(p) for p in params)
    body = adapter.build_payload(
        prompt, overrides, ToolingContext(disable_native_tools=no_native_tools)
    )
    console.print(f"[dim]POST {adapter.endpoint_url()}[/dim]")
    console.print_json(json.dumps(body))


@main.command()
@click.argument("capture", type=click.Path(exists=True))
@click.option("--chunk-size", default=0, type=int, help="Replay in chunks of N bytes.")
@click.option("--partial-tool-calls", is_flag=True, help="Emit provisional tool calls.")
@click.option("--ndjson", is_flag=True, help="Capture is newline-delimited JSON, not SSE.")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def decode(
    capture: str, chunk_size: int, partial_tool_calls: bool, ndjson: bool, verbose: bool
) -> None:
    """Replay a captured response stream and list the decoded events."""
    _setup_logging(verbose)

    raw = Path(capture).read_bytes()
    size = chunk_size if chunk_size > 0 else max(len(raw), 1)
    decoder = ResponseDecoder(
        partial_tool_calls=partial_tool_calls,
        line_prefix=None if ndjson else "data:",
    )

    events: list[CompletionEvent] = []
    for start in range(0, len(raw), size):
        events.extend(decoder.feed(raw[start:start + size]))
    events.extend(decoder.finish())

    table = Table(title=f"Events ({len(events)})")
    table.add_column("#", justify="right")
    table.add_column("Kind", style="cyan")
    table.add_column("Detail")
    for i, event in enumerate(events, 1):
        kind, detail = _describe(event)
        table.add_row(str(i), kind, detail)
    console.print(table)

    collector = StreamCollector()
    collector.extend(events)
    result = collector.to_result()
    console.print(
        f"text={len(result.text)} chars, tool_calls={len(result.tool_calls)}, "
        f"finish={result.finish_reason}"
    )


@main.command()
@click.argument("message")
@click.option("--model", default=None, help="Model name (defaults to VENICE_MODEL).")
@click.option("--system", "system_prompt", default=None, help="System prompt.")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def chat(message: str, model: str | None, system_prompt: str | None, verbose: bool) -> None:
    """Stream a completion for MESSAGE from the live API."""
    _setup_logging(verbose)

    overrides = {"model": model} if model else {}
    try:
        adapter = VeniceAdapter(AdapterConfig.from_env(**overrides))
    except VeniceError as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        raise SystemExit(1) from exc

    messages = [PromptMessage.user(message)]
    if system_prompt:
        messages.insert(0, PromptMessage.system(system_prompt))
    prompt = CanonicalPrompt(messages=messages)

    async def _run() -> None:
        async for event in adapter.stream(prompt):
            if isinstance(event, TextDelta):
                console.print(event.text, end="", markup=False, highlight=False)
            elif isinstance(event, Finish):
                console.print()
                console.print(f"[dim]finish: {event.finish_reason}[/dim]")

    try:
        asyncio.run(_run())
    except VeniceError as exc:
        console.print(f"\n[red]Request failed:[/red] {exc}")
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
