"""Tests for request payload construction and parameter renaming."""

from __future__ import annotations

from venice_llm.models import (
    CanonicalPrompt,
    PromptMessage,
    Role,
    ToolChoice,
    ToolDefinition,
    ToolingContext,
)
from venice_llm.payload import build_payload, normalize_parameters, prune_absent


def _prompt(**overrides: object) -> CanonicalPrompt:
    defaults: dict[str, object] = {"messages": [PromptMessage.user("hello")]}
    defaults.update(overrides)
    return CanonicalPrompt(**defaults)  # type: ignore[arg-type]


WEATHER_TOOL = ToolDefinition(
    name="get_weather",
    description="Look up the weather",
    parameters={"type": "object", "properties": {"city": {"type": "string"}}},
)


class TestNormalizeParameters:
    def test_max_tokens_renamed(self) -> None:
        assert normalize_parameters({"max_tokens": 50}) == {"max_completion_tokens": 50}

    def test_temperature_renamed(self) -> None:
        assert normalize_parameters({"temperature": 0.3}) == {"max_temp": 0.3}

    def test_stop_sequences_renamed(self) -> None:
        assert normalize_parameters({"stop_sequences": ["x"]}) == {"stop": ["x"]}

    def test_unrelated_keys_unchanged(self) -> None:
        params = {"top_p": 0.9, "venice_parameters": {"include_venice_system_prompt": False}}
        assert normalize_parameters(params) == params

    def test_canonical_key_never_survives(self) -> None:
        result = normalize_parameters({"max_tokens": 10, "max_completion_tokens": 99})
        assert result == {"max_completion_tokens": 10}

    def test_input_not_mutated(self) -> None:
        params = {"max_tokens": 50}
        normalize_parameters(params)
        assert params == {"max_tokens": 50}

    def test_none_and_empty(self) -> None:
        assert normalize_parameters(None) == {}
        assert normalize_parameters({}) == {}

    def test_custom_rename_table(self) -> None:
        assert normalize_parameters({"a": 1, "b": 2}, {"a": "z"}) == {"z": 1, "b": 2}


class TestPruneAbsent:
    def test_nested_tree(self) -> None:
        tree = {"a": None, "b": {"c": None, "d": 1}, "e": [None, 2]}
        assert prune_absent(tree) == {"b": {"d": 1}, "e": [2]}

    def test_falsy_values_retained(self) -> None:
        tree = {"f": False, "z": 0, "s": "", "l": [False, 0, ""], "m": {"x": False}}
        assert prune_absent(tree) == tree

    def test_empty_containers_retained(self) -> None:
        assert prune_absent({"a": {}, "b": []}) == {"a": {}, "b": []}


class TestBuildPayload:
    def test_defaults_overlaid_by_params(self) -> None:
        payload = build_payload(
            _prompt(),
            {"model": "other", "max_tokens": 5},
            default_options={"model": "m", "stream": True, "user": "u"},
        )
        assert payload["model"] == "other"
        assert payload["stream"] is True
        assert payload["user"] == "u"
        assert payload["max_completion_tokens"] == 5
        assert "max_tokens" not in payload

    def test_default_options_are_renamed_too(self) -> None:
        payload = build_payload(_prompt(), {}, default_options={"temperature": 0.7})
        assert payload["max_temp"] == 0.7
        assert "temperature" not in payload

    def test_caller_temperature_wins_over_default(self) -> None:
        payload = build_payload(
            _prompt(), {"temperature": 0.1}, default_options={"temperature": 0.7}
        )
        assert payload["max_temp"] == 0.1

    def test_messages_coerced_to_text(self) -> None:
        prompt = _prompt(
            messages=[
                PromptMessage(role=Role.SYSTEM, content="be brief"),
                PromptMessage(role="user", content=None),
                {"role": "assistant", "content": 42},
                {"role": Role.USER, "content": [{"type": "text", "text": "a"}, "b", {"x": 1}]},
                {"content": "no role"},
            ]
        )
        payload = build_payload(prompt)
        assert payload["messages"] == [
            {"role": "system", "content": "be brief"},
            {"role": "user", "content": ""},
            {"role": "assistant", "content": "42"},
            {"role": "user", "content": "ab"},
            {"role": "", "content": "no role"},
        ]

    def test_tools_translated(self) -> None:
        payload = build_payload(_prompt(tools=[WEATHER_TOOL]))
        assert payload["tools"] == [
            {
                "type": "function",
                "function": {
                    "name": "get_weather",
                    "description": "Look up the weather",
                    "parameters": {
                        "type": "object",
                        "properties": {"city": {"type": "string"}},
                    },
                },
            }
        ]

    def test_malformed_tool_degrades(self) -> None:
        payload = build_payload(
            _prompt(tools=[{"name": "lookup", "description": None, "parameters": "junk"}])
        )
        fn = payload["tools"][0]["function"]
        assert fn == {"name": "lookup", "description": "", "parameters": {}}

    def test_nameless_tools_get_unique_identifiers(self) -> None:
        payload = build_payload(_prompt(tools=[ToolDefinition(), {}]))
        names = [t["function"]["name"] for t in payload["tools"]]
        assert all(n.startswith("tool_") for n in names)
        assert names[0] != names[1]

    def test_tools_omitted_when_native_tools_disabled(self) -> None:
        payload = build_payload(
            _prompt(tools=[WEATHER_TOOL], tool_choice="get_weather"),
            tooling=ToolingContext(disable_native_tools=True),
        )
        assert "tools" not in payload
        assert "tool_choice" not in payload

    def test_no_tools_key_without_tools(self) -> None:
        assert "tools" not in build_payload(_prompt())

    def test_tool_choice_dropped_without_tools(self) -> None:
        payload = build_payload(_prompt(tool_choice="none"))
        assert "tools" not in payload
        assert "tool_choice" not in payload

    def test_tool_choice_none_passes_through(self) -> None:
        payload = build_payload(_prompt(tools=[WEATHER_TOOL], tool_choice="none"))
        assert payload["tool_choice"] == "none"

    def test_named_tool_choice(self) -> None:
        payload = build_payload(
            _prompt(
                tools=[WEATHER_TOOL],
                tool_choice=ToolChoice(mode="named", tool_name="get_weather"),
            )
        )
        assert payload["tool_choice"] == {
            "type": "function",
            "function": {"name": "get_weather"},
        }

    def test_bare_tool_name_choice(self) -> None:
        payload = build_payload(_prompt(tools=[WEATHER_TOOL], tool_choice="get_weather"))
        assert payload["tool_choice"]["function"] == {"name": "get_weather"}

    def test_dict_tool_choice(self) -> None:
        payload = build_payload(
            _prompt(tools=[WEATHER_TOOL], tool_choice={"tool_name": "get_weather"})
        )
        assert payload["tool_choice"]["type"] == "function"

    def test_none_values_pruned_at_every_depth(self) -> None:
        payload = build_payload(
            _prompt(),
            {"a": None, "b": {"c": None, "d": 1}, "e": [None, 2], "f": False, "g": 0, "h": ""},
            default_options={"user": None},
        )
        assert "a" not in payload
        assert "user" not in payload
        assert payload["b"] == {"d": 1}
        assert payload["e"] == [2]
        assert payload["f"] is False
        assert payload["g"] == 0
        assert payload["h"] == ""

    def test_prompt_not_mutated(self) -> None:
        prompt = _prompt(tools=[WEATHER_TOOL])
        build_payload(prompt, {"max_tokens": 1})
        assert prompt.tools == [WEATHER_TOOL]
        assert prompt.messages == [PromptMessage.user("hello")]
