"""Tests for ToolSelector."""

import pytest

from fakes import ScriptedProvider, call, response, text
from toolsift_agent.agent.selector import ToolSelector
from toolsift_agent.agent.tools.base import SELECTION_TOOL


@pytest.mark.asyncio
async def test_select_maps_names_to_catalog(catalog):
    provider = ScriptedProvider([response(call("s1", SELECTION_TOOL.name, tools=["set"]))])
    selector = ToolSelector(provider)

    reduced = await selector.select("set key=5", catalog)

    assert reduced.names == ["set"]
    assert reduced.get("set") is catalog["set"]


@pytest.mark.asyncio
async def test_unknown_names_are_dropped(catalog):
    provider = ScriptedProvider([
        response(call("s1", SELECTION_TOOL.name, tools=["delete", "set", "get", "flush"]))
    ])
    selector = ToolSelector(provider)

    reduced = await selector.select("anything", catalog)

    # catalog order, not the order the model listed them in
    assert reduced.names == ["get", "set"]


@pytest.mark.parametrize(
    "names",
    [[], ["get"], ["get", "get"], ["nope"], ["set", "nope", "get"], ["final-tool", "inform-tool"]],
)
@pytest.mark.asyncio
async def test_selection_is_always_a_subset_of_the_catalog(catalog, names):
    provider = ScriptedProvider([response(call("s1", SELECTION_TOOL.name, tools=names))])
    selector = ToolSelector(provider)

    reduced = await selector.select("q", catalog)

    assert set(reduced.names) <= set(catalog)
    assert len(reduced.names) == len(set(reduced.names))


@pytest.mark.asyncio
async def test_no_meta_tool_call_yields_empty_set(catalog):
    provider = ScriptedProvider([response(text("You should use get."))])
    selector = ToolSelector(provider)

    reduced = await selector.select("get a", catalog)

    assert len(reduced) == 0


@pytest.mark.parametrize(
    "arguments",
    [{}, {"tools": "set"}, {"tools": None}, {"raw": "not json"}],
)
@pytest.mark.asyncio
async def test_malformed_selection_yields_empty_set(catalog, arguments):
    provider = ScriptedProvider([response(call("s1", SELECTION_TOOL.name, **arguments))])
    selector = ToolSelector(provider)

    reduced = await selector.select("q", catalog)

    assert len(reduced) == 0


@pytest.mark.asyncio
async def test_non_string_names_are_ignored(catalog):
    provider = ScriptedProvider([response(call("s1", SELECTION_TOOL.name, tools=["get", 3, {"x": 1}]))])
    selector = ToolSelector(provider)

    reduced = await selector.select("q", catalog)

    assert reduced.names == ["get"]


@pytest.mark.asyncio
async def test_other_tool_calls_are_ignored(catalog):
    provider = ScriptedProvider([
        response(call("s1", "get", key="a"), call("s2", SELECTION_TOOL.name, tools=["get"]))
    ])
    selector = ToolSelector(provider)

    reduced = await selector.select("q", catalog)

    assert reduced.names == ["get"]


@pytest.mark.asyncio
async def test_request_offers_only_the_meta_tool(catalog):
    provider = ScriptedProvider([response(call("s1", SELECTION_TOOL.name, tools=[]))])
    selector = ToolSelector(provider, model="test/model", max_tokens=500)

    await selector.select("set key=5", catalog)

    request = provider.calls[0]
    assert request["tools"] == [SELECTION_TOOL.to_schema()]
    assert request["tool_choice"] == {"type": "function", "function": {"name": SELECTION_TOOL.name}}
    assert request["model"] == "test/model"

    prompt = request["messages"][0]["content"]
    assert "Query: set key=5" in prompt
    assert "`get`: Get the value of a key" in prompt
    assert "Returns null" not in prompt
    assert "`set`: Set a key to a value" in prompt


@pytest.mark.asyncio
async def test_provider_errors_propagate(catalog):
    provider = ScriptedProvider([RuntimeError("API down")])
    selector = ToolSelector(provider)

    with pytest.raises(RuntimeError, match="API down"):
        await selector.select("q", catalog)
