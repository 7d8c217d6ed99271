# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/conduitmcp-python/LICENSE
# ==============================================================================

from __future__ import annotations

from typing import Any

import pytest

from conduitmcp import (
    PromptDefinition,
    RegistryBuilder,
    RegistryError,
    ResourceTemplate,
    ServerInfo,
    TemplateError,
    ToolDefinition,
    param,
    prompt,
    resource,
    tool,
)
from conduitmcp.tool import extract_tool_definition, get_active_builder
from conduitmcp.utils.schema import SchemaError
from tests.helpers import build_sample_registry


def _noop(*args: Any) -> dict[str, Any]:
    return {"content": []}


def test_binding_registers_decorated_definitions_in_order() -> None:
    registry = build_sample_registry()

    assert list(registry.tools) == ["add", "control"]
    assert [entry.uri_pattern for entry in registry.resources] == ["user://{id}", "user://{id}/posts/{post_id}"]
    assert list(registry.prompts) == ["greet"]


def test_decorators_outside_binding_only_attach_definitions() -> None:
    builder = RegistryBuilder()

    @tool(description="Echo")
    def echo(principal, arguments):
        return arguments

    assert get_active_builder() is None
    assert builder.tool_names == []

    definition = builder.register_tool(echo)

    assert definition is extract_tool_definition(echo)
    assert builder.tool_names == ["echo"]


def test_binding_resets_ambient_builder() -> None:
    builder = RegistryBuilder()

    with builder.binding():
        assert get_active_builder() is builder
    assert get_active_builder() is None


def test_description_falls_back_to_docstring() -> None:
    @tool()
    def documented(principal, arguments):
        """Return the weather.  """

    assert extract_tool_definition(documented).description == "Return the weather."


def test_duplicate_names_are_rejected() -> None:
    builder = RegistryBuilder()
    builder.register_tool(ToolDefinition(name="dup", handler=_noop))
    builder.register_prompt(PromptDefinition(name="dup", handler=_noop))
    builder.register_resource(ResourceTemplate(uri_pattern="a://{x}", handler=_noop))

    with pytest.raises(RegistryError, match="Tool 'dup' is already registered"):
        builder.register_tool(ToolDefinition(name="dup", handler=_noop))
    with pytest.raises(RegistryError, match="Prompt 'dup'"):
        builder.register_prompt(PromptDefinition(name="dup", handler=_noop))
    with pytest.raises(RegistryError, match="Resource 'a://\\{x\\}'"):
        builder.register_resource(ResourceTemplate(uri_pattern="a://{x}", handler=_noop))


def test_registration_after_build_is_rejected() -> None:
    builder = RegistryBuilder()
    registry = builder.build()

    assert builder.frozen
    assert builder.build() is registry
    with pytest.raises(RegistryError, match="frozen"):
        builder.register_tool(ToolDefinition(name="late", handler=_noop))
    with pytest.raises(RegistryError):
        with builder.binding():
            pass


def test_undecorated_callables_are_rejected() -> None:
    with pytest.raises(RegistryError, match="decorate it with @tool"):
        RegistryBuilder().register_tool(_noop)


def test_registry_is_read_only() -> None:
    registry = build_sample_registry()

    with pytest.raises(TypeError):
        registry.tools["new"] = registry.tools["add"]  # type: ignore[index]
    with pytest.raises(TypeError):
        registry.prompts["new"] = registry.prompts["greet"]  # type: ignore[index]


def test_listings_are_copies() -> None:
    registry = build_sample_registry()

    registry.list_tools()[0]["inputSchema"]["properties"].clear()

    assert registry.list_tools()[0]["inputSchema"]["properties"] != {}


def test_tool_listing() -> None:
    registry = build_sample_registry()

    assert registry.list_tools()[0] == {
        "name": "add",
        "description": "Add two integers",
        "inputSchema": {
            "type": "object",
            "properties": {"a": {"type": "integer"}, "b": {"type": "integer"}},
            "required": ["a", "b"],
        },
    }


def test_tool_listing_extras() -> None:
    definition = ToolDefinition(
        name="search",
        handler=_noop,
        title="Search",
        annotations={"readOnlyHint": True},
        input_schema={"type": "object", "properties": {"q": {"type": "string", "title": "Q"}}},
        params=None,
    )

    listing = definition.to_listing()

    assert listing["title"] == "Search"
    assert listing["annotations"] == {"readOnlyHint": True}
    assert listing["inputSchema"] == {"type": "object", "properties": {"q": {"type": "string"}}}
    assert definition.validation_schema is None


def test_resource_and_prompt_listings() -> None:
    registry = build_sample_registry()

    assert registry.list_resources() == [
        {"uri": "user://{id}", "name": "user", "mimeType": "application/json"},
        {"uri": "user://{id}/posts/{post_id}", "description": "A single post"},
    ]
    assert registry.list_prompts() == [
        {
            "name": "greet",
            "description": "Greet someone",
            "arguments": [{"name": "name", "required": True, "description": "Who to greet"}],
        }
    ]


def test_find_resource_uses_first_registered_match() -> None:
    builder = RegistryBuilder()

    with builder.binding():

        @resource("user://{id}")
        def any_user(principal, params, options):
            return "any"

        @resource("user://admin")
        def admin(principal, params, options):
            return "admin"

    registry = builder.build()
    found = registry.find_resource("user://admin")

    assert found is not None
    template, params = found
    assert template.handler is any_user
    assert params == {"id": "admin"}
    assert registry.find_resource("post://1") is None


@pytest.mark.parametrize(
    ("factory", "error"),
    [
        (lambda: ToolDefinition(name="", handler=_noop), ValueError),
        (lambda: ToolDefinition(name="x", handler="nope"), ValueError),  # type: ignore[arg-type]
        (lambda: ToolDefinition(name="x", handler=_noop, params=[param("a"), param("a")]), ValueError),
        (lambda: ToolDefinition(name="x", handler=_noop, input_schema={"type": "string"}), SchemaError),
        (lambda: PromptDefinition(name="", handler=_noop), ValueError),
        (lambda: ResourceTemplate(uri_pattern="bad://{", handler=_noop), TemplateError),
        (lambda: ResourceTemplate(uri_pattern="dup://{a}/{a}", handler=_noop), TemplateError),
    ],
)
def test_invalid_definitions_fail_at_registration(factory, error) -> None:
    with pytest.raises(error):
        factory()


@pytest.mark.parametrize(
    "kwargs",
    [
        {"type": "decimal"},
        {"type": ("list", "string")},
        {"type": "array", "items": "decimal"},
        {"validator": "not callable"},
        {"min_length": -1},
        {"max_length": True},
    ],
)
def test_invalid_param_declarations(kwargs) -> None:
    with pytest.raises(ValueError):
        param("x", **kwargs)


def test_prompt_decorator_registers_in_binding() -> None:
    builder = RegistryBuilder(ServerInfo(name="prompts"))

    with builder.binding():

        @prompt("summarize", title="Summarize", params=[param("text", required=True)])
        def _summarize(principal, arguments):
            return []

    registry = builder.build()

    assert registry.info.name == "prompts"
    assert registry.get_prompt("summarize").to_listing()["title"] == "Summarize"
    assert registry.get_prompt(42) is None
    assert registry.get_tool(None) is None
