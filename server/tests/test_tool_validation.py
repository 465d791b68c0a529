"""Tests for tool parameter validation, schema generation and the registry."""
import pytest

from tools.base import (
    BaseTool,
    DuplicateToolError,
    RegistryFrozenError,
    ToolParameter,
    ToolRegistry,
    ToolResult,
    ToolSchema,
    to_number_value,
    to_string_list,
    to_string_value,
)


# ---------------------------------------------------------------------------
# Concrete tool for testing
# ---------------------------------------------------------------------------

class DummyTool(BaseTool):
    def __init__(self, name="dummy_tool", module="notes", mutating=False):
        self._name = name
        self._module = module
        self._mutating = mutating

    def _build_schema(self) -> ToolSchema:
        return ToolSchema(
            name=self._name,
            description="A test tool",
            module=self._module,
            mutating=self._mutating,
            parameters=[
                ToolParameter(
                    name="title",
                    type="string",
                    description="Item title",
                    required=True,
                ),
                ToolParameter(
                    name="count",
                    type="number",
                    description="Number of items",
                    required=False,
                    default=1,
                ),
                ToolParameter(
                    name="category",
                    type="string",
                    description="Category",
                    required=False,
                    enum=["work", "personal", "other"],
                ),
            ],
        )

    async def execute(self, args, ctx):
        return ToolResult(ok=True, data=args)


# ---------------------------------------------------------------------------
# ToolSchema
# ---------------------------------------------------------------------------

class TestToolSchema:
    def test_to_json_schema_structure(self):
        js = DummyTool().schema.to_json_schema()
        assert js["name"] == "dummy_tool"
        assert js["description"] == "A test tool"
        assert js["module"] == "notes"
        assert js["mutating"] is False
        assert "inputSchema" in js

    def test_json_schema_properties(self):
        js = DummyTool().schema.to_json_schema()
        props = js["inputSchema"]["properties"]
        assert props["title"] == {"type": "string", "description": "Item title"}
        assert props["count"]["default"] == 1
        assert props["category"]["enum"] == ["work", "personal", "other"]

    def test_required_list(self):
        js = DummyTool().schema.to_json_schema()
        assert js["inputSchema"]["required"] == ["title"]

    def test_no_required_key_when_nothing_required(self):
        schema = ToolSchema(name="t", description="d", module="daily", parameters=[])
        assert "required" not in schema.input_schema()

    def test_function_schema(self):
        fs = DummyTool().schema.to_function_schema()
        assert fs["type"] == "function"
        assert fs["function"]["name"] == "dummy_tool"
        assert fs["function"]["parameters"]["type"] == "object"

    def test_schema_is_cached(self):
        tool = DummyTool()
        assert tool.schema is tool.schema


# ---------------------------------------------------------------------------
# validate_parameters
# ---------------------------------------------------------------------------

class TestValidateParameters:
    def test_valid(self):
        assert DummyTool().validate_parameters({"title": "Lunch"}) is True

    def test_missing_required(self):
        with pytest.raises(ValueError, match="Missing required parameter"):
            DummyTool().validate_parameters({"count": 2})

    def test_none_counts_as_missing(self):
        with pytest.raises(ValueError, match="title"):
            DummyTool().validate_parameters({"title": None})


# ---------------------------------------------------------------------------
# ToolRegistry
# ---------------------------------------------------------------------------

class TestToolRegistry:
    def test_register_and_lookup(self):
        registry = ToolRegistry()
        registry.register(DummyTool())
        assert registry.get_tool("dummy_tool") is not None
        assert registry.list_tools() == ["dummy_tool"]

    def test_duplicate_names_rejected(self):
        with pytest.raises(DuplicateToolError):
            ToolRegistry.from_tools([DummyTool(), DummyTool()])

    def test_frozen_registry_rejects_registration(self):
        registry = ToolRegistry.from_tools([DummyTool()])
        assert registry.frozen
        with pytest.raises(RegistryFrozenError):
            registry.register(DummyTool(name="late_tool"))

    def test_is_mutating(self):
        registry = ToolRegistry.from_tools([
            DummyTool(name="reader"),
            DummyTool(name="writer", mutating=True),
        ])
        assert registry.is_mutating("writer") is True
        assert registry.is_mutating("reader") is False
        assert registry.is_mutating("nope") is False

    def test_tools_by_modules(self):
        registry = ToolRegistry.from_tools([
            DummyTool(name="a", module="calendar"),
            DummyTool(name="b", module="notes"),
            DummyTool(name="c", module="notes"),
        ])
        assert len(registry.get_tools_by_modules()) == 3
        assert [t.name for t in registry.get_tools_by_modules(["notes"])] == ["b", "c"]
        assert registry.get_tools_by_modules(["kanban"]) == []

    def test_function_schemas_for_modules(self):
        registry = ToolRegistry.from_tools([
            DummyTool(name="a", module="calendar"),
            DummyTool(name="b", module="notes"),
        ])
        schemas = registry.get_function_schemas(["notes"])
        assert [s["function"]["name"] for s in schemas] == ["b"]
        assert len(registry.get_json_schemas()) == 2


class TestCatalog:
    def test_full_catalog(self, registry):
        expected = {
            "calendar_list_events", "calendar_create_event", "calendar_update_event", "calendar_delete_event",
            "kanban_list_boards", "kanban_list_cards", "kanban_create_card", "kanban_update_card",
            "kanban_move_card", "kanban_delete_card",
            "notes_search", "notes_create", "notes_update", "notes_delete",
            "daily_overview", "journal_list", "journal_get", "journal_create", "journal_update",
            "journal_delete", "items_link", "items_unlink", "items_list_links",
        }
        assert set(registry.list_tools()) == expected
        assert registry.frozen

    def test_read_tools_are_not_mutating(self, registry):
        for name in ["calendar_list_events", "notes_search", "daily_overview", "journal_get", "items_list_links"]:
            assert registry.is_mutating(name) is False
        for name in ["notes_create", "kanban_move_card", "journal_delete", "items_link"]:
            assert registry.is_mutating(name) is True


# ---------------------------------------------------------------------------
# Argument coercion
# ---------------------------------------------------------------------------

class TestCoercion:
    def test_string_value(self):
        assert to_string_value("  hi ") == "hi"
        assert to_string_value("   ") is None
        assert to_string_value(3) is None

    def test_string_list(self):
        assert to_string_list([" a ", "", 3, "b"]) == ["a", "b"]
        assert to_string_list("a") is None

    def test_number_value(self):
        assert to_number_value(3) == 3.0
        assert to_number_value("2.5") == 2.5
        assert to_number_value(True) is None
        assert to_number_value(float("inf")) is None
        assert to_number_value("abc") is None
