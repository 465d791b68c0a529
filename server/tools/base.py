"""Base tool interface and registry with JSON Schema support."""
from abc import ABC, abstractmethod
from functools import cached_property
from typing import Dict, Any, Iterable, List, Optional, Union
from pydantic import BaseModel
import logging
import math

from models.intent import AgentModule

logger = logging.getLogger(__name__)


class DuplicateToolError(ValueError):
    """Two tools were registered under the same name."""


class RegistryFrozenError(RuntimeError):
    """Registration attempted after the registry was sealed at startup."""


class ToolNotFoundError(LookupError):
    """No tool with the requested name is registered."""

    def __init__(self, tool_name: str):
        super().__init__(f"Unknown tool: {tool_name}")
        self.tool_name = tool_name


class ConfirmationRequiredError(PermissionError):
    """A mutating tool was invoked without explicit confirmation."""

    def __init__(self, tool_name: str):
        super().__init__(f"Mutating tool '{tool_name}' requires explicit confirmation")
        self.tool_name = tool_name


class ToolExecutionContext(BaseModel):
    """Passed unchanged into every tool call."""
    user_id: str
    now_iso: str


class ToolResult(BaseModel):
    ok: bool
    data: Any = None
    error: Optional[str] = None


class ToolParameter(BaseModel):
    """Tool parameter definition."""
    name: str
    type: Union[str, List[str]]  # JSON Schema type(s)
    description: str = ""
    required: bool = False
    default: Any = None
    enum: Optional[List[str]] = None
    items: Optional[Dict[str, Any]] = None


class ToolSchema(BaseModel):
    """Static description of a tool: identity, domain, mutation flag, inputs."""
    name: str
    description: str
    module: AgentModule
    mutating: bool = False
    parameters: List[ToolParameter] = []

    def input_schema(self) -> dict:
        properties: Dict[str, Any] = {}
        required_list: List[str] = []

        for param in self.parameters:
            prop: Dict[str, Any] = {"type": param.type}
            if param.description:
                prop["description"] = param.description
            if param.default is not None:
                prop["default"] = param.default
            if param.enum:
                prop["enum"] = param.enum
            if param.items:
                prop["items"] = param.items

            properties[param.name] = prop
            if param.required:
                required_list.append(param.name)

        schema: Dict[str, Any] = {
            "type": "object",
            "properties": properties,
        }
        if required_list:
            schema["required"] = required_list
        return schema

    def to_json_schema(self) -> dict:
        """Discovery format used by the tools endpoint."""
        return {
            "name": self.name,
            "description": self.description,
            "module": self.module,
            "mutating": self.mutating,
            "inputSchema": self.input_schema(),
        }

    def to_function_schema(self) -> dict:
        """OpenAI-style function calling definition."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.input_schema(),
            },
        }


class BaseTool(ABC):
    """Base class for all tools."""

    @cached_property
    def schema(self) -> ToolSchema:
        """Built once per tool instance."""
        return self._build_schema()

    @property
    def name(self) -> str:
        return self.schema.name

    @property
    def module(self) -> str:
        return self.schema.module

    @property
    def mutating(self) -> bool:
        return self.schema.mutating

    @abstractmethod
    def _build_schema(self) -> ToolSchema:
        """Subclasses implement this to define their schema."""
        ...

    @abstractmethod
    async def execute(self, args: Dict[str, Any], ctx: ToolExecutionContext) -> ToolResult:
        """Run the tool. Domain failures are reported as ``ToolResult(ok=False)``."""
        ...

    def validate_parameters(self, args: Dict[str, Any]) -> bool:
        """Validate parameters before execution."""
        required_params = [p.name for p in self.schema.parameters if p.required]

        missing = [p for p in required_params if args.get(p) is None]
        if missing:
            raise ValueError(f"Missing required parameter(s): {', '.join(missing)}")

        return True


class ToolRegistry:
    """Closed catalogue of tools, sealed once startup registration is done."""

    def __init__(self):
        self._tools: Dict[str, BaseTool] = {}
        self._frozen = False

    @classmethod
    def from_tools(cls, tools: Iterable[BaseTool]) -> "ToolRegistry":
        registry = cls()
        for tool in tools:
            registry.register(tool)
        registry.freeze()
        return registry

    @property
    def frozen(self) -> bool:
        return self._frozen

    def register(self, tool: BaseTool) -> None:
        """Register a tool."""
        if self._frozen:
            raise RegistryFrozenError(
                f"Cannot register '{tool.name}': tool registry is frozen"
            )
        name = tool.name
        if name in self._tools:
            raise DuplicateToolError(f"Duplicate tool name: {name}")
        self._tools[name] = tool
        logger.debug(f"Registered tool: {name} (module={tool.module}, mutating={tool.mutating})")

    def freeze(self) -> None:
        self._frozen = True
        logger.info(f"Tool registry frozen with {len(self._tools)} tools")

    def get_tool(self, name: str) -> Optional[BaseTool]:
        """Get tool by name."""
        return self._tools.get(name)

    def list_tools(self) -> List[str]:
        """List all registered tool names."""
        return list(self._tools.keys())

    def is_mutating(self, name: str) -> bool:
        """Mutation flag lookup; unknown names count as read-only."""
        tool = self._tools.get(name)
        return tool.mutating if tool else False

    def get_tools_by_modules(self, modules: Iterable[str] = ()) -> List[BaseTool]:
        wanted = set(modules)
        if not wanted:
            return list(self._tools.values())
        return [tool for tool in self._tools.values() if tool.module in wanted]

    def get_schemas(self, modules: Iterable[str] = ()) -> List[ToolSchema]:
        return [tool.schema for tool in self.get_tools_by_modules(modules)]

    def get_json_schemas(self, modules: Iterable[str] = ()) -> List[dict]:
        """Get tool schemas in the discovery JSON Schema format."""
        return [schema.to_json_schema() for schema in self.get_schemas(modules)]

    def get_function_schemas(self, modules: Iterable[str] = ()) -> List[dict]:
        return [schema.to_function_schema() for schema in self.get_schemas(modules)]


# ---------------------------------------------------------------------------
# Argument coercion shared by the domain tools
# ---------------------------------------------------------------------------

def to_string_value(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    return trimmed or None


def to_string_list(value: Any) -> Optional[List[str]]:
    if not isinstance(value, list):
        return None
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def to_number_value(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    if isinstance(value, str) and value.strip():
        try:
            parsed = float(value)
        except ValueError:
            return None
        return parsed if math.isfinite(parsed) else None
    return None
