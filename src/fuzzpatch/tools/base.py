from abc import ABC, abstractmethod
from typing import Any, Type, Dict, TYPE_CHECKING, Optional
from enum import Enum
from pydantic import BaseModel, Field
from fuzzpatch.settings import ToolSpec

if TYPE_CHECKING:
    from fuzzpatch.project import Project


# Models
class ToolResponseType(str, Enum):
    text = "text"


class ToolTextResponse(BaseModel):
    type: ToolResponseType = Field(default=ToolResponseType.text)
    text: Optional[str] = None
    # Structured payload for callers that render results themselves.
    data: Optional[Dict[str, Any]] = None


# Global registry of tool name -> tool class
_registry: Dict[str, Type["BaseTool"]] = {}


def register_tool(name: str, tool: Type["BaseTool"]) -> None:
    """Registers a tool class."""
    if name in _registry:
        raise ValueError(f"Tool with name '{name}' already registered.")
    _registry[name] = tool


def unregister_tool(name: str) -> bool:
    """Unregister a tool by name. Returns True if removed, False if not present."""
    return _registry.pop(name, None) is not None


def get_tool(name: str) -> Optional[Type["BaseTool"]]:
    """Gets a tool class by name."""
    return _registry.get(name)


def get_all_tools() -> Dict[str, Type["BaseTool"]]:
    """Returns a copy of the tool registry."""
    return dict(_registry)


class BaseTool(ABC):
    # Subclasses must set this to a unique string
    name: str

    def __init__(self, prj: "Project") -> None:
        self.prj = prj

    @abstractmethod
    async def run(
        self, spec: ToolSpec, args: Any, **kwargs: Any
    ) -> Optional[ToolTextResponse]:
        """
        Execute this tool within the context of the given Project.
        Args:
            spec: ToolSpec including name and optional config for this invocation.
            args: Parsed arguments structure (e.g., dict). Not a JSON string.
        Returns:
            ToolTextResponse with the final text.
        """
        pass

    @abstractmethod
    async def openapi_spec(self, spec: ToolSpec) -> Dict[str, Any]:
        """
        Return this tool's definition in OpenAI 'function' tool format,
        using JSON Schema for parameters.
        """
        pass
