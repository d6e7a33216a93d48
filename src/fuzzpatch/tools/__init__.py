# Re-export the base tool interfaces and registry
from .base import (  # noqa: F401
    BaseTool,
    ToolResponseType,
    ToolTextResponse,
    register_tool,
    unregister_tool,
    get_tool,
    get_all_tools,
)

# Register built-in tools
from . import apply_patch_tool  # noqa: F401,E402
