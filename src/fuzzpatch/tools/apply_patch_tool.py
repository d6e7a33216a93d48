from typing import Any, Dict, List, Optional, TYPE_CHECKING

from pydantic import TypeAdapter, ValidationError

from fuzzpatch.logger import logger
from fuzzpatch.tools import base as tools_base
from fuzzpatch.settings import ToolSpec
from fuzzpatch.patch import (
    DIFF_SYSTEM_INSTRUCTION,
    Operation,
    OperationType,
    PatchCancelled,
    apply_operations,
)
from fuzzpatch.patch.operations import CancelSignal, ProgressFn

if TYPE_CHECKING:
    from fuzzpatch.project import Project


_operations_adapter = TypeAdapter(List[Operation])


class ApplyPatchTool(tools_base.BaseTool):
    """
    Apply a batch of create_file/update_file/delete_file operations under the
    project's base_path. Returns the per-operation summary with total fuzz.
    """

    name = "apply_patch"

    async def run(
        self,
        spec: ToolSpec,
        args: Any,
        *,
        cancel: Optional[CancelSignal] = None,
        on_progress: Optional[ProgressFn] = None,
    ) -> tools_base.ToolTextResponse:
        if not spec.enabled:
            return tools_base.ToolTextResponse(text=f"Tool '{self.name}' is disabled")

        raw_ops = args.get("operations") if isinstance(args, dict) else None
        if not isinstance(raw_ops, list):
            return tools_base.ToolTextResponse(
                text="Invalid apply_patch arguments: 'operations' must be a list"
            )
        try:
            ops = _operations_adapter.validate_python(raw_ops)
        except ValidationError as e:
            return tools_base.ToolTextResponse(
                text=f"Invalid apply_patch arguments: {e}"
            )

        try:
            base_path = self.prj.base_path
        except AttributeError:
            raise RuntimeError("ApplyPatchTool requires project.base_path")

        try:
            batch = apply_operations(
                ops, base_path, cancel=cancel, on_progress=on_progress
            )
        except PatchCancelled as e:
            logger.info("apply_patch aborted", operations=len(ops))
            return tools_base.ToolTextResponse(text=str(e))

        return tools_base.ToolTextResponse(
            text=batch.summary_text(), data=batch.model_dump(mode="json")
        )

    async def openapi_spec(self, spec: ToolSpec) -> Dict[str, Any]:
        description = (
            "Apply structured patch operations (create_file, update_file, delete_file) "
            "using V4A diffs. Returns the status of every operation and the total fuzz."
            "\n\n"
            "Operations must follow these instructions:\n" + DIFF_SYSTEM_INSTRUCTION
        )
        return {
            "name": self.name,
            "description": description,
            "parameters": {
                "type": "object",
                "properties": {
                    "operations": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {
                                "type": {
                                    "type": "string",
                                    "enum": [t.value for t in OperationType],
                                },
                                "path": {"type": "string"},
                                "diff": {
                                    "type": "string",
                                    "description": "V4A diff (create_file: every line starts with '+').",
                                },
                                "move_path": {
                                    "type": "string",
                                    "description": "Rename target for update_file.",
                                },
                            },
                            "required": ["type", "path"],
                            "additionalProperties": False,
                        },
                    },
                },
                "required": ["operations"],
                "additionalProperties": False,
            },
        }


tools_base.register_tool(ApplyPatchTool.name, ApplyPatchTool)
