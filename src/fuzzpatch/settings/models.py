from typing import Any, Dict, List, Optional
from enum import Enum
from pydantic import BaseModel, Field, model_validator


# Project-relative location of the optional config file.
CONFIG_RELPATH = ".fuzzpatch/config.yaml"


class LogLevel(str, Enum):
    debug = "debug"
    info = "info"
    warning = "warning"
    error = "error"
    critical = "critical"


class LoggingSettings(BaseModel):
    # Level for the fuzzpatch logger if not overridden.
    default_level: LogLevel = LogLevel.warning
    # Mapping of logger name -> level override (e.g., {"asyncio": "debug"})
    enabled_loggers: Dict[str, LogLevel] = Field(default_factory=dict)
    # Append log records to this file when set.
    log_file: Optional[str] = None


class PreviewSettings(BaseModel):
    """Limits for diff previews shown before a batch is applied."""

    max_lines: int = Field(default=16, ge=1)
    max_chars: int = Field(default=4000, ge=1)
    max_paths: int = Field(default=20, ge=1)


class ToolSpec(BaseModel):
    """
    Tool specification. Accepts a bare tool name or a mapping with 'name'
    and optional 'enabled'. A disabled tool refuses to run.
    """

    name: str
    enabled: bool = True

    @model_validator(mode="before")
    @classmethod
    def _coerce(cls, v: Any) -> Any:
        if isinstance(v, str):
            return {"name": v}
        if isinstance(v, dict):
            name = v.get("name")
            if not isinstance(name, str) or not name:
                raise ValueError("Tool spec must include non-empty 'name'")
            return {
                "name": name,
                "enabled": v.get("enabled", True),
            }
        return v


class Settings(BaseModel):
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    preview: PreviewSettings = Field(default_factory=PreviewSettings)
    tools: List[ToolSpec] = Field(default_factory=list)

    def tool_spec(self, name: str) -> ToolSpec:
        for spec in self.tools:
            if spec.name == name:
                return spec
        return ToolSpec(name=name)
