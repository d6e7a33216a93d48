from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class OperationType(str, Enum):
    CREATE = "create_file"
    UPDATE = "update_file"
    DELETE = "delete_file"


class OperationStatus(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"


class Operation(BaseModel):
    type: OperationType
    path: str
    # V4A diff; create_file expects full file content in create mode
    diff: Optional[str] = None
    # Rename target for update_file
    move_path: Optional[str] = None


class OperationResult(BaseModel):
    type: OperationType
    path: str
    status: OperationStatus
    detail: Optional[str] = None


class BatchResult(BaseModel):
    fuzz: int = 0
    results: List[OperationResult] = Field(default_factory=list)

    @property
    def completed(self) -> int:
        return sum(1 for r in self.results if r.status == OperationStatus.COMPLETED)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if r.status == OperationStatus.FAILED)

    def summary_text(self) -> str:
        lines = [f"Done. Fuzz={self.fuzz}."]
        for r in self.results:
            mark = "✓" if r.status == OperationStatus.COMPLETED else "✗"
            line = f"{mark} {r.type.value} {r.path}"
            if r.detail:
                line += f" — {r.detail}"
            lines.append(line)
        return "\n".join(lines)


@dataclass
class Chunk:
    # Offset into the section context (or, once rebased, into the file)
    # where deletion begins.
    orig_index: int
    del_lines: List[str] = field(default_factory=list)
    ins_lines: List[str] = field(default_factory=list)


@dataclass
class Section:
    context: List[str]
    chunks: List[Chunk]
    next_index: int
    eof: bool = False


@dataclass
class MatchResult:
    # None when no window matched
    index: Optional[int]
    fuzz: int = 0

    @property
    def found(self) -> bool:
        return self.index is not None


@dataclass
class ApplyResult:
    text: str
    fuzz: int = 0
