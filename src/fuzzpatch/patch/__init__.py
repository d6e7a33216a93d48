from __future__ import annotations

from .errors import (
    ConflictError,
    ContextNotFoundError,
    DiffError,
    ExistenceError,
    FormatError,
    PatchCancelled,
    PathError,
)
from .models import (
    ApplyResult,
    BatchResult,
    Chunk,
    MatchResult,
    Operation,
    OperationResult,
    OperationStatus,
    OperationType,
    Section,
)
from .operations import apply_operations
from .paths import confine, validate_relative_path
from .v4a import (
    DIFF_SYSTEM_INSTRUCTION,
    apply_create,
    apply_update,
    find_context,
    peek_next_section,
)

__all__ = [
    "ApplyResult",
    "BatchResult",
    "Chunk",
    "ConflictError",
    "ContextNotFoundError",
    "DIFF_SYSTEM_INSTRUCTION",
    "DiffError",
    "ExistenceError",
    "FormatError",
    "MatchResult",
    "Operation",
    "OperationResult",
    "OperationStatus",
    "OperationType",
    "PatchCancelled",
    "PathError",
    "Section",
    "apply_create",
    "apply_operations",
    "apply_update",
    "confine",
    "find_context",
    "peek_next_section",
    "validate_relative_path",
]
