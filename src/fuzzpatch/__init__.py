from .patch import (  # noqa: F401
    BatchResult,
    DiffError,
    Operation,
    OperationResult,
    OperationStatus,
    OperationType,
    PatchCancelled,
    apply_create,
    apply_operations,
    apply_update,
)

__version__ = "0.1.0"
