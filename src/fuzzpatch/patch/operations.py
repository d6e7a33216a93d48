from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterable, List, Optional, Protocol, Union

from fuzzpatch.logger import logger

from .errors import DiffError, ExistenceError, FormatError, PatchCancelled
from .fsio import file_exists, read_text, write_file_atomic
from .models import (
    BatchResult,
    Operation,
    OperationResult,
    OperationStatus,
    OperationType,
)
from .paths import confine, validate_relative_path
from .v4a import apply_create, apply_update


class CancelSignal(Protocol):
    def is_set(self) -> bool: ...


ProgressFn = Callable[[str], None]


def _error_text(e: BaseException) -> str:
    msg = str(e)
    if isinstance(e, DiffError) and msg:
        return msg
    return f"{type(e).__name__}: {msg}" if msg else type(e).__name__


def _create_file(op: Operation, rel: str, abs_path: Path) -> OperationResult:
    if op.diff is None:
        raise FormatError(f"create_file missing diff for {rel}")
    if file_exists(abs_path):
        raise ExistenceError(f"File already exists at path '{rel}'")

    content = apply_create(op.diff)
    abs_path.parent.mkdir(parents=True, exist_ok=True)
    write_file_atomic(abs_path, content)
    return OperationResult(type=op.type, path=rel, status=OperationStatus.COMPLETED)


def _update_file(
    op: Operation, rel: str, abs_path: Path, base_path: Path, batch: BatchResult
) -> OperationResult:
    if op.diff is None:
        raise FormatError(f"update_file missing diff for {rel}")
    if not file_exists(abs_path):
        raise ExistenceError(f"File not found at path '{rel}'")

    mode = abs_path.stat().st_mode
    current = read_text(abs_path)
    applied = apply_update(current, op.diff)
    # Counted even when the move below fails
    batch.fuzz += applied.fuzz

    if op.move_path:
        rel_to = validate_relative_path(op.move_path)
        abs_to = confine(base_path, rel_to)
        if file_exists(abs_to):
            raise ExistenceError(f"Target already exists at path '{rel_to}'")

        abs_to.parent.mkdir(parents=True, exist_ok=True)
        write_file_atomic(abs_to, applied.text, mode)
        abs_path.unlink()
        result = OperationResult(
            type=op.type,
            path=rel_to,
            status=OperationStatus.COMPLETED,
            detail=f"Moved from {rel}",
        )
        return result

    write_file_atomic(abs_path, applied.text, mode)
    return OperationResult(type=op.type, path=rel, status=OperationStatus.COMPLETED)


def _delete_file(op: Operation, rel: str, abs_path: Path) -> OperationResult:
    if not file_exists(abs_path):
        raise ExistenceError(f"File not found at path '{rel}'")
    abs_path.unlink()
    return OperationResult(type=op.type, path=rel, status=OperationStatus.COMPLETED)


def apply_operations(
    operations: Iterable[Operation],
    base_path: Union[str, Path],
    *,
    cancel: Optional[CancelSignal] = None,
    on_progress: Optional[ProgressFn] = None,
) -> BatchResult:
    """
    Apply a batch of create/update/delete operations under base_path.

    Operations run one at a time, in order. A failing operation is recorded
    as a failed result and the batch moves on; only cancellation, checked
    between operations, aborts the whole batch with PatchCancelled.
    """
    ops: List[Operation] = list(operations)
    base = Path(base_path)
    batch = BatchResult()

    if on_progress is not None:
        on_progress(f"Applying {len(ops)} operation(s)...")

    for i, op in enumerate(ops):
        if cancel is not None and cancel.is_set():
            logger.info("apply_operations cancelled", done=i, total=len(ops))
            raise PatchCancelled()

        try:
            rel = validate_relative_path(op.path)
            abs_path = confine(base, rel)
        except DiffError as e:
            logger.warning("invalid operation path", path=op.path, error=str(e))
            batch.results.append(
                OperationResult(
                    type=op.type,
                    path=op.path,
                    status=OperationStatus.FAILED,
                    detail=str(e),
                )
            )
            continue

        if on_progress is not None:
            on_progress(f"{i + 1}/{len(ops)} {op.type.value} {rel}")

        try:
            if op.type == OperationType.CREATE:
                result = _create_file(op, rel, abs_path)
            elif op.type == OperationType.UPDATE:
                result = _update_file(op, rel, abs_path, base, batch)
            else:
                result = _delete_file(op, rel, abs_path)
        except PatchCancelled:
            raise
        except Exception as e:
            detail = _error_text(e)
            logger.warning(
                "operation failed", type=op.type.value, path=rel, error=detail
            )
            result = OperationResult(
                type=op.type, path=rel, status=OperationStatus.FAILED, detail=detail
            )
        else:
            logger.info("operation completed", type=op.type.value, path=result.path)

        batch.results.append(result)

    return batch
