from __future__ import annotations

from typing import List, Optional


class DiffError(ValueError):
    """Any problem detected while parsing or applying a patch."""


class PathError(DiffError):
    """Operation path is empty, absolute, traversing or escapes the root."""


class FormatError(DiffError):
    """Malformed diff syntax."""


class ContextNotFoundError(DiffError):
    def __init__(self, message: str, *, eof: bool = False, cursor: int = 0) -> None:
        super().__init__(message)
        self.eof = eof
        self.cursor = cursor


class ConflictError(DiffError):
    """
    Recorded delete lines differ from the target content at the resolved
    position, or resolved chunks are out of order.
    """

    def __init__(
        self,
        message: str,
        *,
        line: Optional[int] = None,
        expected: Optional[List[str]] = None,
        actual: Optional[List[str]] = None,
    ) -> None:
        super().__init__(message)
        self.line = line
        self.expected = expected
        self.actual = actual


class ExistenceError(DiffError):
    """Create on an existing path, update/delete on a missing one."""


# Not a DiffError: per-operation handlers must let it through.
class PatchCancelled(Exception):
    def __init__(self, message: str = "Aborted") -> None:
        super().__init__(message)
