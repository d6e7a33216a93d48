from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, Field

from .errors import PathError
from .paths import validate_relative_path
from .v4a import normalize_line_endings

PATCH_PREVIEW_MAX_LINES = 16
PATCH_PREVIEW_MAX_CHARS = 4000
PATCH_PREVIEW_MAX_PATHS = 20

ELLIPSIS = "…"


class OperationsSummary(BaseModel):
    op_count: int = 0
    approx_bytes: int = 0
    paths: List[str] = Field(default_factory=list)
    preview: Optional[str] = None


def count_newlines(text: str, max_scan_chars: int = 200_000) -> int:
    return text.count("\n", 0, max_scan_chars)


def make_diff_preview(
    diff: str,
    max_lines: int = PATCH_PREVIEW_MAX_LINES,
    max_chars: int = PATCH_PREVIEW_MAX_CHARS,
) -> str:
    """
    Shorten a diff for display: the head and the tail of the diff joined by an
    ellipsis line, capped at max_chars. Short diffs are returned unchanged.
    """
    text = normalize_line_endings(diff)
    if len(text) <= max_chars and count_newlines(text, max_chars) + 1 <= max_lines:
        return text

    head_count = max(6, max_lines // 2)
    tail_count = max(6, max_lines - head_count)
    # Huge diffs: only scan the edges
    big_cutoff = max_chars * 8
    start_slice = text[: max_chars * 3] if len(text) > big_cutoff else text
    end_slice = text[-max_chars * 3 :] if len(text) > big_cutoff else text

    head = start_slice.split("\n")[:head_count]
    tail_lines = end_slice.split("\n")
    tail = tail_lines[max(0, len(tail_lines) - tail_count) :]

    preview = "\n".join([*head, ELLIPSIS, *tail])
    if len(preview) > max_chars:
        preview = preview[:max_chars].rstrip() + "\n" + ELLIPSIS
    return preview


def extract_paths(ops: Any, limit: int = PATCH_PREVIEW_MAX_PATHS) -> List[str]:
    """Validated, de-duplicated operation paths; malformed entries are skipped."""
    if not isinstance(ops, list):
        return []
    out: List[str] = []
    for o in ops:
        if not isinstance(o, dict):
            continue
        p = o.get("path")
        if not isinstance(p, str):
            continue
        try:
            rel = validate_relative_path(p)
        except PathError:
            continue
        if rel not in out:
            out.append(rel)
    return out[:limit]


def summarize_operations(
    args: Any,
    *,
    max_lines: int = PATCH_PREVIEW_MAX_LINES,
    max_chars: int = PATCH_PREVIEW_MAX_CHARS,
    max_paths: int = PATCH_PREVIEW_MAX_PATHS,
) -> OperationsSummary:
    """
    Summarize raw (unvalidated) tool arguments of the form
    {"operations": [...]}: operation count, UTF-8 diff size, paths and a
    preview of the first diff.
    """
    ops = args.get("operations") if isinstance(args, dict) else None
    if not isinstance(ops, list):
        return OperationsSummary()

    approx_bytes = 0
    first_diff = ""
    for o in ops:
        if not isinstance(o, dict):
            continue
        diff = o.get("diff")
        if isinstance(diff, str):
            approx_bytes += len(diff.encode("utf-8"))
            if not first_diff:
                first_diff = diff

    preview = (
        make_diff_preview(first_diff, max_lines=max_lines, max_chars=max_chars)
        if first_diff
        else None
    )
    return OperationsSummary(
        op_count=len(ops),
        approx_bytes=approx_bytes,
        paths=extract_paths(ops, limit=max_paths),
        preview=preview,
    )
