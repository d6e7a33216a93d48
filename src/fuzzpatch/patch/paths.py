from __future__ import annotations

import posixpath
import re
from pathlib import Path
from typing import Union

from .errors import PathError

_WINDOWS_DRIVE_RE = re.compile(r"^[A-Za-z]:/")


def normalize_patch_path(p: str) -> str:
    return p.replace("\\", "/").strip()


def validate_relative_path(p: str) -> str:
    """
    Validate a patch path and return its normalized, root-relative form.

    Pure string logic: absolute POSIX or drive paths, NUL bytes and any
    path that normalizes to '.' or steps above the root are rejected.
    """
    raw = normalize_patch_path(p)
    if not raw:
        raise PathError("Invalid path: empty")
    if "\x00" in raw:
        raise PathError("Invalid path: contains NUL")
    if raw.startswith("/"):
        raise PathError(f"Invalid path: absolute paths are not allowed: {raw}")
    if _WINDOWS_DRIVE_RE.match(raw):
        raise PathError(f"Invalid path: absolute Windows paths are not allowed: {raw}")

    normalized = posixpath.normpath(raw)
    if normalized == ".":
        raise PathError(f"Invalid path: {raw}")
    if normalized == ".." or normalized.startswith("../") or "/../" in normalized:
        raise PathError(f"Invalid path: directory traversal is not allowed: {raw}")
    return normalized


def confine(base_path: Union[str, Path], rel: str) -> Path:
    """
    Join rel onto base_path, rejecting anything that resolves outside it.

    Symlinks are followed only for the containment check; the returned path
    is the one the caller named, so a link is replaced or removed itself
    rather than its target.
    """
    root = Path(base_path).resolve()
    joined = root / rel
    resolved = joined.resolve()
    if resolved == root or root not in resolved.parents:
        raise PathError(f"Invalid path (escapes project root): {rel}")
    return joined.parent.resolve() / joined.name
