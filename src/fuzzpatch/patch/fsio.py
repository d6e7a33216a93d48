from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Optional

from fuzzpatch.logger import logger

# mkstemp creates 0600 files; new files get this mode instead.
DEFAULT_FILE_MODE = 0o644


def file_exists(path: Path) -> bool:
    try:
        path.stat()
    except OSError:
        return False
    return True


def read_text(path: Path) -> str:
    # newline="" keeps CRLF intact; the applier normalizes line endings itself.
    with path.open("rt", encoding="utf-8", newline="") as fh:
        return fh.read()


def write_file_atomic(path: Path, content: str, mode: Optional[int] = None) -> None:
    """
    Replace path with content without ever exposing a partially written file.

    Content goes to a temporary sibling first so the final rename stays on
    one filesystem. If the rename is refused because the target exists (as on
    Windows), the target is removed and the rename retried once. The temporary
    file is gone on every exit path.
    """
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.tmp-{os.getpid()}-", dir=str(path.parent)
    )
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wt", encoding="utf-8", newline="") as fh:
            fh.write(content)
            fh.flush()
            os.fsync(fh.fileno())

        try:
            os.chmod(tmp_path, (DEFAULT_FILE_MODE if mode is None else mode) & 0o7777)
        except OSError as e:
            logger.warning("chmod failed", path=str(path), error=str(e))

        try:
            os.rename(tmp_path, path)
        except OSError as err:
            try:
                os.unlink(path)
                os.rename(tmp_path, path)
            except OSError:
                raise err
    finally:
        if tmp_path.exists():
            try:
                tmp_path.unlink()
            except OSError as e:
                logger.warning("temp file cleanup failed", path=str(tmp_path), error=str(e))
