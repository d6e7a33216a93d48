import os
import stat
from pathlib import Path

import pytest

from fuzzpatch.patch import fsio
from fuzzpatch.patch.fsio import file_exists, read_text, write_file_atomic


def _leftovers(directory: Path) -> list[str]:
    return sorted(p.name for p in directory.iterdir() if ".tmp-" in p.name)


def test_write_creates_file_without_temp_leftovers(tmp_path: Path):
    target = tmp_path / "out.txt"
    write_file_atomic(target, "hello\nworld")
    assert target.read_bytes() == b"hello\nworld"
    assert _leftovers(tmp_path) == []


def test_write_replaces_and_applies_mode(tmp_path: Path):
    target = tmp_path / "run.sh"
    target.write_text("old", encoding="utf-8")
    write_file_atomic(target, "new", 0o100755)
    assert target.read_text(encoding="utf-8") == "new"
    assert stat.S_IMODE(target.stat().st_mode) == 0o755


def test_write_new_file_default_mode(tmp_path: Path):
    target = tmp_path / "new.txt"
    write_file_atomic(target, "x")
    assert stat.S_IMODE(target.stat().st_mode) == fsio.DEFAULT_FILE_MODE


def test_write_keeps_crlf_and_unicode(tmp_path: Path):
    target = tmp_path / "u.txt"
    write_file_atomic(target, "é\r\nü")
    assert target.read_bytes() == "é\r\nü".encode("utf-8")
    assert read_text(target) == "é\r\nü"


def test_chmod_failure_is_not_fatal(tmp_path: Path, monkeypatch):
    def fail_chmod(*args, **kwargs):
        raise PermissionError("no chmod")

    monkeypatch.setattr(fsio.os, "chmod", fail_chmod)
    target = tmp_path / "a.txt"
    write_file_atomic(target, "content", 0o100600)
    assert target.read_text(encoding="utf-8") == "content"
    assert _leftovers(tmp_path) == []


def test_rename_fallback_removes_target_and_retries(tmp_path: Path, monkeypatch):
    target = tmp_path / "a.txt"
    target.write_text("old", encoding="utf-8")
    real_rename = os.rename
    calls: list[str] = []

    def rename_once_refused(src, dst):
        calls.append(str(dst))
        if len(calls) == 1:
            raise FileExistsError("target exists")
        return real_rename(src, dst)

    monkeypatch.setattr(fsio.os, "rename", rename_once_refused)
    write_file_atomic(target, "new")
    assert len(calls) == 2
    assert target.read_text(encoding="utf-8") == "new"
    assert _leftovers(tmp_path) == []


def test_rename_failure_surfaces_original_error(tmp_path: Path, monkeypatch):
    target = tmp_path / "a.txt"
    target.write_text("old", encoding="utf-8")

    def always_refuse(src, dst):
        raise FileExistsError("first refusal")

    monkeypatch.setattr(fsio.os, "rename", always_refuse)
    with pytest.raises(FileExistsError, match="first refusal"):
        write_file_atomic(target, "new")
    assert _leftovers(tmp_path) == []


def test_file_exists(tmp_path: Path):
    assert not file_exists(tmp_path / "missing")
    (tmp_path / "present").write_text("", encoding="utf-8")
    assert file_exists(tmp_path / "present")
