import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from fuzzpatch.cli import main


def _batch(tmp_path: Path, doc) -> str:
    p = tmp_path / "batch.json"
    p.write_text(json.dumps(doc), encoding="utf-8")
    return str(p)


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    root.mkdir()
    return root


def test_apply_renders_summary(tmp_path: Path, project_dir: Path):
    (project_dir / "f.txt").write_text("a\nb\n", encoding="utf-8")
    batch = _batch(
        tmp_path,
        {
            "operations": [
                {"type": "update_file", "path": "f.txt", "diff": " a\n-b\n+c\n"},
                {"type": "create_file", "path": "new.txt", "diff": "+hi\n"},
            ]
        },
    )

    result = CliRunner().invoke(main, ["apply", batch, "--root", str(project_dir)])

    assert result.exit_code == 0, result.output
    assert "Done (fuzz=0)" in result.output
    assert "2 completed, 0 failed" in result.output
    assert "✓ update_file f.txt" in result.output
    assert (project_dir / "f.txt").read_text(encoding="utf-8") == "a\nc\n"
    assert (project_dir / "new.txt").read_text(encoding="utf-8") == "hi"


def test_apply_json_from_stdin(project_dir: Path):
    ops = [{"type": "create_file", "path": "a.txt", "diff": "+x\n"}]

    result = CliRunner().invoke(
        main, ["apply", "-", "--root", str(project_dir), "--json"], input=json.dumps(ops)
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output[result.output.index("{") :])
    assert payload == {
        "fuzz": 0,
        "results": [
            {"type": "create_file", "path": "a.txt", "status": "completed", "detail": None}
        ],
    }


def test_apply_failed_operation_exit_code(tmp_path: Path, project_dir: Path):
    batch = _batch(tmp_path, [{"type": "delete_file", "path": "gone.txt"}])
    result = CliRunner().invoke(main, ["apply", batch, "--root", str(project_dir)])
    assert result.exit_code == 1
    assert "✗ Done (fuzz=0)" in result.output
    assert "0 completed, 1 failed" in result.output
    assert "✗ delete_file gone.txt" in result.output


@pytest.mark.parametrize(
    "doc",
    [
        {"ops": []},
        "not a batch",
        [{"type": "rename_file", "path": "a.txt"}],
    ],
)
def test_apply_invalid_batch(tmp_path: Path, project_dir: Path, doc):
    batch = _batch(tmp_path, doc)
    result = CliRunner().invoke(main, ["apply", batch, "--root", str(project_dir)])
    assert result.exit_code == 2
    assert "Invalid batch:" in result.output


def test_preview(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    batch = _batch(
        tmp_path,
        {
            "operations": [
                {"type": "create_file", "path": "a.txt", "diff": "+hello\n"},
                {"type": "delete_file", "path": "b.txt"},
            ]
        },
    )

    result = CliRunner().invoke(main, ["preview", batch])

    assert result.exit_code == 0, result.output
    assert "apply_patch (2 op(s), ~7 diff bytes)" in result.output
    assert "Paths: a.txt, b.txt" in result.output
    assert "+hello" in result.output
    assert not (tmp_path / "a.txt").exists()


def test_preview_without_diff(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    batch = _batch(tmp_path, [{"type": "delete_file", "path": "b.txt"}])
    result = CliRunner().invoke(main, ["preview", batch])
    assert result.exit_code == 0, result.output
    assert "(no diff)" in result.output


def test_apply_missing_batch_file(tmp_path: Path, project_dir: Path):
    missing = str(tmp_path / "missing.json")
    result = CliRunner().invoke(main, ["apply", missing, "--root", str(project_dir)])
    assert result.exit_code == 2
    assert "Invalid batch:" in result.output


def test_preview_missing_batch_file(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(main, ["preview", str(tmp_path / "missing.json")])
    assert result.exit_code == 2
    assert "Invalid batch:" in result.output


def test_apply_refused_when_disabled_in_settings(tmp_path: Path, project_dir: Path):
    cfg = project_dir / ".fuzzpatch" / "config.yaml"
    cfg.parent.mkdir()
    cfg.write_text("tools:\n  - name: apply_patch\n    enabled: false\n", encoding="utf-8")
    batch = _batch(tmp_path, [{"type": "create_file", "path": "a.txt", "diff": "+x\n"}])

    result = CliRunner().invoke(main, ["apply", batch, "--root", str(project_dir)])

    assert result.exit_code == 2
    assert "apply_patch is disabled in settings" in result.output
    assert not (project_dir / "a.txt").exists()
