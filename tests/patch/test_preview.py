from fuzzpatch.patch.preview import (
    ELLIPSIS,
    OperationsSummary,
    extract_paths,
    make_diff_preview,
    summarize_operations,
)


def test_short_diff_is_unchanged():
    diff = "@@\n-a\n+b"
    assert make_diff_preview(diff) == diff


def test_crlf_is_normalized():
    assert make_diff_preview("-a\r\n+b") == "-a\n+b"


def test_long_diff_keeps_head_and_tail():
    diff = "\n".join(f"l{i}" for i in range(40))
    preview = make_diff_preview(diff, max_lines=16)
    lines = preview.split("\n")
    assert lines[:8] == [f"l{i}" for i in range(8)]
    assert lines[8] == ELLIPSIS
    assert lines[9:] == [f"l{i}" for i in range(32, 40)]


def test_preview_is_capped_by_chars():
    diff = "\n".join(["+" + "x" * 100] * 3)
    preview = make_diff_preview(diff, max_lines=16, max_chars=50)
    assert preview.endswith("\n" + ELLIPSIS)
    assert len(preview) <= 52


def test_extract_paths_dedupes_and_skips_bad_entries():
    ops = [
        {"path": "a.txt"},
        {"path": "./a.txt"},
        {"path": "../escape"},
        {"path": 3},
        "junk",
        {"path": "b\\c.txt"},
    ]
    assert extract_paths(ops) == ["a.txt", "b/c.txt"]
    assert extract_paths(ops, limit=1) == ["a.txt"]
    assert extract_paths("not a list") == []


def test_summarize_operations():
    args = {
        "operations": [
            {"type": "create_file", "path": "a.txt", "diff": "+é\n"},
            {"type": "update_file", "path": "../x", "diff": "+b"},
            "junk",
            {"type": "delete_file", "path": "a.txt"},
        ]
    }
    summary = summarize_operations(args)
    assert summary.op_count == 4
    assert summary.approx_bytes == 6
    assert summary.paths == ["a.txt"]
    assert summary.preview == "+é\n"


def test_summarize_without_operations():
    assert summarize_operations(None) == OperationsSummary()
    assert summarize_operations({"operations": "x"}) == OperationsSummary()
    summary = summarize_operations({"operations": [{"type": "delete_file", "path": "a"}]})
    assert summary.op_count == 1
    assert summary.preview is None
