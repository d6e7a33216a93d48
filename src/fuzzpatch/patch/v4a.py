from __future__ import annotations

from typing import Callable, List, Tuple

from fuzzpatch.logger import logger

from .errors import ConflictError, ContextNotFoundError, FormatError
from .models import ApplyResult, Chunk, MatchResult, Section


DIFF_SYSTEM_INSTRUCTION = r"""# apply_patch operations
Each operation is an object with `type`, `path` and, depending on the type, `diff` and `move_path`.

* `create_file`: `diff` is the full file content in create mode. *Every* line starts with `+`.
* `update_file`: `diff` is a V4A diff with `@@` sections and `+`/`-`/space lines.
  Set `move_path` to rename the file while updating it.
* `delete_file`: no `diff`.

Paths are relative to the project root. Absolute paths and `..` traversal are rejected.

## V4A update diffs
[0-3 lines of context before]
-<old line>
+<new line>
[0-3 lines of context after]

* Context lines start with a single space followed by the exact text. A blank context line may be completely empty.
* Separate changes with `@@`. If context alone is ambiguous, name the enclosing class or function:
  @@ class BaseClass
* Order sections top-to-bottom as they appear in the file.
* Add `*** End of File` after a section whose context ends at the last line of the file.

## Minimal example:
```
@@ def main():
     args = parse()
-    run(args)
+    run(args, verbose=True)
     return 0
```

# Self-Check
* Context and deleted lines match the current file character for character.
* No JSON/Markdown escaping added; quotes/backslashes/tabs preserved literally.
* create_file diffs contain only `+` lines.
"""


END_OF_FILE_MARKER = "*** End of File"
SECTION_TERMINATORS = (
    "@@",
    END_OF_FILE_MARKER,
    "*** End Patch",
    "*** Update File:",
    "*** Delete File:",
    "*** Add File:",
)
ANCHOR_PREFIX = "@@"
DELETE_PREFIX = "-"
ADD_PREFIX = "+"
CONTEXT_PREFIX = " "

# Penalty added when an end-of-file section could not be matched at the tail.
EOF_FALLBACK_FUZZ = 10000

# Ordered matcher strategies: (name, line normalizer, fuzz on success).
MATCHERS: Tuple[Tuple[str, Callable[[str], str], int], ...] = (
    ("exact", lambda s: s, 0),
    ("rstrip", str.rstrip, 1),
    ("strip", str.strip, 100),
)


def normalize_line_endings(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def split_patch_lines(diff: str) -> List[str]:
    lines = normalize_line_endings(diff).split("\n")
    # A terminating newline must not become an extra empty diff line.
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def peek_next_section(lines: List[str], start_index: int) -> Section:
    """
    Parse one section body starting at start_index.

    Keep and delete lines make up the context that must be located in the
    target; each contiguous delete/insert run becomes a Chunk positioned by
    its offset into that context.
    """
    old: List[str] = []
    del_lines: List[str] = []
    ins_lines: List[str] = []
    chunks: List[Chunk] = []

    mode = "keep"
    index = start_index

    while index < len(lines):
        s0 = lines[index]
        if s0.startswith(SECTION_TERMINATORS) or s0 == "***":
            break
        if s0.startswith("***"):
            raise FormatError(f"Invalid Line: {s0}")

        index += 1
        last_mode = mode
        s = s0 or CONTEXT_PREFIX
        prefix = s[0]
        if prefix == ADD_PREFIX:
            mode = "add"
        elif prefix == DELETE_PREFIX:
            mode = "delete"
        elif prefix == CONTEXT_PREFIX:
            mode = "keep"
        else:
            raise FormatError(f"Invalid Line: {s0}")
        s = s[1:]

        if mode == "keep" and last_mode != mode and (ins_lines or del_lines):
            chunks.append(Chunk(len(old) - len(del_lines), del_lines, ins_lines))
            del_lines, ins_lines = [], []

        if mode == "delete":
            del_lines.append(s)
            old.append(s)
        elif mode == "add":
            ins_lines.append(s)
        else:
            old.append(s)

    if ins_lines or del_lines:
        chunks.append(Chunk(len(old) - len(del_lines), del_lines, ins_lines))

    if index < len(lines) and lines[index] == END_OF_FILE_MARKER:
        return Section(context=old, chunks=chunks, next_index=index + 1, eof=True)

    if index == start_index:
        line = lines[index] if index < len(lines) else ""
        raise FormatError(f"Nothing in this section - index={index} line='{line}'")

    return Section(context=old, chunks=chunks, next_index=index, eof=False)


def _find_context_core(lines: List[str], context: List[str], start: int) -> MatchResult:
    if not context:
        return MatchResult(index=start, fuzz=0)

    last_start = len(lines) - len(context)
    for _name, norm, fuzz in MATCHERS:
        wanted = [norm(c) for c in context]
        for i in range(start, last_start + 1):
            if all(norm(lines[i + j]) == w for j, w in enumerate(wanted)):
                return MatchResult(index=i, fuzz=fuzz)
    return MatchResult(index=None)


def find_context(
    lines: List[str], context: List[str], start: int, eof: bool
) -> MatchResult:
    """
    Locate context in lines at or after start.

    End-of-file sections are tried against the tail first; a fallback to the
    ordinary forward scan carries EOF_FALLBACK_FUZZ on top of its own fuzz.
    """
    if eof:
        at_eof = _find_context_core(lines, context, max(0, len(lines) - len(context)))
        if at_eof.found:
            return at_eof
        fallback = _find_context_core(lines, context, start)
        return MatchResult(index=fallback.index, fuzz=fallback.fuzz + EOF_FALLBACK_FUZZ)
    return _find_context_core(lines, context, start)


def _seek_label(file_lines: List[str], label: str, file_index: int) -> Tuple[int, int]:
    """
    Move the cursor past the next line equal to label.

    The search is skipped when the label already occurred before the cursor,
    so repeated labels never re-target an earlier definition.
    """
    prefix = file_lines[:file_index]
    if label in prefix:
        return file_index, 0
    for i in range(file_index, len(file_lines)):
        if file_lines[i] == label:
            return i + 1, 0

    stripped = label.strip()
    if any(s.strip() == stripped for s in prefix):
        return file_index, 0
    for i in range(file_index, len(file_lines)):
        if file_lines[i].strip() == stripped:
            return i + 1, 1
    return file_index, 0


def apply_update(current: str, diff: str) -> ApplyResult:
    # Never strip the diff: context lines may begin with a space.
    patch_lines = split_patch_lines(diff)
    file_lines = normalize_line_endings(current).split("\n")

    fuzz = 0
    chunks: List[Chunk] = []
    patch_index = 0
    file_index = 0

    while patch_index < len(patch_lines):
        line = patch_lines[patch_index]
        label = ""
        if line.startswith(ANCHOR_PREFIX + " "):
            label = line[3:]
            patch_index += 1
        elif line == ANCHOR_PREFIX:
            patch_index += 1
        elif patch_index != 0:
            # Only the very first section may omit its @@ marker
            raise FormatError(f"Invalid diff (expected @@ section): {line}")

        if label.strip():
            file_index, label_fuzz = _seek_label(file_lines, label, file_index)
            fuzz += label_fuzz

        section = peek_next_section(patch_lines, patch_index)
        found = find_context(file_lines, section.context, file_index, section.eof)
        if not found.found:
            kind = "Invalid EOF Context" if section.eof else "Invalid Context"
            raise ContextNotFoundError(
                f"{kind} {file_index}:\n" + "\n".join(section.context),
                eof=section.eof,
                cursor=file_index,
            )
        assert found.index is not None

        fuzz += found.fuzz
        for ch in section.chunks:
            chunks.append(
                Chunk(
                    orig_index=ch.orig_index + found.index,
                    del_lines=ch.del_lines,
                    ins_lines=ch.ins_lines,
                )
            )
        file_index = found.index + len(section.context)
        patch_index = section.next_index

    text = _apply_chunks(file_lines, chunks)
    logger.debug("v4a update applied", chunks=len(chunks), fuzz=fuzz)
    return ApplyResult(text=text, fuzz=fuzz)


def _apply_chunks(file_lines: List[str], chunks: List[Chunk]) -> str:
    dest: List[str] = []
    orig_index = 0
    for chunk in chunks:
        if orig_index > chunk.orig_index:
            raise ConflictError(
                f"Out-of-order change block: line {orig_index} > {chunk.orig_index}",
                line=chunk.orig_index + 1,
            )
        dest.extend(file_lines[orig_index : chunk.orig_index])
        orig_index = chunk.orig_index

        expected = chunk.del_lines
        actual = file_lines[orig_index : orig_index + len(expected)]
        if actual != expected:
            raise ConflictError(
                f"Patch conflict at line {orig_index + 1}. Expected:\n"
                + "\n".join(expected)
                + "\n\nActual:\n"
                + "\n".join(actual),
                line=orig_index + 1,
                expected=list(expected),
                actual=list(actual),
            )

        dest.extend(chunk.ins_lines)
        orig_index += len(expected)

    dest.extend(file_lines[orig_index:])
    return "\n".join(dest)


def apply_create(diff: str) -> str:
    out: List[str] = []
    for line in split_patch_lines(diff):
        if not line.startswith(ADD_PREFIX):
            raise FormatError(
                f"Invalid create_file diff line (must start with '+'): {line}"
            )
        out.append(line[1:])
    return "\n".join(out)
