import json
from pathlib import Path
from typing import Any, List, Optional

import click
from pydantic import TypeAdapter
from rich.console import Console
from rich.text import Text

from fuzzpatch.logger import configure_logging
from fuzzpatch.patch import BatchResult, Operation, OperationStatus, apply_operations
from fuzzpatch.patch.preview import summarize_operations
from fuzzpatch.project import Project

_operations_adapter = TypeAdapter(List[Operation])

EXIT_FAILED = 1
EXIT_BAD_INPUT = 2


def _read_batch(batch_file: str) -> Any:
    with click.open_file(batch_file, "r", encoding="utf-8") as fh:
        doc = json.load(fh)
    if isinstance(doc, dict):
        doc = doc.get("operations")
    if not isinstance(doc, list):
        raise ValueError(
            "Batch must be a list of operations or an object with 'operations'"
        )
    return doc


def render_batch(batch: BatchResult) -> Text:
    out = Text()
    if batch.failed:
        out.append(f"✗ Done (fuzz={batch.fuzz})", style="red")
    else:
        out.append(f"✓ Done (fuzz={batch.fuzz})", style="green")
    out.append(f" — {batch.completed} completed, {batch.failed} failed", style="dim")
    for r in batch.results:
        out.append("\n")
        if r.status == OperationStatus.COMPLETED:
            out.append("✓", style="green")
        else:
            out.append("✗", style="red")
        out.append(f" {r.type.value} {r.path}")
        if r.detail:
            out.append(f" — {r.detail}", style="dim")
    return out


@click.group()
def main() -> None:
    """Apply V4A patch operation batches."""


@main.command()
@click.argument("batch_file", type=click.Path(allow_dash=True))
@click.option(
    "--root",
    "root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
    help="Directory all operation paths are relative to.",
)
@click.option(
    "--config",
    "config",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Settings file (defaults to <root>/.fuzzpatch/config.yaml).",
)
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON.")
def apply(batch_file: str, root: Path, config: Optional[Path], as_json: bool) -> None:
    """Apply the operations in BATCH_FILE (JSON, '-' for stdin)."""
    project = Project.from_base_path(root, config_path=config)
    configure_logging(project.settings.logging)
    if not project.settings.tool_spec("apply_patch").enabled:
        click.echo("apply_patch is disabled in settings", err=True)
        raise SystemExit(EXIT_BAD_INPUT)

    try:
        ops = _operations_adapter.validate_python(_read_batch(batch_file))
    except (OSError, ValueError) as e:
        click.echo(f"Invalid batch: {e}", err=True)
        raise SystemExit(EXIT_BAD_INPUT)

    console = Console()
    with console.status("Applying patch operations...") as status:
        batch = apply_operations(ops, project.base_path, on_progress=status.update)

    if as_json:
        click.echo(batch.model_dump_json(indent=2))
    else:
        console.print(render_batch(batch))

    if batch.failed:
        raise SystemExit(EXIT_FAILED)


@main.command()
@click.argument("batch_file", type=click.Path(allow_dash=True))
@click.option(
    "--config",
    "config",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
)
def preview(batch_file: str, config: Optional[Path]) -> None:
    """Summarize BATCH_FILE without touching the filesystem."""
    project = Project.from_base_path(Path("."), config_path=config)
    limits = project.settings.preview
    try:
        raw_ops = _read_batch(batch_file)
    except (OSError, ValueError) as e:
        click.echo(f"Invalid batch: {e}", err=True)
        raise SystemExit(EXIT_BAD_INPUT)
    summary = summarize_operations(
        {"operations": raw_ops},
        max_lines=limits.max_lines,
        max_chars=limits.max_chars,
        max_paths=limits.max_paths,
    )

    console = Console()
    header = Text("apply_patch", style="bold")
    header.append(
        f" ({summary.op_count} op(s), ~{summary.approx_bytes} diff bytes)", style="dim"
    )
    console.print(header)
    if summary.paths:
        shown = summary.paths[:8]
        more = len(summary.paths) - len(shown)
        line = f"Paths: {', '.join(shown)}" + (f" (+{more} more)" if more else "")
        console.print(Text(line, style="dim"))
    if summary.preview:
        console.print()
        console.print(Text(summary.preview))
    else:
        console.print(Text("(no diff)", style="dim"))


if __name__ == "__main__":
    main()
