from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from rust_scaffold.core.ports.filesystem import FileSystem
from rust_scaffold.core.runner import RootNotFoundError, run
from rust_scaffold.models import FileOutcome, FileStatus, GenerationMode
from rust_scaffold.settings import Settings, parse_formats

console = Console()

_STATUS_STYLES = {
    FileStatus.UPDATED: "[green]Updated[/green]",
    FileStatus.UNCHANGED: "Unchanged",
    FileStatus.SKIPPED: "[yellow]Skipping[/yellow]",
    FileStatus.FAILED: "[red]Failed[/red]",
}


def _get_filesystem() -> FileSystem:
    from rust_scaffold.fs import LocalFileSystem

    return LocalFileSystem()


def _print_outcome(outcome: FileOutcome) -> None:
    label = _STATUS_STYLES[outcome.status]
    line = f"{label} {escape(str(outcome.path))}"
    if outcome.message:
        line += f": {escape(outcome.message)}"
    console.print(line, soft_wrap=True)


def rewrite(
    root: Annotated[Path, typer.Argument(help="Top-level directory of the Rust sources.")],
    workers: Annotated[int | None, typer.Option(min=1, help="Files processed in parallel.")] = None,
    mode: Annotated[
        GenerationMode | None,
        typer.Option(case_sensitive=False, help="How generated tests build instances."),
    ] = None,
    export_path: Annotated[
        str | None,
        typer.Option(help="Path re-exporting the same types, e.g. 'neptune_cash::api::export'."),
    ] = None,
    feature: Annotated[str | None, typer.Option(help="Feature flag that also marks test-only code.")] = None,
    formats: Annotated[
        str | None,
        typer.Option(help="Comma-separated serialization formats (bincode, serde_json, serde_json_wasm)."),
    ] = None,
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Report changes without writing files.")] = False,
) -> None:
    """Neutralize test code and append generated tests to every Rust file under ROOT.

    Files are modified in place.
    """
    try:
        settings = Settings.from_env(
            workers=workers,
            mode=mode,
            export_path=export_path,
            feature=feature,
            formats=parse_formats(formats) if formats is not None else None,
            dry_run=dry_run or None,
        )
    except ValueError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}", soft_wrap=True)
        raise typer.Exit(1) from None

    fs = _get_filesystem()
    console.print(f"Processing Rust files in: {escape(str(root.resolve()))}", soft_wrap=True)
    if settings.dry_run:
        console.print("[yellow]Dry run: no files will be written.[/yellow]\n")
    else:
        console.print("[yellow]WARNING: files are modified in place. Back them up before running.[/yellow]\n")

    try:
        summary = run(root, fs, settings, on_outcome=_print_outcome)
    except RootNotFoundError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}", soft_wrap=True)
        raise typer.Exit(1) from None

    console.print(
        f"\nProcessing complete. {summary.count(FileStatus.UPDATED)} updated, "
        f"{summary.count(FileStatus.UNCHANGED)} unchanged, "
        f"{summary.count(FileStatus.SKIPPED)} skipped, "
        f"{summary.count(FileStatus.FAILED)} failed."
    )
