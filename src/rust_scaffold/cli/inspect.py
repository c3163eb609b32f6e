from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from rust_scaffold.core.report import SiteReport, describe_source
from rust_scaffold.settings import Settings

console = Console()


def _classification(site: SiteReport) -> str:
    if site.skipped:
        return "[red]skipped[/red]"
    if site.exempt:
        return "[cyan]exempt[/cyan]"
    if site.is_test:
        return "[yellow]test[/yellow]"
    return ""


def inspect(
    path: Annotated[Path, typer.Argument(help="Rust source file to inspect.")],
    feature: Annotated[str | None, typer.Option(help="Feature flag that also marks test-only code.")] = None,
) -> None:
    """Show the types, declarations and test blocks found in one file, without changing it."""
    from rust_scaffold.fs import LocalFileSystem

    try:
        text = LocalFileSystem().read_text(path)
    except (OSError, UnicodeDecodeError) as exc:
        console.print(f"[red]Error:[/red] could not read {escape(str(path))}: {escape(str(exc))}", soft_wrap=True)
        raise typer.Exit(1) from None

    try:
        settings = Settings.from_env(feature=feature)
    except ValueError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}", soft_wrap=True)
        raise typer.Exit(1) from None

    report = describe_source(text, settings)

    names = ", ".join(report.type_names) if report.type_names else "(none)"
    console.print(f"Types: {escape(names)}")
    console.print(f"Opaque regions: {report.opaque_regions}")

    table = Table(show_lines=False)
    for header in ("line", "declaration", "terminator", "block lines", "classification"):
        table.add_column(header)
    for site in report.sites:
        span = "" if site.block_start_line is None else f"{site.block_start_line}-{site.block_end_line}"
        table.add_row(
            str(site.line),
            escape(site.declaration),
            site.terminator.value,
            span,
            _classification(site),
        )
    console.print(table)
    console.print(f"({len(report.sites)} declarations)")
