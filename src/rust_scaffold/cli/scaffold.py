from typing import Annotated

import typer
from rich.console import Console

from rust_scaffold.core.scaffold import generate_scaffold
from rust_scaffold.models import GenerationMode, ScaffoldSpec
from rust_scaffold.settings import Settings, parse_formats

console = Console()


def scaffold(
    type_names: Annotated[list[str], typer.Argument(help="Type names to generate tests for.")],
    mode: Annotated[
        GenerationMode | None,
        typer.Option(case_sensitive=False, help="How generated tests build instances."),
    ] = None,
    export_path: Annotated[str | None, typer.Option(help="Path re-exporting the same types.")] = None,
    formats: Annotated[str | None, typer.Option(help="Comma-separated serialization formats.")] = None,
) -> None:
    """Print a generated tests module for the given type names."""
    try:
        settings = Settings.from_env(
            mode=mode,
            export_path=export_path,
            formats=parse_formats(formats) if formats is not None else None,
        )
    except ValueError as exc:
        console.print(f"Error: {exc}", markup=False, soft_wrap=True)
        raise typer.Exit(1) from None

    spec = ScaffoldSpec(
        type_names=tuple(type_names),
        mode=settings.mode,
        export_path=settings.export_path,
        formats=settings.formats,
    )
    typer.echo(generate_scaffold(spec), nl=False)
