import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from rust_scaffold.cli.inspect import inspect
from rust_scaffold.cli.rewrite import rewrite
from rust_scaffold.cli.scaffold import scaffold

app = typer.Typer(
    name="rust-scaffold",
    help="Rust scaffold CLI — neutralize existing tests and generate serialization tests.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_time=False, show_path=False)],
        force=True,
    )


@app.callback()
def _root(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log scanner decisions.")] = False,
) -> None:
    configure_logging(verbose)


app.command("rewrite")(rewrite)
app.command("inspect")(inspect)
app.command("scaffold")(scaffold)


def main() -> None:
    app()
