"""Shared CLI helpers and the top-level callback."""

import posixpath
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape

from . import app
from ..config import load_config
from ..exceptions import DependorError

console = Console()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
    ),
):
    """
    Build and query module dependency graphs for JavaScript/TypeScript.

    [bold cyan]Examples:[/bold cyan]

      dependor build src

      dependor why src/app.ts src/util/log.ts

      dependor cycles
    """
    if version:
        from .. import __version__

        console.print(f"[bold cyan]dependor[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit(0)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)


def fail(error: DependorError) -> NoReturn:
    """Print a DependorError and exit 1."""
    console.print(f"[red]Error:[/red] {escape(str(error))}")
    raise typer.Exit(1)


def graph_file(graph: Optional[Path], config: Optional[Path] = None) -> Path:
    """The graph file to read: explicit, else the configured output file."""
    if graph is not None:
        return graph
    return Path(load_config(config_file=config).output_file)


def node_name(path: str) -> str:
    """Canonical form of a user-typed path (``./src/a.ts`` -> ``src/a.ts``)."""
    if not path:
        return path
    return posixpath.normpath(path.replace("\\", "/"))
