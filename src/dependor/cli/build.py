"""Build command: scan a project and persist its dependency graph."""

from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape
from rich.table import Table

from . import app
from ._common import console, fail
from ..api import analyze
from ..config import load_config
from ..exceptions import DependorError
from ..logging_config import setup_logging
from ..persistence import save_graph, save_metadata


@app.command()
def build(
    path: Path = typer.Argument(
        Path("."),
        help="Project root to scan",
        exists=True,
        file_okay=False,
        dir_okay=True,
        readable=True,
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Graph file to write (default: dependor-output.json)",
    ),
    metadata: Optional[Path] = typer.Option(
        None,
        "--metadata",
        help="Also write exported symbols, external packages and diagnostics here",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    barrels: Optional[bool] = typer.Option(
        None,
        "--barrels/--no-barrels",
        help="Redirect named imports from index files to the defining module",
    ),
    workers: Optional[int] = typer.Option(
        None,
        "-w",
        "--workers",
        help="Parallel workers (default: auto-detect)",
        min=1,
        max=32,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Errors only, no summary"),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Also append log records (diagnostics with -v) to this file",
    ),
):
    """
    Scan a project and write its dependency graph.

    The graph file maps each project file to the files it imports.

    [bold cyan]Examples:[/bold cyan]

      dependor build

      dependor build web/src -o graph.json --metadata graph-meta.json

      dependor build --barrels --workers 4
    """
    try:
        settings = load_config(
            config_file=config,
            root=path,
            resolve_barrels=barrels,
            workers=workers,
            verbose=verbose,
            quiet=quiet,
        )
        setup_logging(settings.verbosity, log_file=str(log_file) if log_file else None)
        result = analyze(str(path), config=settings)

        output_path = output or Path(settings.output_file)
        save_graph(result.graph, output_path)
        if metadata is not None:
            save_metadata(result.graph, metadata)
    except DependorError as e:
        fail(e)

    if settings.verbosity == "quiet":
        return

    graph = result.graph
    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Files", str(len(result.files)))
    table.add_row("Statements", str(result.statement_count))
    table.add_row("Edges", str(graph.edge_count))
    table.add_row("External references", str(len(graph.external)))
    table.add_row("Dangling references", str(len(graph.dangling)))
    table.add_row("Skipped statements", str(result.skipped_statement_count))

    console.print()
    console.print(table)
    console.print()
    console.print(f"[green]Graph written to {escape(str(output_path))}[/green]")
    if metadata is not None:
        console.print(f"[green]Metadata written to {escape(str(metadata))}[/green]")
