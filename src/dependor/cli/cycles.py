"""Cycles command: list import cycles in a persisted graph."""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape

from . import app
from ._common import console, fail, graph_file
from ..exceptions import DependorError
from ..graph import find_cycles
from ..persistence import load_graph


@app.command()
def cycles(
    graph: Optional[Path] = typer.Option(
        None,
        "--graph",
        "-g",
        help="Graph file written by 'dependor build' (default: dependor-output.json)",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
):
    """
    List groups of files that import each other in a cycle.
    """
    try:
        snapshot = load_graph(graph_file(graph))
    except DependorError as e:
        fail(e)

    groups = find_cycles(snapshot)

    if json_output:
        print(json.dumps(groups, indent=2))
        return

    if not groups:
        console.print("[green]No import cycles found[/green]")
        return

    console.print(f"[bold cyan]{len(groups)} import cycle(s)[/bold cyan]")
    for i, group in enumerate(groups, 1):
        console.print()
        console.print(f"[bold]Cycle {i}[/bold] ({len(group)} files)")
        for path in group:
            console.print(f"  {escape(path)}", soft_wrap=True)
