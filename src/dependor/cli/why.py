"""Why command: explain a dependency with the shortest import path."""

import json
from pathlib import Path
from typing import Optional

import typer

from . import app
from ._common import fail, graph_file, node_name
from ..exceptions import DependorError
from ..graph import find_path
from ..persistence import load_graph


@app.command()
def why(
    origin: str = typer.Argument(..., help="File that (transitively) imports DESTINATION"),
    destination: str = typer.Argument(..., help="File whose inclusion you want explained"),
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
    Show the shortest import chain from ORIGIN to DESTINATION.

    [bold cyan]Examples:[/bold cyan]

      dependor why src/app.ts src/util/log.ts

      dependor why src/app.ts src/util/log.ts --graph graph.json --json
    """
    try:
        snapshot = load_graph(graph_file(graph))
        result = find_path(snapshot, node_name(origin), node_name(destination))
    except DependorError as e:
        fail(e)

    if json_output:
        print(json.dumps(result.to_json(), indent=2))
        return
    typer.echo(result.render())
