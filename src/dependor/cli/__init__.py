"""CLI entry point. Registers all subcommands."""

import typer

app = typer.Typer(
    name="dependor",
    help="dependor - module dependency graphs for JavaScript/TypeScript projects",
    add_completion=False,
    rich_markup_mode="rich",
)


# Import subcommands to register them
from ._common import main as _main_callback  # noqa: F401, E402
from .build import build as _build  # noqa: F401, E402
from .why import why as _why  # noqa: F401, E402
from .cycles import cycles as _cycles  # noqa: F401, E402


def main() -> None:
    """Console script entry point."""
    app()
