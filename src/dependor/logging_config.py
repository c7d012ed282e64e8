"""
Logging for dependor.

Everything logs under the ``dependor`` namespace. Terminal output goes
through a rich handler on stderr so stdout stays clean for ``--json``
output; recoverable per-file problems are logged as Diagnostics at DEBUG.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from .exceptions.taxonomy import Diagnostic

_LEVELS = {
    "quiet": logging.ERROR,
    "normal": logging.WARNING,
    "verbose": logging.DEBUG,
}


def setup_logging(verbosity: str = "normal", log_file: Optional[str] = None) -> logging.Logger:
    """
    Install the stderr handler (and optionally a file handler).

    Args:
        verbosity: "quiet" (errors only), "normal" (warnings) or
            "verbose" (every diagnostic, with source paths)
        log_file: Append plain-text records to this file as well

    Returns:
        The ``dependor`` logger
    """
    level = _LEVELS.get(verbosity, logging.WARNING)
    verbose = level == logging.DEBUG

    handlers: list[logging.Handler] = [
        RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            tracebacks_show_locals=verbose,
            markup=False,  # file paths may contain [brackets]
            show_time=True,
            show_path=verbose,
        )
    ]

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s", "%Y-%m-%d %H:%M:%S")
        )
        handlers.append(file_handler)

    # force: repeated analyze() calls in one process must not stack handlers
    logging.basicConfig(
        level=level, format="%(message)s", datefmt="[%X]", handlers=handlers, force=True
    )

    logger = logging.getLogger("dependor")
    logger.setLevel(level)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger under the ``dependor`` namespace (``__name__`` works as-is)."""
    if name is None:
        return logging.getLogger("dependor")
    if not name.startswith("dependor"):
        name = f"dependor.{name}"
    return logging.getLogger(name)


def log_diagnostic(logger: logging.Logger, diagnostic: Diagnostic, level: int = logging.DEBUG) -> None:
    """Log a Diagnostic, attaching its JSON form as ``record.diagnostic``."""
    logger.log(level, str(diagnostic), extra={"diagnostic": diagnostic.to_json()})
