"""Public API for dependor.

Example:
    >>> from dependor import analyze, find_path
    >>>
    >>> result = analyze("/path/to/project")
    >>> find_path(result.graph, "src/app.ts", "src/util/log.ts").render()
    'src/app.ts --> src/core.ts --> src/util/log.ts'
    >>>
    >>> # With customization
    >>> result = analyze("/path/to/project", resolve_barrels=True, workers=4)
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .config import AnalysisConfig, load_config
from .exceptions import InvalidPathError
from .graph.builder import build_dependency_graph
from .graph.models import DependencyGraph
from .graph.resolver import PathSetResolver
from .logging_config import get_logger, setup_logging
from .scanning.discovery import discover_sources
from .scanning.statements import FileDependencies
from .scanning.syntax_extractor import DependencyExtractor

logger = get_logger(__name__)


@dataclass
class AnalysisResult:
    """Everything produced by one run."""

    root: Path
    config: AnalysisConfig
    files: dict[str, FileDependencies]
    graph: DependencyGraph

    @property
    def statement_count(self) -> int:
        return sum(len(f.statements) for f in self.files.values())

    @property
    def skipped_statement_count(self) -> int:
        """Statements dropped by the extractor (DP2xx diagnostics)."""
        return sum(
            1
            for f in self.files.values()
            for d in f.diagnostics
            if d.code.category == "extraction"
        )


def analyze(
    path: str = ".",
    config_file: Optional[Path] = None,
    config: Optional[AnalysisConfig] = None,
    **overrides,
) -> AnalysisResult:
    """Discover, extract and build the dependency graph of a project.

    Pipeline:
    1. Load configuration (project files + env + overrides), unless given
    2. Discover project files
    3. Extract statements from every file in parallel
    4. Resolve specifiers and assemble the graph

    Args:
        path: Project root (default: current directory)
        config_file: Optional explicit TOML config file
        config: Pre-built configuration; skips loading entirely
        **overrides: Configuration overrides (e.g., workers=4, verbose=True)

    Returns:
        AnalysisResult with per-file extraction results and the graph

    Raises:
        ConfigurationError: If configuration is invalid
        InvalidPathError: If path is not a directory
    """
    root = Path(path).resolve()
    if not root.is_dir():
        raise InvalidPathError(root, "not a directory")

    if config is None:
        config = load_config(config_file=config_file, root=root, **overrides)
        setup_logging(config.verbosity)
    logger.info(f"Starting analysis of {root}")

    sources = list(discover_sources(root, config))

    extractor = DependencyExtractor(
        max_workers=config.workers, max_nesting_depth=config.max_nesting_depth
    )
    files = extractor.extract_all(sources)

    resolver = PathSetResolver(files.keys(), aliases=config.path_aliases)
    graph = build_dependency_graph(files, resolver, resolve_barrels=config.resolve_barrels)

    return AnalysisResult(root=root, config=config, files=files, graph=graph)
