"""DependencyExtractor: produces FileDependencies for all discovered files.

Scanning and extraction are pure per-file functions, so files are fanned
out to a thread pool and the results are joined before graph assembly.

Usage:
    extractor = DependencyExtractor(max_workers=4)
    results = extractor.extract_all(sources)
    # results is dict[path, FileDependencies], ordered by path
"""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from threading import Lock
from typing import Iterable

from ..exceptions.taxonomy import Diagnostic, ErrorCode
from ..logging_config import get_logger
from .discovery import SourceFile
from .extractor import extract_dependencies
from .statements import FileDependencies

logger = get_logger(__name__)

# Default worker count: use CPU count, capped at 8
_DEFAULT_WORKERS = min(os.cpu_count() or 4, 8)

# Below this many files the pool costs more than it saves
_PARALLEL_THRESHOLD = 10


class DependencyExtractor:
    """Extracts FileDependencies from source files.

    Attributes:
        total_count: Files processed
        statement_count: Dependency statements recorded
        diagnostic_count: Recoverable problems recorded
    """

    def __init__(self, max_workers: int | None = None, max_nesting_depth: int = 512) -> None:
        self._max_workers = max_workers or _DEFAULT_WORKERS
        self._max_nesting_depth = max_nesting_depth
        self._lock = Lock()
        self.total_count = 0
        self.statement_count = 0
        self.diagnostic_count = 0

    def extract(self, source: SourceFile) -> FileDependencies:
        """Extract one file."""
        result = extract_dependencies(
            source.text, path=source.path, jsx=source.jsx, max_depth=self._max_nesting_depth
        )
        with self._lock:
            self.total_count += 1
            self.statement_count += len(result.statements)
            self.diagnostic_count += len(result.diagnostics)
        return result

    def extract_all(
        self, sources: Iterable[SourceFile], parallel: bool = True
    ) -> dict[str, FileDependencies]:
        """Extract every source file.

        Args:
            sources: Files to process
            parallel: Use the thread pool (default: True)

        Returns:
            Dict mapping canonical path to FileDependencies, in path order
        """
        sources = list(sources)
        results: dict[str, FileDependencies] = {}

        if not parallel or len(sources) < _PARALLEL_THRESHOLD or self._max_workers == 1:
            for source in sources:
                try:
                    results[source.path] = self.extract(source)
                except Exception as e:
                    results[source.path] = self._failed(source, e)
        else:
            with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
                futures = {executor.submit(self.extract, src): src for src in sources}
                for future in as_completed(futures):
                    source = futures[future]
                    try:
                        results[source.path] = future.result()
                    except Exception as e:
                        results[source.path] = self._failed(source, e)

        logger.debug(
            f"Extracted {self.statement_count} statements from {self.total_count} files "
            f"({self.diagnostic_count} diagnostics)"
        )
        return {path: results[path] for path in sorted(results)}

    def _failed(self, source: SourceFile, error: Exception) -> FileDependencies:
        """Empty result for a file whose extraction raised; the file stays a node."""
        logger.warning(f"Error extracting {source.path}: {error}")
        diagnostic = Diagnostic(ErrorCode.DP202, f"extraction failed: {error}", source.path)
        with self._lock:
            self.diagnostic_count += 1
        return FileDependencies(path=source.path, diagnostics=[diagnostic], jsx=source.jsx)
