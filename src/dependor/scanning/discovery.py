"""Project file discovery.

Walks a project root and yields ``SourceFile`` records (canonical path,
text, JSX flag) for every file with a configured extension that is not
excluded by an ignore pattern or the size limit.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from ..config import AnalysisConfig
from ..exceptions import FileAccessError, InvalidPathError
from ..file_ops import safe_read_file, should_skip_path
from ..logging_config import get_logger
from .languages import jsx_enabled

logger = get_logger(__name__)


@dataclass(frozen=True)
class SourceFile:
    """One project file handed to extraction.

    ``path`` is the canonical path: POSIX-style and relative to the root.
    """

    path: str
    text: str
    jsx: bool


def canonical_path(filepath: Path, root: Path) -> str:
    return filepath.relative_to(root).as_posix()


def iter_project_paths(root: Path, config: AnalysisConfig) -> Iterator[Path]:
    """Yield candidate files under ``root`` in sorted walk order.

    Ignored directories are pruned before descending into them.

    Raises:
        InvalidPathError: If root is not a directory
    """
    if not root.is_dir():
        raise InvalidPathError(root, "not a directory")

    extensions = {ext.lower() for ext in config.extensions}
    for dirpath, dirnames, filenames in os.walk(root, followlinks=config.follow_symlinks):
        current = Path(dirpath)
        rel_dir = current.relative_to(root).as_posix()
        prefix = "" if rel_dir == "." else f"{rel_dir}/"

        kept = []
        for name in sorted(dirnames):
            if should_skip_path(prefix + name, config.ignore_patterns):
                logger.debug(f"Ignoring directory {prefix}{name}")
                continue
            kept.append(name)
        dirnames[:] = kept

        for name in sorted(filenames):
            filepath = current / name
            if filepath.suffix.lower() not in extensions:
                continue
            if should_skip_path(prefix + name, config.ignore_patterns):
                logger.debug(f"Ignoring file {prefix}{name}")
                continue
            if filepath.is_symlink() and not config.follow_symlinks:
                logger.debug(f"Skipping symlink {prefix}{name}")
                continue
            yield filepath


def discover_sources(root: Path, config: AnalysisConfig) -> Iterator[SourceFile]:
    """Read every project file under ``root``.

    Unreadable and oversized files are skipped with a warning; they never
    stop discovery.
    """
    root = Path(root).resolve()
    found = 0
    skipped = 0
    for filepath in iter_project_paths(root, config):
        rel_path = canonical_path(filepath, root)
        try:
            text = safe_read_file(filepath, max_bytes=config.max_file_size_bytes)
        except FileAccessError as e:
            skipped += 1
            logger.warning(f"Skipping {rel_path}: {e.reason}")
            continue
        found += 1
        yield SourceFile(path=rel_path, text=text, jsx=jsx_enabled(filepath))

    logger.info(f"Discovered {found} source files under {root} ({skipped} skipped)")
