"""
Safe file operations for dependor.

Provides size-limited reads, parent-creating writes and ignore-pattern
matching shared by discovery and persistence.
"""

from pathlib import Path, PurePosixPath
from typing import Iterable, Optional

from .exceptions import FileAccessError


def safe_read_file(
    filepath: Path,
    max_bytes: Optional[int] = None,
    encoding: str = "utf-8",
    errors: str = "replace",
) -> str:
    """
    Read a text file, refusing files above ``max_bytes``.

    Undecodable bytes are replaced rather than rejected, so any byte
    sequence yields text the scanner can work on.

    Args:
        filepath: File to read
        max_bytes: Size limit (None = unlimited)
        encoding: Text encoding
        errors: How to handle encoding errors

    Returns:
        File contents as string

    Raises:
        FileAccessError: If file cannot be read or is too large
    """
    try:
        if max_bytes is not None:
            size = filepath.stat().st_size
            if size > max_bytes:
                raise FileAccessError(filepath, f"File too large ({size} > {max_bytes} bytes)")
        with open(filepath, encoding=encoding, errors=errors, newline="") as f:
            return f.read()
    except FileAccessError:
        raise
    except OSError as e:
        raise FileAccessError(filepath, f"OS error: {e}")


def safe_write_file(filepath: Path, content: str, encoding: str = "utf-8") -> None:
    """
    Write to a file, creating parent directories as needed.

    Raises:
        FileAccessError: If file cannot be written
    """
    try:
        filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, "w", encoding=encoding) as f:
            f.write(content)
    except OSError as e:
        raise FileAccessError(filepath, f"Write failed: {e}")


def should_skip_path(rel_path: str, ignore_patterns: Iterable[str]) -> bool:
    """
    Check if a project-relative path matches any ignore pattern.

    Patterns are globs matched from the right, so ``node_modules`` matches a
    ``node_modules`` directory at any depth and ``*/noRead.js`` matches a
    file one level below any directory. A leading ``**/`` is treated as
    "at any depth".

    Args:
        rel_path: POSIX path relative to the project root
        ignore_patterns: Glob patterns to exclude

    Returns:
        True if the path should be skipped
    """
    path = PurePosixPath(rel_path)
    for pattern in ignore_patterns:
        pattern = pattern.strip().rstrip("/")
        while pattern.startswith("**/"):
            pattern = pattern[3:]
        if not pattern or pattern == "**":
            continue
        if path.match(pattern):
            return True
    return False
