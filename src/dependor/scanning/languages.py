"""Language configurations for the JavaScript/TypeScript family.

Adding a dialect:
  1. Add a LanguageConfig entry to LANGUAGES below.
  2. That's it. Discovery and the scanner's JSX flag pick it up automatically.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePath
from typing import Union


@dataclass(frozen=True)
class LanguageConfig:
    """Everything discovery needs to know about a dialect."""

    name: str
    extensions: tuple[str, ...]

    # Whether "<" in expression position may open a JSX element. Plain .ts
    # keeps it off because of `<T>value` type assertions.
    jsx: bool = False

    typescript: bool = False


LANGUAGES: dict[str, LanguageConfig] = {
    "javascript": LanguageConfig(
        name="javascript",
        extensions=(".js", ".mjs", ".cjs"),
        jsx=True,
    ),
    "jsx": LanguageConfig(name="jsx", extensions=(".jsx",), jsx=True),
    "typescript": LanguageConfig(
        name="typescript",
        extensions=(".ts", ".mts", ".cts"),
        typescript=True,
    ),
    "tsx": LanguageConfig(name="tsx", extensions=(".tsx",), jsx=True, typescript=True),
}

# Extension to language mapping (built from LANGUAGES)
_EXTENSION_TO_LANGUAGE: dict[str, str] = {
    ext: cfg.name for cfg in LANGUAGES.values() for ext in cfg.extensions
}


def get_all_known_extensions() -> set[str]:
    """Return the set of all file extensions covered by a dialect."""
    return set(_EXTENSION_TO_LANGUAGE)


def detect_language(filepath: Union[str, PurePath]) -> str:
    """Detect dialect from file extension.

    Returns:
        Language name (e.g., "typescript", "jsx") or "unknown"
    """
    suffix = PurePath(filepath).suffix.lower()
    return _EXTENSION_TO_LANGUAGE.get(suffix, "unknown")


def jsx_enabled(filepath: Union[str, PurePath]) -> bool:
    """Whether files with this extension may contain JSX.

    Unknown extensions are scanned as plain JavaScript.
    """
    cfg = LANGUAGES.get(detect_language(filepath), LANGUAGES["javascript"])
    return cfg.jsx
