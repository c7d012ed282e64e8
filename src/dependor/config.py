"""Configuration loading and management for dependor.

Configuration sources are merged in priority order:
    1. Defaults (defined in AnalysisConfig)
    2. Project config (<root>/dependor.toml)
    3. Legacy project config (<root>/dependor.json)
    4. Explicit config file (TOML)
    5. Environment variables (DEPENDOR_* prefix)
    6. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(verbose=True, workers=4)
    >>> config.verbosity
    'verbose'
    >>> config.workers
    4
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError

Verbosity = Literal["quiet", "normal", "verbose"]

PROJECT_CONFIG_NAME = "dependor.toml"
LEGACY_CONFIG_NAME = "dependor.json"

# camelCase keys used by dependor.json
_LEGACY_KEYS = {
    "ignorePatterns": "ignore_patterns",
    "pathAliases": "path_aliases",
    "resolveBarrels": "resolve_barrels",
}


@dataclass(frozen=True)
class AnalysisConfig:
    """Configuration for a dependency analysis run.

    Attributes:
        File discovery:
            ignore_patterns: Glob patterns for directories/files to skip
            extensions: File extensions treated as project source files
            max_file_size_mb: Files above this size are skipped
            follow_symlinks: Follow symbolic links during discovery

        Resolution:
            path_aliases: Specifier prefix rewrites (e.g. "~" -> "src")
            resolve_barrels: Redirect named imports through index re-exports

        Performance tuning:
            workers: Number of parallel extraction workers (None = auto-detect)
            max_nesting_depth: Scanner mode stack cap for pathological inputs

        Output control:
            output_file: Default location of the persisted graph
            verbosity: Logging verbosity level
    """

    # File discovery
    ignore_patterns: list[str] = field(
        default_factory=lambda: [
            "node_modules",
            ".git",
            "dist",
            "build",
            "coverage",
        ]
    )
    extensions: list[str] = field(
        default_factory=lambda: [".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs", ".mts", ".cts"]
    )
    max_file_size_mb: float = 5.0
    follow_symlinks: bool = False

    # Resolution
    path_aliases: dict[str, str] = field(default_factory=dict)
    resolve_barrels: bool = False

    # Performance tuning
    workers: Optional[int] = None
    max_nesting_depth: int = 512

    # Output control
    output_file: str = "dependor-output.json"
    verbosity: Verbosity = "normal"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.workers is not None and self.workers < 1:
            raise ValueError("workers must be at least 1")
        if self.max_nesting_depth < 8:
            raise ValueError("max_nesting_depth must be at least 8")
        if self.max_file_size_mb <= 0:
            raise ValueError("max_file_size_mb must be positive")
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise ValueError("verbosity must be one of quiet, normal, verbose")
        for ext in self.extensions:
            if not ext.startswith("."):
                raise ValueError(f"extension {ext!r} must start with '.'")
        for alias, target in self.path_aliases.items():
            if not alias:
                raise ValueError("path alias prefixes must be non-empty")
            if not isinstance(target, str):
                raise ValueError(f"path alias {alias!r} must map to a string")

    @property
    def max_file_size_bytes(self) -> int:
        """Get max file size in bytes."""
        return int(self.max_file_size_mb * 1024 * 1024)


def load_config(
    config_file: Optional[Path] = None, root: Optional[Path] = None, **overrides
) -> AnalysisConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit TOML config file path
        root: Project root searched for dependor.toml / dependor.json
              (defaults to the current directory)
        **overrides: Direct overrides (typically from CLI flags)

    Returns:
        Validated AnalysisConfig instance

    Raises:
        ConfigurationError: If a config source is invalid or missing
    """
    root = Path(root) if root is not None else Path.cwd()
    merged: dict = {}

    project_config = root / PROJECT_CONFIG_NAME
    if project_config.exists():
        try:
            merged.update(_load_toml_file(project_config))
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Invalid project config '{project_config}': {e}")

    legacy_config = root / LEGACY_CONFIG_NAME
    if legacy_config.exists():
        try:
            merged.update(_load_legacy_json(legacy_config))
        except Exception as e:
            raise ConfigurationError(f"Invalid project config '{legacy_config}': {e}")

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        try:
            merged.update(_load_toml_file(config_file))
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Invalid config file '{config_file}': {e}")

    merged.update(_load_env_vars())

    # Convert verbosity boolean flags to string
    if "verbose" in overrides:
        if overrides["verbose"]:
            overrides["verbosity"] = "verbose"
        del overrides["verbose"]
    if "quiet" in overrides:
        if overrides["quiet"]:
            overrides["verbosity"] = "quiet"
        del overrides["quiet"]

    merged.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return AnalysisConfig(**merged)
    except TypeError as e:
        # Unknown field in config
        raise ConfigurationError(f"Invalid configuration: {e}")
    except ValueError as e:
        raise ConfigurationError(f"Invalid configuration: {e}")


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from DEPENDOR_* environment variables.

    Supported environment variables:
        DEPENDOR_WORKERS: int
        DEPENDOR_MAX_FILE_SIZE_MB: float
        DEPENDOR_MAX_NESTING_DEPTH: int
        DEPENDOR_RESOLVE_BARRELS: bool (true/false/1/0)
        DEPENDOR_FOLLOW_SYMLINKS: bool
        DEPENDOR_OUTPUT_FILE: str
        DEPENDOR_VERBOSITY: quiet/normal/verbose

    Returns:
        Dict of field_name -> parsed_value for any DEPENDOR_* vars found.
    """
    type_hints = get_type_hints(AnalysisConfig)

    result: dict[str, Any] = {}

    for field_name in AnalysisConfig.__dataclass_fields__:
        env_key = f"DEPENDOR_{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
            if parsed is not None:
                result[field_name] = parsed
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse environment variable string to the correct type.

    Returns None for types that cannot come from a single string
    (lists, dicts).

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    origin = getattr(type_hint, "__origin__", None)

    # Handle Optional[X] which is Union[X, None]
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]
            origin = getattr(type_hint, "__origin__", None)

    if origin in (list, dict) or type_hint in (list, dict):
        return None

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_legacy_json(path: Path) -> dict:
    """Load a dependor.json file, mapping its camelCase keys to field names."""
    with open(path, encoding="utf-8") as f:
        raw = json.load(f)
    if not isinstance(raw, dict):
        raise ValueError("top-level value must be an object")
    return {_LEGACY_KEYS[k]: v for k, v in raw.items() if k in _LEGACY_KEYS}


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    A ``[dependor]`` table is used when present, otherwise the whole document.

    Raises:
        ConfigurationError: If tomllib/tomli not available
        Exception: If TOML parsing fails
    """
    try:
        # Python 3.11+ has tomllib in stdlib
        import tomllib
    except ModuleNotFoundError:
        try:
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise ConfigurationError(
                "TOML support requires Python 3.11+ or 'tomli' package. "
                "Install with: pip install tomli"
            )

    with open(path, "rb") as f:
        data = tomllib.load(f)
    section = data.get("dependor")
    return dict(section) if isinstance(section, dict) else data
