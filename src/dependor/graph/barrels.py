"""Barrel (index file) re-export resolution.

An index file that only forwards bindings (``export {a} from "./a"``,
``export * from "./b"``) hides the real dependency. With barrel
resolution enabled, a named import from such a file becomes an edge to
the module that defines the name.
"""

from __future__ import annotations

import re
from typing import Mapping, Optional

from ..logging_config import get_logger
from ..scanning.statements import FileDependencies, StatementKind
from .models import ProjectFile
from .resolver import ResolveFn

logger = get_logger(__name__)

_INDEX_FILE_RE = re.compile(r"(?:^|/)index\.(?:js|jsx|ts|tsx|mjs|cjs|mts|cts)$")


def is_index_file(path: str) -> bool:
    return _INDEX_FILE_RE.search(path) is not None


class BarrelIndex:
    """Trace names exported by index files back to their defining module.

    Args:
        files: Extraction results for every project file
        resolve: Specifier resolver used for the barrels' own re-exports
    """

    def __init__(self, files: Mapping[str, FileDependencies], resolve: ResolveFn):
        self._files = files
        self._resolve = resolve
        self._cache: dict[tuple[str, str], Optional[str]] = {}

    def origin_of(self, barrel: str, name: str) -> Optional[str]:
        """Path of the module defining ``name`` as exported by ``barrel``.

        Returns ``barrel`` itself when it defines the name locally and None
        when the name cannot be traced.
        """
        key = (barrel, name)
        if key not in self._cache:
            self._cache[key] = self._trace(barrel, name, set())
        return self._cache[key]

    def _trace(self, barrel: str, name: str, seen: set[tuple[str, str]]) -> Optional[str]:
        if (barrel, name) in seen:
            return None
        seen.add((barrel, name))
        deps = self._files.get(barrel)
        if deps is None:
            return None

        forwarded: set[str] = set()
        for statement in deps.statements:
            if statement.kind is StatementKind.RE_EXPORT_NAMED:
                for binding in statement.imported_names:
                    forwarded.add(binding.local)
                    if binding.local == name:
                        target = self._target(barrel, statement.specifier)
                        if target is None:
                            return None
                        return self._follow(target, binding.name, seen)
            elif statement.kind is StatementKind.RE_EXPORT_ALL and statement.is_namespace:
                alias = statement.imported_names[0].alias if statement.imported_names else None
                forwarded.add(alias or "")
                if alias == name:
                    return self._target(barrel, statement.specifier)

        if name in deps.exported_symbols and name not in forwarded:
            return barrel

        for statement in deps.statements:
            if statement.kind is not StatementKind.RE_EXPORT_ALL or statement.is_namespace:
                continue
            target = self._target(barrel, statement.specifier)
            if target is None:
                continue
            if is_index_file(target):
                found = self._trace(target, name, seen)
                if found is not None:
                    return found
                continue
            target_deps = self._files.get(target)
            if target_deps is not None and name in target_deps.exported_symbols:
                return target
        return None

    def _follow(self, target: str, name: str, seen: set[tuple[str, str]]) -> str:
        if is_index_file(target) and name != "default":
            return self._trace(target, name, seen) or target
        return target

    def _target(self, barrel: str, specifier: Optional[str]) -> Optional[str]:
        if specifier is None:
            return None
        outcome = self._resolve(barrel, specifier)
        if isinstance(outcome, ProjectFile):
            return outcome.path
        return None
