"""Module specifier resolution against the set of known project files.

Resolution never touches the filesystem: discovery has already produced
every canonical path, so probing is a set lookup.

Order of attempts for a project-local specifier:
    1. the path as written
    2. the TypeScript counterpart of a .js/.jsx/.mjs/.cjs path
    3. the path plus each extension in PROBE_EXTENSIONS
    4. <path>/index plus each extension
"""

from __future__ import annotations

import posixpath
from typing import Callable, Iterable, Mapping, Optional

from .models import ExternalPackage, ProjectFile, Resolution, Unresolved


PROBE_EXTENSIONS = (".js", ".ts", ".jsx", ".tsx", ".mjs", ".cjs", ".mts", ".cts")

# `./x.js` in TypeScript sources refers to x.ts
_TS_COUNTERPARTS = {
    ".js": (".ts", ".tsx"),
    ".jsx": (".tsx",),
    ".mjs": (".mts",),
    ".cjs": (".cts",),
}

ResolveFn = Callable[[str, str], Resolution]


def is_relative(specifier: str) -> bool:
    return specifier in (".", "..") or specifier.startswith(("./", "../"))


def package_name(specifier: str) -> str:
    """Package root of a bare specifier.

    >>> package_name("@scope/pkg/deep/file")
    '@scope/pkg'
    >>> package_name("lodash/fp")
    'lodash'
    >>> package_name("node:fs/promises")
    'node:fs'
    """
    parts = specifier.split("/")
    if specifier.startswith("@") and len(parts) >= 2:
        return "/".join(parts[:2])
    return parts[0]


def _normalize(path: str) -> Optional[str]:
    """Normalise a root-relative POSIX path; None if it escapes the root."""
    normalized = posixpath.normpath(path) if path else "."
    if normalized == "..":
        return None
    if normalized.startswith("../"):
        return None
    return "" if normalized == "." else normalized


class PathSetResolver:
    """Resolve specifiers to canonical project paths.

    Args:
        known_paths: Canonical paths of every project file
        aliases: Specifier prefix rewrites; the longest matching prefix wins
            and its target is taken relative to the project root
    """

    def __init__(self, known_paths: Iterable[str], aliases: Optional[Mapping[str, str]] = None):
        self._known = set(known_paths)
        self._aliases = sorted((aliases or {}).items(), key=lambda kv: len(kv[0]), reverse=True)

    def __call__(self, from_path: str, specifier: str) -> Resolution:
        return self.resolve(from_path, specifier)

    def apply_aliases(self, specifier: str) -> Optional[str]:
        """Rewrite ``specifier`` with the first matching alias, or None."""
        for alias, target in self._aliases:
            if specifier.startswith(alias):
                return target + specifier[len(alias) :]
        return None

    def resolve(self, from_path: str, specifier: str) -> Resolution:
        specifier = specifier.split("?", 1)[0]
        if not specifier:
            return Unresolved("empty specifier")

        aliased = self.apply_aliases(specifier)
        if aliased is not None:
            base = _normalize(aliased.lstrip("/"))
        elif is_relative(specifier):
            base = _normalize(posixpath.join(posixpath.dirname(from_path), specifier))
        elif specifier.startswith("/"):
            base = _normalize(specifier.lstrip("/"))
        else:
            return ExternalPackage(package_name(specifier))

        if base is None:
            return Unresolved(f"'{specifier}' points outside the project root")

        found = self.probe(base)
        if found is None:
            return Unresolved(f"no project file matches '{specifier}'")
        return ProjectFile(found)

    def probe(self, base: str) -> Optional[str]:
        """First known path among the candidates for ``base``."""
        for candidate in self._candidates(base):
            if candidate in self._known:
                return candidate
        return None

    @staticmethod
    def _candidates(base: str) -> list[str]:
        candidates: list[str] = []
        if base:
            candidates.append(base)
            stem, ext = posixpath.splitext(base)
            candidates.extend(stem + counterpart for counterpart in _TS_COUNTERPARTS.get(ext, ()))
            candidates.extend(base + ext for ext in PROBE_EXTENSIONS)
        index = f"{base}/index" if base else "index"
        candidates.extend(index + ext for ext in PROBE_EXTENSIONS)
        return candidates
