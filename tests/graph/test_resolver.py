"""Tests for specifier resolution against the known file set."""

import pytest

from dependor.graph import ExternalPackage, PathSetResolver, ProjectFile, Unresolved, package_name

KNOWN = [
    "src/app.ts",
    "src/util.ts",
    "src/view.tsx",
    "src/legacy.js",
    "src/config.json",
    "src/components/index.ts",
    "src/components/Button.tsx",
    "lib/ui/Card.jsx",
    "index.js",
]


@pytest.fixture
def resolver():
    return PathSetResolver(KNOWN, aliases={"@/": "src/", "@/ui/": "lib/ui/", "~": "src"})


class TestRelativeSpecifiers:
    """./ and ../ specifiers probe the known paths."""

    @pytest.mark.parametrize(
        "from_path, specifier, expected",
        [
            ("src/app.ts", "./util", "src/util.ts"),
            ("src/app.ts", "./util.ts", "src/util.ts"),
            ("src/app.ts", "./util.js", "src/util.ts"),
            ("src/app.ts", "./view.jsx", "src/view.tsx"),
            ("src/app.ts", "./legacy", "src/legacy.js"),
            ("src/app.ts", "./config.json", "src/config.json"),
            ("src/app.ts", "./components", "src/components/index.ts"),
            ("src/components/Button.tsx", ".", "src/components/index.ts"),
            ("lib/ui/Card.jsx", "../../src/components", "src/components/index.ts"),
            ("src/components/Button.tsx", "../util", "src/util.ts"),
            ("src/components/Button.tsx", "./", "src/components/index.ts"),
            ("src/app.ts", "../index", "index.js"),
            ("src/app.ts", "./util?raw", "src/util.ts"),
        ],
    )
    def test_resolves(self, resolver, from_path, specifier, expected):
        assert resolver(from_path, specifier) == ProjectFile(expected)

    def test_missing_file_is_unresolved(self, resolver):
        outcome = resolver("src/app.ts", "./missing")
        assert isinstance(outcome, Unresolved)
        assert "./missing" in outcome.reason

    def test_escaping_the_root_is_unresolved(self, resolver):
        outcome = resolver("src/app.ts", "../../outside")
        assert isinstance(outcome, Unresolved)
        assert "outside the project root" in outcome.reason

    def test_empty_specifier(self, resolver):
        assert isinstance(resolver("src/app.ts", ""), Unresolved)


class TestBareSpecifiers:
    """Everything not relative, absolute or aliased is a package."""

    @pytest.mark.parametrize(
        "specifier, package",
        [
            ("react", "react"),
            ("lodash/fp", "lodash"),
            ("@scope/pkg", "@scope/pkg"),
            ("@scope/pkg/deep/file", "@scope/pkg"),
            ("node:fs", "node:fs"),
            ("fs", "fs"),
        ],
    )
    def test_external(self, resolver, specifier, package):
        assert resolver("src/app.ts", specifier) == ExternalPackage(package)

    def test_package_name_of_scoped_without_name(self):
        assert package_name("@scope") == "@scope"


class TestAliasesAndRootRelative:
    """Alias prefixes and leading-slash specifiers are root-relative."""

    def test_alias(self, resolver):
        assert resolver("lib/ui/Card.jsx", "@/util") == ProjectFile("src/util.ts")

    def test_longest_alias_wins(self, resolver):
        assert resolver("src/app.ts", "@/ui/Card") == ProjectFile("lib/ui/Card.jsx")

    def test_alias_without_separator(self, resolver):
        assert resolver("lib/ui/Card.jsx", "~/components") == ProjectFile("src/components/index.ts")

    def test_root_relative(self, resolver):
        assert resolver("lib/ui/Card.jsx", "/src/util") == ProjectFile("src/util.ts")

    def test_apply_aliases(self, resolver):
        assert resolver.apply_aliases("@/x") == "src/x"
        assert resolver.apply_aliases("react") is None

    def test_no_aliases(self):
        assert PathSetResolver(KNOWN)("src/app.ts", "@/util") == ExternalPackage("@/util")
