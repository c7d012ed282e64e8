"""Tests for barrel (index re-export) resolution."""

import pytest

from dependor.graph import BarrelIndex, PathSetResolver, build_dependency_graph, is_index_file
from dependor.scanning import extract_dependencies

PROJECT = {
    "src/app.ts": 'import { Button, format, Input } from "./components";\n',
    "src/default.ts": 'import Components from "./components";\n',
    "src/components/index.ts": (
        'export { Button } from "./Button";\n'
        'export { default as Card } from "./Card";\n'
        'export * from "./utils";\n'
        'export * from "./forms";\n'
        'export * as icons from "./icons";\n'
        "export const VERSION = 1;\n"
    ),
    "src/components/Button.tsx": "export function Button() {}\n",
    "src/components/Card.tsx": "export default function Card() {}\n",
    "src/components/utils.ts": "export const format = (s: string) => s;\n",
    "src/components/icons.ts": "export const Star = 1;\n",
    "src/components/forms/index.ts": 'export { Input } from "./Input";\n',
    "src/components/forms/Input.tsx": "export const Input = () => null;\n",
}


def _files(sources):
    return {path: extract_dependencies(text, path=path) for path, text in sorted(sources.items())}


@pytest.fixture
def files():
    return _files(PROJECT)


@pytest.fixture
def barrels(files):
    return BarrelIndex(files, PathSetResolver(files))


class TestIsIndexFile:
    """Index file detection."""

    @pytest.mark.parametrize(
        "path, expected",
        [
            ("index.ts", True),
            ("src/index.jsx", True),
            ("src/components/index.mjs", True),
            ("src/reindex.ts", False),
            ("src/index.test.ts", False),
            ("src/index/main.ts", False),
        ],
    )
    def test_is_index_file(self, path, expected):
        assert is_index_file(path) is expected


class TestBarrelIndex:
    """Tracing names through index files."""

    BARREL = "src/components/index.ts"

    @pytest.mark.parametrize(
        "name, origin",
        [
            ("Button", "src/components/Button.tsx"),
            ("Card", "src/components/Card.tsx"),
            ("format", "src/components/utils.ts"),
            ("Input", "src/components/forms/Input.tsx"),
            ("icons", "src/components/icons.ts"),
            ("VERSION", "src/components/index.ts"),
            ("Missing", None),
        ],
    )
    def test_origin_of(self, barrels, name, origin):
        assert barrels.origin_of(self.BARREL, name) == origin

    def test_results_are_cached(self, barrels):
        first = barrels.origin_of(self.BARREL, "Button")
        assert barrels.origin_of(self.BARREL, "Button") is first

    def test_unknown_barrel(self, barrels):
        assert barrels.origin_of("src/nope/index.ts", "x") is None

    def test_mutual_star_exports_terminate(self):
        files = _files(
            {
                "a/index.ts": 'export * from "../b";\n',
                "b/index.ts": 'export * from "../a";\n',
            }
        )
        assert BarrelIndex(files, PathSetResolver(files)).origin_of("a/index.ts", "x") is None


class TestBarrelEdges:
    """Graph edges with barrel resolution on and off."""

    def test_disabled_keeps_index_edge(self, files):
        graph = build_dependency_graph(files, PathSetResolver(files))
        assert list(graph.successors("src/app.ts")) == ["src/components/index.ts"]

    def test_enabled_redirects_named_imports(self, files):
        graph = build_dependency_graph(files, PathSetResolver(files), resolve_barrels=True)
        assert list(graph.successors("src/app.ts")) == [
            "src/components/Button.tsx",
            "src/components/utils.ts",
            "src/components/forms/Input.tsx",
        ]

    def test_default_import_is_not_redirected(self, files):
        graph = build_dependency_graph(files, PathSetResolver(files), resolve_barrels=True)
        assert list(graph.successors("src/default.ts")) == ["src/components/index.ts"]

    def test_untraceable_name_falls_back_to_index(self):
        files = _files(
            {
                "main.ts": 'import { Ghost, real } from "./lib";\n',
                "lib/index.ts": 'export * from "./real";\n',
                "lib/real.ts": "export const real = 1;\n",
            }
        )
        graph = build_dependency_graph(files, PathSetResolver(files), resolve_barrels=True)
        assert list(graph.successors("main.ts")) == ["lib/index.ts", "lib/real.ts"]
