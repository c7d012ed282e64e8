"""Tests for dependency graph construction."""

import threading

from dependor.exceptions import ErrorCode
from dependor.graph import (
    ExternalPackage,
    GraphBuilder,
    PathSetResolver,
    ProjectFile,
    Unresolved,
    build_dependency_graph,
)
from dependor.scanning import extract_dependencies


def _files(sources):
    """Extract a {path: source_text} mapping in path order."""
    return {
        path: extract_dependencies(text, path=path, jsx=path.endswith(("x", ".js")))
        for path, text in sorted(sources.items())
    }


def _build(sources, **kwargs):
    files = _files(sources)
    return build_dependency_graph(files, PathSetResolver(files), **kwargs)


class TestBuildDependencyGraph:
    """Edges, externals and dangling references."""

    def test_every_file_is_a_scanned_node(self):
        graph = _build({"a.ts": 'import "./b";', "b.ts": "", "c.ts": ""})
        assert list(graph) == ["a.ts", "b.ts", "c.ts"]
        assert all(node.scanned for node in graph.nodes.values())

    def test_statement_kinds_create_edges(self):
        graph = _build(
            {
                "a.ts": (
                    'import x from "./b";\n'
                    'export * from "./c";\n'
                    'export { y } from "./d";\n'
                    'const e = require("./e");\n'
                    'const f = import("./f");\n'
                ),
                "b.ts": "",
                "c.ts": "",
                "d.ts": "",
                "e.js": "",
                "f.ts": "",
            }
        )
        assert list(graph.successors("a.ts")) == ["b.ts", "c.ts", "d.ts", "e.js", "f.ts"]

    def test_duplicate_imports_collapse(self):
        graph = _build(
            {
                "a.ts": 'import { x } from "./b";\nimport type { T } from "./b";\nrequire("./b.ts");\n',
                "b.ts": "",
            }
        )
        assert graph.nodes["a.ts"].outgoing_edges == ["b.ts"]
        assert [p.line for p in graph.provenance] == [1, 2, 3]
        assert [p.kind for p in graph.provenance] == ["StaticImport", "StaticImport", "RequireCall"]

    def test_exports_without_specifier_create_no_edge(self):
        graph = _build({"a.ts": "export const x = 1;\nexport default x;\n"})
        assert graph.edge_count == 0
        assert graph.nodes["a.ts"].exported_symbols == {"x", "default"}

    def test_non_literal_require_creates_no_edge(self):
        graph = _build({"a.js": "const m = require(name);", "name.js": ""})
        assert graph.edge_count == 0
        assert graph.dangling == []

    def test_external_packages(self):
        graph = _build({"a.ts": 'import React from "react";\nimport fs from "node:fs";'})
        assert [(r.specifier, r.package) for r in graph.external] == [("react", "react"), ("node:fs", "node:fs")]
        assert graph.edge_count == 0
        assert "react" not in graph

    def test_dangling_reference(self):
        graph = _build({"a.ts": '\nimport gone from "./gone";'})
        [ref] = graph.dangling
        assert (ref.source, ref.specifier) == ("a.ts", "./gone")
        [diag] = graph.diagnostics
        assert diag.code is ErrorCode.DP300
        assert (diag.path, diag.line) == ("a.ts", 2)

    def test_extraction_diagnostics_are_kept(self):
        graph = _build({"a.ts": 'export let a, b;\nconst s = "open\n'})
        assert [d.code for d in graph.diagnostics] == [ErrorCode.DP200, ErrorCode.DP100]

    def test_self_import(self):
        graph = _build({"a.ts": 'import "./a";'})
        assert graph.has_edge("a.ts", "a.ts")

    def test_cycle(self):
        graph = _build({"a.ts": 'import "./b";', "b.ts": 'import "./a";'})
        assert graph.has_edge("a.ts", "b.ts")
        assert graph.has_edge("b.ts", "a.ts")


class TestGraphBuilder:
    """Incremental, lock-protected assembly."""

    def test_forward_reference_stub(self):
        builder = GraphBuilder(lambda source, spec: ProjectFile("later.ts"))
        builder.add_file(extract_dependencies('import "./later";', path="a.ts"))
        assert builder.graph.nodes["later.ts"].scanned is False
        builder.register("later.ts", {"x"})
        assert builder.graph.nodes["later.ts"].scanned is True
        assert builder.graph.nodes["later.ts"].exported_symbols == {"x"}

    def test_custom_resolver_outcomes(self):
        outcomes = {"./p": ProjectFile("p.ts"), "ext": ExternalPackage("ext"), "./u": Unresolved("nope")}
        builder = GraphBuilder(lambda source, spec: outcomes[spec])
        source = 'import "./p";\nimport "ext";\nimport "./u";\n'
        builder.add_file(extract_dependencies(source, path="a.ts"))
        graph = builder.graph
        assert list(graph.successors("a.ts")) == ["p.ts"]
        assert [r.package for r in graph.external] == ["ext"]
        assert [r.reason for r in graph.dangling] == ["nope"]

    def test_concurrent_add_file(self):
        count = 40
        files = {
            f"m{i:02d}.ts": extract_dependencies(
                f'import "./m{(i + 1) % count:02d}";\nimport "./m00";', path=f"m{i:02d}.ts"
            )
            for i in range(count)
        }
        builder = GraphBuilder(PathSetResolver(files))
        threads = [threading.Thread(target=builder.add_file, args=(deps,)) for deps in files.values()]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        graph = builder.graph
        assert len(graph) == count
        assert graph.edge_count == 2 * count - 1
        assert len(graph.provenance) == 2 * count
