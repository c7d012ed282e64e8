"""Shared test fixtures for dependor tests."""

from pathlib import Path

import pytest


def pytest_addoption(parser):
    """Add --run-slow option for slow tests."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="run slow tests",
    )


def pytest_configure(config):
    """Configure slow marker."""
    config.addinivalue_line("markers", "slow: mark test as slow to run")


def pytest_collection_modifyitems(config, items):
    """Skip slow tests unless --run-slow is given."""
    if config.getoption("--run-slow"):
        return
    skip_slow = pytest.mark.skip(reason="need --run-slow option to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    """Keep DEPENDOR_* variables from the outer environment out of tests."""
    import os

    for key in list(os.environ):
        if key.startswith("DEPENDOR_"):
            monkeypatch.delenv(key)


@pytest.fixture
def make_project(tmp_path):
    """Write a {relative_path: content} mapping under tmp_path and return the root."""

    def _make(files: dict) -> Path:
        for rel, content in files.items():
            target = tmp_path / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        return tmp_path

    return _make


@pytest.fixture
def sample_project(make_project):
    """A small TS/JS project with a barrel, an alias-free cycle and externals."""
    return make_project(
        {
            "src/app.ts": (
                'import React from "react";\n'
                'import { Button, format } from "./components";\n'
                'import { loadConfig } from "./config";\n'
                "export const main = () => loadConfig();\n"
            ),
            "src/components/index.ts": (
                'export { Button } from "./Button";\n'
                'export * from "./utils";\n'
            ),
            "src/components/Button.tsx": (
                'import { format } from "./utils";\n'
                "export function Button() { return <button>{format(\"ok\")}</button>; }\n"
            ),
            "src/components/utils.ts": 'export const format = (s: string) => s.trim();\n',
            "src/config.js": (
                'const { helper } = require("./helper");\n'
                "module.exports.loadConfig = () => helper();\n"
            ),
            "src/helper.js": (
                'const cfg = require("./config");\n'
                'const missing = require("./does-not-exist");\n'
                "module.exports.helper = () => cfg;\n"
            ),
            "node_modules/react/index.js": "module.exports = {};\n",
        }
    )
