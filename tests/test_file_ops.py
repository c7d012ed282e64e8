"""Tests for safe file operations and ignore patterns."""

import pytest

from dependor.exceptions import FileAccessError
from dependor.file_ops import safe_read_file, safe_write_file, should_skip_path


class TestSafeReadFile:
    def test_reads_text(self, tmp_path):
        path = tmp_path / "a.js"
        path.write_text("const a = 1;\n", encoding="utf-8")
        assert safe_read_file(path) == "const a = 1;\n"

    def test_preserves_line_endings(self, tmp_path):
        path = tmp_path / "crlf.js"
        path.write_bytes(b"a\r\nb\r\n")
        assert safe_read_file(path) == "a\r\nb\r\n"

    def test_size_limit(self, tmp_path):
        path = tmp_path / "big.js"
        path.write_text("x" * 100)
        with pytest.raises(FileAccessError, match="big.js"):
            safe_read_file(path, max_bytes=10)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileAccessError):
            safe_read_file(tmp_path / "missing.js")

    def test_strict_decoding_raises(self, tmp_path):
        path = tmp_path / "bin.js"
        path.write_bytes(b"\xff\xfe\x00")
        with pytest.raises(UnicodeDecodeError):
            safe_read_file(path, errors="strict")


class TestSafeWriteFile:
    def test_creates_parents(self, tmp_path):
        path = tmp_path / "out" / "nested" / "graph.json"
        safe_write_file(path, "{}")
        assert path.read_text() == "{}"

    def test_write_into_file_fails(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        with pytest.raises(FileAccessError):
            safe_write_file(blocker / "graph.json", "{}")


class TestShouldSkipPath:
    """Glob ignore patterns, matched from the right."""

    @pytest.mark.parametrize(
        "path, patterns, expected",
        [
            ("node_modules", ["node_modules"], True),
            ("packages/web/node_modules", ["node_modules"], True),
            ("src/node_modules_docs", ["node_modules"], False),
            ("src/noRead.js", ["*/noRead.js"], True),
            ("noRead.js", ["*/noRead.js"], False),
            ("a/b/gen.ts", ["**/gen.ts"], True),
            ("dist", ["dist/"], True),
            ("src/a.test.ts", ["*.test.ts"], True),
            ("src/a.ts", ["", "**"], False),
            ("src/a.ts", [], False),
        ],
    )
    def test_patterns(self, path, patterns, expected):
        assert should_skip_path(path, patterns) is expected
