"""Tests for termide.editor.Document."""

from __future__ import annotations

import pytest

from termide.editor import Document, EditorError


class TestDocument:
    def test_starts_empty(self) -> None:
        doc = Document()
        assert doc.path is None
        assert doc.name == ""

    def test_load(self, tmp_path) -> None:
        path = tmp_path / "notes.txt"
        path.write_text("hello\nworld\n")
        doc = Document()
        assert doc.load(str(path)) == "hello\nworld\n"
        assert doc.path == str(path)
        assert doc.name == "notes.txt"

    def test_load_missing_file(self, tmp_path) -> None:
        doc = Document()
        with pytest.raises(EditorError):
            doc.load(str(tmp_path / "missing.txt"))
        assert doc.path is None

    def test_save_without_file(self) -> None:
        with pytest.raises(EditorError, match="no file loaded"):
            Document().save("text")

    def test_save_round_trip(self, tmp_path) -> None:
        path = tmp_path / "a.py"
        path.write_text("x = 1\n")
        doc = Document()
        doc.load(str(path))
        assert doc.save("x = 2\n") == str(path)
        assert path.read_text() == "x = 2\n"

    def test_save_to_removed_directory(self, tmp_path) -> None:
        sub = tmp_path / "sub"
        sub.mkdir()
        path = sub / "a.txt"
        path.write_text("a")
        doc = Document()
        doc.load(str(path))
        path.unlink()
        sub.rmdir()
        with pytest.raises(EditorError):
            doc.save("b")
