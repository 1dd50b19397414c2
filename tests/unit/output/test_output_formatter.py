"""Tests for markdown and XML context documents."""

from __future__ import annotations

import tempfile
import unittest
import xml.etree.ElementTree as ET
from pathlib import Path

from ctxselect.errors import NotFoundError
from ctxselect.output import MARKDOWN, XML, build_document, format_directory_tree, language_for_filename
from ctxselect.selection import SelectionState
from ctxselect.tree_model import load_tree


class OutputFixture(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.root_path = Path(self._tmp.name).resolve() / "proj"
        (self.root_path / "src").mkdir(parents=True)
        (self.root_path / "docs").mkdir()
        (self.root_path / "src" / "main.py").write_text("print('hi')\n", encoding="utf-8")
        (self.root_path / "docs" / "guide.md").write_text("Use ```code``` blocks", encoding="utf-8")
        (self.root_path / "README.md").write_text("# Proj\n", encoding="utf-8")
        self.tree = load_tree(self.root_path, skip_gitignored=False)

    def _selection(self, *relative_paths: str, empty_dirs: tuple[str, ...] = ()) -> SelectionState:
        return SelectionState(
            selected_files={self.root_path / rel for rel in relative_paths},
            selected_empty_dirs={self.root_path / rel for rel in empty_dirs},
        )


class DirectoryTreeTests(OutputFixture):
    def test_two_space_indentation_with_directory_slashes(self) -> None:
        self.assertEqual(
            format_directory_tree(self.tree),
            "proj/\n  docs/\n    guide.md\n  src/\n    main.py\n  README.md\n",
        )


class MarkdownDocumentTests(OutputFixture):
    def test_files_appear_once_in_tree_order(self) -> None:
        document = build_document(self.tree, self._selection("README.md", "src/main.py"), output_format=MARKDOWN)

        text = document.text
        self.assertEqual(document.file_count, 2)
        self.assertTrue(text.startswith("# Project Directory Structure\n"))
        self.assertEqual(text.count("## src/main.py"), 1)
        self.assertEqual(text.count("## README.md"), 1)
        self.assertLess(text.index("## src/main.py"), text.index("## README.md"))
        self.assertIn("```python\nprint('hi')\n```\n", text)
        self.assertNotIn("# Instructions", text)

    def test_content_with_backticks_gets_a_wider_fence(self) -> None:
        document = build_document(self.tree, self._selection("docs/guide.md"))

        self.assertIn("````markdown\nUse ```code``` blocks\n````\n", document.text)

    def test_prompt_is_appended_as_instructions(self) -> None:
        document = build_document(self.tree, self._selection("README.md"), prompt="Explain the layout.")

        self.assertIn("# Instructions\n\nExplain the layout.\n", document.text)
        self.assertLess(document.text.index("## README.md"), document.text.index("# Instructions"))

    def test_selected_empty_directories_are_listed(self) -> None:
        (self.root_path / "cache").mkdir()
        tree = load_tree(self.root_path, skip_gitignored=False)

        document = build_document(tree, self._selection(empty_dirs=("cache",)))

        self.assertIn("Selected empty directories:\n\n- cache/\n", document.text)
        self.assertEqual(document.file_count, 0)

    def test_read_failure_degrades_only_that_file(self) -> None:
        missing = self.root_path / "src" / "main.py"

        def read_bytes(path: Path) -> bytes:
            if path == missing:
                raise NotFoundError(code="not_found", message=f"Path not found: {path}")
            return path.read_bytes()

        document = build_document(
            self.tree,
            self._selection("src/main.py", "README.md"),
            read_bytes=read_bytes,
        )

        self.assertEqual(len(document.failures), 1)
        self.assertEqual(document.failures[0].relative_path, "src/main.py")
        self.assertIn("> Error reading file: [not_found]", document.text)
        self.assertIn("# Proj\n", document.text)

    def test_stale_selection_paths_are_ignored(self) -> None:
        document = build_document(self.tree, self._selection("README.md", "deleted.py"))

        self.assertEqual(document.file_count, 1)
        self.assertNotIn("deleted.py", document.text)

    def test_unknown_format_raises(self) -> None:
        with self.assertRaises(ValueError):
            build_document(self.tree, self._selection(), output_format="yaml")


class XmlDocumentTests(OutputFixture):
    def test_document_parses_and_carries_files(self) -> None:
        document = build_document(
            self.tree,
            self._selection("src/main.py", "docs/guide.md"),
            output_format=XML,
            prompt="Summarize <everything>.",
        )

        root = ET.fromstring(document.text.encode("utf-8"))
        self.assertEqual(root.tag, "context")
        self.assertIn("main.py", root.findtext("directory_structure"))
        files = root.findall("./files/file")
        self.assertEqual([item.findtext("path") for item in files], ["docs/guide.md", "src/main.py"])
        self.assertEqual(files[1].findtext("language"), "python")
        self.assertEqual(files[1].findtext("content"), "\nprint('hi')\n")
        self.assertEqual(root.findtext("user_instructions"), "\nSummarize <everything>.\n")

    def test_cdata_terminator_in_content_is_escaped(self) -> None:
        (self.root_path / "README.md").write_text("a ]]> b\n", encoding="utf-8")

        document = build_document(self.tree, self._selection("README.md"), output_format=XML)

        root = ET.fromstring(document.text.encode("utf-8"))
        self.assertEqual(root.find("./files/file").findtext("content"), "\na ]]> b\n")

    def test_read_failure_becomes_error_element(self) -> None:
        def read_bytes(path: Path) -> bytes:
            raise PermissionError(13, "Permission denied", str(path))

        document = build_document(
            self.tree,
            self._selection("README.md"),
            output_format=XML,
            read_bytes=read_bytes,
        )

        root = ET.fromstring(document.text.encode("utf-8"))
        item = root.find("./files/file")
        self.assertIsNone(item.find("content"))
        self.assertIn("Permission denied", item.findtext("error"))


class LanguageTests(unittest.TestCase):
    def test_known_extension_uses_pygments_alias(self) -> None:
        self.assertEqual(language_for_filename("main.py"), "python")

    def test_unknown_extension_falls_back_to_extension(self) -> None:
        self.assertEqual(language_for_filename("data.zzqx"), "zzqx")

    def test_name_without_extension_falls_back_to_text(self) -> None:
        self.assertEqual(language_for_filename("NOTES_WITHOUT_EXT_QQ"), "text")


if __name__ == "__main__":
    unittest.main()
