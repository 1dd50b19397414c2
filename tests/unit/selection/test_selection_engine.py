"""Tests for selection rules."""

from __future__ import annotations

import unittest
from pathlib import Path

from ctxselect.selection import SelectionEngine, SelectionState, plan_subtree
from ctxselect.tree_model import DirectoryNode, FileNode

ROOT = Path("/project")


def _file(rel: str) -> FileNode:
    return FileNode(path=ROOT / rel, relative_path=rel, size=1)


def _dir(rel: str, *children) -> DirectoryNode:
    return DirectoryNode(path=ROOT / rel, relative_path=rel, children=tuple(children))


class SelectionEngineTests(unittest.TestCase):
    def setUp(self) -> None:
        self.util = _file("src/lib/util.py")
        self.main = _file("src/main.py")
        self.empty = _dir("src/empty")
        self.lib = _dir("src/lib", self.util)
        self.src = _dir("src", self.lib, self.empty, self.main)
        self.readme = _file("README.md")
        self.root = DirectoryNode(path=ROOT, relative_path=".", children=(self.src, self.readme))
        self.engine = SelectionEngine()

    def test_toggle_file_twice_restores_state(self) -> None:
        self.assertTrue(self.engine.toggle_file(self.main))
        self.assertTrue(self.engine.is_selected(self.main))

        self.engine.toggle_file(self.main)

        self.assertTrue(self.engine.state.is_empty)

    def test_toggle_file_rejects_directories(self) -> None:
        self.assertFalse(self.engine.toggle_file(self.src))
        self.assertTrue(self.engine.state.is_empty)

    def test_toggle_directory_selects_files_and_empty_dirs(self) -> None:
        self.engine.toggle_directory(self.src)

        self.assertEqual(self.engine.state.selected_files, {self.util.path, self.main.path})
        self.assertEqual(self.engine.state.selected_empty_dirs, {self.empty.path})
        self.assertTrue(self.engine.is_selected(self.src))
        self.assertTrue(self.engine.is_selected(self.lib))

    def test_toggle_directory_twice_from_empty_is_a_round_trip(self) -> None:
        self.engine.toggle_directory(self.src)
        self.engine.toggle_directory(self.src)

        self.assertTrue(self.engine.state.is_empty)

    def test_partial_directory_toggle_selects_the_rest(self) -> None:
        self.engine.toggle_file(self.main)
        self.assertFalse(self.engine.is_selected(self.src))
        self.assertTrue(self.engine.is_partially_selected(self.src))

        self.engine.toggle_directory(self.src)

        self.assertTrue(self.engine.is_selected(self.src))
        self.assertFalse(self.engine.is_partially_selected(self.src))

    def test_empty_directory_is_its_own_selectable(self) -> None:
        self.engine.toggle_directory(self.empty)

        self.assertEqual(self.engine.state.selected_empty_dirs, {self.empty.path})
        self.assertTrue(self.engine.is_selected(self.empty))
        self.assertFalse(self.engine.is_partially_selected(self.empty))

    def test_directory_without_selectables_is_never_selected(self) -> None:
        hollow = _dir("hollow", _dir("hollow/inner", _dir("hollow/inner/deeper")))
        # The deepest directory is empty, so it is the single selectable.
        self.assertFalse(self.engine.is_selected(hollow))
        self.engine.toggle_directory(hollow)
        self.assertTrue(self.engine.is_selected(hollow))
        self.assertFalse(self.engine.is_selected(None))

    def test_toggle_all_visible_selects_then_clears(self) -> None:
        visible = [self.src, self.readme]

        self.assertTrue(self.engine.toggle_all_visible(visible))
        self.assertTrue(all(self.engine.is_selected(node) for node in visible))

        self.engine.toggle_all_visible(visible)
        self.assertTrue(self.engine.state.is_empty)

    def test_toggle_all_visible_with_partial_selects_everything(self) -> None:
        self.engine.toggle_file(self.readme)

        self.engine.toggle_all_visible([self.src, self.readme, None])

        self.assertTrue(self.engine.is_selected(self.src))
        self.assertTrue(self.engine.is_selected(self.readme))

    def test_toggle_all_visible_without_candidates_is_a_no_op(self) -> None:
        self.assertFalse(self.engine.toggle_all_visible([None]))

    def test_iter_selected_files_follows_tree_order_and_skips_stale_paths(self) -> None:
        state = SelectionState(selected_files={self.readme.path, self.util.path, ROOT / "gone.py"})
        engine = SelectionEngine(state)

        files = [node.relative_path for node in engine.iter_selected_files(self.root)]

        self.assertEqual(files, ["src/lib/util.py", "README.md"])

    def test_plan_subtree_covers_only_selectables(self) -> None:
        changes = plan_subtree(self.src, True)

        self.assertEqual(
            [(change.path, change.kind) for change in changes],
            [(self.util.path, "file"), (self.empty.path, "empty_dir"), (self.main.path, "file")],
        )

    def test_count_selected_under(self) -> None:
        self.engine.toggle_file(self.util)

        self.assertEqual(self.engine.count_selected_under(self.src), (1, 3))


if __name__ == "__main__":
    unittest.main()
