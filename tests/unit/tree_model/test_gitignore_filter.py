"""Tests for git-ignore filtering during the tree walk."""

from __future__ import annotations

import shutil
import subprocess
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from ctxselect.gitignore import GitIgnoreMatcher, load_gitignore_matcher
from ctxselect.tree_model import load_tree


class GitIgnoreMatcherTests(unittest.TestCase):
    def test_paths_below_ignored_directory_are_ignored(self) -> None:
        root = Path("/repo")
        matcher = GitIgnoreMatcher(
            root=root,
            ignored_files=frozenset({root / "debug.log"}),
            ignored_dirs=frozenset({root / "build"}),
        )

        self.assertTrue(matcher.is_ignored(root / "debug.log"))
        self.assertTrue(matcher.is_ignored(root / "build" / "out" / "app.o"))
        self.assertFalse(matcher.is_ignored(root / "src" / "main.py"))
        self.assertFalse(matcher.is_ignored(Path("/elsewhere/build")))

    def test_without_git_nothing_is_filtered(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with mock.patch("ctxselect.gitignore.shutil.which", return_value=None):
                self.assertIsNone(load_gitignore_matcher(Path(tmp)))

    def test_outside_work_tree_returns_none(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with mock.patch("ctxselect.gitignore._git_output", return_value=None):
                self.assertIsNone(load_gitignore_matcher(Path(tmp)))


@unittest.skipUnless(shutil.which("git"), "git is not installed")
class GitIgnoreTreeWalkTests(unittest.TestCase):
    def test_ignored_paths_are_left_out_of_the_tree(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            subprocess.run(["git", "init", "-q", str(root)], check=True)
            (root / ".gitignore").write_text("build/\n*.log\n", encoding="utf-8")
            (root / "build").mkdir()
            (root / "build" / "out.bin").write_text("x", encoding="utf-8")
            (root / "debug.log").write_text("x", encoding="utf-8")
            (root / "main.py").write_text("x", encoding="utf-8")

            filtered = load_tree(root)
            unfiltered = load_tree(root, skip_gitignored=False)

            self.assertEqual([child.name for child in filtered.children], ["main.py"])
            self.assertEqual(
                [child.name for child in unfiltered.children],
                ["build", "debug.log", "main.py"],
            )


if __name__ == "__main__":
    unittest.main()
