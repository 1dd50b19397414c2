"""The single source of truth for what is selected."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class SelectionSnapshot:
    """Immutable copy of a selection, comparable by value."""

    files: frozenset[Path]
    empty_dirs: frozenset[Path]


@dataclass
class SelectionState:
    """Explicitly selected files and explicitly selected empty directories.

    Directories with children are never stored; their selection is derived
    by ``SelectionEngine.is_selected``.
    """

    selected_files: set[Path] = field(default_factory=set)
    selected_empty_dirs: set[Path] = field(default_factory=set)

    @property
    def is_empty(self) -> bool:
        """True when neither a file nor an empty directory is selected."""
        return not self.selected_files and not self.selected_empty_dirs

    @property
    def file_count(self) -> int:
        """Number of selected files; empty directories are not counted."""
        return len(self.selected_files)

    def snapshot(self) -> SelectionSnapshot:
        """Frozen copy of both sets."""
        return SelectionSnapshot(frozenset(self.selected_files), frozenset(self.selected_empty_dirs))

    def replace(self, files: Iterable[Path], empty_dirs: Iterable[Path] = ()) -> None:
        """Swap in new contents, e.g. from a template or a pruned refresh."""
        self.selected_files = set(files)
        self.selected_empty_dirs = set(empty_dirs)
