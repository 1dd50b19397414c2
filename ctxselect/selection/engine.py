"""Selection rules for files, directory subtrees, and visible-row batches.

Every toggle is two-phase: take one "fully selected" decision up front, then
apply a uniform plan. Recomputing the decision per descendant while mutating
would observe half-applied state.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from ..tree_model.types import DirectoryNode, FileNode, TreeNode, iter_descendants, iter_nodes
from .state import SelectionState

FILE = "file"
EMPTY_DIR = "empty_dir"


@dataclass(frozen=True)
class SelectionChange:
    """One planned mutation of ``SelectionState``."""

    path: Path
    kind: str
    select: bool


def is_selectable(node: TreeNode) -> bool:
    """Files and empty directories are the only things stored in a selection."""
    if isinstance(node, FileNode):
        return True
    return node.is_empty


def selectable_nodes(node: TreeNode) -> Iterator[TreeNode]:
    """Yield the selectable entities a toggle of ``node`` covers."""
    if is_selectable(node):
        yield node
        return
    assert isinstance(node, DirectoryNode)
    for descendant in iter_descendants(node):
        if is_selectable(descendant):
            yield descendant


def _change_for(node: TreeNode, select: bool) -> SelectionChange:
    kind = FILE if isinstance(node, FileNode) else EMPTY_DIR
    return SelectionChange(path=node.path, kind=kind, select=select)


def plan_subtree(node: TreeNode, select: bool) -> list[SelectionChange]:
    """Changes that set every selectable entity under ``node`` to ``select``."""
    return [_change_for(target, select) for target in selectable_nodes(node)]


def plan_nodes(nodes: Iterable[TreeNode | None], select: bool) -> list[SelectionChange]:
    """Concatenated subtree plans for ``nodes``, skipping ``None``."""
    changes: list[SelectionChange] = []
    for node in nodes:
        if node is None:
            continue
        changes.extend(plan_subtree(node, select))
    return changes


def apply_changes(state: SelectionState, changes: Iterable[SelectionChange]) -> None:
    """Apply planned changes; each one is idempotent."""
    for change in changes:
        target = state.selected_files if change.kind == FILE else state.selected_empty_dirs
        if change.select:
            target.add(change.path)
        else:
            target.discard(change.path)


class SelectionEngine:
    """Reads and writes one ``SelectionState``; the only writer of it."""

    def __init__(self, state: SelectionState | None = None) -> None:
        self.state = state if state is not None else SelectionState()

    def _is_marked(self, node: TreeNode) -> bool:
        if isinstance(node, FileNode):
            return node.path in self.state.selected_files
        return node.path in self.state.selected_empty_dirs

    def is_selected(self, node: TreeNode | None) -> bool:
        """Tri-state collapsed to a bool: partial directories are not selected."""
        if node is None:
            return False
        if is_selectable(node):
            return self._is_marked(node)
        found = False
        for target in selectable_nodes(node):
            found = True
            if not self._is_marked(target):
                return False
        return found

    def count_selected_under(self, node: TreeNode) -> tuple[int, int]:
        """Return ``(selected, total)`` selectable entities covered by ``node``."""
        selected = 0
        total = 0
        for target in selectable_nodes(node):
            total += 1
            if self._is_marked(target):
                selected += 1
        return selected, total

    def is_partially_selected(self, node: TreeNode | None) -> bool:
        if not isinstance(node, DirectoryNode) or node.is_empty:
            return False
        selected, total = self.count_selected_under(node)
        return 0 < selected < total

    def toggle_file(self, node: TreeNode | None) -> bool:
        if not isinstance(node, FileNode):
            return False
        if node.path in self.state.selected_files:
            self.state.selected_files.discard(node.path)
        else:
            self.state.selected_files.add(node.path)
        return True

    def toggle_directory(self, node: TreeNode | None) -> bool:
        if not isinstance(node, DirectoryNode):
            return False
        was_fully_selected = self.is_selected(node)
        apply_changes(self.state, plan_subtree(node, not was_fully_selected))
        return True

    def toggle_node(self, node: TreeNode | None) -> bool:
        if isinstance(node, FileNode):
            return self.toggle_file(node)
        return self.toggle_directory(node)

    def toggle_all_visible(self, nodes: Iterable[TreeNode | None]) -> bool:
        """Select every given node, or clear them all when all are selected.

        Directories with nothing selectable beneath them take no part in the
        "all selected" decision.
        """
        candidates = [
            node for node in nodes if node is not None and any(True for _ in selectable_nodes(node))
        ]
        if not candidates:
            return False
        all_selected = all(self.is_selected(node) for node in candidates)
        apply_changes(self.state, plan_nodes(candidates, not all_selected))
        return True

    def iter_selected_files(self, root: DirectoryNode) -> Iterator[FileNode]:
        """Selected files in tree order; paths missing from ``root`` are omitted."""
        for node in iter_nodes(root):
            if isinstance(node, FileNode) and node.path in self.state.selected_files:
                yield node

    def iter_selected_empty_dirs(self, root: DirectoryNode) -> Iterator[DirectoryNode]:
        for node in iter_nodes(root):
            if isinstance(node, DirectoryNode) and node.is_empty and node.path in self.state.selected_empty_dirs:
                yield node
