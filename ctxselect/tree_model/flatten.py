"""Expansion state and the expansion-aware row linearization of a tree."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from .index import TreeIndex
from .types import DirectoryNode, TreeNode


class ExpansionState:
    """Set of open directories. The root counts as expanded unconditionally."""

    def __init__(self, root: Path, expanded: Iterable[Path] = ()) -> None:
        self.root = root
        self._expanded: set[Path] = set(expanded)

    @property
    def paths(self) -> frozenset[Path]:
        return frozenset(self._expanded | {self.root})

    def is_expanded(self, path: Path) -> bool:
        return path == self.root or path in self._expanded

    def expand(self, path: Path) -> None:
        self._expanded.add(path)

    def collapse(self, path: Path) -> None:
        self._expanded.discard(path)

    def toggle(self, node: TreeNode | None) -> bool:
        """Flip ``node`` open/closed; returns ``False`` for files and ``None``."""
        if not isinstance(node, DirectoryNode):
            return False
        if node.path in self._expanded:
            self._expanded.discard(node.path)
        else:
            self._expanded.add(node.path)
        return True

    def expand_path_to(self, path: Path, index: TreeIndex) -> None:
        """Expand ``path`` (when it is a directory) and every ancestor."""
        if isinstance(index.get(path), DirectoryNode):
            self._expanded.add(path)
        for ancestor in index.ancestors(path):
            self._expanded.add(ancestor.path)

    def retain(self, index: TreeIndex) -> None:
        """Drop expanded paths that are no longer directories in ``index``."""
        self._expanded = {path for path in self._expanded if isinstance(index.get(path), DirectoryNode)}


@dataclass(frozen=True)
class FlatRow:
    """One on-screen tree row."""

    node: TreeNode
    depth: int


def flatten_tree(root: DirectoryNode, expansion: ExpansionState) -> list[FlatRow]:
    """Depth-first pre-order rows, descending only into expanded directories."""
    rows: list[FlatRow] = [FlatRow(root, 0)]

    def walk(directory: DirectoryNode, depth: int) -> None:
        for child in directory.children:
            rows.append(FlatRow(child, depth))
            if isinstance(child, DirectoryNode) and expansion.is_expanded(child.path):
                walk(child, depth + 1)

    walk(root, 1)
    return rows


class FlattenedView:
    """Immutable cursor-row mapping for the full tree view."""

    def __init__(self, rows: Iterable[FlatRow]) -> None:
        self.rows: tuple[FlatRow, ...] = tuple(rows)
        self._index_by_path = {row.node.path: idx for idx, row in enumerate(self.rows)}

    @classmethod
    def build(cls, root: DirectoryNode, expansion: ExpansionState) -> FlattenedView:
        return cls(flatten_tree(root, expansion))

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[FlatRow]:
        return iter(self.rows)

    def row_at(self, index: int) -> FlatRow | None:
        if 0 <= index < len(self.rows):
            return self.rows[index]
        return None

    def node_at(self, index: int) -> TreeNode | None:
        row = self.row_at(index)
        return row.node if row is not None else None

    def index_of(self, path: Path) -> int | None:
        return self._index_by_path.get(path)

    def nodes(self) -> list[TreeNode]:
        return [row.node for row in self.rows]
