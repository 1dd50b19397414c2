"""Domain datatypes for one filesystem tree snapshot."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class FileNode:
    """One file entry. ``path`` is absolute and is the node's identity."""

    path: Path
    relative_path: str
    size: int | None = None

    @property
    def name(self) -> str:
        return self.path.name or str(self.path)


@dataclass(frozen=True)
class DirectoryNode:
    """Directory entry with ordered children; ``()`` marks an empty directory."""

    path: Path
    relative_path: str
    children: tuple["TreeNode", ...] = ()

    @property
    def name(self) -> str:
        return self.path.name or str(self.path)

    @property
    def is_empty(self) -> bool:
        return not self.children


TreeNode = DirectoryNode | FileNode


def iter_nodes(root: TreeNode) -> Iterator[TreeNode]:
    """Yield ``root`` and every descendant in pre-order, ignoring expansion."""
    yield root
    if isinstance(root, DirectoryNode):
        for child in root.children:
            yield from iter_nodes(child)


def iter_descendants(directory: DirectoryNode) -> Iterator[TreeNode]:
    """Yield every descendant of ``directory`` (excluding itself) in pre-order."""
    for child in directory.children:
        yield from iter_nodes(child)


def count_nodes(root: TreeNode) -> int:
    return sum(1 for _node in iter_nodes(root))


__all__ = [
    "FileNode",
    "DirectoryNode",
    "TreeNode",
    "iter_nodes",
    "iter_descendants",
    "count_nodes",
]
