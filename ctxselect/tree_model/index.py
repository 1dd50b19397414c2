"""Identity lookup over one tree snapshot."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .types import DirectoryNode, TreeNode


@dataclass(frozen=True)
class TreeIndex:
    """Path -> node and path -> parent maps for a single snapshot."""

    root: DirectoryNode
    nodes: dict[Path, TreeNode]
    parents: dict[Path, Path]

    @classmethod
    def build(cls, root: DirectoryNode) -> TreeIndex:
        nodes: dict[Path, TreeNode] = {root.path: root}
        parents: dict[Path, Path] = {}
        stack: list[DirectoryNode] = [root]
        while stack:
            directory = stack.pop()
            for child in directory.children:
                nodes[child.path] = child
                parents[child.path] = directory.path
                if isinstance(child, DirectoryNode):
                    stack.append(child)
        return cls(root=root, nodes=nodes, parents=parents)

    def __contains__(self, path: object) -> bool:
        return path in self.nodes

    def __len__(self) -> int:
        return len(self.nodes)

    def get(self, path: Path | None) -> TreeNode | None:
        if path is None:
            return None
        return self.nodes.get(path)

    def get_by_relative(self, relative_path: str) -> TreeNode | None:
        if relative_path in {"", "."}:
            return self.root
        return self.nodes.get(self.root.path / relative_path)

    def parent_of(self, path: Path) -> DirectoryNode | None:
        parent_path = self.parents.get(path)
        if parent_path is None:
            return None
        parent = self.nodes.get(parent_path)
        return parent if isinstance(parent, DirectoryNode) else None

    def ancestors(self, path: Path) -> list[DirectoryNode]:
        """Return ancestors of ``path`` nearest first, ending with the root."""
        out: list[DirectoryNode] = []
        parent = self.parent_of(path)
        while parent is not None:
            out.append(parent)
            parent = self.parent_of(parent.path)
        return out
