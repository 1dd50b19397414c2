"""Grouped search-result projection layered over the full tree view.

The overlay only ever reads the tree; toggles made through it go to the same
``SelectionState`` the tree view reads, so no sync step exists on exit.
"""

from __future__ import annotations

import locale
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from ..tree_model.index import TreeIndex
from ..tree_model.types import DirectoryNode, FileNode, TreeNode
from .matching import search_nodes

GROUP = "group"
FILE = "file"


@dataclass(frozen=True)
class OverlayRow:
    """One displayed overlay row.

    ``node`` is the toggle target: the file for file rows and the group's
    directory for group rows that are themselves results. Groups shown only
    for path context have ``matched`` false and no toggle target; their
    ``directory`` is still set so Enter can navigate to it.
    """

    kind: str
    relative_path: str
    depth: int
    node: TreeNode | None
    directory: DirectoryNode | None = None
    matched: bool = True
    is_last_in_group: bool = False


@dataclass(frozen=True)
class OverlayReference:
    """Full-tree state captured when the overlay first opens."""

    root: DirectoryNode
    cursor_path: Path | None


def _parent_relative(relative_path: str) -> str:
    parent = PurePosixPath(relative_path).parent.as_posix()
    return parent if parent else "."


def _group_depth(relative_path: str) -> int:
    if relative_path == ".":
        return 0
    return len(PurePosixPath(relative_path).parts)


def collation_key(relative_path: str) -> tuple[str, str]:
    """Locale-aware sort key for group paths with a stable tie-breaker."""
    return locale.strxfrm(relative_path.casefold()), relative_path


def group_matches(matches: Sequence[TreeNode]) -> dict[str, list[FileNode]]:
    """Map each group directory path to its result files in traversal order."""
    groups: dict[str, list[FileNode]] = {}
    for node in matches:
        if isinstance(node, DirectoryNode):
            groups.setdefault(node.relative_path, [])
    for node in matches:
        if isinstance(node, FileNode):
            groups.setdefault(_parent_relative(node.relative_path), []).append(node)
    return groups


def project(matches: Sequence[TreeNode], index: TreeIndex) -> list[OverlayRow]:
    """Build display rows: a header per group directory, then its result files."""
    matched_dirs = {node.relative_path for node in matches if isinstance(node, DirectoryNode)}
    groups = group_matches(matches)
    rows: list[OverlayRow] = []
    for relative_path in sorted(groups, key=collation_key):
        directory = index.get_by_relative(relative_path)
        if not isinstance(directory, DirectoryNode):
            directory = None
        matched = relative_path in matched_dirs
        depth = _group_depth(relative_path)
        rows.append(
            OverlayRow(
                kind=GROUP,
                relative_path=relative_path,
                depth=depth,
                node=directory if matched else None,
                directory=directory,
                matched=matched,
            )
        )
        files = groups[relative_path]
        for position, file_node in enumerate(files):
            rows.append(
                OverlayRow(
                    kind=FILE,
                    relative_path=file_node.relative_path,
                    depth=depth + 1,
                    node=file_node,
                    is_last_in_group=position == len(files) - 1,
                )
            )
    return rows


@dataclass
class SearchOverlay:
    """Overlay lifecycle: enter (or re-query), row lookup, exit."""

    active: bool = False
    query: str = ""
    matches: list[TreeNode] = field(default_factory=list)
    rows: list[OverlayRow] = field(default_factory=list)
    reference: OverlayReference | None = None

    def enter(self, query: str, index: TreeIndex, reference: OverlayReference) -> list[OverlayRow]:
        """Run ``query``; the reference is captured only on the first entry."""
        if not self.active:
            self.reference = reference
            self.active = True
        self.query = query
        self.matches = search_nodes(index.root, query)
        self.rows = project(self.matches, index)
        return self.rows

    def exit(self) -> OverlayReference | None:
        reference = self.reference
        self.active = False
        self.query = ""
        self.matches = []
        self.rows = []
        self.reference = None
        return reference

    def __len__(self) -> int:
        return len(self.rows)

    def row_at(self, index: int) -> OverlayRow | None:
        if 0 <= index < len(self.rows):
            return self.rows[index]
        return None

    def file_nodes(self) -> list[FileNode]:
        return [row.node for row in self.rows if row.kind == FILE and isinstance(row.node, FileNode)]

    def file_node_at(self, index: int) -> FileNode | None:
        """File-only lookup used by range commits; group rows yield ``None``."""
        row = self.row_at(index)
        if row is None or row.kind != FILE or not isinstance(row.node, FileNode):
            return None
        return row.node
