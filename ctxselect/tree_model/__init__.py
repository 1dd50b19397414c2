"""Tree snapshot model: node types, filesystem provider, lookup, flattening.

Nothing in this package knows about selection or rendering.
"""

from __future__ import annotations

from .flatten import ExpansionState, FlatRow, FlattenedView, flatten_tree
from .fs import load_tree, path_kind, read_file_bytes
from .index import TreeIndex
from .types import DirectoryNode, FileNode, TreeNode, count_nodes, iter_descendants, iter_nodes

__all__ = [
    "DirectoryNode",
    "FileNode",
    "TreeNode",
    "iter_nodes",
    "iter_descendants",
    "count_nodes",
    "load_tree",
    "read_file_bytes",
    "path_kind",
    "TreeIndex",
    "ExpansionState",
    "FlatRow",
    "FlattenedView",
    "flatten_tree",
]
