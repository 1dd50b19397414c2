"""Name matching over a whole tree snapshot."""

from __future__ import annotations

from ..tree_model.types import DirectoryNode, TreeNode


def normalize_query(query: str) -> str:
    return query.casefold() if query.strip() else ""


def name_matches(node: TreeNode, folded_query: str) -> bool:
    """Case-insensitive substring test against the node's own name."""
    return bool(folded_query) and folded_query in node.name.casefold()


def search_nodes(root: DirectoryNode, query: str) -> list[TreeNode]:
    """Pre-order results for ``query``, collapsed directories included.

    A node is a result when its name matches or when any directory above it
    matched; everything below a matching directory comes along. The root
    itself is never a result.
    """
    folded = normalize_query(query)
    if not folded:
        return []
    results: list[TreeNode] = []
    # (node, an ancestor below the root matched)
    stack: list[tuple[TreeNode, bool]] = [(child, False) for child in reversed(root.children)]
    while stack:
        node, inherited = stack.pop()
        hit = inherited or name_matches(node, folded)
        if hit:
            results.append(node)
        if isinstance(node, DirectoryNode):
            stack.extend((child, hit) for child in reversed(node.children))
    return results
