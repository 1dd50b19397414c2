"""Shift-extended row ranges, committed as one selection batch."""

from __future__ import annotations

from collections.abc import Callable

from .tree_model.types import TreeNode


class RangeSelector:
    """Anchor plus highlighted row indices for the active displayed sequence.

    Rows are addressed by index into whatever sequence is on screen; the
    caller resolves an index to a node at commit time.
    """

    def __init__(self) -> None:
        self.anchor: int | None = None
        self.highlighted: frozenset[int] = frozenset()

    @property
    def active(self) -> bool:
        return self.anchor is not None

    def begin(self, cursor: int) -> None:
        if self.anchor is None:
            self.anchor = cursor
            self.highlighted = frozenset({cursor})

    def extend(self, cursor: int) -> None:
        """Highlight the inclusive interval between the anchor and ``cursor``."""
        self.begin(cursor)
        assert self.anchor is not None
        low = min(self.anchor, cursor)
        high = max(self.anchor, cursor)
        self.highlighted = frozenset(range(low, high + 1))

    def is_highlighted(self, index: int) -> bool:
        return index in self.highlighted

    def commit(
        self,
        rows: Callable[[int], TreeNode | None],
        toggle_batch: Callable[[list[TreeNode]], bool],
    ) -> int:
        """Hand the highlighted rows to ``toggle_batch`` as one batch, then clear.

        Nodes are resolved in ascending row order and indices that resolve to
        ``None`` are skipped. The batch takes a single "all selected" decision,
        so already-selected rows stay selected when the rest are not. Returns
        how many rows were committed.
        """
        nodes: list[TreeNode] = []
        for index in sorted(self.highlighted):
            node = rows(index)
            if node is not None:
                nodes.append(node)
        changed = toggle_batch(nodes) if nodes else False
        self.clear()
        return len(nodes) if changed else 0

    def clear(self) -> None:
        self.anchor = None
        self.highlighted = frozenset()
