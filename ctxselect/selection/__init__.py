"""Selection state and the rules that mutate it."""

from __future__ import annotations

from .engine import (
    SelectionChange,
    SelectionEngine,
    apply_changes,
    is_selectable,
    plan_nodes,
    plan_subtree,
    selectable_nodes,
)
from .state import SelectionSnapshot, SelectionState

__all__ = [
    "SelectionChange",
    "SelectionEngine",
    "SelectionSnapshot",
    "SelectionState",
    "apply_changes",
    "is_selectable",
    "plan_nodes",
    "plan_subtree",
    "selectable_nodes",
]
