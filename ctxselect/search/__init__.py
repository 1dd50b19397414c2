"""Name search and the grouped overlay built from its results."""

from __future__ import annotations

from .matching import name_matches, normalize_query, search_nodes
from .overlay import (
    FILE,
    GROUP,
    OverlayReference,
    OverlayRow,
    SearchOverlay,
    collation_key,
    group_matches,
    project,
)

__all__ = [
    "FILE",
    "GROUP",
    "OverlayReference",
    "OverlayRow",
    "SearchOverlay",
    "collation_key",
    "group_matches",
    "name_matches",
    "normalize_query",
    "project",
    "search_nodes",
]
