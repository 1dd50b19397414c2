"""Terminal runtime for the interactive selector."""

from __future__ import annotations

from .app import SelectorResult, run_selector

__all__ = ["SelectorResult", "run_selector"]
