"""Template and prompt persistence."""

from __future__ import annotations

from .store import (
    KIND_DIRECTORY,
    KIND_FILE,
    PromptStore,
    TemplateEntry,
    TemplateLoad,
    TemplateStore,
    sanitize_name,
)

__all__ = [
    "KIND_DIRECTORY",
    "KIND_FILE",
    "PromptStore",
    "TemplateEntry",
    "TemplateLoad",
    "TemplateStore",
    "sanitize_name",
]
