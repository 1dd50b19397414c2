"""Context document rendering."""

from __future__ import annotations

from .formatter import (
    MARKDOWN,
    OUTPUT_FORMATS,
    XML,
    OutputDocument,
    ReadFailure,
    build_document,
    format_directory_tree,
)
from .languages import language_for_filename

__all__ = [
    "MARKDOWN",
    "OUTPUT_FORMATS",
    "XML",
    "OutputDocument",
    "ReadFailure",
    "build_document",
    "format_directory_tree",
    "language_for_filename",
]
