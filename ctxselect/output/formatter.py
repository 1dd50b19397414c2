"""Render the selected files as one markdown or XML context document.

Files come out in tree order, each exactly once. A file that cannot be read
is replaced by an error note; the rest of the document is still produced.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from xml.sax.saxutils import escape

from ..errors import CtxSelectError, format_error
from ..logging import get_logger, log_event
from ..selection.engine import SelectionEngine
from ..selection.state import SelectionState
from ..tree_model.fs import read_file_bytes
from ..tree_model.types import DirectoryNode, FileNode, TreeNode
from .languages import language_for_filename

MARKDOWN = "markdown"
XML = "xml"
OUTPUT_FORMATS = (MARKDOWN, XML)

logger = get_logger(__name__)


@dataclass(frozen=True)
class ReadFailure:
    relative_path: str
    message: str


@dataclass(frozen=True)
class OutputDocument:
    text: str
    file_count: int
    failures: tuple[ReadFailure, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class _FileBody:
    node: FileNode
    content: str | None
    error: str | None


def format_directory_tree(node: TreeNode, indent: str = "") -> str:
    """Two-space indented listing; directories carry a trailing slash."""
    if isinstance(node, FileNode):
        return f"{indent}{node.name}\n"
    lines = [f"{indent}{node.name}/\n"]
    for child in node.children:
        lines.append(format_directory_tree(child, indent + "  "))
    return "".join(lines)


def _read_bodies(
    files: list[FileNode],
    read_bytes: Callable[[Path], bytes],
) -> tuple[list[_FileBody], list[ReadFailure]]:
    bodies: list[_FileBody] = []
    failures: list[ReadFailure] = []
    for node in files:
        try:
            raw = read_bytes(node.path)
        except (CtxSelectError, OSError) as exc:
            message = format_error(exc)
            failures.append(ReadFailure(node.relative_path, message))
            log_event(logger, "output.read_failed", path=str(node.path), error=message)
            bodies.append(_FileBody(node, None, message))
            continue
        bodies.append(_FileBody(node, raw.decode("utf-8", errors="replace"), None))
    return bodies, failures


def _cdata(text: str) -> str:
    return "<![CDATA[" + text.replace("]]>", "]]]]><![CDATA[>") + "]]>"


def _with_newline(text: str) -> str:
    return text if text.endswith("\n") else text + "\n"


def _render_markdown(
    root: DirectoryNode,
    bodies: list[_FileBody],
    empty_dirs: list[DirectoryNode],
    prompt: str,
) -> str:
    parts = ["# Project Directory Structure\n\n", "```\n", format_directory_tree(root), "```\n\n"]
    if empty_dirs:
        parts.append("Selected empty directories:\n\n")
        parts.extend(f"- {node.relative_path}/\n" for node in empty_dirs)
        parts.append("\n")
    parts.append("---\n\n")
    parts.append("# Selected Files\n\n")
    for body in bodies:
        parts.append(f"## {body.node.relative_path}\n\n")
        if body.content is None:
            parts.append(f"> Error reading file: {body.error}\n\n")
        else:
            fence = "````" if "```" in body.content else "```"
            parts.append(fence + language_for_filename(body.node.name) + "\n")
            parts.append(_with_newline(body.content))
            parts.append(fence + "\n\n")
        parts.append("---\n\n")
    if prompt.strip():
        parts.append("# Instructions\n\n")
        parts.append(_with_newline(prompt) + "\n")
        parts.append("---\n\n")
    return "".join(parts)


def _render_xml(
    root: DirectoryNode,
    bodies: list[_FileBody],
    empty_dirs: list[DirectoryNode],
    prompt: str,
) -> str:
    parts = ['<?xml version="1.0" encoding="UTF-8"?>\n', "<context>\n"]
    parts.append("  <directory_structure>" + _cdata("\n" + format_directory_tree(root)) + "</directory_structure>\n")
    if empty_dirs:
        parts.append("  <empty_directories>\n")
        parts.extend(f"    <directory>{escape(node.relative_path)}</directory>\n" for node in empty_dirs)
        parts.append("  </empty_directories>\n")
    parts.append("  <files>\n")
    for body in bodies:
        parts.append("    <file>\n")
        parts.append(f"      <path>{escape(body.node.relative_path)}</path>\n")
        parts.append(f"      <language>{escape(language_for_filename(body.node.name))}</language>\n")
        if body.content is None:
            parts.append(f"      <error>{escape(body.error or '')}</error>\n")
        else:
            parts.append("      <content>" + _cdata("\n" + _with_newline(body.content)) + "</content>\n")
        parts.append("    </file>\n")
    parts.append("  </files>\n")
    if prompt.strip():
        parts.append("  <user_instructions>" + _cdata("\n" + _with_newline(prompt)) + "</user_instructions>\n")
    parts.append("</context>\n")
    return "".join(parts)


def build_document(
    root: DirectoryNode,
    selection: SelectionState,
    *,
    output_format: str = MARKDOWN,
    prompt: str = "",
    read_bytes: Callable[[Path], bytes] = read_file_bytes,
) -> OutputDocument:
    """Render every selected file under ``root`` in ``output_format``.

    Raises ``ValueError`` for an unknown format.
    """
    if output_format not in OUTPUT_FORMATS:
        raise ValueError(f"unknown output format: {output_format!r}")
    engine = SelectionEngine(selection)
    files = list(engine.iter_selected_files(root))
    empty_dirs = list(engine.iter_selected_empty_dirs(root))
    bodies, failures = _read_bodies(files, read_bytes)
    render = _render_markdown if output_format == MARKDOWN else _render_xml
    text = render(root, bodies, empty_dirs, prompt)
    log_event(
        logger,
        "output.built",
        format=output_format,
        files=len(files),
        failures=len(failures),
        chars=len(text),
    )
    return OutputDocument(text=text, file_count=len(files), failures=tuple(failures))
