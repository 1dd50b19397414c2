"""Frame composition for the selector screen.

``build_frame`` is pure and returns the full ANSI frame as text; ``render``
writes it to the terminal in one ``os.write``.
"""

from __future__ import annotations

import os
import re
import sys
import unicodedata
from dataclasses import dataclass

from ..session import ROW_GROUP, DisplayRow, SelectionSession
from ..ui_theme import UITheme
from .state import (
    MODE_PICKER,
    MODE_PROMPT,
    PROMPT_INSTRUCTIONS,
    PROMPT_SEARCH,
    PROMPT_TEMPLATE_NAME,
    SelectorUIState,
)

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")

MARK_SELECTED = "[x]"
MARK_PARTIAL = "[-]"
MARK_EMPTY = "[ ]"

_PROMPT_LABELS = {
    PROMPT_SEARCH: "/",
    PROMPT_TEMPLATE_NAME: "template name: ",
    PROMPT_INSTRUCTIONS: "instructions: ",
}


def char_width(ch: str) -> int:
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def clip_line(text: str, max_cols: int) -> str:
    """Cut ``text`` to ``max_cols`` visible columns, keeping escape sequences."""
    if max_cols <= 0:
        return ""
    out: list[str] = []
    col = 0
    index = 0
    while index < len(text):
        if text[index] == "\x1b":
            match = ANSI_ESCAPE_RE.match(text, index)
            if match is not None:
                out.append(match.group(0))
                index = match.end()
                continue
        width = char_width(text[index])
        if col + width > max_cols:
            break
        out.append(text[index])
        col += width
        index += 1
    return "".join(out)


def marker_for(session: SelectionSession, row: DisplayRow) -> str:
    if row.node is None:
        return "   "
    if session.is_selected(row.node):
        return MARK_SELECTED
    if session.is_partially_selected(row.node):
        return MARK_PARTIAL
    return MARK_EMPTY


def _styled_marker(marker: str, theme: UITheme) -> str:
    if marker == MARK_SELECTED:
        return f"{theme.marker_selected}{marker}{theme.reset}"
    if marker == MARK_PARTIAL:
        return f"{theme.marker_partial}{marker}{theme.reset}"
    return f"{theme.marker_empty}{marker}{theme.reset}"


def format_row(session: SelectionSession, row: DisplayRow, theme: UITheme) -> str:
    """Marker, indentation, and label for one row, without cursor styling."""
    marker = _styled_marker(marker_for(session, row), theme)
    indent = "  " * row.depth
    if row.kind == ROW_GROUP:
        color = theme.search_group if row.matched else theme.search_group_context
        return f"{marker} {indent}{color}{row.label}{theme.reset}"
    if row.directory is not None:
        return f"{marker} {indent}{theme.tree_dir}{row.label}{theme.reset}"
    return f"{marker} {indent}{theme.tree_file}{row.label}{theme.reset}"


def visible_window(cursor: int, scroll: int, height: int, total: int) -> int:
    """Return a scroll offset that keeps ``cursor`` within ``height`` rows."""
    if height <= 0 or total <= height:
        return 0
    if cursor < scroll:
        scroll = cursor
    elif cursor >= scroll + height:
        scroll = cursor - height + 1
    return max(0, min(scroll, total - height))


@dataclass(frozen=True)
class FrameGeometry:
    columns: int
    rows: int

    @property
    def list_rows(self) -> int:
        # Header line plus status and footer lines.
        return max(1, self.rows - 3)


def _header(ui: SelectorUIState, theme: UITheme) -> str:
    session = ui.session
    if session.searching:
        query = f"{theme.search_query}search: {session.overlay.query}{theme.reset}"
        return f"{query}  {theme.divider}(ESC to return){theme.reset}"
    return f"{theme.tree_dir}{session.tree.path}{theme.reset}"


def _status(ui: SelectorUIState, theme: UITheme) -> str:
    session = ui.session
    parts = [
        f"{theme.status_count}{session.selection.file_count} selected{theme.reset}",
    ]
    if ui.token_text:
        parts.append(f"{theme.status_text}{ui.token_text}{theme.reset}")
    parts.append(f"{theme.status_text}{session.output_format}{theme.reset}")
    if session.pending_template_name:
        parts.append(f"{theme.status_text}save as {session.pending_template_name}{theme.reset}")
    if ui.loading:
        parts.append(f"{theme.status_message}loading...{theme.reset}")
    if session.status:
        parts.append(f"{theme.status_message}{session.status}{theme.reset}")
    return " | ".join(parts)


def _footer(ui: SelectorUIState, theme: UITheme) -> str:
    if ui.mode == MODE_PROMPT:
        label = _PROMPT_LABELS.get(ui.prompt_kind or "", "> ")
        return f"{theme.search_query}{label}{ui.prompt_text}{theme.reset}_"
    if ui.mode == MODE_PICKER:
        return f"{theme.divider}j/k move  enter load  esc cancel{theme.reset}"
    return (
        f"{theme.divider}space toggle  a all  shift+arrows range  / search  "
        f"t templates  s save  i prompt  o format  r reload  c finish  q quit{theme.reset}"
    )


def _picker_lines(ui: SelectorUIState, theme: UITheme, height: int) -> list[str]:
    lines = [f"{theme.search_group}Load template:{theme.reset}"]
    start = visible_window(ui.picker_index, 0, height - 1, len(ui.picker_items))
    for index in range(start, min(len(ui.picker_items), start + height - 1)):
        name = ui.picker_items[index]
        if index == ui.picker_index:
            lines.append(f"{theme.reverse}  {name}{theme.reset}")
        else:
            lines.append(f"  {name}")
    return lines


def _restyle(text: str, style: str, theme: UITheme) -> str:
    """Keep ``style`` active across the resets embedded in ``text``."""
    return style + text.replace(theme.reset, theme.reset + style) + theme.reset


def build_frame(ui: SelectorUIState, theme: UITheme, geometry: FrameGeometry) -> str:
    """Compose one full-screen frame; updates ``ui.scroll`` to follow the cursor."""
    session = ui.session
    width = max(1, geometry.columns - 1)
    height = geometry.list_rows
    out: list[str] = ["\033[H\033[J"]
    lines: list[str] = [_header(ui, theme)]

    if ui.mode == MODE_PICKER:
        body = _picker_lines(ui, theme, height)
    else:
        rows = session.current_rows()
        ui.scroll = visible_window(session.cursor, ui.scroll, height, len(rows))
        body = []
        for index in range(ui.scroll, min(len(rows), ui.scroll + height)):
            text = format_row(session, rows[index], theme)
            if index == session.cursor:
                text = _restyle(text, theme.reverse, theme) if theme.reverse else "> " + text
            elif session.range.is_highlighted(index):
                text = _restyle(text, theme.range_highlight, theme) if theme.range_highlight else "* " + text
            body.append(text)
        if not rows:
            body.append(f"{theme.divider}(no matches){theme.reset}" if session.searching else "")

    lines.extend(body)
    while len(lines) < height + 1:
        lines.append("")
    lines.append(_status(ui, theme))
    lines.append(_footer(ui, theme))

    out.append("\r\n".join(clip_line(line, width) for line in lines))
    return "".join(out)


def render(ui: SelectorUIState, theme: UITheme, geometry: FrameGeometry, fd: int | None = None) -> None:
    frame = build_frame(ui, theme, geometry)
    os.write(sys.stdout.fileno() if fd is None else fd, frame.encode("utf-8", errors="replace"))
    ui.dirty = False
