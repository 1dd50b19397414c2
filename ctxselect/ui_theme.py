"""ANSI palettes for the selector tree, search overlay and status line."""

from __future__ import annotations

from dataclasses import dataclass, fields

RESET = "\033[0m"
REVERSE = "\033[7m"


@dataclass(frozen=True)
class UITheme:
    """Escape sequences keyed by what they color, not by color."""

    name: str
    divider: str
    marker_selected: str
    marker_partial: str
    marker_empty: str
    tree_dir: str
    tree_file: str
    range_highlight: str
    search_group: str
    search_group_context: str
    search_query: str
    status_text: str
    status_count: str
    status_message: str
    reverse: str = REVERSE
    reset: str = RESET


def _fg(code: int, *, bold: bool = False, dim: bool = False) -> str:
    attrs = ("1;" if bold else "") + ("2;" if dim else "")
    return f"\033[{attrs}38;5;{code}m"


def _bg(code: int) -> str:
    return f"\033[48;5;{code}m"


DEFAULT_THEME = UITheme(
    name="default",
    divider="\033[2m",
    marker_selected=_fg(42, bold=True),
    marker_partial=_fg(214),
    marker_empty=_fg(250, dim=True),
    tree_dir="\033[1;34m",
    tree_file=_fg(252),
    range_highlight=_bg(238),
    search_group=_fg(81, bold=True),
    search_group_context=_fg(81, dim=True),
    search_query=_fg(81, bold=True),
    status_text=_fg(250, dim=True),
    status_count=_fg(229, bold=True),
    status_message=_fg(214),
)

# Tuned for white or pale terminal backgrounds.
LIGHT_THEME = UITheme(
    name="light",
    divider=_fg(248),
    marker_selected=_fg(28, bold=True),
    marker_partial=_fg(130),
    marker_empty=_fg(244),
    tree_dir=_fg(25, bold=True),
    tree_file=_fg(236),
    range_highlight=_bg(254),
    search_group=_fg(90, bold=True),
    search_group_context=_fg(139),
    search_query=_fg(90, bold=True),
    status_text=_fg(242),
    status_count=_fg(25, bold=True),
    status_message=_fg(130, bold=True),
)

PLAIN_THEME = UITheme(
    "plain",
    **{field.name: "" for field in fields(UITheme) if field.name != "name"},
)

_THEMES = {theme.name: theme for theme in (DEFAULT_THEME, LIGHT_THEME, PLAIN_THEME)}


def theme_names() -> list[str]:
    return sorted(_THEMES)


def resolve_theme(name: str | None, *, no_color: bool = False) -> UITheme:
    """Look up ``name`` case-insensitively; unknown names get the default.

    ``no_color`` wins over any name.
    """
    if no_color:
        return PLAIN_THEME
    return _THEMES.get((name or "").strip().lower(), DEFAULT_THEME)


__all__ = [
    "UITheme",
    "DEFAULT_THEME",
    "LIGHT_THEME",
    "PLAIN_THEME",
    "theme_names",
    "resolve_theme",
]
