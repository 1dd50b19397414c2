"""Keyboard handling for the selector: normal mode, text prompts, template picker."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from .key_registry import KeyBinding, KeyMap
from .state import (
    MODE_PICKER,
    MODE_PROMPT,
    OUTCOME_FINISH,
    OUTCOME_QUIT,
    PROMPT_INSTRUCTIONS,
    PROMPT_SEARCH,
    PROMPT_TEMPLATE_NAME,
    SelectorUIState,
)


@dataclass(frozen=True)
class KeyContext:
    """UI state plus the side-effecting operations key handlers may trigger."""

    ui: SelectorUIState
    request_refresh: Callable[[], None]
    list_templates: Callable[[], list[str]]
    load_template: Callable[[str], object]
    persist_output_format: Callable[[str], object]
    page_rows: Callable[[], int] = lambda: 10


def build_normal_keymap(context: KeyContext) -> KeyMap:
    """Bindings active while browsing the tree or the search overlay."""
    ui = context.ui
    session = ui.session

    def quit_action() -> None:
        ui.outcome = OUTCOME_QUIT

    def finish_action() -> None:
        if not session.has_selection:
            session.status = "Nothing selected"
            return
        ui.outcome = OUTCOME_FINISH

    def cancel_action() -> None:
        if session.cancel_range() or session.cancel_search():
            return
        session.status = ""

    def open_templates() -> None:
        names = context.list_templates()
        if not names:
            session.status = "No saved templates"
            return
        ui.open_picker(names)

    def toggle_format() -> None:
        context.persist_output_format(session.toggle_output_format())

    def page(delta: int) -> Callable[[], None]:
        return lambda: session.move_cursor(delta * max(1, context.page_rows()))

    return KeyMap(
        [
            KeyBinding(("q", "CTRL_C"), quit_action, "quit without output"),
            KeyBinding(("c",), finish_action, "finish and emit selection"),
            KeyBinding(("SPACE",), session.toggle_current, "toggle item / commit range", structural=True),
            KeyBinding(("ENTER",), session.activate_current, "expand/collapse, open group", structural=True),
            KeyBinding(
                ("/",),
                lambda: ui.open_prompt(PROMPT_SEARCH, session.overlay.query),
                "search names",
                structural=True,
            ),
            KeyBinding(("ESC",), cancel_action, "cancel range / search"),
            KeyBinding(("a",), session.toggle_all_visible, "toggle all visible", structural=True),
            KeyBinding(("SHIFT_UP",), lambda: session.extend_range(-1), "extend range up", structural=True),
            KeyBinding(("SHIFT_DOWN",), lambda: session.extend_range(1), "extend range down", structural=True),
            KeyBinding(("k", "UP"), lambda: session.move_cursor(-1), "move up"),
            KeyBinding(("j", "DOWN"), lambda: session.move_cursor(1), "move down"),
            KeyBinding(("PAGE_UP",), page(-1)),
            KeyBinding(("PAGE_DOWN",), page(1)),
            KeyBinding(("g", "HOME"), session.jump_top, "top"),
            KeyBinding(("G", "END"), session.jump_bottom, "bottom"),
            KeyBinding(("h", "LEFT"), session.go_parent, "collapse / parent", structural=True),
            KeyBinding(("l", "RIGHT"), session.expand_or_enter, "expand / enter", structural=True),
            KeyBinding(("t",), open_templates, "load template", structural=True),
            KeyBinding(
                ("s",),
                lambda: ui.open_prompt(PROMPT_TEMPLATE_NAME, session.pending_template_name or ""),
                "save selection as template on finish",
            ),
            KeyBinding(("i",), lambda: ui.open_prompt(PROMPT_INSTRUCTIONS, session.prompt), "edit instructions"),
            KeyBinding(("o",), toggle_format, "toggle markdown/xml"),
            KeyBinding(("r",), context.request_refresh, "reload tree", structural=True),
        ]
    )


def submit_prompt(ui: SelectorUIState) -> None:
    session = ui.session
    kind = ui.prompt_kind
    text = ui.prompt_text
    ui.close_prompt()
    if kind == PROMPT_SEARCH:
        session.start_search(text)
    elif kind == PROMPT_TEMPLATE_NAME:
        session.set_pending_template_name(text.strip() or None)
    elif kind == PROMPT_INSTRUCTIONS:
        session.set_prompt(text)


def handle_prompt_key(key: str, ui: SelectorUIState) -> None:
    """Single-line editing for search queries, template names, and prompts."""
    if key == "ESC":
        ui.close_prompt()
        return
    if key == "ENTER":
        submit_prompt(ui)
        return
    if key == "BACKSPACE":
        ui.prompt_text = ui.prompt_text[:-1]
    elif key == "CTRL_U":
        ui.prompt_text = ""
    elif key == "SPACE":
        ui.prompt_text += " "
    elif key == "CTRL_C":
        ui.outcome = OUTCOME_QUIT
    elif len(key) == 1 and key.isprintable():
        ui.prompt_text += key
    ui.dirty = True


def handle_picker_key(key: str, ui: SelectorUIState, load_template: Callable[[str], object]) -> None:
    if key in {"ESC", "q"}:
        ui.close_picker()
        return
    if key == "CTRL_C":
        ui.outcome = OUTCOME_QUIT
        return
    if key in {"j", "DOWN"}:
        ui.picker_index = min(len(ui.picker_items) - 1, ui.picker_index + 1)
    elif key in {"k", "UP"}:
        ui.picker_index = max(0, ui.picker_index - 1)
    elif key == "ENTER" and ui.picker_items:
        name = ui.picker_items[ui.picker_index]
        ui.close_picker()
        load_template(name)
    ui.dirty = True


class SelectorKeyHandler:
    """Routes one decoded key to the handler for the current input mode."""

    def __init__(self, context: KeyContext) -> None:
        self.context = context
        self.keymap = build_normal_keymap(context)

    def handle(self, key: str) -> bool:
        """Handle ``key``; returns ``True`` once the selector should exit."""
        ui = self.context.ui
        if not key:
            return ui.outcome is not None
        if ui.mode == MODE_PROMPT:
            handle_prompt_key(key, ui)
        elif ui.mode == MODE_PICKER:
            handle_picker_key(key, ui, self.context.load_template)
        elif ui.loading and self.keymap.is_structural(key):
            ui.session.status = "Loading tree..."
        else:
            self.keymap.dispatch(key)
        ui.dirty = True
        return ui.outcome is not None
