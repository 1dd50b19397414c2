"""Terminal-only UI state that sits next to the selection session."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..session import SelectionSession

MODE_NORMAL = "normal"
MODE_PROMPT = "prompt"
MODE_PICKER = "picker"

PROMPT_SEARCH = "search"
PROMPT_TEMPLATE_NAME = "template_name"
PROMPT_INSTRUCTIONS = "instructions"

OUTCOME_QUIT = "quit"
OUTCOME_FINISH = "finish"


@dataclass
class SelectorUIState:
    """Input mode, text prompt buffer, picker, scroll, and exit outcome."""

    session: SelectionSession
    mode: str = MODE_NORMAL
    prompt_kind: str | None = None
    prompt_text: str = ""
    picker_items: list[str] = field(default_factory=list)
    picker_index: int = 0
    scroll: int = 0
    loading: bool = False
    outcome: str | None = None
    token_text: str = ""
    dirty: bool = True

    def open_prompt(self, kind: str, initial: str = "") -> None:
        self.mode = MODE_PROMPT
        self.prompt_kind = kind
        self.prompt_text = initial
        self.dirty = True

    def close_prompt(self) -> None:
        self.mode = MODE_NORMAL
        self.prompt_kind = None
        self.prompt_text = ""
        self.dirty = True

    def open_picker(self, items: list[str]) -> None:
        self.mode = MODE_PICKER
        self.picker_items = list(items)
        self.picker_index = 0
        self.dirty = True

    def close_picker(self) -> None:
        self.mode = MODE_NORMAL
        self.picker_items = []
        self.picker_index = 0
        self.dirty = True
