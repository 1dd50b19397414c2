"""Main interactive event loop for the selector.

Coordinates background tree reloads, rendering, and input dispatch. Feature
logic lives in the session and the key handlers; the loop only wires them.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from ..errors import format_error
from .key_handlers import SelectorKeyHandler
from .render import FrameGeometry
from .state import SelectorUIState
from .terminal import TerminalController
from .tree_loader import TreeLoadScheduler

KEY_POLL_MS = 50


@dataclass(frozen=True)
class RuntimeLoopCallbacks:
    """Injected operations used by ``run_main_loop``."""

    read_key: Callable[[int, int | None], str]
    render: Callable[[SelectorUIState, FrameGeometry], None]
    refresh_token_estimate: Callable[[], None]


def apply_load_results(ui: SelectorUIState, scheduler: TreeLoadScheduler) -> bool:
    """Apply the newest finished tree load, if any. Returns whether one landed."""
    results = scheduler.drain_results()
    if not results:
        ui.loading = scheduler.busy
        return False
    result = results[-1]
    ui.loading = scheduler.busy
    if result.error is not None:
        ui.session.status = format_error(result.error)
    elif result.tree is not None:
        ui.session.replace_tree(result.tree)
        ui.session.status = "Tree reloaded"
    ui.dirty = True
    return True


def run_main_loop(
    ui: SelectorUIState,
    terminal: TerminalController,
    stdin_fd: int,
    handler: SelectorKeyHandler,
    scheduler: TreeLoadScheduler,
    callbacks: RuntimeLoopCallbacks,
) -> str | None:
    """Run until a quit/finish key; returns the outcome."""
    last_selection = None
    last_geometry: FrameGeometry | None = None
    with terminal.raw_mode():
        while True:
            columns, rows = terminal.size()
            geometry = FrameGeometry(columns=columns, rows=rows)
            if geometry != last_geometry:
                last_geometry = geometry
                ui.dirty = True

            if apply_load_results(ui, scheduler):
                last_selection = None

            snapshot = ui.session.selection.snapshot()
            if snapshot != last_selection:
                last_selection = snapshot
                callbacks.refresh_token_estimate()
                ui.dirty = True

            if ui.dirty:
                callbacks.render(ui, geometry)

            key = callbacks.read_key(stdin_fd, KEY_POLL_MS)
            if handler.handle(key):
                return ui.outcome
