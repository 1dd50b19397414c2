"""Selector runtime wiring: terminal, loader, key handling, render loop."""

from __future__ import annotations

import os
from collections.abc import Callable
from contextlib import contextmanager
from dataclasses import dataclass

from ..config import save_output_format
from ..logging import get_logger, log_event
from ..selection.state import SelectionState
from ..session import SelectionSession
from ..templates.store import TemplateStore
from ..tokens import TokenEstimator, format_token_count
from ..tree_model.fs import load_tree, read_file_bytes
from ..tree_model.types import DirectoryNode
from ..ui_theme import UITheme
from .input import read_key
from .key_handlers import KeyContext, SelectorKeyHandler
from .loop import RuntimeLoopCallbacks, run_main_loop
from .render import render
from .state import OUTCOME_FINISH, SelectorUIState
from .terminal import TerminalController
from .tree_loader import TreeLoadScheduler

TTY_PATH = "/dev/tty"

logger = get_logger(__name__)


@dataclass(frozen=True)
class SelectorResult:
    """What the interactive run produced; ``finished`` is false on quit."""

    finished: bool
    root: DirectoryNode
    selection: SelectionState
    output_format: str
    prompt: str
    pending_template_name: str | None


@contextmanager
def open_tty():
    """Yield a read/write fd on the controlling terminal.

    The document may be written to stdout, so the UI never draws there.
    """
    fd = os.open(TTY_PATH, os.O_RDWR | os.O_NOCTTY)
    try:
        yield fd
    finally:
        os.close(fd)


def run_selector(
    session: SelectionSession,
    *,
    theme: UITheme,
    template_store: TemplateStore,
    show_hidden: bool,
    skip_gitignored: bool,
    estimator: TokenEstimator | None = None,
    persist_output_format: Callable[[str], object] = save_output_format,
) -> SelectorResult:
    """Run the interactive selector over ``session`` until finish or quit."""
    estimator = estimator if estimator is not None else TokenEstimator()
    ui = SelectorUIState(session=session)
    scheduler = TreeLoadScheduler(load_tree)

    def request_refresh() -> None:
        estimator.clear_cache()
        scheduler.schedule(session.tree.path, show_hidden=show_hidden, skip_gitignored=skip_gitignored)
        ui.loading = True
        session.status = "Reloading tree..."

    def refresh_token_estimate() -> None:
        count = estimator.estimate_selection(sorted(session.selection.selected_files), read_file_bytes)
        ui.token_text = format_token_count(count, estimator.source)

    with open_tty() as tty_fd:
        terminal = TerminalController(tty_fd, tty_fd)
        context = KeyContext(
            ui=ui,
            request_refresh=request_refresh,
            list_templates=template_store.list,
            load_template=lambda name: session.load_template(template_store, name),
            persist_output_format=persist_output_format,
            page_rows=lambda: max(1, terminal.size()[1] - 4),
        )
        handler = SelectorKeyHandler(context)
        callbacks = RuntimeLoopCallbacks(
            read_key=read_key,
            render=lambda state, geometry: render(state, theme, geometry, fd=tty_fd),
            refresh_token_estimate=refresh_token_estimate,
        )
        outcome = run_main_loop(ui, terminal, tty_fd, handler, scheduler, callbacks)

    finished = outcome == OUTCOME_FINISH
    log_event(
        logger,
        "selector.exit",
        outcome=outcome,
        files=session.selection.file_count,
        empty_dirs=len(session.selection.selected_empty_dirs),
    )
    return SelectorResult(
        finished=finished,
        root=session.tree,
        selection=session.selection,
        output_format=session.output_format,
        prompt=session.prompt,
        pending_template_name=session.pending_template_name,
    )


__all__ = ["SelectorResult", "open_tty", "run_selector"]
