from __future__ import annotations

import contextlib
import unittest
from pathlib import Path

from ctxselect.runtime.key_handlers import KeyContext, SelectorKeyHandler
from ctxselect.runtime.loop import RuntimeLoopCallbacks, run_main_loop
from ctxselect.runtime.state import OUTCOME_FINISH, OUTCOME_QUIT, SelectorUIState
from ctxselect.session import SelectionSession
from ctxselect.tree_model import DirectoryNode, FileNode

ROOT = Path("/project")


class _FakeTerminal:
    def __init__(self) -> None:
        self.entered = 0

    @contextlib.contextmanager
    def raw_mode(self):
        self.entered += 1
        yield

    def size(self) -> tuple[int, int]:
        return 80, 24


class _IdleScheduler:
    busy = False

    def drain_results(self) -> list:
        return []


class RunMainLoopTests(unittest.TestCase):
    def _run(self, keys: list[str]) -> tuple[str | None, SelectorUIState, list[int], int]:
        tree = DirectoryNode(
            path=ROOT,
            relative_path=".",
            children=(FileNode(path=ROOT / "a.py", relative_path="a.py"),),
        )
        ui = SelectorUIState(session=SelectionSession(tree))
        handler = SelectorKeyHandler(
            KeyContext(
                ui=ui,
                request_refresh=lambda: None,
                list_templates=list,
                load_template=lambda name: None,
                persist_output_format=lambda value: None,
            )
        )
        pending = list(keys)
        estimates: list[int] = []
        renders: list[int] = []

        def read_key(fd: int, timeout_ms: int | None) -> str:
            return pending.pop(0) if pending else "q"

        def render(state: SelectorUIState, geometry) -> None:
            renders.append(geometry.rows)
            state.dirty = False

        callbacks = RuntimeLoopCallbacks(
            read_key=read_key,
            render=render,
            refresh_token_estimate=lambda: estimates.append(ui.session.selection.file_count),
        )
        outcome = run_main_loop(ui, _FakeTerminal(), 0, handler, _IdleScheduler(), callbacks)
        return outcome, ui, estimates, len(renders)

    def test_finish_after_selecting(self) -> None:
        outcome, ui, estimates, render_count = self._run(["j", "SPACE", "c"])

        self.assertEqual(outcome, OUTCOME_FINISH)
        self.assertEqual(ui.session.selection.selected_files, {ROOT / "a.py"})
        self.assertEqual(estimates, [0, 1])
        self.assertGreaterEqual(render_count, 3)

    def test_idle_timeouts_do_not_rerender(self) -> None:
        outcome, _ui, estimates, render_count = self._run(["", "", "", "q"])

        self.assertEqual(outcome, OUTCOME_QUIT)
        self.assertEqual(estimates, [0])
        self.assertEqual(render_count, 1)


if __name__ == "__main__":
    unittest.main()
