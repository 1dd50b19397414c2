"""Raw-mode lifecycle tests for the selector terminal."""

from __future__ import annotations

import os
import termios
import unittest
from unittest import mock

from ctxselect.runtime.terminal import TerminalController


class TerminalControllerTests(unittest.TestCase):
    def test_enable_and_disable_use_alternate_screen_sequences(self) -> None:
        saved_state = [1, 2, 3]

        with mock.patch("ctxselect.runtime.terminal.termios.tcgetattr", return_value=saved_state), mock.patch(
            "ctxselect.runtime.terminal.tty.setraw"
        ) as setraw_mock, mock.patch("ctxselect.runtime.terminal.os.write") as write_mock, mock.patch(
            "ctxselect.runtime.terminal.termios.tcsetattr"
        ) as setattr_mock:
            controller = TerminalController(stdin_fd=5, stdout_fd=5)
            controller.enable_tui_mode()
            controller.disable_tui_mode()

        setraw_mock.assert_called_once_with(5, termios.TCSAFLUSH)
        self.assertEqual(write_mock.call_args_list[0].args, (5, b"\x1b[?1049h\x1b[?25l"))
        self.assertEqual(write_mock.call_args_list[1].args, (5, b"\x1b[?25h\x1b[?1049l"))
        setattr_mock.assert_called_once_with(5, termios.TCSAFLUSH, saved_state)

    def test_raw_mode_restores_terminal_after_exception(self) -> None:
        with mock.patch("ctxselect.runtime.terminal.termios.tcgetattr", return_value=[0]):
            controller = TerminalController(stdin_fd=0, stdout_fd=1)

        with mock.patch.object(controller, "enable_tui_mode") as enable_mock, mock.patch.object(
            controller, "disable_tui_mode"
        ) as disable_mock:
            with self.assertRaises(RuntimeError):
                with controller.raw_mode():
                    raise RuntimeError("boom")

        enable_mock.assert_called_once()
        disable_mock.assert_called_once()

    def test_size_has_a_floor(self) -> None:
        with mock.patch("ctxselect.runtime.terminal.termios.tcgetattr", return_value=[0]):
            controller = TerminalController(stdin_fd=0, stdout_fd=1)

        with mock.patch(
            "ctxselect.runtime.terminal.os.get_terminal_size",
            return_value=os.terminal_size((10, 2)),
        ):
            self.assertEqual(controller.size(), (20, 5))

        with mock.patch(
            "ctxselect.runtime.terminal.os.get_terminal_size",
            side_effect=OSError("not a tty"),
        ), mock.patch(
            "ctxselect.runtime.terminal.shutil.get_terminal_size",
            return_value=os.terminal_size((100, 40)),
        ):
            self.assertEqual(controller.size(), (100, 40))


if __name__ == "__main__":
    unittest.main()
