"""Raw mode and alternate screen for the controlling terminal."""

from __future__ import annotations

import contextlib
import os
import shutil
import termios
import tty

ENTER_SCREEN = b"\x1b[?1049h\x1b[?25l"
LEAVE_SCREEN = b"\x1b[?25h\x1b[?1049l"

MIN_COLUMNS = 20
MIN_ROWS = 5


class TerminalController:
    """Wraps the tty fds; the tty attributes at construction are what gets restored."""

    def __init__(self, stdin_fd: int, stdout_fd: int) -> None:
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self._saved_tty_state = termios.tcgetattr(stdin_fd)

    def enable_tui_mode(self) -> None:
        tty.setraw(self.stdin_fd, termios.TCSAFLUSH)
        os.write(self.stdout_fd, ENTER_SCREEN)

    def disable_tui_mode(self) -> None:
        os.write(self.stdout_fd, LEAVE_SCREEN)
        termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._saved_tty_state)

    @contextlib.contextmanager
    def raw_mode(self):
        """Full-screen raw mode for the duration of the block, even if it raises."""
        self.enable_tui_mode()
        try:
            yield self
        finally:
            self.disable_tui_mode()

    def size(self) -> tuple[int, int]:
        """``(columns, rows)``, never smaller than a usable minimum."""
        try:
            columns, rows = os.get_terminal_size(self.stdout_fd)
        except OSError:
            columns, rows = shutil.get_terminal_size((80, 24))
        return max(MIN_COLUMNS, columns), max(MIN_ROWS, rows)
