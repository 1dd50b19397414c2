"""Raw terminal bytes to key tokens.

Tokens are single printable characters or upper-case names such as ``UP``,
``SHIFT_DOWN`` and ``CTRL_C``. A lone ESC is told apart from the start of an
escape sequence by waiting ``ESC_SEQUENCE_TIMEOUT_MS`` for a follow-up byte.
"""

from __future__ import annotations

import os
import select

ESC_SEQUENCE_TIMEOUT_MS = 25

# Bytes read ahead while probing an escape sequence, replayed first.
_PENDING_BYTES: list[bytes] = []

_CONTROL_KEYS = {
    b"\x03": "CTRL_C",
    b"\x08": "BACKSPACE",
    b"\t": "TAB",
    b"\n": "ENTER",
    b"\r": "ENTER",
    b"\x15": "CTRL_U",
    b" ": "SPACE",
    b"\x7f": "BACKSPACE",
}

# Final byte of ``ESC [ x`` / ``ESC O x``.
_CURSOR_KEYS = {
    b"A": "UP",
    b"B": "DOWN",
    b"C": "RIGHT",
    b"D": "LEFT",
    b"H": "HOME",
    b"F": "END",
}

_TILDE_KEYS = {b"5": "PAGE_UP", b"6": "PAGE_DOWN"}

SHIFT_MODIFIER = b"2"


def _next_byte(fd: int, timeout_ms: int | None) -> bytes | None:
    """One byte from ``fd``; ``None`` on timeout or EOF. ``None`` timeout blocks."""
    if timeout_ms is not None:
        ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
        if not ready:
            return None
    data = os.read(fd, 1)
    return data or None


def _follow_up(fd: int) -> bytes | None:
    return _next_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)


def _utf8_length(lead: int) -> int:
    if lead >= 0xF0:
        return 4
    if lead >= 0xE0:
        return 3
    if lead >= 0xC0:
        return 2
    return 1


def _decode_text(fd: int, lead: bytes) -> str:
    data = lead
    while len(data) < _utf8_length(lead[0]):
        extra = _follow_up(fd)
        if extra is None:
            break
        data += extra
    return data.decode("utf-8", errors="replace")


def _decode_escape(fd: int) -> str:
    introducer = _follow_up(fd)
    if introducer is None:
        return "ESC"
    if introducer not in (b"[", b"O"):
        _PENDING_BYTES.append(introducer)
        return "ESC"

    code = _follow_up(fd)
    if code is None:
        return "ESC"
    if code in _CURSOR_KEYS:
        return _CURSOR_KEYS[code]
    if introducer != b"[":
        return "ESC"
    if code in _TILDE_KEYS:
        return _TILDE_KEYS[code] if _follow_up(fd) == b"~" else "ESC"
    if code == b"1":
        # ESC [ 1 ; <modifier> <final>
        params = [_follow_up(fd) for _ in range(3)]
        if params[0] != b";" or params[1] != SHIFT_MODIFIER or params[2] is None:
            return "ESC"
        name = _CURSOR_KEYS.get(params[2])
        return f"SHIFT_{name}" if name in ("UP", "DOWN", "LEFT", "RIGHT") else "ESC"
    return "ESC"


def read_key(fd: int, timeout_ms: int | None = None) -> str:
    """Return the next key token, or ``""`` when ``timeout_ms`` elapses."""
    lead = _PENDING_BYTES.pop(0) if _PENDING_BYTES else _next_byte(fd, timeout_ms)
    if lead is None:
        return ""
    if lead in _CONTROL_KEYS:
        return _CONTROL_KEYS[lead]
    if lead == b"\x1b":
        return _decode_escape(fd)
    return _decode_text(fd, lead)


__all__ = ["ESC_SEQUENCE_TIMEOUT_MS", "read_key"]
