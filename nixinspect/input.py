"""Low-level terminal input decoding and the background key reader.

Reads raw bytes from stdin and translates them into normalized key tokens.
``KeyReader`` runs the decoder on its own thread and posts every token to
the UI message queue, plus a ``RESIZE`` token when the terminal size changes.
"""

from __future__ import annotations

import logging
import os
import select
import shutil
import threading
from collections.abc import Callable

from .messages import Message

logger = logging.getLogger(__name__)

ESC_SEQUENCE_TIMEOUT_MS = 25
POLL_TIMEOUT_MS = 120
_PENDING_BYTES: list[bytes] = []

_CONTROL_KEYS: dict[bytes, str] = {
    b"\x03": "CTRL_C",
    b"\x04": "CTRL_D",
    b"\x0e": "CTRL_N",
    b"\x10": "CTRL_P",
    b"\x15": "CTRL_U",
    b"\t": "TAB",
    b"\x08": "BACKSPACE",
    b"\x7f": "BACKSPACE",
    b"\r": "ENTER",
    b"\n": "ENTER",
}

_CSI_FINAL_KEYS: dict[bytes, str] = {
    b"A": "UP",
    b"B": "DOWN",
    b"C": "RIGHT",
    b"D": "LEFT",
    b"H": "HOME",
    b"F": "END",
    b"Z": "SHIFT_TAB",
}

_CSI_TILDE_KEYS: dict[bytes, str] = {
    b"3": "DELETE",
    b"5": "PAGE_UP",
    b"6": "PAGE_DOWN",
}


def _read_ready_byte(fd: int, timeout_ms: int) -> bytes | None:
    ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
    if not ready:
        return None
    ch = os.read(fd, 1)
    if not ch:
        return None
    return ch


def _read_utf8_tail(fd: int, lead: bytes) -> str:
    """Complete a multi-byte UTF-8 character started by ``lead``."""
    first = lead[0]
    if first >= 0xF0:
        remaining = 3
    elif first >= 0xE0:
        remaining = 2
    elif first >= 0xC0:
        remaining = 1
    else:
        remaining = 0
    data = lead
    for _ in range(remaining):
        more = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if more is None:
            break
        data += more
    return data.decode("utf-8", errors="replace")


def read_key(fd: int, timeout_ms: int | None = None) -> str:
    """Read one key token, or ``""`` on timeout/EOF."""
    if _PENDING_BYTES:
        ch = _PENDING_BYTES.pop(0)
    else:
        if timeout_ms is not None:
            ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
            if not ready:
                return ""

        ch = os.read(fd, 1)
        if not ch:
            return ""

    control = _CONTROL_KEYS.get(ch)
    if control is not None:
        return control

    if ch != b"\x1b":
        return _read_utf8_tail(fd, ch)

    # Escape / arrow key sequences.
    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return "ESC"
    if seq not in {b"[", b"O"}:
        _PENDING_BYTES.append(seq)
        return "ESC"
    code = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if code is None:
        return "ESC"
    final = _CSI_FINAL_KEYS.get(code)
    if final is not None:
        return final
    tilde = _CSI_TILDE_KEYS.get(code)
    if tilde is not None:
        terminator = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if terminator == b"~":
            return tilde
    return "ESC"


class KeyReader:
    """Background thread that feeds decoded keys into the UI queue."""

    def __init__(
        self,
        stdin_fd: int,
        post: Callable[[Message], None],
        terminal_size: Callable[[], os.terminal_size] | None = None,
    ) -> None:
        self.stdin_fd = stdin_fd
        self._post = post
        self._terminal_size = terminal_size or (lambda: shutil.get_terminal_size((80, 24)))
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self.run, name="nix-inspect-keys", daemon=True)

    def start(self) -> None:
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()

    def join(self, timeout: float | None = None) -> None:
        if self._thread.ident is not None:
            self._thread.join(timeout)

    def run(self) -> None:
        last_size = self._terminal_size()
        while not self._stop.is_set():
            try:
                key = read_key(self.stdin_fd, timeout_ms=POLL_TIMEOUT_MS)
            except OSError:
                logger.exception("reading terminal input failed")
                return
            size = self._terminal_size()
            if size != last_size:
                last_size = size
                self._post(Message.term_event("RESIZE"))
            if key:
                self._post(Message.term_event(key))


__all__ = ["ESC_SEQUENCE_TIMEOUT_MS", "KeyReader", "read_key"]
