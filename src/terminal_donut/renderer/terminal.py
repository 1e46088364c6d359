"""Small helpers for writing glyph frames to an ANSI terminal."""

from __future__ import annotations

import os
import select
import shutil
import sys
import termios
import tty
from typing import List, Optional, Tuple

TermiosAttr = List[int | List[bytes | int]]


class TerminalController:
    """Context manager that prepares the terminal for smooth animations."""

    def __init__(self, *, clear: bool = True, aspect_correction: float = 0.5) -> None:
        self._clear = clear
        self._aspect_correction = aspect_correction
        self._screen_active = False
        self._stdin_fd: Optional[int] = None
        self._termios_before: Optional[TermiosAttr] = None
        self._input_enabled = False
        self._pending_rows: List[str] = []
        self._current_row: List[str] = []

    def __enter__(self) -> "TerminalController":
        sys.stdout.write("\033[?1049h")
        if self._clear:
            sys.stdout.write("\033[2J")
        sys.stdout.write("\033[H")
        sys.stdout.write("\033[?25l")
        sys.stdout.flush()
        self._screen_active = True

        if sys.stdin.isatty():
            fd = sys.stdin.fileno()
            self._stdin_fd = fd
            try:
                self._termios_before = termios.tcgetattr(fd)
                tty.setcbreak(fd)
                self._input_enabled = True
            except termios.error:
                self._termios_before = None
                self._stdin_fd = None
                self._input_enabled = False
        else:
            self._stdin_fd = None
            self._termios_before = None
            self._input_enabled = False
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.restore()

    def restore(self) -> None:
        if self._screen_active:
            sys.stdout.write("\033[?25h")
            sys.stdout.write("\033[?1049l")
            sys.stdout.flush()
            self._screen_active = False

        if self._input_enabled and self._stdin_fd is not None and self._termios_before is not None:
            try:
                termios.tcsetattr(self._stdin_fd, termios.TCSADRAIN, self._termios_before)
            except termios.error:
                pass
        self._input_enabled = False
        self._stdin_fd = None
        self._termios_before = None

    @property
    def aspect_correction(self) -> float:
        return self._aspect_correction

    def draw(self, frame: str) -> None:
        sys.stdout.write("\033[H")
        sys.stdout.write(frame)
        sys.stdout.flush()

    def get_size(self) -> os.terminal_size:
        return shutil.get_terminal_size(fallback=(100, 40))

    def size_tuple(self) -> Tuple[int, int]:
        # One column short so a full row never triggers the terminal's auto-wrap.
        size = self.get_size()
        return max(1, size.columns - 1), max(1, size.lines)

    def emit_glyph(self, glyph: str) -> None:
        self._current_row.append(glyph)

    def emit_row_end(self) -> None:
        self._pending_rows.append("".join(self._current_row))
        self._current_row = []

    def flush(self) -> None:
        if self._current_row:
            self.emit_row_end()
        frame = "\n".join(self._pending_rows)
        self._pending_rows = []
        self.draw(frame)

    def poll_keys(self) -> List[str]:
        if not self._input_enabled or self._stdin_fd is None:
            return []

        keys: List[str] = []
        try:
            while True:
                readable, _, _ = select.select([sys.stdin], [], [], 0)
                if not readable:
                    break

                data = os.read(self._stdin_fd, 1)
                if not data:
                    break

                char = data.decode("utf-8", errors="ignore")
                if not char:
                    continue

                if char == "\x03":
                    raise KeyboardInterrupt

                if char == "\x1b":
                    keys.append(self._read_escape_sequence())
                    continue

                keys.append(char)
        except OSError:
            return keys

        return keys

    def _read_escape_sequence(self) -> str:
        sequence = "\x1b"
        if self._stdin_fd is None:
            return sequence

        while True:
            readable, _, _ = select.select([sys.stdin], [], [], 0)
            if not readable:
                break
            data = os.read(self._stdin_fd, 1)
            if not data:
                break
            char = data.decode("utf-8", errors="ignore")
            if not char:
                continue
            sequence += char
            if char.isalpha() or char == "~":
                break
        return sequence


class BufferSink:
    """In-memory sink with a fixed device size; collects finished frames."""

    def __init__(self, width: int, height: int, *, aspect_correction: float = 0.5) -> None:
        self.width = width
        self.height = height
        self.aspect_correction = aspect_correction
        self.frames: List[str] = []
        self._rows: List[str] = []
        self._current_row: List[str] = []

    def size_tuple(self) -> Tuple[int, int]:
        return self.width, self.height

    def emit_glyph(self, glyph: str) -> None:
        self._current_row.append(glyph)

    def emit_row_end(self) -> None:
        self._rows.append("".join(self._current_row))
        self._current_row = []

    def flush(self) -> None:
        if self._current_row:
            self.emit_row_end()
        self.frames.append("\n".join(self._rows))
        self._rows = []
