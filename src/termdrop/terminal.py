"""Raw-mode terminal access and key decoding."""

import codecs
import os
import select
import sys
import termios
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, TextIO

from termdrop.errors import InputReadError, TerminalModeError

ESC = "\x1b"


class Key(Enum):
    """Key codes the decoder recognizes."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    HOME = "home"
    END = "end"
    ENTER = "enter"
    ESC = "esc"
    TAB = "tab"
    BACKSPACE = "backspace"
    CTRL_C = "ctrl-c"
    CHAR = "char"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class KeyEvent:
    """A key press."""

    key: Key
    char: str = ""


@dataclass(frozen=True)
class FocusEvent:
    """The terminal window gained or lost focus."""

    gained: bool


Event = KeyEvent | FocusEvent


class TerminalDriver(Protocol):
    """What the interaction loop needs from a terminal.

    Allows swapping in scripted terminals.
    """

    output: TextIO

    def enable_raw_mode(self) -> None:
        ...

    def disable_raw_mode(self) -> None:
        ...

    def read_event(self) -> Event:
        """Block until the next event arrives."""
        ...


_SINGLE_KEYS = {
    "\r": Key.ENTER,
    "\n": Key.ENTER,
    "\t": Key.TAB,
    "\x7f": Key.BACKSPACE,
    "\x08": Key.BACKSPACE,
    "\x03": Key.CTRL_C,
}

# Final byte of CSI / SS3 sequences
_FINAL_KEYS = {
    "A": Key.UP,
    "B": Key.DOWN,
    "C": Key.RIGHT,
    "D": Key.LEFT,
    "H": Key.HOME,
    "F": Key.END,
}

# CSI <n> ~ sequences
_TILDE_KEYS = {
    "1": Key.HOME,
    "7": Key.HOME,
    "4": Key.END,
    "8": Key.END,
}


class Terminal:
    """A character terminal: raw input mode, event reads and an output stream."""

    def __init__(
        self,
        input_fd: int | None = None,
        output: TextIO | None = None,
        escape_timeout: float = 0.025,
    ):
        """Initialize the terminal.

        Args:
            input_fd: Descriptor to read keys from. Defaults to stdin.
            output: Stream frames are written to. Defaults to stdout.
            escape_timeout: Seconds to wait after ESC for the rest of a sequence.
        """
        self._input_fd = input_fd
        self.output = sys.stdout if output is None else output
        self.escape_timeout = escape_timeout

        self._saved_attrs: list | None = None
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._pending = ""

    @property
    def input_fd(self) -> int:
        """Descriptor keys are read from, resolved from stdin on first use."""
        if self._input_fd is None:
            self._input_fd = sys.stdin.fileno()
        return self._input_fd

    @property
    def raw(self) -> bool:
        """Whether raw mode is currently enabled."""
        return self._saved_attrs is not None

    def is_interactive(self) -> bool:
        """Return True if the input descriptor is a TTY."""
        try:
            return os.isatty(self.input_fd)
        except (OSError, ValueError):
            return False

    def enable_raw_mode(self) -> None:
        """Switch input to per-keystroke delivery without echo.

        Output post-processing is left on so newlines still return the cursor
        to the first column.

        Raises:
            TerminalModeError: If the terminal attributes cannot be changed.
        """
        if self._saved_attrs is not None:
            return

        try:
            saved = termios.tcgetattr(self.input_fd)
            attrs = termios.tcgetattr(self.input_fd)
            attrs[0] &= ~(termios.IXON | termios.ICRNL)
            attrs[3] &= ~(termios.ICANON | termios.ECHO | termios.IEXTEN | termios.ISIG)
            attrs[6][termios.VMIN] = 1
            attrs[6][termios.VTIME] = 0
            termios.tcsetattr(self.input_fd, termios.TCSADRAIN, attrs)
        except (termios.error, OSError, ValueError) as e:
            raise TerminalModeError(f"Failed to enable raw mode: {e}") from e

        self._saved_attrs = saved

    def disable_raw_mode(self) -> None:
        """Restore the attributes saved by enable_raw_mode.

        Raises:
            TerminalModeError: If the attributes cannot be restored.
        """
        saved, self._saved_attrs = self._saved_attrs, None
        if saved is None:
            return

        try:
            termios.tcsetattr(self.input_fd, termios.TCSADRAIN, saved)
        except (termios.error, OSError) as e:
            raise TerminalModeError(f"Failed to disable raw mode: {e}") from e

    def read_event(self) -> Event:
        """Block until the next terminal event arrives.

        Raises:
            InputReadError: On end of input or a read failure.
        """
        ch = self._read_char()

        if ch == ESC:
            return self._read_escape()

        key = _SINGLE_KEYS.get(ch)
        if key is not None:
            return KeyEvent(key)
        if ch.isprintable():
            return KeyEvent(Key.CHAR, ch)
        return KeyEvent(Key.UNKNOWN, ch)

    def _read_escape(self) -> Event:
        """Decode what follows an ESC byte."""
        intro = self._read_char(self.escape_timeout)

        if intro is None:
            return KeyEvent(Key.ESC)

        if intro == ESC:
            # Two ESC presses in a row; keep the second for the next read
            self._pending = intro + self._pending
            return KeyEvent(Key.ESC)

        if intro not in ("[", "O"):
            # Alt+<key>
            return KeyEvent(Key.UNKNOWN, ESC + intro)

        params = ""
        while True:
            ch = self._read_char(self.escape_timeout)
            if ch is None:
                return KeyEvent(Key.UNKNOWN, ESC + intro + params)
            if "\x40" <= ch <= "\x7e":
                break
            params += ch

        if intro == "[" and not params and ch in ("I", "O"):
            return FocusEvent(gained=ch == "I")

        if ch == "~":
            key = _TILDE_KEYS.get(params)
        else:
            key = _FINAL_KEYS.get(ch)

        if key is None:
            return KeyEvent(Key.UNKNOWN, ESC + intro + params + ch)
        return KeyEvent(key)

    def _read_char(self, timeout: float | None = None) -> str | None:
        """Read one decoded character.

        Args:
            timeout: Seconds to wait for input, or None to block.

        Returns:
            The character, or None if the timeout expired first.
        """
        while not self._pending:
            if timeout is not None and not self._wait_readable(timeout):
                return None

            try:
                data = os.read(self.input_fd, 1)
            except (OSError, ValueError) as e:
                raise InputReadError(f"Failed to read event: {e}") from e

            if not data:
                raise InputReadError("Failed to read event: end of input")

            self._pending += self._decoder.decode(data)

        ch, self._pending = self._pending[0], self._pending[1:]
        return ch

    def _wait_readable(self, timeout: float) -> bool:
        try:
            ready, _, _ = select.select([self.input_fd], [], [], timeout)
        except (OSError, ValueError) as e:
            raise InputReadError(f"Failed to read event: {e}") from e
        return bool(ready)
