"""The interaction loop a picker session runs on its worker thread."""

import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, MutableMapping

from rich.console import Console

from termdrop.diagnostics import report_error
from termdrop.errors import InputReadError, OutputFlushError, TerminalModeError
from termdrop.render import DEFAULT_PROMPT, render_frame
from termdrop.terminal import Key, KeyEvent, TerminalDriver

DEBOUNCE_SECONDS = 0.3

_HANDLED_KEYS = frozenset({Key.UP, Key.DOWN, Key.ENTER, Key.ESC})


class Phase(Enum):
    """Where the loop is in its lifecycle."""

    UNINITIALIZED = "uninitialized"
    RAW_ACQUIRED = "raw-acquired"
    RUNNING = "running"
    DISPATCHING = "dispatching"
    TERMINATING = "terminating"
    RELEASED = "released"


class Outcome(Enum):
    """How a session ended."""

    CONFIRMED = "confirmed"
    CANCELED = "canceled"
    EMPTY = "empty"
    ABORTED = "aborted"


@dataclass(frozen=True)
class PickerText:
    """User-visible wording.

    ``confirm`` is formatted with the selected item as ``{item}``.
    """

    prompt: str = DEFAULT_PROMPT
    confirm: str = "Confirm delete: {item}"
    canceled: str = "Delete canceled."
    empty: str = "No options available."


class InteractionLoop:
    """Drives the menu until the user confirms, cancels, or input fails."""

    def __init__(
        self,
        choices: MutableMapping[Any, Callable[[Any], Any]],
        lock: threading.Lock,
        terminal: TerminalDriver,
        viewport_size: int,
        text: PickerText | None = None,
        debounce: float = DEBOUNCE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        err_console: Console | None = None,
    ):
        """Initialize the loop.

        Args:
            choices: Items mapped to one-shot actions. Shared with the caller.
            lock: Guards every access to ``choices``.
            terminal: Terminal to take over.
            viewport_size: Maximum number of items visible at once.
            text: Wording for prompts and messages.
            debounce: Seconds after an acted-upon key during which keys are dropped.
            clock: Monotonic time source in seconds.
            err_console: Where diagnostics go. Defaults to stderr.
        """
        self.choices = choices
        self.lock = lock
        self.terminal = terminal
        self.viewport_size = viewport_size
        self.text = text or PickerText()
        self.debounce = debounce
        self.clock = clock
        self.err_console = err_console

        self.phase = Phase.UNINITIALIZED
        self.options: list = []
        self.cursor = 0
        self.last_event_time = 0.0

        self.console = Console(
            file=terminal.output,
            markup=False,
            emoji=False,
            highlight=False,
            soft_wrap=True,
        )

    def _report(self, error: Exception):
        report_error(error, self.err_console)

    def _say(self, message: str):
        """Print a message on a fresh line; output failures are reported, not raised."""
        try:
            self.console.print("\n" + message)
        except (OSError, ValueError) as e:
            self._report(OutputFlushError(f"Failed to write to stdout: {e}"))

    def _render(self):
        render_frame(
            self.terminal.output,
            self.options,
            self.cursor,
            self.viewport_size,
            prompt=self.text.prompt,
            on_flush_error=self._report,
        )

    def run(self) -> Outcome:
        """Run the loop to completion.

        Raw mode, once enabled, is disabled again on every way out, including
        exceptions raised by the dispatched action.
        """
        with self.lock:
            self.options = list(self.choices)

        if not self.options:
            self._say(self.text.empty)
            self.phase = Phase.TERMINATING
            return Outcome.EMPTY

        try:
            self.terminal.enable_raw_mode()
        except TerminalModeError as e:
            self._report(e)
            self.phase = Phase.TERMINATING
            return Outcome.ABORTED

        self.phase = Phase.RAW_ACQUIRED
        try:
            return self._interact()
        finally:
            self.phase = Phase.TERMINATING
            try:
                self.terminal.disable_raw_mode()
            except TerminalModeError as e:
                self._report(e)
            self.phase = Phase.RELEASED

    def _interact(self) -> Outcome:
        self.cursor = 0
        self.phase = Phase.RUNNING
        self._render()
        self.last_event_time = self.clock()

        while True:
            try:
                event = self.terminal.read_event()
            except InputReadError as e:
                self._report(e)
                return Outcome.ABORTED

            if not isinstance(event, KeyEvent) or event.key not in _HANDLED_KEYS:
                continue

            now = self.clock()
            if now - self.last_event_time < self.debounce:
                continue
            self.last_event_time = now

            if event.key is Key.UP:
                self.cursor = (self.cursor - 1) % len(self.options)
                self._render()
            elif event.key is Key.DOWN:
                self.cursor = (self.cursor + 1) % len(self.options)
                self._render()
            elif event.key is Key.ENTER:
                self._dispatch(self.options[self.cursor])
                return Outcome.CONFIRMED
            elif event.key is Key.ESC:
                self._say(self.text.canceled)
                return Outcome.CANCELED

    def _dispatch(self, item):
        """Take the item's action out of the table, then call it."""
        self.phase = Phase.DISPATCHING
        self._say(self.text.confirm.format(item=item))

        with self.lock:
            action = self.choices.pop(item, None)

        if action is not None:
            action(item)
