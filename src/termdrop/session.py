"""Picker sessions: run a picker on a background thread and join it later."""

import threading
import time
from typing import Any, Callable, MutableMapping

from rich.console import Console

from termdrop.errors import SessionError, WorkerFault
from termdrop.loop import DEBOUNCE_SECONDS, InteractionLoop, Outcome, Phase, PickerText
from termdrop.terminal import Terminal, TerminalDriver

# Raw mode is process-wide, so only one session may own the terminal at a time
_active_session = threading.Lock()


class PickerSession:
    """One run of the picker, from launch to worker exit."""

    def __init__(
        self,
        choices: MutableMapping[Any, Callable[[Any], Any]],
        viewport_size: int,
        terminal: TerminalDriver | None = None,
        text: PickerText | None = None,
        debounce: float = DEBOUNCE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        err_console: Console | None = None,
    ):
        if viewport_size < 1:
            raise ValueError(f"viewport_size must be at least 1, got {viewport_size}")

        self.choices = choices
        self.viewport_size = viewport_size
        self.lock = threading.Lock()

        self._loop = InteractionLoop(
            choices,
            self.lock,
            terminal if terminal is not None else Terminal(),
            viewport_size,
            text=text,
            debounce=debounce,
            clock=clock,
            err_console=err_console,
        )
        self._outcome: Outcome | None = None
        self._error: BaseException | None = None
        self._started = False
        self._joined = False
        self._thread = threading.Thread(
            target=self._work,
            name="termdrop-picker",
            daemon=True,
        )

    @property
    def phase(self) -> Phase:
        """Current lifecycle phase of the worker."""
        return self._loop.phase

    @property
    def running(self) -> bool:
        """Whether the worker is still alive."""
        return self._thread.is_alive()

    def start(self) -> None:
        """Spawn the worker.

        Raises:
            SessionError: If another session is still active.
        """
        if not _active_session.acquire(blocking=False):
            raise SessionError("Another picker session is already active")

        try:
            self._thread.start()
            self._started = True
        except BaseException:
            _active_session.release()
            raise

    def _work(self):
        try:
            self._outcome = self._loop.run()
        except BaseException as e:
            self._error = e
        finally:
            _active_session.release()

    def join(self, timeout: float | None = None) -> Outcome:
        """Wait for the worker to finish.

        Any action the worker dispatched has completed when this returns.

        Args:
            timeout: Seconds to wait, or None to wait indefinitely.

        Returns:
            How the session ended.

        Raises:
            SessionError: If the session was already joined or never started.
            TimeoutError: If the worker is still running after ``timeout``.
            WorkerFault: If the worker died with an unexpected exception.
        """
        if self._joined:
            raise SessionError("Picker session was already joined")
        if not self._started:
            raise SessionError("Picker session was never started")

        self._thread.join(timeout)
        if self._thread.is_alive():
            raise TimeoutError("Picker session is still running")

        self._joined = True
        if self._error is not None:
            raise WorkerFault(f"Picker worker failed: {self._error}") from self._error
        if self._outcome is None:
            raise WorkerFault("Picker worker exited without an outcome")
        return self._outcome


def launch(
    choices: MutableMapping[Any, Callable[[Any], Any]],
    viewport_size: int,
    *,
    terminal: TerminalDriver | None = None,
    text: PickerText | None = None,
    debounce: float = DEBOUNCE_SECONDS,
    clock: Callable[[], float] = time.monotonic,
    err_console: Console | None = None,
) -> PickerSession:
    """Start a picker in the background and return its session.

    The session takes ownership of ``choices``: the confirmed item's action is
    removed from it before being called, so the mapping must not be reused.

    Args:
        choices: Items mapped to one-shot actions called with their item.
        viewport_size: Maximum number of items visible at once (>= 1).
        terminal: Terminal to take over. Defaults to stdin/stdout.
        text: Wording for prompts and messages.
        debounce: Seconds after an acted-upon key during which keys are dropped.
        clock: Monotonic time source in seconds.
        err_console: Where diagnostics go. Defaults to stderr.

    Returns:
        A running PickerSession; call join() on it exactly once.
    """
    session = PickerSession(
        choices,
        viewport_size,
        terminal=terminal,
        text=text,
        debounce=debounce,
        clock=clock,
        err_console=err_console,
    )
    session.start()
    return session
