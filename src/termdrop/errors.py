"""Exceptions raised by termdrop.

- TermdropError: Base exception for all termdrop errors
- TerminalModeError: Enabling or disabling raw mode failed
- InputReadError: Reading a terminal event failed
- OutputFlushError: Flushing the output stream failed mid-render
- WorkerFault: The picker worker terminated abnormally
- SessionError: A session was misused (joined twice, launched concurrently)
"""


class TermdropError(Exception):
    """Base exception for all termdrop errors."""

    pass


class TerminalModeError(TermdropError):
    """Raw mode could not be toggled."""

    pass


class InputReadError(TermdropError):
    """A terminal event could not be read."""

    pass


class OutputFlushError(TermdropError):
    """Standard output could not be flushed."""

    pass


class WorkerFault(TermdropError):
    """The worker thread died with an unexpected exception.

    The original exception is available as ``__cause__``.
    """

    pass


class SessionError(TermdropError):
    """A picker session was used in a way it does not support."""

    pass
