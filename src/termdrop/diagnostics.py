"""Diagnostic stream for errors the worker cannot return to its caller."""

from rich.console import Console
from rich.markup import escape

err_console = Console(stderr=True, highlight=False)


def report_error(error: Exception, console: Console | None = None) -> None:
    """Print a one-line, human-readable diagnostic.

    Args:
        error: The error to report.
        console: Console to print to. Defaults to stderr.
    """
    if console is None:
        console = err_console

    console.print(f"[bold red]error:[/bold red] {escape(str(error))}")
