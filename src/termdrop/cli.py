"""CLI commands for termdrop."""

import sys
from pathlib import Path
from typing import TextIO

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from termdrop import __version__
from termdrop.config import load_config, save_config
from termdrop.errors import SessionError, WorkerFault
from termdrop.loop import Outcome, PickerText
from termdrop.session import launch
from termdrop.terminal import Terminal

app = typer.Typer(
    name="termdrop",
    help="Pick one item from a list with the arrow keys.",
    add_completion=False,
)

console = Console()

PICK_TEXT = PickerText(confirm="Selected: {item}", canceled="Selection canceled.")


def version_callback(value: bool):
    if value:
        console.print(f"[bold cyan]termdrop[/bold cyan] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
):
    """Pick one item from a list with the arrow keys."""
    pass


def open_terminal(output: TextIO | None = None) -> Terminal:
    """Open the controlling terminal for a picker session."""
    return Terminal(output=output)


def _interactive_terminal(output: TextIO | None = None) -> Terminal:
    terminal = open_terminal(output)

    if not terminal.is_interactive():
        console.print(
            Panel(
                "[red]Standard input is not a terminal[/red]\n\n"
                "termdrop needs an interactive terminal to read keys from.",
                title="Error",
                border_style="red",
            )
        )
        raise typer.Exit(1)

    return terminal


def _run_session(
    choices: dict,
    size: int | None,
    terminal: Terminal,
    text: PickerText | None = None,
) -> Outcome:
    """Launch a picker with the configured defaults and wait for it."""
    config = load_config()

    try:
        session = launch(
            choices,
            size or config.viewport_size,
            terminal=terminal,
            text=text,
            debounce=config.debounce_seconds,
        )
        return session.join()
    except WorkerFault as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)
    except SessionError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)


@app.command()
def pick(
    items: list[str] = typer.Argument(None, help="Items to choose from"),
    file: Path = typer.Option(
        None, "--file", "-f", help="Read items from a file, one per line"
    ),
    size: int = typer.Option(
        None, "--size", "-s", min=1, help="Number of visible items (default from config)"
    ),
):
    """Choose one item and print it to stdout.

    The menu is drawn on stderr so the result can be captured.
    """
    candidates = list(items or [])

    if file is not None:
        if not file.is_file():
            console.print(f"[red]File does not exist:[/red] {escape(str(file))}")
            raise typer.Exit(1)
        candidates.extend(
            line.strip() for line in file.read_text().splitlines() if line.strip()
        )

    if not candidates:
        console.print(
            Panel(
                "[yellow]No items to choose from[/yellow]\n\n"
                "Pass items as arguments or with [bold cyan]--file[/bold cyan].",
                title="Pick",
                border_style="yellow",
            )
        )
        raise typer.Exit(1)

    terminal = _interactive_terminal(sys.stderr)

    chosen: list[str] = []
    choices = {item: chosen.append for item in dict.fromkeys(candidates)}

    outcome = _run_session(choices, size, terminal, PICK_TEXT)

    if outcome is not Outcome.CONFIRMED or not chosen:
        raise typer.Exit(1)

    typer.echo(chosen[0])


@app.command()
def rm(
    paths: list[str] = typer.Argument(..., help="Files to choose from"),
    size: int = typer.Option(
        None, "--size", "-s", min=1, help="Number of visible items (default from config)"
    ),
):
    """Choose one of the given files and delete it."""
    files: list[Path] = []

    for raw in paths:
        path = Path(raw)
        if not path.exists():
            console.print(f"[red]Path does not exist:[/red] {escape(raw)}")
            raise typer.Exit(1)
        if path.is_dir():
            console.print(f"[red]Refusing to delete a directory:[/red] {escape(raw)}")
            raise typer.Exit(1)
        files.append(path)

    terminal = _interactive_terminal()

    deleted: list[Path] = []

    def delete(path: Path):
        path.unlink()
        deleted.append(path)

    choices = {path: delete for path in dict.fromkeys(files)}

    outcome = _run_session(choices, size, terminal)

    if outcome is not Outcome.CONFIRMED or not deleted:
        raise typer.Exit(1)

    console.print(
        f"[bold green]✓[/bold green] Deleted [cyan]{escape(str(deleted[0]))}[/cyan]"
    )


@app.command("config")
def config_command(
    size: int = typer.Option(
        None, "--size", "-s", min=1, help="Default number of visible items"
    ),
    debounce_ms: int = typer.Option(
        None, "--debounce-ms", min=1, help="Milliseconds to ignore keys after a handled key"
    ),
):
    """Show or update the saved defaults."""
    config = load_config()

    if size is None and debounce_ms is None:
        table = Table(show_header=False, box=None, padding=(0, 2))
        table.add_column("Key", style="dim")
        table.add_column("Value", style="bold")

        table.add_row("Viewport size", str(config.viewport_size))
        table.add_row("Debounce", f"{config.debounce_ms} ms")

        console.print(
            Panel(
                table,
                title="[bold cyan]termdrop defaults[/bold cyan]",
                border_style="cyan",
            )
        )
        return

    if size is not None:
        config.viewport_size = size
    if debounce_ms is not None:
        config.debounce_ms = debounce_ms

    save_config(config)
    console.print("[bold green]✓[/bold green] Saved defaults")


if __name__ == "__main__":
    app()
