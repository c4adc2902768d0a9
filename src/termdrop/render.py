"""Frame rendering for the picker menu.

A frame is the whole screen: it is cleared, then the prompt, a status line,
the visible window of options and a key legend are written top to bottom.
"""

from typing import Callable, Sequence, TextIO

from termdrop.errors import OutputFlushError

CLEAR_SCREEN = "\x1b[2J\x1b[1;1H"
REVERSE_VIDEO = "\x1b[7m"
RESET = "\x1b[0m"

DEFAULT_PROMPT = "Please select (ESC to cancel):"
LEGEND = "↑: Up | ↓: Down | Enter: Confirm | ESC: Cancel"


def viewport_bounds(total: int, cursor: int, size: int) -> tuple[int, int]:
    """Compute the half-open window of option indexes to show.

    The cursor is centered when possible; near either end the window is
    clamped so it always holds exactly ``size`` rows when the options overflow.

    Args:
        total: Number of options.
        cursor: Highlighted index.
        size: Maximum number of visible rows.

    Returns:
        (start, end) indexes, end exclusive.
    """
    if total <= size:
        return 0, total

    start = min(max(cursor - size // 2, 0), total - size)
    return start, start + size


def _flush(out: TextIO, on_flush_error: Callable[[OutputFlushError], None] | None):
    try:
        out.flush()
    except (OSError, ValueError) as e:
        if on_flush_error is not None:
            on_flush_error(OutputFlushError(f"Failed to flush stdout: {e}"))


def render_frame(
    out: TextIO,
    options: Sequence,
    cursor: int,
    viewport_size: int,
    prompt: str = DEFAULT_PROMPT,
    on_flush_error: Callable[[OutputFlushError], None] | None = None,
) -> None:
    """Clear the screen and paint one frame of the menu.

    Args:
        out: Stream to write to.
        options: All options in display order.
        cursor: Index of the highlighted option.
        viewport_size: Maximum number of options shown at once.
        prompt: First line of the frame.
        on_flush_error: Called when flushing fails; rendering carries on.
    """
    out.write(CLEAR_SCREEN)
    _flush(out, on_flush_error)

    if not options:
        out.write("No options available.\nPress ESC to exit.\n")
        _flush(out, on_flush_error)
        return

    total = len(options)
    start, end = viewport_bounds(total, cursor, viewport_size)

    lines = [prompt, f"Total: {total} | Showing: {start + 1} - {end}", ""]
    for i in range(start, end):
        if i == cursor:
            lines.append(f"{REVERSE_VIDEO}> {options[i]}{RESET}")
        else:
            lines.append(f"  {options[i]}")
    lines.extend(["", LEGEND])

    out.write("\n".join(lines) + "\n")
    _flush(out, on_flush_error)
