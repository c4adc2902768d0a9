"""Tests for frame rendering."""

import io

import pytest

from termdrop.errors import OutputFlushError
from termdrop.render import (
    CLEAR_SCREEN,
    DEFAULT_PROMPT,
    LEGEND,
    RESET,
    REVERSE_VIDEO,
    render_frame,
    viewport_bounds,
)


def render(options, cursor, size, **kwargs) -> list[str]:
    out = io.StringIO()
    render_frame(out, options, cursor, size, **kwargs)
    text = out.getvalue()
    assert text.startswith(CLEAR_SCREEN)
    return text[len(CLEAR_SCREEN):].split("\n")


def option_lines(lines: list[str]) -> list[str]:
    """The option rows: between the blank line after the status and the blank before the legend."""
    return lines[3:lines.index(LEGEND) - 1]


class TestViewportBounds:
    """Tests for the sliding window math."""

    def test_short_list_shows_everything(self):
        """All options fit, whatever the cursor."""
        for cursor in range(4):
            assert viewport_bounds(4, cursor, 10) == (0, 4)

    def test_exact_fit(self):
        assert viewport_bounds(5, 4, 5) == (0, 5)

    def test_centers_cursor(self):
        assert viewport_bounds(20, 10, 5) == (8, 13)

    def test_clamps_at_top(self):
        """Small cursors do not push the window below zero."""
        assert viewport_bounds(20, 0, 5) == (0, 5)
        assert viewport_bounds(20, 1, 5) == (0, 5)

    def test_clamps_at_bottom(self):
        assert viewport_bounds(20, 19, 5) == (15, 20)
        assert viewport_bounds(20, 18, 5) == (15, 20)

    def test_single_row_follows_cursor(self):
        for cursor in range(7):
            assert viewport_bounds(7, cursor, 1) == (cursor, cursor + 1)

    def test_even_viewport(self):
        assert viewport_bounds(10, 5, 4) == (3, 7)

    def test_window_always_contains_cursor(self):
        """Overflowing lists always show exactly `size` rows including the cursor."""
        for total in range(2, 25):
            for size in range(1, total):
                for cursor in range(total):
                    start, end = viewport_bounds(total, cursor, size)
                    assert end - start == size
                    assert 0 <= start <= total - size
                    assert start <= cursor < end


class TestRenderFrame:
    """Tests for the painted frame."""

    def test_frame_layout(self):
        lines = render(["a", "b", "c"], 0, 10)

        assert lines[0] == DEFAULT_PROMPT
        assert lines[1] == "Total: 3 | Showing: 1 - 3"
        assert lines[2] == ""
        assert lines[3] == f"{REVERSE_VIDEO}> a{RESET}"
        assert lines[4] == "  b"
        assert lines[5] == "  c"
        assert lines[6] == ""
        assert lines[7] == LEGEND
        assert lines[8] == ""

    def test_highlights_cursor_only(self):
        rows = option_lines(render(["a", "b", "c"], 1, 10))

        assert rows == ["  a", f"{REVERSE_VIDEO}> b{RESET}", "  c"]

    def test_overflow_window(self):
        options = [f"item{i:02d}" for i in range(20)]
        lines = render(options, 10, 5)
        rows = option_lines(lines)

        assert lines[1] == "Total: 20 | Showing: 9 - 13"
        assert rows == [
            "  item08",
            "  item09",
            f"{REVERSE_VIDEO}> item10{RESET}",
            "  item11",
            "  item12",
        ]

    @pytest.mark.parametrize("cursor", [0, 3, 6])
    def test_single_row_viewport(self, cursor):
        rows = option_lines(render(list("abcdefg"), cursor, 1))

        assert rows == [f"{REVERSE_VIDEO}> {'abcdefg'[cursor]}{RESET}"]

    def test_renders_non_string_options(self):
        rows = option_lines(render([10, 20], 1, 10))

        assert rows == ["  10", f"{REVERSE_VIDEO}> 20{RESET}"]

    def test_custom_prompt(self):
        lines = render(["a"], 0, 3, prompt="Pick a branch:")

        assert lines[0] == "Pick a branch:"

    def test_empty_options(self):
        lines = render([], 0, 5)

        assert lines[0] == "No options available."
        assert lines[1] == "Press ESC to exit."
        assert LEGEND not in lines

    def test_flush_failure_is_reported_and_not_fatal(self):
        class BrokenStream(io.StringIO):
            def flush(self):
                raise OSError("broken pipe")

        out = BrokenStream()
        errors: list[OutputFlushError] = []

        render_frame(out, ["a", "b"], 1, 5, on_flush_error=errors.append)

        assert errors
        assert all(isinstance(e, OutputFlushError) for e in errors)
        assert "broken pipe" in str(errors[0])
        assert f"{REVERSE_VIDEO}> b{RESET}" in out.getvalue()
