import pytest

from batt_tui.screen import BLANK, COLOR_PAIRS, CellStyle, ScreenBuffer, render_snapshot


def test_color_pairs_cover_basic_terminal_colors() -> None:
    assert set(COLOR_PAIRS) == {"black", "red", "green", "yellow", "blue", "magenta", "cyan", "white"}
    assert all(pair.background == "black" for pair in COLOR_PAIRS.values())


def test_put_ignores_cells_off_screen() -> None:
    screen = ScreenBuffer(3)
    assert screen.put(3, 0, "x") is False
    assert screen.put(-1, 0, "x") is False
    assert screen.put(0, -1, "x") is False
    assert screen.width == 0


def test_put_grows_rows_on_demand() -> None:
    screen = ScreenBuffer(2)
    assert screen.put(1, 4, "x")
    assert screen.width == 5
    assert screen.line(1) == "    x"
    assert screen.cell(0, 10) == BLANK


def test_write_paints_text_left_to_right() -> None:
    screen = ScreenBuffer(1)
    style = CellStyle(pair="cyan", bold=True)
    screen.write(0, 2, "Volts:", style)
    assert screen.line(0) == "  Volts:"
    assert screen.cell(0, 2).style == style


def test_snapshot_is_detached_from_later_paints() -> None:
    screen = ScreenBuffer(1)
    screen.write(0, 0, "ab")
    snapshot = screen.snapshot()
    screen.write(0, 0, "cd")

    assert "".join(cell.glyph for cell in snapshot[0]) == "ab"
    assert screen.line(0) == "cd"


def test_render_snapshot_merges_styled_runs() -> None:
    screen = ScreenBuffer(2)
    screen.write(0, 0, "V:", CellStyle(pair="cyan"))
    screen.write(1, 1, "   ", CellStyle(pair="white", reverse=True))
    text = render_snapshot(screen.snapshot())

    assert text.plain == "V:\n    "
    styled = [span for span in text.spans if span.style is not None]
    assert len(styled) == 2
    reverse_span = styled[1]
    assert text.plain[reverse_span.start : reverse_span.end] == "   "
    assert reverse_span.style.reverse is True
    assert reverse_span.style.bgcolor.name == "black"


def test_screen_height_must_be_positive() -> None:
    with pytest.raises(ValueError):
        ScreenBuffer(0)
