"""Test the command pipeline: dispatch, status codes, undo by replay, save/load.

Test cases:
    - status codes and history recording per command
    - malformed input is reported and skipped
    - undo restores the exact previous canvas and draw colour
    - save then load on a fresh session reproduces the canvas
    - load recording, recursion guard and undo of a whole load
    - BMP export through the command pipeline

Run:
    pytest tests/test_session.py -v
"""
import io

import numpy as np
import pytest

from color import WHITE, Pixel
from session import PainterConfig, Session, Status

RED = Pixel(255, 0, 0, 255)


def run(session, *lines):
    return [session.execute(line) for line in lines]


# --- Dispatch and status ---

@pytest.mark.parametrize("line", [
    "point 1 1", "line 0 0 9 9", "rect 1 1 5 5", "circle 5 5 3", "fill 0 0",
    "grayscale", "gradient 45 #000000 #FFFFFF", "color #00FF00", "clear",
])
def test_drawing_commands_are_recorded(session, line):
    assert session.execute(line + "\n") == Status.NORMAL
    assert session.history.entries == [line]


@pytest.mark.parametrize("line", ["quit", "exit", "quit now"])
def test_quit(session, line):
    assert session.execute(line) == Status.QUIT
    assert len(session.history) == 0


def test_blank_line_is_ignored(session):
    assert session.execute("   \n") == Status.UNRECORDED
    assert session.err.getvalue() == ""


@pytest.mark.parametrize("line, message", [
    ("paint 1 1", "unknown command: paint"),
    ("point 1", "point expects 2 arguments, got 1"),
    ("line 0 0 a 1", "line: arguments must be integers"),
    ("color red", "invalid color code"),
    ("gradient 45 #000000", "gradient expects 3 arguments"),
    ("grayscale 1", "grayscale expects 0 arguments"),
    ("export", "lack of filename"),
    ("load", "lack of filename"),
])
def test_bad_input_reported_not_recorded(session, line, message):
    assert session.execute(line) == Status.UNRECORDED
    assert message in session.err.getvalue()
    assert session.err.getvalue().startswith("error: ")
    assert len(session.history) == 0
    assert not session.canvas.buffer.any()


def test_overlay_empty_after_every_command(session):
    for line in ["rect 0 0 5 5", "gradient 10 #FF0000 #0000FF80", "fill 2 2", "bogus"]:
        session.execute(line)
        assert not session.canvas.overlay.any()


def test_default_colour_is_opaque_white(session):
    session.execute("point 3 4")
    assert session.canvas.pixel(3, 4) == WHITE


def test_rect_then_fill_gives_solid_square(session):
    run(session, "rect 0 0 5 5", "fill 2 2")
    alpha = session.canvas.buffer[..., 3]
    assert (alpha[:6, :6] == 255).all()
    assert not alpha[6:, :].any()
    assert not alpha[:, 6:].any()


def test_clear_keeps_colour(session):
    run(session, "color #FF0000", "point 1 1", "clear", "point 2 2")
    assert session.canvas.pixel(1, 1) == Pixel(0, 0, 0, 0)
    assert session.canvas.pixel(2, 2) == RED


# --- Undo ---

def test_undo_restores_each_previous_state(session):
    lines = [
        "color #FF000080", "rect 1 1 8 8", "fill 4 4", "color #00FF00",
        "circle 5 5 3", "gradient 200 #00000000 #0000FF80", "grayscale",
        "line 0 9 9 0", "clear", "point 0 0",
    ]
    snapshots = []
    colours = []
    for line in lines:
        snapshots.append(session.canvas.buffer.copy())
        colours.append(session.color)
        assert session.execute(line) == Status.NORMAL

    for before, colour in zip(reversed(snapshots), reversed(colours)):
        assert session.execute("undo") == Status.UNRECORDED
        assert np.array_equal(session.canvas.buffer, before)
        assert session.color == colour
    assert len(session.history) == 0


def test_undo_is_not_recorded(session):
    run(session, "point 1 1", "point 2 2", "undo")
    assert session.history.entries == ["point 1 1"]


def test_undo_empty_history_reported(session):
    assert session.execute("undo") == Status.UNRECORDED
    assert "nothing to undo" in session.err.getvalue()


def test_undo_restores_draw_colour(session):
    run(session, "color #FF0000", "color #00FF00", "undo", "point 1 1")
    assert session.canvas.pixel(1, 1) == RED


# --- Save / load ---

def test_save_load_round_trip(session, tmp_path):
    path = tmp_path / "drawing.txt"
    run(session, "color #3366CC", "rect 0 0 6 4", "fill 2 2", "undo",
        "circle 5 5 4", "gradient -30 #FF000040 #00FF0040", "grayscale")
    assert session.execute(f"save {path}") == Status.UNRECORDED
    assert f'saved as "{path}"' in session.out.getvalue()

    fresh = Session(session.config, out=io.StringIO(), err=io.StringIO())
    assert fresh.execute(f"load {path}") == Status.NORMAL
    assert np.array_equal(fresh.canvas.buffer, session.canvas.buffer)
    assert fresh.color == session.color
    assert fresh.history.entries == [f"load {path}"]


def test_save_without_path_uses_default(session):
    session.execute("point 1 1")
    session.execute("save")
    with open(session.config.history_file, encoding="utf-8") as f:
        assert f.read() == "point 1 1\n"


def test_load_missing_file_not_recorded(session, tmp_path):
    assert session.execute(f"load {tmp_path / 'absent.txt'}") == Status.UNRECORDED
    assert "cannot open" in session.err.getvalue()
    assert len(session.history) == 0


def test_load_skips_bad_lines(session, tmp_path):
    path = tmp_path / "script.txt"
    path.write_text("point 1 1\nfrobnicate\n\npoint 2 2\n", encoding="utf-8")
    assert session.execute(f"load {path}") == Status.NORMAL
    assert session.canvas.pixel(1, 1) == WHITE
    assert session.canvas.pixel(2, 2) == WHITE
    assert "unknown command: frobnicate" in session.err.getvalue()


def test_load_refuses_recursion(session, tmp_path):
    path = tmp_path / "loop.txt"
    path.write_text(f"point 1 1\nload {path}\n", encoding="utf-8")
    assert session.execute(f"load {path}") == Status.NORMAL
    assert "already being loaded" in session.err.getvalue()
    assert session.canvas.pixel(1, 1) == WHITE


def test_undo_inside_loaded_file_rejected(session, tmp_path):
    path = tmp_path / "script.txt"
    path.write_text("point 1 1\nundo\nquit\n", encoding="utf-8")
    run(session, "point 5 5", f"load {path}")
    err = session.err.getvalue()
    assert "undo is not allowed" in err
    assert "quit is not allowed" in err
    assert session.canvas.pixel(5, 5) == WHITE
    assert len(session.history) == 2


def test_undo_takes_back_whole_load(session, tmp_path):
    path = tmp_path / "script.txt"
    path.write_text("point 1 1\npoint 2 2\n", encoding="utf-8")
    run(session, "point 5 5", f"load {path}", "undo")
    assert session.canvas.pixel(1, 1) == Pixel(0, 0, 0, 0)
    assert session.canvas.pixel(5, 5) == WHITE
    assert session.history.entries == ["point 5 5"]


# --- Export ---

def test_export_red_point(tmp_path):
    session = Session(PainterConfig(), out=io.StringIO(), err=io.StringIO())
    path = tmp_path / "out.bmp"
    run(session, "color #FF0000", "point 1 1")
    assert session.execute(f"export {path}") == Status.UNRECORDED
    assert f'exported as "{path}"' in session.out.getvalue()

    data = path.read_bytes()
    width, height = session.config.width, session.config.height
    stride = (width * 3 + 3) & ~3
    row = height - 1 - 1
    offset = 54 + row * stride + 1 * 3
    assert data[offset:offset + 3] == b"\x00\x00\xff"
    assert len(data) == 54 + stride * height


def test_export_failure_reported(session, tmp_path):
    assert session.execute(f"export {tmp_path / 'missing' / 'x.bmp'}") == Status.UNRECORDED
    assert "cannot open" in session.err.getvalue()
