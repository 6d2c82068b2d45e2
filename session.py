"""Command pipeline: owns the canvas, draw colour and history of one painting session."""

import logging
import os
import sys
from dataclasses import dataclass
from enum import IntEnum
from typing import List, Optional, TextIO, Tuple

from bitmap import export_bmp
from canvas import CIRCLE_SEGMENTS, Canvas
from color import Pixel, format_color_code, parse_color_code
from errors import CommandError, PainterError
from history import History, read_command_file

logger = logging.getLogger(__name__)


@dataclass
class PainterConfig:
    width: int = 70
    height: int = 40
    frame_file: str = "canvas.txt"
    history_file: str = "history.txt"
    draw_color: Tuple[int, int, int, int] = (255, 255, 255, 255)
    circle_segments: int = CIRCLE_SEGMENTS


class Status(IntEnum):
    NORMAL = 0  # applied and recorded in the history
    UNRECORDED = 1  # handled (or rejected) but not recorded
    QUIT = 2


class Session:
    """
    One painting session.

    ``execute`` takes a raw command line, runs it against the canvas, commits
    the overlay exactly once and records the line when it returns
    ``Status.NORMAL``. Undo never reverses an operation directly: it replays
    every remaining history entry into a fresh canvas and swaps that in.
    """
    def __init__(
        self,
        config: Optional[PainterConfig] = None,
        out: Optional[TextIO] = None,
        err: Optional[TextIO] = None,
    ) -> None:
        self.config = config or PainterConfig()
        self.out = out if out is not None else sys.stdout
        self.err = err if err is not None else sys.stderr
        self.canvas = Canvas(self.config.width, self.config.height, self.config.circle_segments)
        self.color = Pixel(*self.config.draw_color)
        self.history = History()
        self._loading: List[str] = []

    def execute(self, line: str, record: bool = True) -> Status:
        text = line.rstrip("\r\n")
        try:
            status = self._dispatch(text)
        except PainterError as e:
            print(f"error: {e}", file=self.err)
            logger.info("rejected %r: %s", text, e)
            status = Status.UNRECORDED
        finally:
            self.canvas.commit()
        if record and status == Status.NORMAL:
            self.history.append(text)
        return status

    def _dispatch(self, text: str) -> Status:
        tokens = text.split()
        if not tokens:
            return Status.UNRECORDED
        name, args = tokens[0], tokens[1:]
        if name in ("quit", "exit"):
            if self._loading:
                raise CommandError(f"{name} is not allowed in a loaded file")
            return Status.QUIT
        method = getattr(self, f"_do_{name}", None)
        if method is None:
            raise CommandError(f"unknown command: {name}")
        logger.debug("execute %r", text)
        return method(args)

    # --- Argument helpers ---

    @staticmethod
    def _ints(name: str, args: List[str], count: int) -> List[int]:
        if len(args) != count:
            raise CommandError(f"{name} expects {count} arguments, got {len(args)}")
        try:
            return [int(a) for a in args]
        except ValueError:
            raise CommandError(f"{name}: arguments must be integers") from None

    @staticmethod
    def _color(code: str) -> Pixel:
        try:
            return parse_color_code(code)
        except ValueError as e:
            raise CommandError(str(e)) from None

    # --- Shapes ---

    def _do_point(self, args):
        x, y = self._ints("point", args, 2)
        self.canvas.draw_point(x, y, self.color)
        return Status.NORMAL

    def _do_line(self, args):
        x0, y0, x1, y1 = self._ints("line", args, 4)
        self.canvas.draw_line(x0, y0, x1, y1, self.color)
        return Status.NORMAL

    def _do_rect(self, args):
        x0, y0, x1, y1 = self._ints("rect", args, 4)
        self.canvas.draw_rect(x0, y0, x1, y1, self.color)
        return Status.NORMAL

    def _do_circle(self, args):
        cx, cy, radius = self._ints("circle", args, 3)
        self.canvas.draw_circle(cx, cy, radius, self.color)
        return Status.NORMAL

    # --- Effects ---

    def _do_fill(self, args):
        x, y = self._ints("fill", args, 2)
        self.canvas.fill(x, y, self.color)
        return Status.NORMAL

    def _do_grayscale(self, args):
        self._ints("grayscale", args, 0)
        self.canvas.grayscale()
        return Status.NORMAL

    def _do_gradient(self, args):
        if len(args) != 3:
            raise CommandError(f"gradient expects 3 arguments, got {len(args)}")
        (degree,) = self._ints("gradient", args[:1], 1)
        color_a = self._color(args[1])
        color_b = self._color(args[2])
        self.canvas.gradient(degree, color_a, color_b)
        return Status.NORMAL

    # --- State ---

    def _do_color(self, args):
        if len(args) != 1:
            raise CommandError(f"color expects 1 argument, got {len(args)}")
        self.color = self._color(args[0])
        logger.debug("draw colour set to %s", format_color_code(self.color))
        return Status.NORMAL

    def _do_clear(self, args):
        self._ints("clear", args, 0)
        self.canvas.clear()
        return Status.NORMAL

    def _do_undo(self, args):
        self._ints("undo", args, 0)
        self.undo()
        return Status.UNRECORDED

    # --- Files ---

    def _do_load(self, args):
        if not args:
            raise CommandError("lack of filename")
        self.load(args[0])
        return Status.NORMAL

    def _do_save(self, args):
        path = args[0] if args else self.config.history_file
        self.history.save(path)
        print(f'saved as "{path}"', file=self.out)
        return Status.UNRECORDED

    def _do_export(self, args):
        if not args:
            raise CommandError("lack of filename")
        export_bmp(self.canvas, args[0])
        print(f'exported as "{args[0]}"', file=self.out)
        return Status.UNRECORDED

    # --- Operations shared with the CLI ---

    def load(self, path: str) -> None:
        """
        Executes every line of a saved history file.

        The lines run through the normal pipeline, each committed on its own,
        but are not recorded: the caller records the ``load`` command itself,
        so one undo takes back the whole file.
        """
        key = os.path.abspath(path)
        if key in self._loading:
            raise CommandError(f"{path} is already being loaded")
        lines = read_command_file(path)
        self._loading.append(key)
        try:
            for line in lines:
                self.execute(line, record=False)
        finally:
            self._loading.pop()
        logger.debug("loaded %d lines from %s", len(lines), path)

    def undo(self) -> None:
        """Drops the newest history entry and rebuilds the canvas from the rest."""
        if self._loading:
            raise CommandError("undo is not allowed in a loaded file")
        if not len(self.history):
            raise CommandError("nothing to undo")
        remaining = self.history.entries[:-1]
        replay = Session(self.config, out=self.out, err=self.err)
        for line in remaining:
            replay.execute(line)
        self.canvas = replay.canvas
        self.color = replay.color
        self.history.pop()
        logger.debug("undo replayed %d entries", len(remaining))
