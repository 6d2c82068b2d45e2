"""Text rendering of the canvas with 24-bit ANSI background colours."""

from typing import Optional, TextIO

ESC = "\x1b"
FRAME_SEPARATOR = "----------"


def ansi_cell(r: int, g: int, b: int, char: str = " ") -> str:
    return f"{ESC}[48;2;{r};{g};{b}m{char}{ESC}[0m"


def render_frame(canvas) -> str:
    """Renders one frame: a separator line, then one text row per canvas row."""
    lines = [FRAME_SEPARATOR]
    for row in canvas.buffer.tolist():
        lines.append("".join(ansi_cell(r, g, b) for r, g, b, _ in row))
    return "\n".join(lines) + "\n"


class FrameDump:
    """Append-only file receiving a rendered frame after every command."""

    def __init__(self, path) -> None:
        self.path = path
        self._file: Optional[TextIO] = None

    def __enter__(self) -> "FrameDump":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def open(self) -> None:
        if self._file is None:
            self._file = open(self.path, "a", encoding="utf-8")

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def write(self, canvas) -> None:
        if self._file is None:
            raise RuntimeError("frame dump is not open")
        self._file.write(render_frame(canvas))
        self._file.flush()
