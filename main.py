import argparse
import logging
import sys
from typing import List, Optional, TextIO

from errors import PainterError
from logging_config import setup_logging
from render import FrameDump
from session import PainterConfig, Session, Status

logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    n = int(value)
    if n <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {value}")
    return n


def build_parser() -> argparse.ArgumentParser:
    defaults = PainterConfig()
    parser = argparse.ArgumentParser(description="Command-driven raster painter")
    parser.add_argument("--width", type=_positive_int, default=defaults.width,
                        help="canvas width in pixels")
    parser.add_argument("--height", type=_positive_int, default=defaults.height,
                        help="canvas height in pixels")
    parser.add_argument("--frames", default=defaults.frame_file,
                        help="file receiving a rendered frame after every command")
    parser.add_argument("--history", default=defaults.history_file,
                        help="default file for 'save' without a path")
    parser.add_argument("--log-level", default="WARNING",
                        help="DEBUG, INFO, WARNING or ERROR")
    parser.add_argument("--log-file", default=None, help="also write logs to this file")
    parser.add_argument("--view", metavar="FILE", default=None,
                        help="replay a saved history file and show it in the terminal")
    return parser


def repl(session: Session, frames: FrameDump,
         stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None) -> None:
    """Reads commands until quit or end of input, dumping a frame after each one."""
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    frames.write(session.canvas)
    while True:
        stdout.write(f"{len(session.history)} > ")
        stdout.flush()
        line = stdin.readline()
        if not line:
            break
        if session.execute(line) == Status.QUIT:
            break
        frames.write(session.canvas)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, log_file=args.log_file)
    config = PainterConfig(
        width=args.width,
        height=args.height,
        frame_file=args.frames,
        history_file=args.history,
    )
    session = Session(config)

    if args.view:
        # asciimatics is only loaded for the viewer
        from ui import view
        try:
            session.load(args.view)
        except PainterError as e:
            print(f"error: {e}", file=sys.stderr)
            return 1
        view(session.canvas)
        return 0

    frames = FrameDump(config.frame_file)
    try:
        frames.open()
    except OSError:
        print(f"error: cannot open {config.frame_file}.", file=sys.stderr)
        return 1
    with frames:
        repl(session, frames)
    logger.debug("session ended with %d history entries", len(session.history))
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
