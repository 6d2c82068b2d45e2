import logging
from typing import Iterator, List

from errors import HistoryFileError

logger = logging.getLogger(__name__)


class History:
    """
    Ordered log of the command lines that changed the canvas.

    Entries are kept verbatim (without the trailing newline) in execution
    order. Apart from appending, the only mutation is dropping the newest
    entry, which is how undo works.
    """
    def __init__(self, entries=None):
        self._entries: List[str] = list(entries or [])

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    @property
    def entries(self) -> List[str]:
        return list(self._entries)

    def append(self, line: str) -> None:
        self._entries.append(line.rstrip("\r\n"))

    def pop(self) -> str:
        if not self._entries:
            raise IndexError("pop from empty history")
        return self._entries.pop()

    def save(self, path) -> None:
        """Writes one entry per line so the file can be replayed with ``load``."""
        try:
            with open(path, "w", encoding="utf-8") as f:
                for line in self._entries:
                    f.write(line + "\n")
        except OSError as e:
            raise HistoryFileError(f"cannot open {path}.") from e
        logger.debug("saved %d history entries to %s", len(self._entries), path)


def read_command_file(path) -> List[str]:
    """Returns the lines of a saved history file, newline-stripped."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            return [line.rstrip("\r\n") for line in f]
    except (OSError, UnicodeDecodeError) as e:
        raise HistoryFileError(f"cannot open {path}.") from e
