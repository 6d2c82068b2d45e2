class PainterError(Exception):
    """Base class for errors reported back to the user without ending the session."""


class CommandError(PainterError):
    """A command line could not be understood or is not allowed here."""


class HistoryFileError(PainterError):
    """A history file could not be read or written."""


class ExportError(PainterError):
    """The canvas could not be exported as an image."""
