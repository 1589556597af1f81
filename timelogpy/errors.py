"""Exception types raised by timelogPy operations."""


class TimelogError(Exception):
    """Base class for errors reported to the user."""


class StateError(TimelogError):
    """A clock action was attempted from the wrong clock state."""


class NotFoundError(TimelogError):
    """A requested project could not be found in the log."""


class MalformedLineError(TimelogError, ValueError):
    """A clock record whose timestamp cannot be parsed.

    Args:
        line_no: 1-based line number in the log file
        line: Raw line text
    """

    def __init__(self, line_no: int, line: str):
        super().__init__(f"line {line_no} invalid time: {line}")
        self.line_no = line_no
        self.line = line
