"""
TimelogFile: read and append access to the line-oriented timelog file.
"""
from typing import Iterable, List


class TimelogFile:
    """Raw access to a timelog file. No interpretation of the lines happens here."""

    def __init__(self, path: str, encoding: str = "utf-8"):
        """Initialize the TimelogFile.

        Args:
            path: Path of the timelog file
            encoding: Text encoding of the file
        """
        self.path = path
        self.encoding = encoding

    def read_lines(self) -> List[str]:
        """Read all lines of the file in file order.

        Returns:
            Lines without their trailing newline
            (undecodable bytes become U+FFFD)

        Raises:
            OSError: If the file cannot be opened or read
        """
        with open(self.path, "r", encoding=self.encoding, errors="replace") as f:
            return [line.rstrip("\r\n") for line in f]

    def read_lines_or_empty(self) -> List[str]:
        """Read all lines, treating a missing file as an empty log.

        Returns:
            Lines without their trailing newline
        """
        try:
            return self.read_lines()
        except FileNotFoundError:
            return []

    def append_line(self, text: str) -> None:
        """Append a single line, creating the file if absent.

        Args:
            text: Line text (without newline)

        Raises:
            OSError: If the file cannot be created or written
        """
        self.append_lines([text])

    def append_lines(self, texts: Iterable[str]) -> None:
        """Append several lines with one write call.

        Args:
            texts: Line texts (without newlines)

        Raises:
            OSError: If the file cannot be created or written
        """
        payload = "".join(f"{text}\n" for text in texts)
        if not payload:
            return
        with open(self.path, "a", encoding=self.encoding) as f:
            f.write(payload)
