"""Exception types raised by the XML tree parser.

Transport and file failures abort a call before any tree is built. Lexical
errors only abort when the RAISE error policy is configured; otherwise they
are recorded as diagnostics and the build continues.
"""

from typing import Optional


class XMLTreeError(Exception):
    """Base exception for all parser failures."""


class TransportError(XMLTreeError):
    """Remote XML could not be fetched (network failure or non-2xx status)."""

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class FileReadError(XMLTreeError, OSError):
    """Local XML file could not be read.

    Subclasses ``OSError`` so callers catching ``IOError`` keep working.
    """

    def __init__(self, message: str, file_path: Optional[str] = None) -> None:
        super().__init__(message)
        self.file_path = file_path


class LexicalError(XMLTreeError):
    """The lexical source reported malformed XML."""

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None
    ) -> None:
        super().__init__(message)
        self.line = line
        self.column = column
