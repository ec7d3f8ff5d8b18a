"""Custom exceptions for Libris application."""


class LibrisError(Exception):
    """Base exception for all Libris errors."""

    pass


class OnixParseError(LibrisError):
    """Exception raised when a file cannot be interpreted as an ONIX message."""

    def __init__(self, message: str, source: str | None = None) -> None:
        super().__init__(message)
        self.source = source


class ImportDirectoryError(LibrisError):
    """Exception raised when the incoming directory cannot be listed."""

    pass

