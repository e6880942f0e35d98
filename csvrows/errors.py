from __future__ import annotations

from typing import Optional


class CsvError(Exception):
    """Base class for everything the parser raises."""


class ConfigurationError(CsvError, ValueError):
    """Invalid parser options, raised before any input is read."""


class ParseError(CsvError):
    """Fatal problem with the input itself. The parse is aborted."""


class MalformedRowError(ParseError):
    def __init__(self, row: int, expected: int, actual: int):
        self.row = row
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Malformed CSV: column count {actual} != headers {expected} at row {row}"
        )


class UnclosedQuoteError(ParseError):
    def __init__(self):
        super().__init__("Malformed CSV: unclosed quoted field at EOF")


class EmptyInputError(ParseError):
    def __init__(self):
        super().__init__("Empty or header-less CSV: no data parsed")


class InvalidEncodingError(ParseError):
    """Input bytes are not valid UTF-8."""

    def __init__(self, offset: int, reason: str, detected: Optional[str] = None):
        self.offset = offset
        self.reason = reason
        self.detected = detected
        message = f"Invalid UTF-8 at byte {offset}: {reason}"
        if detected:
            message += f" (input looks like {detected})"
        super().__init__(message)


class ParserClosedError(CsvError, RuntimeError):
    """The parser was already finalized or aborted; parsers are single use."""
