"""Error type raised by every section processor."""

from __future__ import annotations

from enum import Enum, auto


class ErrorKind(Enum):
    STRUCTURAL_COUNT = auto()
    PUNCTUATION_MISSING = auto()
    PUNCTUATION_EXTRANEOUS = auto()
    QUOTE_VIOLATION = auto()
    BRACE_MISMATCH = auto()
    IDENTIFIER_INVALID = auto()
    TOKEN_COUNT_MISMATCH = auto()
    EMPTY_BODY = auto()


class ParseError(Exception):
    """Raised on the first well-formedness violation found in a .proto file."""

    def __init__(self, message: str, kind: ErrorKind, fragment: str = ""):
        self.kind = kind
        self.fragment = fragment
        if fragment:
            super().__init__(f"{message}: {fragment}")
        else:
            super().__init__(message)
