"""
Error types raised while reading SLEEP files.

Every failure surfaces as a subclass of SleepError. Where a failure maps onto
a built-in category (bad value, bad index, unsupported operation) the class
also derives from the matching built-in exception so generic handlers still
catch it.
"""

from typing import Optional

__all__ = [
    "SleepError",
    "SleepIOError",
    "TruncatedFileError",
    "HeaderError",
    "IncorrectFormatError",
    "IncorrectFileTypeError",
    "InvalidVersionError",
    "HeaderParseError",
    "SignatureDecodeError",
    "TypeMismatchError",
    "RecordIndexError",
    "UnimplementedViewError",
]


class SleepError(Exception):
    """Base class for every error raised by datsleep."""


# ==============================================================================
# I/O ERRORS
# ==============================================================================

class SleepIOError(SleepError, OSError):
    """The underlying read failed."""


class TruncatedFileError(SleepIOError):
    """The stream ended before the fixed 32-byte header was complete."""


# ==============================================================================
# HEADER ERRORS
# ==============================================================================

class HeaderError(SleepError, ValueError):
    """Base class for header decode failures."""


class IncorrectFormatError(HeaderError):
    """The magic prefix does not match."""


class IncorrectFileTypeError(HeaderError):
    """The record kind byte is outside the known set."""


class InvalidVersionError(HeaderError):
    """The format version byte is not recognized."""


class HeaderParseError(HeaderError):
    """A header field (algorithm name, padding) could not be decoded."""


# ==============================================================================
# VIEW ERRORS
# ==============================================================================

class SignatureDecodeError(SleepError, ValueError):
    """
    A record of a signatures file was rejected by the signature decoder.

    Attributes:
        message (str): Diagnostic from the decoder
        index (int, optional): Index of the first failing record
    """

    def __init__(self, message: str, index: Optional[int] = None):
        self.message = message
        self.index = index
        if index is None:
            super().__init__(message)
        else:
            super().__init__(f"record {index}: {message}")


class TypeMismatchError(SleepError, TypeError):
    """A view was requested that does not match the file's record kind."""


class RecordIndexError(SleepError, IndexError):
    """A record index is outside ``0 <= i < record_count``."""


class UnimplementedViewError(SleepError, NotImplementedError):
    """Record access was attempted on a view that has no decoder yet."""
