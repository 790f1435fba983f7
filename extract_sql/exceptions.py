"""Package-specific exception types."""

from __future__ import annotations


class ExtractError(Exception):
    """Base class for errors raised by extract-sql."""


class ScanFileError(ExtractError):
    """Raised when an input source cannot be read.

    This is the only condition that aborts a run; malformed statements are
    reported as warnings instead.

    Args:
        source: Identifier of the input that failed.
        reason: Human-readable cause.
    """

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"{source}: {reason}")
