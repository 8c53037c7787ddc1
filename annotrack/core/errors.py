"""
Error taxonomy for annotrack.

Every error raised by the library derives from ``AnnotrackError`` and also
from the closest builtin, so callers can catch either.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Tuple, Union


class AnnotrackError(Exception):
    """Base class for all annotrack errors."""
    pass


class ParseError(AnnotrackError, ValueError):
    """Raised when a line of an interval file is malformed."""

    def __init__(
        self,
        message: str,
        line_number: Optional[int] = None,
        path: Optional[Union[str, Path]] = None,
    ):
        self.reason = message
        self.line_number = line_number
        self.path = Path(path) if path is not None else None
        location = ""
        if self.path is not None:
            location = f"{self.path}: "
        if line_number is not None:
            location += f"line {line_number}: "
        super().__init__(f"{location}{message}")


class ValidationError(AnnotrackError, ValueError):
    """Raised when an interval invariant or a format requirement is violated."""
    pass


class InvalidRecordError(ParseError, ValidationError):
    """A parsed line whose coordinates violate the interval invariant."""
    pass


class TrackIOError(AnnotrackError, OSError):
    """Raised when a track file cannot be read or written."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path is not None else None
        super().__init__(message)

    def __str__(self) -> str:
        return self.args[0] if self.args else ""


class NotFoundError(TrackIOError, FileNotFoundError):
    """Raised when a track file does not exist."""
    pass


class TagMismatchError(AnnotrackError, ValueError):
    """Raised when two collections tagged with different genomes are combined."""

    def __init__(self, tag_a: str, tag_b: str):
        self.tags: Tuple[str, str] = (tag_a, tag_b)
        super().__init__(
            f"Genome tags differ: '{tag_a}' vs '{tag_b}'. "
            f"Lift one collection over before combining."
        )


class ExternalServiceError(AnnotrackError):
    """Raised when an annotation service call fails."""

    def __init__(self, service: str, message: str):
        self.service = service
        super().__init__(f"{service}: {message}")
