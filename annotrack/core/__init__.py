"""Core utilities package."""

from annotrack.core.errors import (
    AnnotrackError,
    ParseError,
    ValidationError,
    InvalidRecordError,
    TrackIOError,
    NotFoundError,
    TagMismatchError,
    ExternalServiceError,
)

__all__ = [
    "AnnotrackError",
    "ParseError",
    "ValidationError",
    "InvalidRecordError",
    "TrackIOError",
    "NotFoundError",
    "TagMismatchError",
    "ExternalServiceError",
]
