from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict


@dataclass(slots=True)
class Result:
    success: bool
    data: Dict[str, Any] | None
    error: str | None
    bytes_transferred: int     # read or written by the operation


class RangeFileError(RuntimeError):
    """Base class for every error raised by rangefile."""

    def __init__(self, message: str, *, path=None, start: int | None = None,
                 end: int | None = None, offset: int | None = None):
        super().__init__(message)
        self.path = path
        self.start = start
        self.end = end
        self.offset = offset


class IOFailureError(RangeFileError):
    """Raised when opening, seeking, reading, writing or closing fails."""

    def __init__(self, message: str, *, os_error: BaseException | None = None, **context):
        super().__init__(message, **context)
        self.os_error = os_error


class NotFoundError(IOFailureError):
    """Raised when the location does not exist where existence is required."""


class RangeNotSupportedError(IOFailureError):
    """Raised when server rejects Range and file size >= RANGE_FALLBACK_MAX."""


class ReadOnlyLocationError(IOFailureError):
    """Raised when a writer is requested for a location that cannot be written."""


class InvalidRangeError(RangeFileError):
    """Raised when end precedes start, or an offset is negative."""


class DecodeFailureError(RangeFileError):
    """Raised when bytes read cannot be decoded with the requested encoding."""

    def __init__(self, message: str, *, byte_count: int, encoding: str, **context):
        super().__init__(message, **context)
        self.byte_count = byte_count
        self.encoding = encoding


@dataclass(frozen=True, slots=True)
class ByteRange:
    """Half-open span ``[start, end)`` of a file."""

    start: int
    end: int

    def __post_init__(self):
        if self.start < 0:
            raise InvalidRangeError(f"Start offset cannot be negative: {self.start}",
                                    start=self.start, end=self.end)
        if self.end < self.start:
            raise InvalidRangeError(f"End offset {self.end} precedes start offset {self.start}",
                                    start=self.start, end=self.end)

    @classmethod
    def of_length(cls, start: int, length: int) -> "ByteRange":
        return cls(start, start + length)

    @property
    def length(self) -> int:
        return self.end - self.start

    def header_value(self) -> str:
        """HTTP ``Range`` header value; only meaningful for non-empty ranges."""
        return f"bytes={self.start}-{self.end - 1}"

    def __str__(self) -> str:
        return f"[{self.start}, {self.end})"
