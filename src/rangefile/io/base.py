"""Base protocols and shared constants for the I/O layer."""

from datetime import datetime
from typing import Optional, Protocol, runtime_checkable

from ..core.model import IOFailureError, NotFoundError


DEFAULT_ENCODING = "utf-8"
RANGE_FALLBACK_MAX = 10 * 1024 * 1024  # 10 MB
HTTP_TIMEOUT = 30.0  # seconds, remote readers only


@runtime_checkable
class RangeReader(Protocol):
    """Protocol for synchronous range readers."""

    bytes_fetched: int  # running total

    def read(self, start: int, end: int) -> bytes:
        """Return the bytes in ``[start, end)``.
        Fewer bytes are returned when the file ends inside the range.
        """
        ...

    def read_string(self, start: int, end: int, encoding: str = DEFAULT_ENCODING) -> str:
        ...

    def size(self) -> int:
        ...

    def modification_time(self) -> Optional[datetime]:
        ...


@runtime_checkable
class AsyncRangeReader(Protocol):
    """Protocol for asynchronous range readers."""

    bytes_fetched: int  # running total

    async def read(self, start: int, end: int) -> bytes:
        ...

    async def read_string(self, start: int, end: int, encoding: str = DEFAULT_ENCODING) -> str:
        ...

    async def size(self) -> int:
        ...


@runtime_checkable
class RangeWriter(Protocol):
    """Protocol for synchronous range writers."""

    bytes_written: int  # running total

    def write(self, data: bytes, offset: int) -> None:
        """Write `data` at absolute `offset`, extending the file if needed."""
        ...

    def append(self, data: bytes) -> int:
        ...

    def truncate(self) -> None:
        ...


@runtime_checkable
class AsyncRangeWriter(Protocol):
    """Protocol for asynchronous range writers."""

    bytes_written: int

    async def write(self, data: bytes, offset: int) -> None:
        ...

    async def append(self, data: bytes) -> int:
        ...

    async def truncate(self) -> None:
        ...


def content_length(headers) -> Optional[int]:
    """Advertised Content-Length, or None when absent or malformed."""
    value = headers.get('content-length')
    return int(value) if value and value.isdigit() else None


def check_status(url: str, status: int, span=None) -> None:
    """Raise for HTTP statuses that are neither success nor a short read."""
    context = {"path": url}
    if span is not None:
        context.update(start=span.start, end=span.end)
    if status in (404, 410):
        raise NotFoundError(f"Remote file not found: {url} (status {status})", **context)
    if status >= 400:
        raise IOFailureError(f"Request for {url} failed with status {status}", **context)
