"""I/O layer for rangefile - byte-range reads and writes on files."""

# Re-export these for import convenience
from .base import (
    RangeReader, AsyncRangeReader, RangeWriter, AsyncRangeWriter,
    DEFAULT_ENCODING, RANGE_FALLBACK_MAX, HTTP_TIMEOUT,
)
from .local import (
    LocalRangeReader, LocalRangeWriter, LocalAsyncRangeReader, LocalAsyncRangeWriter,
    open_local_reader, open_local_reader_async, open_local_writer, open_local_writer_async,
)
from .http_sync import HTTPRangeReader, open_http_reader
from .http_async import HTTPAsyncRangeReader, open_http_reader_async, close_global_client
from ..core.model import ReadOnlyLocationError
from ..core.util import is_remote


def open_reader(location):
    """Factory function to create appropriate RangeReader based on location type."""
    if is_remote(location):
        return open_http_reader(str(location))
    return open_local_reader(location)


async def open_reader_async(location):
    """Factory function to create appropriate AsyncRangeReader based on location type."""
    if is_remote(location):
        return await open_http_reader_async(str(location))
    return await open_local_reader_async(location)


def open_writer(location):
    """Factory function to create a RangeWriter; remote locations are read-only."""
    if is_remote(location):
        raise ReadOnlyLocationError(f"Remote location is read-only: {location}", path=str(location))
    return open_local_writer(location)


async def open_writer_async(location):
    """Factory function to create an AsyncRangeWriter; remote locations are read-only."""
    if is_remote(location):
        raise ReadOnlyLocationError(f"Remote location is read-only: {location}", path=str(location))
    return await open_local_writer_async(location)
