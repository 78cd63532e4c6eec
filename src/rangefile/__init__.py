"""rangefile - random-access byte-range reads and writes on files."""

from .core.model import (                                            # re-export
    ByteRange, Result,
    RangeFileError, IOFailureError, NotFoundError, InvalidRangeError, DecodeFailureError,
    RangeNotSupportedError, ReadOnlyLocationError,
)
from .io import open_reader, open_reader_async, open_writer, open_writer_async
from .io.base import DEFAULT_ENCODING


def read_range(location, start: int, end: int) -> bytes:
    """Read the bytes in ``[start, end)`` from a path, file URI or URL."""
    return open_reader(location).read(start, end)


def read_range_string(location, start: int, end: int, encoding: str = DEFAULT_ENCODING) -> str:
    """Read ``[start, end)`` and decode it with `encoding`."""
    return open_reader(location).read_string(start, end, encoding)


def file_size(location) -> int:
    return open_reader(location).size()


def modification_time(location):
    return open_reader(location).modification_time()


def write_range(location, data: bytes, offset: int) -> None:
    """Write `data` at `offset`, creating the file and extending it as needed."""
    open_writer(location).write(data, offset)


def append_range(location, data: bytes) -> int:
    """Write `data` at the end of the file; returns the offset written at."""
    return open_writer(location).append(data)


def truncate_file(location) -> None:
    open_writer(location).truncate()


async def read_range_async(location, start: int, end: int) -> bytes:
    reader = await open_reader_async(location)
    return await reader.read(start, end)


async def read_range_string_async(location, start: int, end: int,
                                  encoding: str = DEFAULT_ENCODING) -> str:
    reader = await open_reader_async(location)
    return await reader.read_string(start, end, encoding)


async def file_size_async(location) -> int:
    reader = await open_reader_async(location)
    return await reader.size()


async def modification_time_async(location):
    reader = await open_reader_async(location)
    return await reader.modification_time()


async def write_range_async(location, data: bytes, offset: int) -> None:
    writer = await open_writer_async(location)
    await writer.write(data, offset)


async def append_range_async(location, data: bytes) -> int:
    writer = await open_writer_async(location)
    return await writer.append(data)


async def truncate_file_async(location) -> None:
    writer = await open_writer_async(location)
    await writer.truncate()


__all__ = [
    "read_range", "read_range_string", "file_size", "modification_time",
    "write_range", "append_range", "truncate_file",
    "read_range_async", "read_range_string_async", "file_size_async", "modification_time_async",
    "write_range_async", "append_range_async", "truncate_file_async",
    "open_reader", "open_reader_async", "open_writer", "open_writer_async",
    "ByteRange", "Result",
    "RangeFileError", "IOFailureError", "NotFoundError", "InvalidRangeError",
    "DecodeFailureError", "RangeNotSupportedError", "ReadOnlyLocationError",
]
