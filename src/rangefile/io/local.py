"""Local file range readers and writers.

Every operation is a fresh open/seek/operate/close cycle; no file handle
outlives a single call, so concurrent callers are not coordinated here.
"""

import asyncio
import logging
import os
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path

from ..core.model import ByteRange, InvalidRangeError, IOFailureError, NotFoundError
from ..core.util import Location, decode_bytes, resolve_path
from .base import DEFAULT_ENCODING

logger = logging.getLogger(__name__)


@contextmanager
def _os_errors(action: str, path: Path, *, missing_is_not_found: bool = True, **context):
    """Translate OSError raised inside the block into the rangefile taxonomy."""
    try:
        yield
    except FileNotFoundError as e:
        cls = NotFoundError if missing_is_not_found else IOFailureError
        raise cls(f"Error {action} {path}{_describe(context)}: no such file",
                  path=path, os_error=e, **context) from e
    except OSError as e:
        raise IOFailureError(f"Error {action} {path}{_describe(context)}: {e.strerror or e}",
                             path=path, os_error=e, **context) from e


def _describe(context: dict) -> str:
    if context.get("start") is not None:
        return f" [{context['start']}, {context['end']})"
    if context.get("offset") is not None:
        return f" at offset {context['offset']}"
    return ""


class LocalRangeReader:
    """Synchronous local file range reader."""

    def __init__(self, location: Location):
        self.path = resolve_path(location)
        self.bytes_fetched = 0
        self.requests_made = 0

    def exists(self) -> bool:
        return self.path.is_file()

    def read(self, start: int, end: int) -> bytes:
        """Return the bytes in ``[start, end)``; short at end-of-file."""
        span = ByteRange(start, end)
        self.requests_made += 1

        with _os_errors("reading", self.path, start=start, end=end):
            with open(self.path, "rb") as f:
                f.seek(span.start)
                data = f.read(span.length)

        logger.debug("read %d/%d bytes from %s %s", len(data), span.length, self.path, span)
        self.bytes_fetched += len(data)
        return data

    def read_string(self, start: int, end: int, encoding: str = DEFAULT_ENCODING) -> str:
        data = self.read(start, end)
        return decode_bytes(data, encoding, path=self.path, start=start, end=end)

    def size(self) -> int:
        """Return the file size in bytes from filesystem metadata."""
        with _os_errors("querying size of", self.path):
            return self.path.stat().st_size

    def modification_time(self) -> datetime:
        with _os_errors("querying modification time of", self.path):
            mtime = self.path.stat().st_mtime
        return datetime.fromtimestamp(mtime, tz=timezone.utc)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        pass


class LocalRangeWriter:
    """Synchronous local file range writer.

    Writes overwrite in place and never insert. Writing past end-of-file
    leaves a gap that reads back as zero bytes (a sparse hole where the
    filesystem supports them). A failure part-way through a write is not
    rolled back.
    """

    def __init__(self, location: Location):
        self.path = resolve_path(location)
        self.bytes_written = 0
        self.requests_made = 0

    def _open_for_update(self, *, create: bool):
        flags = os.O_RDWR | (os.O_CREAT if create else 0) | getattr(os, "O_BINARY", 0)
        fd = os.open(self.path, flags, 0o666)
        try:
            return os.fdopen(fd, "r+b")
        except BaseException:
            os.close(fd)
            raise

    def write(self, data: bytes, offset: int) -> None:
        """Write `data` starting at absolute `offset`."""
        if offset < 0:
            raise InvalidRangeError(f"Offset cannot be negative: {offset}",
                                    path=self.path, offset=offset)
        self.requests_made += 1

        if not self.path.exists():
            logger.debug("creating %s", self.path)

        with _os_errors("writing", self.path, missing_is_not_found=False, offset=offset):
            with self._open_for_update(create=True) as f:
                f.seek(offset)
                f.write(data)

        logger.debug("wrote %d bytes to %s at offset %d", len(data), self.path, offset)
        self.bytes_written += len(data)

    def append(self, data: bytes) -> int:
        """Write `data` at the current end-of-file and return that offset."""
        self.requests_made += 1
        with _os_errors("appending to", self.path, missing_is_not_found=False):
            with self._open_for_update(create=True) as f:
                offset = f.seek(0, os.SEEK_END)
                f.write(data)

        logger.debug("appended %d bytes to %s at offset %d", len(data), self.path, offset)
        self.bytes_written += len(data)
        return offset

    def truncate(self) -> None:
        """Truncate the file to zero length; the file must already exist."""
        self.requests_made += 1
        with _os_errors("truncating", self.path):
            with self._open_for_update(create=False) as f:
                f.truncate(0)
        logger.debug("truncated %s", self.path)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        pass


class LocalAsyncRangeReader:
    """Asynchronous local range reader - thin wrapper around sync reader.

    Each call runs on a worker thread; cancelling the awaiting task does not
    interrupt the OS call already in flight.
    """

    def __init__(self, location: Location):
        self._sync_reader = LocalRangeReader(location)

    @property
    def path(self) -> Path:
        return self._sync_reader.path

    @property
    def bytes_fetched(self) -> int:
        return self._sync_reader.bytes_fetched

    @property
    def requests_made(self) -> int:
        return self._sync_reader.requests_made

    async def exists(self) -> bool:
        return await asyncio.to_thread(self._sync_reader.exists)

    async def read(self, start: int, end: int) -> bytes:
        return await asyncio.to_thread(self._sync_reader.read, start, end)

    async def read_string(self, start: int, end: int, encoding: str = DEFAULT_ENCODING) -> str:
        return await asyncio.to_thread(self._sync_reader.read_string, start, end, encoding)

    async def size(self) -> int:
        return await asyncio.to_thread(self._sync_reader.size)

    async def modification_time(self) -> datetime:
        return await asyncio.to_thread(self._sync_reader.modification_time)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        pass


class LocalAsyncRangeWriter:
    """Asynchronous local range writer - thin wrapper around sync writer.

    Partial writes remain possible when the awaiting task is cancelled.
    """

    def __init__(self, location: Location):
        self._sync_writer = LocalRangeWriter(location)

    @property
    def path(self) -> Path:
        return self._sync_writer.path

    @property
    def bytes_written(self) -> int:
        return self._sync_writer.bytes_written

    @property
    def requests_made(self) -> int:
        return self._sync_writer.requests_made

    async def write(self, data: bytes, offset: int) -> None:
        await asyncio.to_thread(self._sync_writer.write, data, offset)

    async def append(self, data: bytes) -> int:
        return await asyncio.to_thread(self._sync_writer.append, data)

    async def truncate(self) -> None:
        await asyncio.to_thread(self._sync_writer.truncate)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        pass


def open_local_reader(location: Location) -> LocalRangeReader:
    """Create a synchronous local range reader."""
    return LocalRangeReader(location)


def open_local_writer(location: Location) -> LocalRangeWriter:
    """Create a synchronous local range writer."""
    return LocalRangeWriter(location)


async def open_local_reader_async(location: Location) -> LocalAsyncRangeReader:
    """Create an asynchronous local range reader."""
    return LocalAsyncRangeReader(location)


async def open_local_writer_async(location: Location) -> LocalAsyncRangeWriter:
    """Create an asynchronous local range writer."""
    return LocalAsyncRangeWriter(location)
