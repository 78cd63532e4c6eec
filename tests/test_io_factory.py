"""Tests for I/O factory functions."""

import tempfile
from pathlib import Path

import pytest

from rangefile.core.model import ReadOnlyLocationError
from rangefile.io import (
    open_reader, open_reader_async, open_writer, open_writer_async,
    RangeReader, AsyncRangeReader, RangeWriter, AsyncRangeWriter,
)
from rangefile.io.local import (
    LocalRangeReader, LocalRangeWriter, LocalAsyncRangeReader, LocalAsyncRangeWriter,
)
from rangefile.io.http_sync import HTTPRangeReader
from rangefile.io.http_async import HTTPAsyncRangeReader


class TestFactoryFunctions:
    """Test the main factory functions."""

    def test_open_reader_with_path_string(self):
        """Test factory with path string."""
        with tempfile.NamedTemporaryFile() as f:
            f.write(b"0123456789")
            f.flush()

            reader = open_reader(f.name)
            assert isinstance(reader, LocalRangeReader)
            assert isinstance(reader, RangeReader)
            assert reader.read(0, 5) == b"01234"

    def test_open_reader_with_path_object(self):
        """Test factory with Path object."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "data.bin"
            path.write_bytes(b"0123456789")

            reader = open_reader(path)
            assert isinstance(reader, LocalRangeReader)
            assert reader.read(5, 10) == b"56789"

    def test_open_reader_with_file_uri(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "data.bin"
            path.write_bytes(b"0123456789")

            reader = open_reader(path.as_uri())
            assert isinstance(reader, LocalRangeReader)
            assert reader.read(0, 3) == b"012"

    @pytest.mark.parametrize("url", ["http://example.com/test", "https://example.com/test"])
    def test_open_reader_with_url(self, url):
        """URLs get an HTTP reader; no request is made until the first read."""
        reader = open_reader(url)
        assert isinstance(reader, HTTPRangeReader)
        assert reader.requests_made == 0

    def test_open_writer_with_path(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            writer = open_writer(Path(tmpdir) / "out.bin")
            assert isinstance(writer, LocalRangeWriter)
            assert isinstance(writer, RangeWriter)

    def test_open_writer_with_url(self):
        with pytest.raises(ReadOnlyLocationError, match="read-only"):
            open_writer("https://example.com/test")

    @pytest.mark.asyncio
    async def test_open_reader_async_with_path(self):
        """Test async factory with path."""
        with tempfile.NamedTemporaryFile() as f:
            f.write(b"0123456789")
            f.flush()

            reader = await open_reader_async(f.name)
            assert isinstance(reader, LocalAsyncRangeReader)
            assert isinstance(reader, AsyncRangeReader)
            assert await reader.read(0, 5) == b"01234"

    @pytest.mark.asyncio
    async def test_open_reader_async_with_url(self):
        reader = await open_reader_async("http://example.com/test")
        assert isinstance(reader, HTTPAsyncRangeReader)

    @pytest.mark.asyncio
    async def test_open_writer_async(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            writer = await open_writer_async(Path(tmpdir) / "out.bin")
            assert isinstance(writer, LocalAsyncRangeWriter)
            assert isinstance(writer, AsyncRangeWriter)

        with pytest.raises(ReadOnlyLocationError):
            await open_writer_async("http://example.com/test")
