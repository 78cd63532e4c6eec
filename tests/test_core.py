import os
from pathlib import Path

import pytest

from rangefile.core.model import (
    ByteRange, Result, DecodeFailureError, InvalidRangeError, IOFailureError, NotFoundError,
    RangeFileError, RangeNotSupportedError, ReadOnlyLocationError,
)
from rangefile.core.util import decode_bytes, encode_payload, is_remote, resolve_path, result_asdict


class TestByteRange:
    """Test byte range validation."""

    def test_length(self):
        span = ByteRange(5, 10)
        assert span.length == 5
        assert str(span) == "[5, 10)"

    def test_of_length(self):
        assert ByteRange.of_length(1000, 9) == ByteRange(1000, 1009)

    def test_empty_range_allowed(self):
        assert ByteRange(7, 7).length == 0

    def test_end_before_start(self):
        with pytest.raises(InvalidRangeError) as excinfo:
            ByteRange(5, 3)
        assert (excinfo.value.start, excinfo.value.end) == (5, 3)

    def test_negative_start(self):
        with pytest.raises(InvalidRangeError, match="negative"):
            ByteRange(-1, 3)

    def test_header_value(self):
        assert ByteRange(0, 10).header_value() == "bytes=0-9"

    def test_immutable(self):
        span = ByteRange(0, 1)
        with pytest.raises(AttributeError):
            span.start = 5


class TestErrorTaxonomy:
    """Test the error hierarchy."""

    def test_hierarchy(self):
        assert issubclass(NotFoundError, IOFailureError)
        assert issubclass(RangeNotSupportedError, IOFailureError)
        assert issubclass(ReadOnlyLocationError, IOFailureError)
        for cls in (IOFailureError, InvalidRangeError, DecodeFailureError):
            assert issubclass(cls, RangeFileError)
        assert issubclass(RangeFileError, RuntimeError)

    def test_io_failure_carries_context(self):
        cause = PermissionError(13, "Permission denied")
        err = IOFailureError("denied", path="/x", offset=4, os_error=cause)
        assert err.path == "/x"
        assert err.offset == 4
        assert err.os_error is cause
        assert err.start is None

    def test_decode_failure_carries_count(self):
        err = DecodeFailureError("bad", byte_count=3, encoding="utf-8")
        assert err.byte_count == 3
        assert err.encoding == "utf-8"


class TestLocations:
    """Test location helpers."""

    def test_is_remote(self):
        assert is_remote("http://example.com/a")
        assert is_remote("HTTPS://example.com/a")
        assert not is_remote("/tmp/a")
        assert not is_remote("file:///tmp/a")
        assert not is_remote(Path("http:/odd"))

    def test_resolve_plain_path(self):
        assert resolve_path("/tmp/data.bin") == Path("/tmp/data.bin")

    def test_resolve_relative_path(self):
        assert resolve_path("data.bin") == Path.cwd() / "data.bin"

    def test_resolve_home(self):
        assert resolve_path("~/data.bin") == Path(os.path.expanduser("~")) / "data.bin"

    def test_resolve_file_uri(self):
        assert resolve_path("file:///tmp/a%20b.bin") == Path("/tmp/a b.bin")
        assert resolve_path("file://localhost/tmp/a.bin") == Path("/tmp/a.bin")

    def test_resolve_rejects_remote(self):
        with pytest.raises(ValueError):
            resolve_path("http://example.com/a")
        with pytest.raises(ValueError):
            resolve_path("file://otherhost/tmp/a")


class TestDecodeBytes:
    """Test the decode_bytes utility function."""

    def test_decode(self):
        assert decode_bytes(b"abc", "utf-8") == "abc"

    def test_invalid_bytes(self):
        with pytest.raises(DecodeFailureError) as excinfo:
            decode_bytes(b"\xff\xfe\xfd", "utf-8", path="/x", start=0, end=3)
        assert excinfo.value.byte_count == 3
        assert excinfo.value.path == "/x"

    def test_unknown_encoding(self):
        with pytest.raises(DecodeFailureError, match="Unknown encoding"):
            decode_bytes(b"abc", "klingon")


class TestResultAsDict:
    """Test the result_asdict utility function."""

    def test_successful_result(self):
        """Test conversion of successful result."""
        result = Result(
            success=True,
            data={"source": "a.bin", "size": 10, "modified": None},
            error=None,
            bytes_transferred=0
        )

        output = result_asdict(result)
        expected = {
            "success": True,
            "source": "a.bin",
            "size": 10,
            "bytes_transferred": 0
        }
        assert output == expected

    def test_failed_result(self):
        """Test conversion of failed result."""
        result = Result(success=False, data=None, error="No such file", bytes_transferred=0)

        assert result_asdict(result) == {
            "success": False,
            "error": "No such file",
            "bytes_transferred": 0
        }

    def test_field_filtering(self):
        """Test field filtering functionality."""
        result = Result(
            success=True,
            data={"source": "a.bin", "start": 0, "end": 4, "length": 4},
            error=None,
            bytes_transferred=4
        )

        output = result_asdict(result, fields=["start", "end"])
        assert output == {"success": True, "start": 0, "end": 4, "bytes_transferred": 4}


def test_encode_payload():
    assert encode_payload(b"Hello") == "SGVsbG8="
