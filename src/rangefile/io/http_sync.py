"""Synchronous HTTP range reader using requests."""

import logging
from datetime import datetime
from email.utils import parsedate_to_datetime
from typing import Optional

import requests

from ..core.model import ByteRange, IOFailureError, NotFoundError, RangeNotSupportedError
from ..core.util import decode_bytes
from .base import DEFAULT_ENCODING, HTTP_TIMEOUT, RANGE_FALLBACK_MAX, check_status, content_length

logger = logging.getLogger(__name__)

# Module-level session for connection pooling
_session = None


def _get_session():
    """Get or create the global requests session."""
    global _session
    if _session is None:
        _session = requests.Session()
    return _session


class HTTPRangeReader:
    """Synchronous, read-only HTTP reader using Range requests.

    Nothing is cached between calls and failed requests are not retried.
    """

    def __init__(self, url: str, *, timeout: float = HTTP_TIMEOUT):
        self.url = url
        self.path = url
        self.timeout = timeout
        self.bytes_fetched = 0
        self.requests_made = 0
        self._session = _get_session()

    def _head(self) -> requests.Response:
        self.requests_made += 1
        try:
            response = self._session.head(self.url, timeout=self.timeout, allow_redirects=True)
        except requests.RequestException as e:
            raise IOFailureError(f"HEAD request for {self.url} failed: {e}",
                                 path=self.url, os_error=e) from e
        check_status(self.url, response.status_code)
        return response

    def exists(self) -> bool:
        try:
            self._head()
        except NotFoundError:
            return False
        return True

    def read(self, start: int, end: int) -> bytes:
        """Return the bytes in ``[start, end)``; short at end-of-file."""
        span = ByteRange(start, end)
        if span.length == 0:
            self._head()
            return b''

        self.requests_made += 1
        headers = {'Range': span.header_value()}
        try:
            with self._session.get(self.url, headers=headers, timeout=self.timeout,
                                   stream=True) as response:
                data = self._handle_range_response(response, span)
        except requests.RequestException as e:
            raise IOFailureError(f"Range request for {self.url} {span} failed: {e}",
                                 path=self.url, start=start, end=end, os_error=e) from e

        logger.debug("fetched %d/%d bytes from %s %s", len(data), span.length, self.url, span)
        self.bytes_fetched += len(data)
        return data

    def _handle_range_response(self, response: requests.Response, span: ByteRange) -> bytes:
        status = response.status_code
        if status == 206:
            return response.content[:span.length]
        if status == 416:
            # Range starts at or past the end of the resource
            return b''
        if status == 200:
            # Server doesn't support ranges, got full content
            advertised = content_length(response.headers)
            if advertised is None or advertised >= RANGE_FALLBACK_MAX:
                raise RangeNotSupportedError(
                    f"Server ignored Range for {self.url} and the file is too large",
                    path=self.url, start=span.start, end=span.end)
            return response.content[span.start:span.end]
        check_status(self.url, status, span)
        raise IOFailureError(f"Unexpected status {status} for {self.url} {span}",
                             path=self.url, start=span.start, end=span.end)

    def read_string(self, start: int, end: int, encoding: str = DEFAULT_ENCODING) -> str:
        data = self.read(start, end)
        return decode_bytes(data, encoding, path=self.url, start=start, end=end)

    def size(self) -> int:
        """Return the advertised Content-Length of the remote file."""
        advertised = content_length(self._head().headers)
        if advertised is None:
            raise IOFailureError(f"Server did not report a size for {self.url}", path=self.url)
        return advertised

    def modification_time(self) -> Optional[datetime]:
        last_modified = self._head().headers.get('last-modified')
        if not last_modified:
            return None
        try:
            return parsedate_to_datetime(last_modified)
        except (TypeError, ValueError):
            logger.warning("Unparseable Last-Modified %r from %s", last_modified, self.url)
            return None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        # Session is shared, don't close it here
        pass


def open_http_reader(url: str, *, timeout: float = HTTP_TIMEOUT) -> HTTPRangeReader:
    """Create a synchronous HTTP range reader."""
    return HTTPRangeReader(url, timeout=timeout)
