"""Asynchronous HTTP range reader using httpx."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from email.utils import parsedate_to_datetime
from typing import Optional

import httpx

from ..core.model import ByteRange, IOFailureError, NotFoundError, RangeNotSupportedError
from ..core.util import decode_bytes
from .base import DEFAULT_ENCODING, HTTP_TIMEOUT, RANGE_FALLBACK_MAX, check_status, content_length

logger = logging.getLogger(__name__)

# Global async client
_client: Optional[httpx.AsyncClient] = None


@asynccontextmanager
async def _get_client():
    """Get or create the global httpx AsyncClient."""
    global _client
    if _client is None:
        _client = httpx.AsyncClient(follow_redirects=True)

    try:
        yield _client
    finally:
        # Don't close the client here - it's shared
        pass


class HTTPAsyncRangeReader:
    """Asynchronous, read-only HTTP reader using Range requests."""

    def __init__(self, url: str, *, timeout: float = HTTP_TIMEOUT):
        self.url = url
        self.path = url
        self.timeout = timeout
        self.bytes_fetched = 0
        self.requests_made = 0

    async def _head(self) -> httpx.Response:
        self.requests_made += 1
        async with _get_client() as client:
            try:
                response = await client.head(self.url, timeout=self.timeout)
            except httpx.HTTPError as e:
                raise IOFailureError(f"HEAD request for {self.url} failed: {e}",
                                     path=self.url, os_error=e) from e
        check_status(self.url, response.status_code)
        return response

    async def exists(self) -> bool:
        try:
            await self._head()
        except NotFoundError:
            return False
        return True

    async def read(self, start: int, end: int) -> bytes:
        """Return the bytes in ``[start, end)``; short at end-of-file."""
        span = ByteRange(start, end)
        if span.length == 0:
            await self._head()
            return b''

        self.requests_made += 1
        headers = {'Range': span.header_value()}
        async with _get_client() as client:
            try:
                async with client.stream("GET", self.url, headers=headers,
                                         timeout=self.timeout) as response:
                    data = await self._handle_range_response(response, span)
            except httpx.HTTPError as e:
                raise IOFailureError(f"Range request for {self.url} {span} failed: {e}",
                                     path=self.url, start=start, end=end, os_error=e) from e

        logger.debug("fetched %d/%d bytes from %s %s", len(data), span.length, self.url, span)
        self.bytes_fetched += len(data)
        return data

    async def _handle_range_response(self, response: httpx.Response, span: ByteRange) -> bytes:
        status = response.status_code
        if status == 206:
            return (await response.aread())[:span.length]
        if status == 416:
            return b''
        if status == 200:
            # Server doesn't support ranges, got full content
            advertised = content_length(response.headers)
            if advertised is None or advertised >= RANGE_FALLBACK_MAX:
                raise RangeNotSupportedError(
                    f"Server ignored Range for {self.url} and the file is too large",
                    path=self.url, start=span.start, end=span.end)
            return (await response.aread())[span.start:span.end]
        check_status(self.url, status, span)
        raise IOFailureError(f"Unexpected status {status} for {self.url} {span}",
                             path=self.url, start=span.start, end=span.end)

    async def read_string(self, start: int, end: int, encoding: str = DEFAULT_ENCODING) -> str:
        data = await self.read(start, end)
        return decode_bytes(data, encoding, path=self.url, start=start, end=end)

    async def size(self) -> int:
        advertised = content_length((await self._head()).headers)
        if advertised is None:
            raise IOFailureError(f"Server did not report a size for {self.url}", path=self.url)
        return advertised

    async def modification_time(self) -> Optional[datetime]:
        last_modified = (await self._head()).headers.get('last-modified')
        if not last_modified:
            return None
        try:
            return parsedate_to_datetime(last_modified)
        except (TypeError, ValueError):
            logger.warning("Unparseable Last-Modified %r from %s", last_modified, self.url)
            return None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        # Client is shared, don't close it here
        pass


async def open_http_reader_async(url: str, *, timeout: float = HTTP_TIMEOUT) -> HTTPAsyncRangeReader:
    """Create an asynchronous HTTP range reader."""
    return HTTPAsyncRangeReader(url, timeout=timeout)


async def close_global_client():
    """Close the global httpx client. Call this at application shutdown."""
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
