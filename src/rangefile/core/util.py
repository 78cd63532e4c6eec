from __future__ import annotations
import base64
import codecs
import os
from pathlib import Path
from typing import Any, Dict, Iterable, Union
from urllib.parse import unquote, urlparse

from .model import DecodeFailureError, Result

Location = Union[str, "os.PathLike[str]"]

_REMOTE_SCHEMES = ("http", "https")


def is_remote(location: Location) -> bool:
    """True for http(s) URLs, which are served by the HTTP readers."""
    if isinstance(location, os.PathLike):
        return False
    return urlparse(str(location)).scheme.lower() in _REMOTE_SCHEMES


def resolve_path(location: Location) -> Path:
    """Turn a path, ``~`` path or ``file://`` URI into an absolute Path.

    The file itself is not touched; missing files resolve fine.
    """
    if isinstance(location, os.PathLike):
        return Path(location).expanduser().absolute()

    text = str(location)
    parsed = urlparse(text)
    if parsed.scheme.lower() == "file":
        # file://host/path is only meaningful for localhost
        if parsed.netloc not in ("", "localhost"):
            raise ValueError(f"Unsupported file URI host: {parsed.netloc!r}")
        text = unquote(parsed.path)
    elif parsed.scheme.lower() in _REMOTE_SCHEMES:
        raise ValueError(f"Not a local location: {text}")
    return Path(text).expanduser().absolute()


def decode_bytes(data: bytes, encoding: str, *, path=None, start=None, end=None) -> str:
    try:
        codecs.lookup(encoding)
    except LookupError as e:
        raise DecodeFailureError(f"Unknown encoding {encoding!r}", byte_count=len(data),
                                 encoding=encoding, path=path, start=start, end=end) from e
    try:
        return data.decode(encoding)
    except UnicodeDecodeError as e:
        raise DecodeFailureError(
            f"Unable to decode {len(data)} bytes from {path} as {encoding}: {e.reason}",
            byte_count=len(data), encoding=encoding, path=path, start=start, end=end,
        ) from e


def result_asdict(res: Result, *, fields: Iterable[str] | None = None) -> Dict[str, Any]:
    """Return a JSON-serialisable dict (skip None) optionally filtered."""
    if not res.success or res.data is None:
        return {"success": False, "error": res.error, "bytes_transferred": res.bytes_transferred}
    payload = {k: v for k, v in res.data.items() if v is not None}
    if fields:
        wanted = set(fields)
        payload = {k: v for k, v in payload.items() if k in wanted}
    payload.update({"success": True, "bytes_transferred": res.bytes_transferred})
    return payload


def encode_payload(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")
