"""CLI implementation for rangefile."""

import json
import logging
import sys
from pathlib import Path
from typing import Callable, Optional

import typer

from .core.model import IOFailureError, RangeFileError, Result
from .core.util import encode_payload, result_asdict
from .io import open_reader, open_writer
from .io.base import DEFAULT_ENCODING

logger = logging.getLogger(__name__)

app = typer.Typer(add_completion=False, help="Read and write byte ranges of local files and URLs.")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Log every open, read and write"),
):
    """Random-access byte-range file I/O."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _run(location: str, operation: Callable[[], Result]) -> Result:
    """Run one operation, turning rangefile errors into a failed Result."""
    try:
        return operation()
    except (RangeFileError, ValueError) as e:
        logger.debug("operation on %s failed", location, exc_info=True)
        return Result(success=False, data=None, error=str(e), bytes_transferred=0)


def _emit(results: list[Result], *, jsonl: bool, output: Optional[Path],
          fields: Optional[set[str]] = None) -> None:
    # open output sink
    sink = open(output, "w", encoding="utf-8") if output else sys.stdout
    try:
        if len(results) == 1 and not jsonl:
            json.dump(result_asdict(results[0], fields=fields), sink, indent=2)
            sink.write("\n")
        else:
            for res in results:
                sink.write(json.dumps(result_asdict(res, fields=fields)))
                sink.write("\n")
    finally:
        if output:
            sink.close()

    if any(not r.success for r in results):
        raise typer.Exit(code=1)


def _check_payload(data: Optional[str], input_path: Optional[str]) -> None:
    if (data is None) == (input_path is None):
        typer.echo("Exactly one of --data or --input is required.", err=True)
        raise typer.Exit(code=1)


def _payload(data: Optional[str], input_path: Optional[str], encoding: str) -> bytes:
    if data is not None:
        return data.encode(encoding)
    if input_path == "-":
        return sys.stdin.buffer.read()
    try:
        return Path(input_path).read_bytes()
    except OSError as e:
        raise IOFailureError(f"Error reading input {input_path}: {e.strerror or e}",
                             path=input_path, os_error=e) from e


@app.command()
def read(
    source: str = typer.Argument(..., help="Path, file:// URI or http(s) URL"),
    start: int = typer.Option(0, "--start", min=0, help="First byte offset"),
    end: Optional[int] = typer.Option(None, "--end", help="Exclusive end offset [default: end of file]"),
    text: bool = typer.Option(False, "--text", help="Decode the bytes instead of emitting Base64"),
    encoding: str = typer.Option(DEFAULT_ENCODING, "--encoding", help="Text encoding for --text"),
    raw: bool = typer.Option(False, "--raw", help="Write the bytes themselves instead of JSON (not with --text)"),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Write to PATH instead of stdout"),
):
    """Read the byte range [START, END) of a file."""
    if raw and text:
        typer.echo("--raw and --text cannot be combined.", err=True)
        raise typer.Exit(code=1)

    def operation() -> Result:
        reader = open_reader(source)
        # a start past end-of-file reads nothing
        stop = max(reader.size(), start) if end is None else end
        payload = {"source": source, "start": start, "end": stop}
        if text:
            payload["text"] = reader.read_string(start, stop, encoding)
        else:
            chunk = reader.read(start, stop)
            payload["length"] = len(chunk)
            payload["data"] = chunk if raw else encode_payload(chunk)
        return Result(success=True, data=payload, error=None, bytes_transferred=reader.bytes_fetched)

    res = _run(source, operation)
    if raw and res.success:
        if output:
            output.write_bytes(res.data["data"])
        else:
            typer.echo(res.data["data"], nl=False)
        return
    if raw and not res.success:
        typer.echo(res.error, err=True)
        raise typer.Exit(code=1)
    _emit([res], jsonl=False, output=output)


@app.command()
def write(
    target: str = typer.Argument(..., help="Path or file:// URI; created if missing"),
    offset: int = typer.Option(0, "--offset", min=0, help="Byte offset to write at"),
    data: Optional[str] = typer.Option(None, "--data", help="Text to write"),
    input_path: Optional[str] = typer.Option(None, "--input", help="File whose bytes to write, or '-' for stdin"),
    encoding: str = typer.Option(DEFAULT_ENCODING, "--encoding", help="Encoding of --data"),
):
    """Write bytes at OFFSET, overwriting in place and extending the file as needed."""
    _check_payload(data, input_path)

    def operation() -> Result:
        payload = _payload(data, input_path, encoding)
        writer = open_writer(target)
        writer.write(payload, offset)
        return Result(success=True, data={"target": target, "offset": offset, "length": len(payload)},
                      error=None, bytes_transferred=writer.bytes_written)

    _emit([_run(target, operation)], jsonl=False, output=None)


@app.command()
def append(
    target: str = typer.Argument(..., help="Path or file:// URI; created if missing"),
    data: Optional[str] = typer.Option(None, "--data", help="Text to append"),
    input_path: Optional[str] = typer.Option(None, "--input", help="File whose bytes to append, or '-' for stdin"),
    encoding: str = typer.Option(DEFAULT_ENCODING, "--encoding", help="Encoding of --data"),
):
    """Write bytes at the end of the file."""
    _check_payload(data, input_path)

    def operation() -> Result:
        payload = _payload(data, input_path, encoding)
        writer = open_writer(target)
        at = writer.append(payload)
        return Result(success=True, data={"target": target, "offset": at, "length": len(payload)},
                      error=None, bytes_transferred=writer.bytes_written)

    _emit([_run(target, operation)], jsonl=False, output=None)


@app.command()
def size(
    sources: list[str] = typer.Argument(..., help="Paths, file:// URIs or URLs"),
    jsonl: bool = typer.Option(False, "--jsonl", help="Force JSON-lines output"),
    fields: Optional[str] = typer.Option(None, "--fields", help="Comma-separated subset of keys to emit"),
):
    """Report size and modification time without reading the files."""
    def measure(src: str) -> Callable[[], Result]:
        def operation() -> Result:
            reader = open_reader(src)
            modified = reader.modification_time()
            return Result(
                success=True,
                data={"source": src, "size": reader.size(),
                      "modified": modified.isoformat() if modified else None},
                error=None,
                bytes_transferred=0,
            )
        return operation

    sel_fields = set(fields.split(",")) if fields else None
    _emit([_run(src, measure(src)) for src in sources], jsonl=jsonl, output=None, fields=sel_fields)


@app.command()
def truncate(
    target: str = typer.Argument(..., help="Existing file to empty"),
):
    """Truncate an existing file to zero length."""
    def operation() -> Result:
        open_writer(target).truncate()
        return Result(success=True, data={"target": target, "size": 0}, error=None, bytes_transferred=0)

    _emit([_run(target, operation)], jsonl=False, output=None)


if __name__ == "__main__":
    app()
