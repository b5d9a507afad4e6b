"""File-backed execution logger for hook script output.

Captures everything a script prints into a log file, optionally mirroring
each flushed chunk to a secondary handler (e.g. the terminal).

Copyright 2025 Ben Mensi
Licensed under the Apache License, Version 2.0
"""

import os
from pathlib import Path
from typing import Callable, Iterable, Optional, Protocol, TextIO, Union

MirrorHandler = Callable[[str], None]


class ExecutionLogger(Protocol):
    """Anything the script runner can write a transcript to."""

    @property
    def stream(self) -> TextIO: ...

    def consume_line(self, line: str) -> None: ...


class _MirrorStream:
    """Text stream that writes through and mirrors each flush.

    Text written since the previous flush is handed to the mirror handler
    as one chunk, with trailing line breaks removed.
    """

    def __init__(self, out: TextIO, mirror_handler: MirrorHandler):
        self._out = out
        self._mirror_handler = mirror_handler
        self._buffer: list = []

    @property
    def closed(self) -> bool:
        return self._out.closed

    def writable(self) -> bool:
        return True

    def write(self, text: str) -> int:
        self._out.write(text)
        self._buffer.append(text)
        return len(text)

    def writelines(self, lines: Iterable[str]) -> None:
        for line in lines:
            self.write(line)

    def flush(self) -> None:
        self._out.flush()

        if not self._buffer:
            return

        chunk = "".join(self._buffer).rstrip("\r\n")
        self._buffer = []
        self._mirror_handler(chunk)

    def close(self) -> None:
        if self._out.closed:
            return
        self.flush()
        self._out.close()


def _as_callable(mirror_handler) -> Optional[MirrorHandler]:
    if mirror_handler is None or callable(mirror_handler):
        return mirror_handler
    # Handler objects in the style of ``consume_output(text)``
    return mirror_handler.consume_output


class FileLogger:
    """Writes script output to a log file.

    Args:
        output_file: Path to the log file. Missing parent directories are
            created. If None, all output is discarded (mirroring still works).
        mirror_handler: Optional callable (or object with ``consume_output``)
            that receives each flushed chunk of output.
        encoding: Text encoding of the log file, platform default if None.

    Example:
        >>> with FileLogger(Path("target/build.log"), print) as logger:
        ...     logger.consume_line("hello")
    """

    def __init__(
        self,
        output_file: Optional[Union[str, Path]] = None,
        mirror_handler=None,
        encoding: Optional[str] = None,
    ):
        self._file = Path(output_file) if output_file is not None else None

        if self._file is not None:
            self._file.parent.mkdir(parents=True, exist_ok=True)
            out = open(self._file, "w", encoding=encoding)
        else:
            out = open(os.devnull, "w")

        handler = _as_callable(mirror_handler)
        if handler is not None:
            self._stream = _MirrorStream(out, handler)
        else:
            self._stream = out

    @property
    def output_file(self) -> Optional[Path]:
        """Path of the log file, or None when output is discarded."""
        return self._file

    @property
    def stream(self) -> TextIO:
        """Stream handed to interpreters for script output."""
        return self._stream

    def consume_line(self, line: str) -> None:
        """Write a single line to the log and flush it."""
        self._stream.write(f"{line}\n")
        self._stream.flush()

    def close(self) -> None:
        """Flush and close the log file. Safe to call more than once."""
        if self._stream.closed:
            return
        self._stream.flush()
        self._stream.close()

    def __enter__(self) -> "FileLogger":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
