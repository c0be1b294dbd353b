"""Streaming of command output, line by line, to interested readers."""

from __future__ import annotations

import threading
from collections import deque
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Protocol

__all__ = [
    "ClosedWriterError",
    "ChannelWriter",
    "current_writer",
    "with_writer",
    "multi_writer",
    "log",
]


class _Writable(Protocol):
    def write(self, data: bytes) -> int | None: ...


_current: ContextVar[_Writable | None] = ContextVar("booster_stream_writer", default=None)

_DEFAULT_BUF_SIZE = 100


class ClosedWriterError(ValueError):
    """Raised when writing to a writer that has been closed."""


class ChannelWriter:
    """Splits written bytes into lines and queues them for readers.

    Partial lines are held until a newline arrives. When the queue is full,
    new lines are dropped rather than blocking the writer. Safe for use from
    several threads.
    """

    def __init__(self, buf_size: int = _DEFAULT_BUF_SIZE) -> None:
        self._max = buf_size if buf_size > 0 else _DEFAULT_BUF_SIZE
        self._lines: deque[str] = deque()
        self._buf = bytearray()
        self._closed = False
        self._cond = threading.Condition()

    def _offer(self, line: str) -> None:
        if len(self._lines) < self._max:
            self._lines.append(line)

    def write(self, data: bytes | str) -> int:
        """Buffer data and queue every complete line; return the bytes taken."""
        if isinstance(data, str):
            data = data.encode()
        with self._cond:
            if self._closed:
                raise ClosedWriterError("write to closed writer")
            self._buf.extend(data)
            while (idx := self._buf.find(b"\n")) >= 0:
                self._offer(bytes(self._buf[:idx]).decode("utf-8", "replace"))
                del self._buf[: idx + 1]
            self._cond.notify_all()
        return len(data)

    def close(self) -> None:
        """Flush any partial line and mark the writer closed."""
        with self._cond:
            if self._closed:
                return
            self._closed = True
            if self._buf:
                self._offer(bytes(self._buf).decode("utf-8", "replace"))
                self._buf.clear()
            self._cond.notify_all()

    def drain(self) -> list[str]:
        """Return the lines queued so far without waiting for more."""
        with self._cond:
            lines = list(self._lines)
            self._lines.clear()
            return lines

    def __iter__(self) -> Iterator[str]:
        """Yield lines as they arrive until the writer is closed and empty."""
        while True:
            with self._cond:
                while not self._lines and not self._closed:
                    self._cond.wait()
                if not self._lines:
                    return
                line = self._lines.popleft()
            yield line


class _MultiWriter:
    def __init__(self, *writers: _Writable) -> None:
        self._writers = writers

    def write(self, data: bytes) -> int:
        for writer in self._writers:
            writer.write(data)
        return len(data)


def current_writer() -> _Writable | None:
    """Return the stream writer active in the current context, if any."""
    return _current.get()


@contextmanager
def with_writer(writer: _Writable) -> Iterator[_Writable]:
    """Make ``writer`` the stream writer for the duration of the block."""
    token = _current.set(writer)
    try:
        yield writer
    finally:
        _current.reset(token)


def multi_writer(stream: _Writable | None, buffer: _Writable | None) -> _Writable | None:
    """Return a writer that writes to both ``stream`` and ``buffer``."""
    if stream is None:
        return buffer
    if buffer is None:
        return stream
    return _MultiWriter(stream, buffer)


def log(msg: str) -> None:
    """Write a message line to the current stream writer, if one is set."""
    writer = current_writer()
    if writer is None:
        return
    if not msg.endswith("\n"):
        msg += "\n"
    writer.write(msg.encode())