"""Adapt message producers into readable streams for request bodies."""

from __future__ import annotations

import io
import logging
import queue
import threading
from collections.abc import Callable
from email.generator import BytesGenerator
from email.message import Message as EmailMessage
from typing import BinaryIO, Final

from .errors import MessageStreamError

LOGGER = logging.getLogger(__name__)

_PIPE_DEPTH: Final = 16
_POLL_SECONDS: Final = 0.1
_EOF: Final = object()


class _Pipe:
    """Bounded chunk queue shared by the producer and consumer ends."""

    def __init__(self) -> None:
        self.chunks: queue.Queue[object] = queue.Queue(maxsize=_PIPE_DEPTH)
        self.reader_closed = threading.Event()

    def deliver(self, item: object) -> bool:
        """Block until ``item`` is queued; False if the reader went away."""

        while not self.reader_closed.is_set():
            try:
                self.chunks.put(item, timeout=_POLL_SECONDS)
            except queue.Full:
                continue
            return True
        return False


class PipeWriter(io.RawIOBase):
    """Producer end handed to the writer callable."""

    def __init__(self, pipe: _Pipe) -> None:
        super().__init__()
        self._pipe = pipe

    def writable(self) -> bool:
        return True

    def write(self, data) -> int:  # type: ignore[override]
        chunk = bytes(data)
        if not chunk:
            return 0
        if not self._pipe.deliver(chunk):
            raise BrokenPipeError("message pipe reader closed")
        return len(chunk)


class PipeReader(io.RawIOBase):
    """Consumer end used as a request body.

    A producer failure is raised as :class:`MessageStreamError` on the next
    read and on every read after it; a clean finish reads as EOF.
    """

    def __init__(self, pipe: _Pipe) -> None:
        super().__init__()
        self._pipe = pipe
        self._pending = b""
        self._finished = False
        self._error: MessageStreamError | None = None

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:  # type: ignore[override]
        while not self._pending:
            if self._error is not None:
                raise self._error
            if self._finished:
                return 0
            item = self._pipe.chunks.get()
            if item is _EOF:
                self._finished = True
            elif isinstance(item, BaseException):
                self._error = MessageStreamError(f"writing to pipe: {item}")
                self._error.__cause__ = item
            else:
                self._pending = item  # type: ignore[assignment]
        size = min(len(buffer), len(self._pending))
        buffer[:size] = self._pending[:size]
        self._pending = self._pending[size:]
        return size

    def close(self) -> None:
        self._pipe.reader_closed.set()
        super().close()


def stream_from_writer(write_to: Callable[[BinaryIO], object]) -> BinaryIO:
    """Run ``write_to`` in a background thread and return what it writes as a stream.

    ``write_to`` receives a writable binary file object. Data is handed over
    through a bounded in-memory pipe, so the message is never held in memory
    as a whole. Closing the returned reader stops the producer.
    """

    pipe = _Pipe()
    writer = PipeWriter(pipe)
    reader = PipeReader(pipe)

    def _produce() -> None:
        try:
            write_to(writer)  # type: ignore[arg-type]
        except BaseException as exc:
            if pipe.reader_closed.is_set():
                LOGGER.debug("Message pipe reader closed before producer finished")
                return
            pipe.deliver(exc)
            return
        pipe.deliver(_EOF)

    thread = threading.Thread(target=_produce, name="rspamd-message-pipe", daemon=True)
    thread.start()
    return reader  # type: ignore[return-value]


def stream_email(message: EmailMessage) -> BinaryIO:
    """Serialize an email message into a stream suitable as a request body."""

    return stream_from_writer(lambda handle: BytesGenerator(handle).flatten(message))


__all__ = ["PipeReader", "PipeWriter", "stream_email", "stream_from_writer"]
