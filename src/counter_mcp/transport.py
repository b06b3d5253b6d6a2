from __future__ import annotations

import asyncio
import concurrent.futures
import sys
import threading
from typing import Optional, Protocol, TextIO, Union

from .shared.errors import TransportFailure
from .shared.logging import get_logger

logger = get_logger(__name__)

_EOF = None
READ_AHEAD_LINES = 32

Inbound = Union[str, BaseException, None]


class Transport(Protocol):
    async def receive(self) -> Optional[str]:
        """Return the next inbound line, or None once the peer has closed."""

    async def send(self, line: str) -> None: ...

    def close(self) -> None: ...


class StreamTransport:
    """Line-oriented duplex channel over a pair of text streams (stdio by default).

    Blocking reads run on a daemon thread and are handed to the event loop
    through a bounded queue. The thread stops reading once ``read_ahead``
    lines are waiting, so a flooding peer cannot grow memory without limit.
    """

    def __init__(
        self,
        reader: Optional[TextIO] = None,
        writer: Optional[TextIO] = None,
        read_ahead: int = READ_AHEAD_LINES,
    ) -> None:
        if read_ahead < 1:
            raise ValueError(f"read_ahead must be >= 1, got {read_ahead}")
        self._reader = reader or sys.stdin
        self._writer = writer or sys.stdout
        self._read_ahead = read_ahead
        self._queue: Optional["asyncio.Queue[Inbound]"] = None
        self._thread: Optional[threading.Thread] = None
        self.closed = False

    @property
    def buffered(self) -> int:
        """Lines read from the stream but not yet received."""
        return self._queue.qsize() if self._queue is not None else 0

    def _start_reader(self) -> "asyncio.Queue[Inbound]":
        loop = asyncio.get_running_loop()
        queue: "asyncio.Queue[Inbound]" = asyncio.Queue(maxsize=self._read_ahead)

        def _push(item: Inbound) -> bool:
            # Blocks the reader thread while the queue is full.
            try:
                asyncio.run_coroutine_threadsafe(queue.put(item), loop).result()
            except (RuntimeError, concurrent.futures.CancelledError):
                # Event loop closed or shutting down.
                return False
            return True

        def _read() -> None:
            try:
                for line in iter(self._reader.readline, ""):
                    if not _push(line):
                        return
            except (OSError, ValueError) as exc:
                _push(exc)
                return
            _push(_EOF)

        self._queue = queue
        self._thread = threading.Thread(target=_read, name="counter-mcp-reader", daemon=True)
        self._thread.start()
        return queue

    async def receive(self) -> Optional[str]:
        if self.closed:
            return None
        queue = self._queue if self._queue is not None else self._start_reader()
        item = await queue.get()
        if isinstance(item, BaseException):
            raise TransportFailure(f"Failed to read from transport: {item}") from item
        return item

    async def send(self, line: str) -> None:
        if self.closed:
            raise TransportFailure("Transport is closed")
        try:
            self._writer.write(line)
            self._writer.flush()
        except (OSError, ValueError) as exc:
            raise TransportFailure(f"Failed to write response: {exc}") from exc

    def close(self) -> None:
        if not self.closed:
            logger.debug("Transport closed")
        self.closed = True
