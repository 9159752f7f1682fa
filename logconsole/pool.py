"""
Pool of reusable scratch buffers for rendering.
"""

import io
import queue
from contextlib import contextmanager
from typing import Iterator

DEFAULT_MAX_SIZE = 64


class BufferPool:
    """
    Thread-safe pool of io.StringIO buffers.

    A buffer handed out by acquire() belongs to one caller until the with
    block exits; it is then emptied and returned, whether the block finished
    normally or raised.

    Example:
        pool = BufferPool()
        with pool.acquire() as buf:
            buf.write('line')
            text = buf.getvalue()
    """

    def __init__(self, max_size: int = DEFAULT_MAX_SIZE):
        self.max_size = max_size
        self._idle: queue.SimpleQueue = queue.SimpleQueue()

    def __len__(self) -> int:
        return self._idle.qsize()

    def _get(self) -> io.StringIO:
        try:
            return self._idle.get_nowait()
        except queue.Empty:
            return io.StringIO()

    def _put(self, buf: io.StringIO) -> None:
        buf.seek(0)
        buf.truncate(0)
        # qsize is approximate under contention; the bound only needs to be loose
        if self._idle.qsize() < self.max_size:
            self._idle.put(buf)

    @contextmanager
    def acquire(self) -> Iterator[io.StringIO]:
        """Borrow an empty buffer for the duration of a with block"""
        buf = self._get()
        try:
            yield buf
        finally:
            self._put(buf)


console_buffer_pool = BufferPool()
