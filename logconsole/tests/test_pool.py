"""
Unit tests for BufferPool.
"""

import threading

import pytest

from logconsole.pool import BufferPool


class TestBufferPool:
    """Test BufferPool"""

    def test_reuses_buffer(self):
        """Should hand back a released buffer, emptied"""
        pool = BufferPool()

        with pool.acquire() as first:
            first.write('data')

        with pool.acquire() as second:
            assert second is first
            assert second.getvalue() == ''
            assert second.tell() == 0

    def test_release_on_exception(self):
        """Should return the buffer when the block raises"""
        pool = BufferPool()

        with pytest.raises(RuntimeError):
            with pool.acquire() as buf:
                buf.write('partial')
                raise RuntimeError('boom')

        assert len(pool) == 1
        with pool.acquire() as buf:
            assert buf.getvalue() == ''

    def test_max_size(self):
        """Should not keep more idle buffers than max_size"""
        pool = BufferPool(max_size=1)

        with pool.acquire():
            with pool.acquire():
                pass

        assert len(pool) == 1

    def test_concurrent_buffers_distinct(self):
        """Should never share a buffer between concurrent holders"""
        pool = BufferPool()
        count = 8
        barrier = threading.Barrier(count)
        held = []
        lock = threading.Lock()

        def worker():
            with pool.acquire() as buf:
                with lock:
                    held.append(buf)
                barrier.wait(timeout=10)

        threads = [threading.Thread(target=worker) for _ in range(count)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len({id(buf) for buf in held}) == count
        assert len(pool) == count
