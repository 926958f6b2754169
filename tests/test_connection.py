"""
Connection Handler Tests
========================

Exercises ConnectionHandler against in-memory streams, checking that every
exit path closes the connection exactly once.
"""

import asyncio

import pytest

from screenshare_gateway.models import ConnectionState
from screenshare_gateway.observability import GatewayMetrics
from screenshare_gateway.server import ConnectionHandler, ResponseRouter


class FakeWriter:
    """Minimal stand-in for asyncio.StreamWriter and its transport."""

    def __init__(
        self,
        fail_writes: bool = False,
        stall_drain: bool = False,
        stall_close: bool = False,
    ) -> None:
        self.buffer = bytearray()
        self.close_calls = 0
        self.abort_calls = 0
        self.fail_writes = fail_writes
        self.stall_drain = stall_drain
        self.stall_close = stall_close
        self.transport = self

    def get_extra_info(self, name):
        return ("127.0.0.1", 50000) if name == "peername" else None

    def write(self, data: bytes) -> None:
        if self.fail_writes:
            raise ConnectionResetError("peer went away")
        self.buffer.extend(data)

    async def drain(self) -> None:
        if self.stall_drain:
            await asyncio.Event().wait()

    def is_closing(self) -> bool:
        return self.close_calls > 0 or self.abort_calls > 0

    def close(self) -> None:
        self.close_calls += 1

    async def wait_closed(self) -> None:
        if self.stall_close and not self.abort_calls:
            await asyncio.Event().wait()

    def get_write_buffer_size(self) -> int:
        return 0 if self.abort_calls else len(self.buffer)

    def abort(self) -> None:
        self.abort_calls += 1


def make_handler(cache, raw=None, eof=True, writer=None, **kwargs):
    reader = asyncio.StreamReader()
    if raw:
        reader.feed_data(raw)
    if eof:
        reader.feed_eof()
    writer = writer or FakeWriter()
    closed = []
    handler = ConnectionHandler(
        reader,
        writer,
        ResponseRouter(cache, browser_fps=5),
        metrics=GatewayMetrics(),
        on_close=closed.append,
        **kwargs,
    )
    return handler, reader, writer, closed


class TestConnectionHandler:
    """Tests for ConnectionHandler."""

    def test_successful_response(self, cache, tiny_jpeg):
        cache.publish(tiny_jpeg)

        async def scenario():
            handler, _, writer, closed = make_handler(
                cache, b"GET /shot.jpg HTTP/1.1\r\nHost: x\r\n\r\n"
            )
            await handler.run()
            return handler, writer, closed

        handler, writer, closed = asyncio.run(scenario())

        assert bytes(writer.buffer).endswith(b"\r\n\r\n" + tiny_jpeg)
        assert writer.close_calls == 1
        assert writer.abort_calls == 0
        assert closed == [handler]
        assert handler.state is ConnectionState.CLOSED

    def test_zero_bytes_is_peer_disconnect(self, cache):
        async def scenario():
            handler, _, writer, closed = make_handler(cache, b"")
            await handler.run()
            return handler, writer, closed

        handler, writer, closed = asyncio.run(scenario())

        assert writer.buffer == bytearray()
        assert writer.close_calls == 1
        assert closed == [handler]
        assert handler.metrics.peer_disconnects == 1

    def test_read_deadline_without_request_line(self, cache):
        async def scenario():
            handler, _, writer, closed = make_handler(
                cache, b"GET /sh", eof=False, read_timeout=0.05
            )
            await handler.run()
            return handler, writer, closed

        handler, writer, closed = asyncio.run(scenario())

        assert writer.buffer == bytearray()
        assert writer.close_calls == 1
        assert len(closed) == 1
        assert handler.metrics.read_timeouts == 1

    def test_request_is_bounded_by_max_bytes(self, cache):
        raw = b"GET /shot.jpg HTTP/1.1\r\nX-Padding: " + b"a" * 4096

        async def scenario():
            handler, reader, writer, _ = make_handler(cache, raw, max_request_bytes=256)
            await handler.run()
            return await reader.read(), writer

        remaining, writer = asyncio.run(scenario())

        assert len(remaining) == len(raw) - 256
        assert bytes(writer.buffer).startswith(b"HTTP/1.1 404 Not Found\r\n")

    def test_write_failure_closes_once(self, cache):
        async def scenario():
            handler, _, writer, closed = make_handler(
                cache, b"GET / HTTP/1.1\r\n\r\n", writer=FakeWriter(fail_writes=True)
            )
            await handler.run()
            return handler, writer, closed

        handler, writer, closed = asyncio.run(scenario())

        assert writer.close_calls == 1
        assert len(closed) == 1
        assert handler.metrics.write_failures == 1

    def test_cancellation_aborts_once(self, cache):
        async def scenario():
            handler, _, writer, closed = make_handler(cache, eof=False, read_timeout=30.0)
            task = asyncio.create_task(handler.run())
            await asyncio.sleep(0.05)
            assert handler.state is ConnectionState.READING

            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task
            return handler, writer, closed

        handler, writer, closed = asyncio.run(scenario())

        assert writer.abort_calls == 1
        assert writer.close_calls == 0
        assert closed == [handler]

    def test_close_is_idempotent(self, cache):
        async def scenario():
            handler, _, writer, closed = make_handler(cache)
            assert handler.close() is True
            assert handler.close() is False
            assert handler.close(abort=True) is False
            return writer, closed

        writer, closed = asyncio.run(scenario())

        assert writer.close_calls == 1
        assert writer.abort_calls == 0
        assert len(closed) == 1

    def test_write_deadline_aborts_once(self, cache):
        async def scenario():
            handler, _, writer, closed = make_handler(
                cache,
                b"GET / HTTP/1.1\r\n\r\n",
                writer=FakeWriter(stall_drain=True),
                write_timeout=0.05,
            )
            await asyncio.wait_for(handler.run(), timeout=2.0)
            return handler, writer, closed

        handler, writer, closed = asyncio.run(scenario())

        assert writer.abort_calls == 1
        assert writer.close_calls == 0
        assert closed == [handler]
        assert handler.metrics.write_failures == 1
        assert handler.metrics.bytes_sent == 0

    def test_unflushed_output_keeps_connection_live_until_aborted(self, cache, tiny_jpeg):
        cache.publish(tiny_jpeg)

        async def scenario():
            handler, _, writer, closed = make_handler(
                cache,
                b"GET /shot.jpg HTTP/1.1\r\n\r\n",
                writer=FakeWriter(stall_close=True),
                write_timeout=0.3,
            )
            task = asyncio.create_task(handler.run())
            await asyncio.sleep(0.1)
            flushing = (writer.close_calls, list(closed), handler.closed)

            await asyncio.wait_for(task, timeout=2.0)
            return handler, writer, closed, flushing

        handler, writer, closed, flushing = asyncio.run(scenario())

        assert flushing == (1, [], False)
        assert writer.abort_calls == 1
        assert writer.close_calls == 1
        assert writer.get_write_buffer_size() == 0
        assert closed == [handler]
        assert handler.metrics.write_failures == 1
