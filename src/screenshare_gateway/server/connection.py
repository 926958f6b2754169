"""
Connection Handler
==================

Owns one accepted socket end-to-end:

    read request bytes -> parse -> route -> write response -> close

Design Rules:
    - Reading is bounded by a byte cap and an overall deadline, so idle and
      slow-loris peers are eventually dropped without a response
    - Writing is bounded by a drain timeout, and closing by a flush timeout
      after which the transport is aborted
    - The connection is only reported closed once its transport is gone
    - Every exit path (success, malformed request, disconnect, write error,
      cancellation) closes the socket exactly once
    - Failures never escape to the listener
"""

import asyncio
import logging
from typing import Callable, Optional

from screenshare_gateway.models.http import HttpResponse
from screenshare_gateway.models.state import ConnectionState
from screenshare_gateway.observability.metrics import GatewayMetrics
from screenshare_gateway.server.request import (
    HEADER_TERMINATOR,
    has_request_line,
    parse_request,
)
from screenshare_gateway.server.router import ResponseRouter


logger = logging.getLogger(__name__)


DEFAULT_READ_TIMEOUT_SECONDS = 5.0
DEFAULT_WRITE_TIMEOUT_SECONDS = 10.0
DEFAULT_MAX_REQUEST_BYTES = 65535


class ConnectionHandler:
    """
    Serves exactly one request on one accepted connection.

    Attributes:
        state: Current ConnectionState
        peer: Remote address as reported by the transport
    """

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        router: ResponseRouter,
        metrics: Optional[GatewayMetrics] = None,
        read_timeout: float = DEFAULT_READ_TIMEOUT_SECONDS,
        write_timeout: float = DEFAULT_WRITE_TIMEOUT_SECONDS,
        max_request_bytes: int = DEFAULT_MAX_REQUEST_BYTES,
        on_close: Optional[Callable[["ConnectionHandler"], None]] = None,
    ) -> None:
        """
        Initialize connection handler.

        Args:
            reader: Stream reader of the accepted socket
            writer: Stream writer of the accepted socket
            router: Router producing the response
            metrics: Shared traffic counters
            read_timeout: Deadline in seconds for receiving the request
            write_timeout: Deadline in seconds for draining the response
            max_request_bytes: Maximum bytes buffered per request
            on_close: Called once, right after the socket is closed
        """
        self._reader = reader
        self._writer = writer
        self._router = router
        self.metrics = metrics if metrics is not None else GatewayMetrics()
        self._read_timeout = read_timeout
        self._write_timeout = write_timeout
        self._max_request_bytes = max_request_bytes
        self._on_close = on_close

        self.state = ConnectionState.ACCEPTED
        self.peer = writer.get_extra_info("peername")

    @property
    def closed(self) -> bool:
        return self.state is ConnectionState.CLOSED

    async def run(self) -> None:
        """
        Handle the connection until it is closed.

        Cancellation aborts the socket and is re-raised to the caller.
        """
        try:
            await self._serve()
            await self._shutdown()
        except asyncio.CancelledError:
            self.close(abort=True)
            raise
        finally:
            self.close()

    def close(self, abort: bool = False) -> bool:
        """
        Close the socket if it is still open.

        Args:
            abort: Drop the transport immediately, discarding buffered output

        Returns:
            True if this call closed the connection, False if already closed.
        """
        if self.state is ConnectionState.CLOSED:
            return False
        self.state = ConnectionState.CLOSED

        if abort:
            self._writer.transport.abort()
        elif not self._writer.is_closing():
            self._writer.close()

        self.metrics.connections_closed += 1
        logger.debug(f"Connection closed: {self.peer}")

        if self._on_close is not None:
            self._on_close(self)
        return True

    async def _shutdown(self) -> None:
        """
        Close gracefully, flushing buffered output within the write deadline.

        drain() returns once the buffer falls below the high-water mark, so
        a peer that stopped reading may still hold bytes in the transport.
        The handler stays live until the transport is actually gone, and the
        transport is aborted if it cannot flush in time.
        """
        if self.closed:
            return

        self._writer.close()
        try:
            await asyncio.wait_for(self._writer.wait_closed(), timeout=self._write_timeout)
        except asyncio.TimeoutError:
            self.metrics.write_failures += 1
            logger.debug(
                f"Flush deadline ({self._write_timeout}s) hit for {self.peer}, "
                f"aborting with {self._writer.transport.get_write_buffer_size()} bytes unsent"
            )
            self.close(abort=True)
            return
        except (ConnectionError, OSError) as e:
            logger.debug(f"Close error for {self.peer}: {e}")

        self.close()

    async def _serve(self) -> None:
        raw = await self._read_request()
        if raw is None:
            return

        request = parse_request(raw)
        self.state = ConnectionState.PARSED
        if request is None:
            self.metrics.malformed_requests += 1
            logger.debug(f"Malformed request from {self.peer}, serving viewer page")
        else:
            logger.debug(f"{request.method} {request.path} from {self.peer}")

        response = self._router.route(request)
        self._count_response(response, self._router.is_image_request(request))

        self.state = ConnectionState.RESPONDING
        await self._write_response(response)

    async def _read_request(self) -> Optional[bytes]:
        """
        Receive request bytes within the read deadline.

        Returns:
            Received bytes, or None if nothing usable arrived.
        """
        self.state = ConnectionState.READING
        buffer = bytearray()

        try:
            await asyncio.wait_for(self._fill(buffer), timeout=self._read_timeout)
        except asyncio.TimeoutError:
            if not has_request_line(buffer):
                self.metrics.read_timeouts += 1
                logger.debug(
                    f"Read deadline ({self._read_timeout}s) hit with "
                    f"{len(buffer)} bytes from {self.peer}, dropping"
                )
                return None
        except (ConnectionError, OSError) as e:
            self.metrics.peer_disconnects += 1
            logger.debug(f"Read error from {self.peer}: {e}")
            return None

        if not buffer:
            self.metrics.peer_disconnects += 1
            logger.debug(f"Peer {self.peer} disconnected without sending a request")
            return None

        return bytes(buffer)

    async def _fill(self, buffer: bytearray) -> None:
        """Read into buffer until end of headers, EOF or the byte cap."""
        while HEADER_TERMINATOR not in buffer and len(buffer) < self._max_request_bytes:
            chunk = await self._reader.read(self._max_request_bytes - len(buffer))
            if not chunk:
                return
            buffer.extend(chunk)

    async def _write_response(self, response: HttpResponse) -> None:
        payload = response.encode()

        try:
            self._writer.write(payload)
            await asyncio.wait_for(self._writer.drain(), timeout=self._write_timeout)
        except asyncio.TimeoutError:
            self.metrics.write_failures += 1
            logger.debug(f"Write deadline ({self._write_timeout}s) hit for {self.peer}")
            self.close(abort=True)
        except (ConnectionError, OSError) as e:
            self.metrics.write_failures += 1
            logger.debug(f"Write error to {self.peer}: {e}")
        else:
            self.metrics.bytes_sent += len(payload)

    def _count_response(self, response: HttpResponse, is_image: bool) -> None:
        if response.status == 404:
            self.metrics.not_found_responses += 1
        elif is_image:
            self.metrics.image_responses += 1
        else:
            self.metrics.html_responses += 1
